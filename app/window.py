"""Main application window for Markdown Writer."""

import logging
from pathlib import Path

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QActionGroup, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QSplitter,
    QStatusBar,
)

from app.dialogs.image_dialog import ImageDialog
from app.dialogs.link_dialog import LinkDialog
from app.dialogs.options_dialog import OptionsDialog
from app.editor_tabs import DocumentTab, EditorTabWidget
from app.preview import PreviewPane
from app.theme import apply_dark, apply_light, preview_stylesheet
from config.settings import PREVIEW_TYPES, AppSettings
from core.file_handler import (
    LINE_SEPARATORS,
    FileHandlerError,
    detect_line_separator,
    export_html,
    read_file,
    write_markdown,
)
from core.markdown_renderer import MARKDOWN2, MARKDOWN_IT, MarkdownRenderer

logger = logging.getLogger(__name__)

_PREVIEW_LABELS = {
    "web": "&Web Preview",
    "source": "&HTML Source",
    "ast": "Markdown &AST",
    "none": "&No Preview",
}
_RENDERER_LABELS = {MARKDOWN_IT: "markdown-&it (CommonMark)", MARKDOWN2: "markdown&2"}

_MD_FILTER = "Markdown Files (*.md *.markdown *.txt);;All Files (*)"


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

class MainWindow(QMainWindow):
    def __init__(self, paths: list[Path] | None = None) -> None:
        super().__init__()
        self._settings = AppSettings()
        self._renderer = self._make_renderer()

        self.resize(1200, 780)
        self._build_ui()
        self._build_menus()
        self._restore_geometry()

        if paths:
            for path in paths:
                try:
                    self._load(Path(path))
                except FileHandlerError as exc:
                    logger.warning("Could not open %s: %s", path, exc)
                    QMessageBox.critical(self, "File Error", str(exc))
        else:
            self._restore_session()
        self._update_title()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _make_renderer(self) -> MarkdownRenderer:
        return MarkdownRenderer(
            self._settings.renderer_type, self._settings.markdown_extensions
        )

    def _build_ui(self) -> None:
        self._splitter = QSplitter(Qt.Orientation.Horizontal)

        self._tabs = EditorTabWidget(
            font_size=self._settings.font_size,
            spell_check=self._settings.spell_check,
        )
        self._preview = PreviewPane(self._renderer, dark=self._settings.dark_mode)
        self._preview.set_preview_type(self._settings.preview_type)

        self._splitter.addWidget(self._tabs)
        self._splitter.addWidget(self._preview)
        self._splitter.setSizes([600, 600])
        self.setCentralWidget(self._splitter)

        self.setStatusBar(QStatusBar())
        self.statusBar().showMessage("Ready")

        self._tabs.text_changed.connect(self._on_text_changed)
        self._tabs.caret_moved.connect(self._preview.highlight_at)
        self._tabs.scroll_changed.connect(self._preview.scroll_to_fraction)
        self._tabs.link_requested.connect(self._on_insert_link)
        self._tabs.image_requested.connect(self._on_insert_image)
        self._tabs.current_changed.connect(self._show_in_preview)
        self._tabs.close_requested.connect(self._close_tab)
        self._preview.jump_requested.connect(lambda offset: self._doc.go_to_offset(offset))

    def _build_menus(self) -> None:
        bar = self.menuBar()

        file_menu = bar.addMenu("&File")
        self._add_action(file_menu, "&New", self._on_new, QKeySequence.StandardKey.New)
        self._add_action(file_menu, "&Open…", self._on_open_file, QKeySequence.StandardKey.Open)
        self._add_action(file_menu, "&Close", self._on_close_current, QKeySequence.StandardKey.Close)
        file_menu.addSeparator()
        self._add_action(file_menu, "&Save", self._on_save, QKeySequence.StandardKey.Save)
        self._add_action(file_menu, "Save &As…", self._on_save_as, QKeySequence.StandardKey.SaveAs)
        self._add_action(file_menu, "Save A&ll", self._on_save_all, "Ctrl+Shift+S")
        self._add_action(file_menu, "&Export HTML…", self._on_export_html)
        file_menu.addSeparator()
        self._add_action(file_menu, "&Quit", self.close, QKeySequence.StandardKey.Quit)

        edit_menu = bar.addMenu("&Edit")
        self._add_action(edit_menu, "&Find…", lambda: self._doc.show_find(False))
        self._add_action(edit_menu, "&Replace…", lambda: self._doc.show_find(True))
        edit_menu.addSeparator()
        self._add_action(edit_menu, "Insert &Link…", self._on_insert_link)
        self._add_action(edit_menu, "Insert &Image…", self._on_insert_image)
        edit_menu.addSeparator()
        self._add_action(
            edit_menu, "Format &Paragraphs", lambda: self._on_format(False), "Ctrl+Shift+F"
        )
        self._add_action(
            edit_menu, "Format Selected Paragraphs", lambda: self._on_format(True), "Ctrl+Alt+F"
        )

        view_menu = bar.addMenu("&View")
        preview_group = QActionGroup(self)
        for kind in PREVIEW_TYPES:
            act = QAction(_PREVIEW_LABELS[kind], self, checkable=True)
            act.setChecked(kind == self._settings.preview_type)
            act.triggered.connect(lambda _checked, k=kind: self._on_preview_type(k))
            preview_group.addAction(act)
            view_menu.addAction(act)

        view_menu.addSeparator()
        renderer_group = QActionGroup(self)
        self._renderer_actions: dict[str, QAction] = {}
        for kind, label in _RENDERER_LABELS.items():
            act = QAction(label, self, checkable=True)
            act.setChecked(kind == self._renderer.renderer_type)
            act.triggered.connect(lambda _checked, k=kind: self._on_renderer_type(k))
            renderer_group.addAction(act)
            view_menu.addAction(act)
            self._renderer_actions[kind] = act

        view_menu.addSeparator()
        self._dark_action = QAction("&Dark Theme", self, checkable=True)
        self._dark_action.setChecked(self._settings.dark_mode)
        self._dark_action.toggled.connect(self._on_toggle_theme)
        view_menu.addAction(self._dark_action)

        spell_action = QAction("&Spell Check", self, checkable=True)
        spell_action.setChecked(self._settings.spell_check)
        spell_action.toggled.connect(self._on_toggle_spell_check)
        view_menu.addAction(spell_action)

        tools_menu = bar.addMenu("&Tools")
        self._add_action(
            tools_menu, "&Options…", self._on_options, QKeySequence.StandardKey.Preferences
        )

    def _add_action(self, menu, text: str, slot, shortcut=None) -> QAction:
        act = QAction(text, self)
        if shortcut is not None:
            act.setShortcut(QKeySequence(shortcut))
        act.triggered.connect(slot)
        menu.addAction(act)
        return act

    @property
    def _doc(self) -> DocumentTab:
        return self._tabs.current()

    # ------------------------------------------------------------------
    # Editor / preview wiring
    # ------------------------------------------------------------------

    def _on_text_changed(self) -> None:
        self._preview.update_text(self._doc.get_text())
        self._update_title()

    def _show_in_preview(self, tab: DocumentTab) -> None:
        """Point the shared preview at *tab*, keeping its scroll and caret."""
        self._preview.set_path(tab.path)
        self._preview.render_now(tab.get_text(), reset_scroll=True)
        self._preview.scroll_to_fraction(tab.scroll_fraction())
        self._preview.highlight_at(tab.caret_offset())
        self._update_title()

    def _update_title(self) -> None:
        tab = self._doc
        mark = "*" if tab.is_modified() else ""
        self.setWindowTitle(f"{mark}{tab.title} - Markdown Writer")

    def _on_preview_type(self, kind: str) -> None:
        self._settings.preview_type = kind
        self._preview.set_preview_type(kind)
        self._preview.highlight_at(self._doc.caret_offset())

    def _on_renderer_type(self, kind: str) -> None:
        self._settings.renderer_type = kind
        self._apply_renderer()

    def _apply_renderer(self) -> None:
        self._renderer = self._make_renderer()
        self._renderer_actions[self._renderer.renderer_type].setChecked(True)
        self._preview.set_renderer(self._renderer)
        self.statusBar().showMessage(f"Renderer: {self._renderer.renderer_type}")

    def _on_toggle_theme(self, dark: bool) -> None:
        self._settings.dark_mode = dark
        app = QApplication.instance()
        if dark:
            apply_dark(app)
        else:
            apply_light(app)
        self._preview.set_dark(dark)

    def _on_toggle_spell_check(self, enabled: bool) -> None:
        self._settings.spell_check = enabled
        self._tabs.set_spell_check(enabled)

    def _on_insert_link(self) -> None:
        dlg = LinkDialog(self._doc.selected_text(), self)
        if dlg.exec():
            self._doc.insert_link(dlg.url(), dlg.text(), dlg.title())

    def _on_insert_image(self) -> None:
        base = self._doc.path.parent if self._doc.path else None
        dlg = ImageDialog(base, self)
        if dlg.exec():
            self._doc.insert_image(dlg.url(), dlg.alt(), dlg.title())

    def _on_format(self, selection_only: bool) -> None:
        self._doc.format_paragraphs(self._settings.wrap_length, selection_only)

    def _on_options(self) -> None:
        dlg = OptionsDialog(self._settings, self)
        if not dlg.exec():
            return
        dlg.apply()
        self._tabs.set_font_size(self._settings.font_size)
        self._apply_renderer()

    # ------------------------------------------------------------------
    # File actions
    # ------------------------------------------------------------------

    def _confirm_discard(self, tab: DocumentTab) -> bool:
        """Ask before throwing away unsaved edits in *tab*; True means go ahead."""
        if not tab.is_modified():
            return True
        self._tabs.set_current(tab)
        answer = QMessageBox.question(
            self,
            "Unsaved Changes",
            f"'{tab.title}' has unsaved changes. Save them first?",
            QMessageBox.StandardButton.Save
            | QMessageBox.StandardButton.Discard
            | QMessageBox.StandardButton.Cancel,
        )
        if answer == QMessageBox.StandardButton.Save:
            return self._save_tab(tab)
        return answer == QMessageBox.StandardButton.Discard

    def _close_tab(self, idx: int) -> None:
        tab = self._tabs.tab_at(idx)
        if tab is None or not self._confirm_discard(tab):
            return
        self._tabs.remove_tab(self._tabs.index_of(tab))

    def _on_close_current(self) -> None:
        self._close_tab(self._tabs.current_index())

    def _on_new(self) -> None:
        self._tabs.add_tab()

    def _on_open_file(self) -> None:
        start_dir = self._settings.last_open_dir or str(self._settings.documents_dir)
        paths, _ = QFileDialog.getOpenFileNames(self, "Open Markdown", start_dir, _MD_FILTER)
        for path in paths:
            try:
                self._load(Path(path))
            except FileHandlerError as exc:
                QMessageBox.critical(self, "File Error", str(exc))

    def _load(self, path: Path) -> DocumentTab:
        """Open *path* in a tab, or switch to the tab already showing it."""
        existing = self._tabs.find_path(path)
        if existing is not None:
            self._tabs.set_current(existing)
            return existing

        text = read_file(path, self._settings.encoding or None)
        tab = self._tabs.reusable_tab()
        tab.line_separator = detect_line_separator(text)
        tab.path = path
        tab.set_text(text.replace("\r\n", "\n").replace("\r", "\n"))
        self._tabs.refresh_title(tab)
        self._show_in_preview(tab)
        self._settings.last_file_path = str(path)
        self._settings.last_open_dir = str(path.parent)
        self.statusBar().showMessage(f"Opened: {path}")
        return tab

    def _restore_session(self) -> None:
        """Silently reopen the files that were open at last exit."""
        active = self._settings.last_file_path
        paths = self._settings.open_files or ([active] if active else [])
        for path_str in paths:
            p = Path(path_str)
            if not p.exists():
                continue
            try:
                self._load(p)
            except FileHandlerError as exc:
                logger.warning("Could not reopen %s: %s", p, exc)
        if active:
            tab = self._tabs.find_path(Path(active))
            if tab is not None:
                self._tabs.set_current(tab)

    def _on_save(self) -> bool:
        return self._save_tab(self._doc)

    def _on_save_as(self) -> bool:
        return self._save_tab_as(self._doc)

    def _on_save_all(self) -> None:
        for tab in self._tabs.tabs():
            if tab.is_modified() and not self._save_tab(tab):
                return

    def _save_tab(self, tab: DocumentTab) -> bool:
        if tab.path is None:
            return self._save_tab_as(tab)
        return self._save_to(tab, tab.path)

    def _save_tab_as(self, tab: DocumentTab) -> bool:
        start = (
            str(tab.path)
            if tab.path
            else str(Path(self._settings.last_open_dir or self._settings.documents_dir) / "Untitled.md")
        )
        path, _ = QFileDialog.getSaveFileName(self, "Save Markdown", start, _MD_FILTER)
        if not path:
            return False
        out = Path(path)
        if not out.suffix:
            out = out.with_suffix(".md")
        if not self._save_to(tab, out):
            return False
        tab.path = out
        self._tabs.refresh_title(tab)
        if tab is self._doc:
            self._preview.set_path(out)
        self._settings.last_file_path = str(out)
        self._settings.last_open_dir = str(out.parent)
        self._update_title()
        return True

    def _save_to(self, tab: DocumentTab, path: Path) -> bool:
        separator = LINE_SEPARATORS.get(self._settings.line_separator, tab.line_separator)
        try:
            write_markdown(
                tab.get_text(), path,
                line_separator=separator,
                encoding=self._settings.encoding or None,
            )
        except FileHandlerError as exc:
            QMessageBox.critical(self, "Save Error", str(exc))
            return False
        tab.set_modified(False)
        self._tabs.refresh_title(tab)
        self._update_title()
        self.statusBar().showMessage(f"Saved: {path}")
        return True

    def _on_export_html(self) -> None:
        tab = self._doc
        text = tab.get_text()
        if not text.strip():
            QMessageBox.warning(self, "Empty Editor", "Nothing to export.")
            return
        if tab.path:
            start = str(tab.path.with_suffix(".html"))
        else:
            start = str(self._settings.documents_dir / "Untitled.html")
        path, _ = QFileDialog.getSaveFileName(self, "Export HTML", start, "HTML Files (*.html)")
        if not path:
            return
        try:
            out = Path(path)
            export_html(
                text, out, self._renderer,
                stylesheet=preview_stylesheet(self._settings.dark_mode),
            )
            self.statusBar().showMessage(f"Exported: {out}")
        except FileHandlerError as exc:
            QMessageBox.critical(self, "Export Error", str(exc))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _restore_geometry(self) -> None:
        geom = self._settings.window_geometry
        if geom:
            self.restoreGeometry(geom)
        state = self._settings.splitter_state
        if state:
            self._splitter.restoreState(state)

    def closeEvent(self, event) -> None:
        for tab in self._tabs.tabs():
            if not self._confirm_discard(tab):
                event.ignore()
                return
        self._settings.open_files = [str(t.path) for t in self._tabs.tabs() if t.path]
        self._settings.last_file_path = str(self._doc.path) if self._doc.path else ""
        self._settings.window_geometry = bytes(self.saveGeometry())
        self._settings.splitter_state = bytes(self._splitter.saveState())
        self._settings.sync()
        super().closeEvent(event)
