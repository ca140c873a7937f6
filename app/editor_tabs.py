"""Multi-document tab container: one MarkdownEditor per open file."""

import logging
from pathlib import Path

from PyQt6.QtCore import QPoint, pyqtSignal
from PyQt6.QtWidgets import (
    QApplication,
    QMenu,
    QTabBar,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from app.editor import MarkdownEditor

logger = logging.getLogger(__name__)


class DocumentTab(MarkdownEditor):
    """A MarkdownEditor that knows which file it edits."""

    def __init__(self, font_size: int = 11, spell_check: bool = True, parent=None) -> None:
        super().__init__(font_size=font_size, spell_check=spell_check, parent=parent)
        self.path: Path | None = None
        self.line_separator = "\n"    # separator the file was read with

    @property
    def title(self) -> str:
        return self.path.name if self.path else "Untitled"

    def is_blank(self) -> bool:
        """True for an untitled, unmodified, empty tab that a file may replace."""
        return self.path is None and not self.is_modified() and not self.get_text()


class _TabBar(QTabBar):
    """QTabBar that reports right-clicks on a tab."""

    context_menu_requested = pyqtSignal(int, QPoint)   # (tab_index, global_pos)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setExpanding(False)

    def contextMenuEvent(self, event) -> None:
        idx = self.tabAt(event.pos())
        if idx >= 0:
            self.context_menu_requested.emit(idx, self.mapToGlobal(event.pos()))


class EditorTabWidget(QWidget):
    """QTabWidget of DocumentTab editors.

    Editor signals are re-emitted only for the active tab, so the preview
    follows whichever document is in front.  Closing is left to the owner
    (``close_requested``), which has to ask about unsaved changes; there is
    always at least one tab.
    """

    text_changed = pyqtSignal()
    caret_moved = pyqtSignal(int)
    scroll_changed = pyqtSignal(float)
    link_requested = pyqtSignal()
    image_requested = pyqtSignal()
    current_changed = pyqtSignal(object)    # DocumentTab
    close_requested = pyqtSignal(int)       # tab index

    def __init__(self, font_size: int = 11, spell_check: bool = True, parent=None) -> None:
        super().__init__(parent)
        self._font_size = font_size
        self._spell_check = spell_check
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self._tabs = QTabWidget()
        self._tabs.setDocumentMode(True)

        # Custom tab bar (must be installed before any addTab calls)
        self._tab_bar = _TabBar()
        self._tabs.setTabBar(self._tab_bar)
        self._tabs.setTabsClosable(True)
        self._tabs.setMovable(True)
        self._tabs.tabCloseRequested.connect(self.close_requested)
        self._tab_bar.context_menu_requested.connect(self._on_tab_context_menu)
        self._tabs.currentChanged.connect(self._on_current_tab_changed)

        layout.addWidget(self._tabs)
        self.add_tab()

    # ------------------------------------------------------------------
    # Right-click context menu
    # ------------------------------------------------------------------

    def _on_tab_context_menu(self, idx: int, global_pos: QPoint) -> None:
        tab = self.tab_at(idx)
        menu = QMenu(self)
        close_action = menu.addAction("Close Tab")
        close_others = menu.addAction("Close Other Tabs")
        close_others.setEnabled(self.tab_count() > 1)
        menu.addSeparator()
        copy_path = menu.addAction("Copy File Path")
        copy_path.setEnabled(tab.path is not None)

        action = menu.exec(global_pos)

        if action == close_action:
            self.close_requested.emit(idx)
        elif action == close_others:
            for other in [t for t in self.tabs() if t is not tab]:
                self.close_requested.emit(self.index_of(other))
        elif action == copy_path and tab.path is not None:
            QApplication.clipboard().setText(str(tab.path))

    # ------------------------------------------------------------------
    # Tab management
    # ------------------------------------------------------------------

    def add_tab(self) -> DocumentTab:
        """Open a new untitled tab and make it current."""
        tab = DocumentTab(font_size=self._font_size, spell_check=self._spell_check)
        tab.text_changed.connect(lambda t=tab: self._on_tab_text_changed(t))
        tab.caret_moved.connect(lambda offset, t=tab: self._forward(t, self.caret_moved, offset))
        tab.scroll_changed.connect(lambda frac, t=tab: self._forward(t, self.scroll_changed, frac))
        tab.link_requested.connect(lambda t=tab: self._forward(t, self.link_requested))
        tab.image_requested.connect(lambda t=tab: self._forward(t, self.image_requested))
        idx = self._tabs.addTab(tab, tab.title)
        self._tabs.setCurrentIndex(idx)
        return tab

    def remove_tab(self, idx: int) -> None:
        """Drop the tab at *idx*; the last tab is replaced by a blank one."""
        tab = self.tab_at(idx)
        if tab is None:
            return
        self._tabs.removeTab(idx)
        tab.deleteLater()
        if self._tabs.count() == 0:
            self.add_tab()

    def reusable_tab(self) -> DocumentTab:
        """The current tab when it is blank, otherwise a new one."""
        tab = self.current()
        return tab if tab.is_blank() else self.add_tab()

    def find_path(self, path: Path) -> DocumentTab | None:
        target = path.resolve()
        for tab in self.tabs():
            if tab.path is not None and tab.path.resolve() == target:
                return tab
        return None

    def current(self) -> DocumentTab:
        return self._tabs.currentWidget()

    def set_current(self, tab: DocumentTab) -> None:
        idx = self.index_of(tab)
        if idx >= 0:
            self._tabs.setCurrentIndex(idx)

    def current_index(self) -> int:
        return self._tabs.currentIndex()

    def tab_at(self, idx: int) -> DocumentTab | None:
        return self._tabs.widget(idx)

    def tab_count(self) -> int:
        return self._tabs.count()

    def tabs(self) -> list[DocumentTab]:
        return [self._tabs.widget(i) for i in range(self._tabs.count())]

    def index_of(self, tab: DocumentTab) -> int:
        return self._tabs.indexOf(tab)

    def refresh_title(self, tab: DocumentTab) -> None:
        idx = self.index_of(tab)
        if idx < 0:
            return
        mark = "*" if tab.is_modified() else ""
        self._tabs.setTabText(idx, f"{mark}{tab.title}")
        self._tabs.setTabToolTip(idx, str(tab.path) if tab.path else "")

    # ------------------------------------------------------------------
    # Settings applied to every tab
    # ------------------------------------------------------------------

    def set_font_size(self, size: int) -> None:
        """Apply *size* to all existing tabs and remember it for new ones."""
        self._font_size = size
        for tab in self.tabs():
            tab.set_font_size(size)

    def set_spell_check(self, enabled: bool) -> None:
        self._spell_check = enabled
        for tab in self.tabs():
            tab.set_spell_check(enabled)

    # ------------------------------------------------------------------
    # Signal routing
    # ------------------------------------------------------------------

    def _forward(self, tab: DocumentTab, signal, *args) -> None:
        if tab is self.current():
            signal.emit(*args)

    def _on_tab_text_changed(self, tab: DocumentTab) -> None:
        self.refresh_title(tab)
        self._forward(tab, self.text_changed)

    def _on_current_tab_changed(self, idx: int) -> None:
        tab = self.tab_at(idx)
        if tab is not None:
            logger.debug("Active tab: %s", tab.path or "Untitled")
            self.current_changed.emit(tab)
