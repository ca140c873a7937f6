"""Live preview pane: rendered web view, HTML source view and AST view."""

import logging
from pathlib import Path

from PyQt6.QtCore import Qt, QTimer, QUrl, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWebEngineCore import QWebEnginePage, QWebEngineSettings
from PyQt6.QtWebEngineWidgets import QWebEngineView
from PyQt6.QtWidgets import QPlainTextEdit, QStackedWidget, QVBoxLayout, QWidget

from app.theme import preview_stylesheet
from core.highlighter import PreviewHighlighter
from core.markdown_renderer import MarkdownRenderer, RenderResult
from core.preview_bridge import (
    JUMP_SCHEME,
    build_page,
    highlight_script,
    jump_offset,
    scroll_script,
)
from core.source_map import build_tree

logger = logging.getLogger(__name__)

_PAGES = {"web": 0, "source": 1, "ast": 2, "none": 3}


class _PreviewPage(QWebEnginePage):
    """Intercepts jump navigations coming from the page script."""

    jump_requested = pyqtSignal(int)

    def acceptNavigationRequest(self, url, nav_type, is_main_frame) -> bool:
        if url.scheme() == JUMP_SCHEME:
            offset = jump_offset(url.toString())
            if offset is not None:
                self.jump_requested.emit(offset)
            return False
        if nav_type == QWebEnginePage.NavigationType.NavigationTypeLinkClicked:
            # Keep the preview on the document; links open nowhere.
            logger.debug("Ignoring link click in preview: %s", url.toString())
            return False
        return super().acceptNavigationRequest(url, nav_type, is_main_frame)


class PreviewPane(QWidget):
    """Renders the editor text and keeps the preview in step with the caret.

    Signals:
        jump_requested: Source offset of a block clicked in the web view.
    """

    jump_requested = pyqtSignal(int)

    def __init__(self, renderer: MarkdownRenderer, dark: bool = False, parent=None) -> None:
        super().__init__(parent)
        self._renderer = renderer
        self._dark = dark
        self._highlighter = PreviewHighlighter()
        self._text = ""
        self._path: Path | None = None
        self._result: RenderResult | None = None
        self._type = "web"
        self._loading = False
        self._caret_offset = -1
        self._scroll_fraction = 0.0
        self._scroll_pending = False
        self._reset_scroll = False
        self._build_ui()

        # Coalesce keystrokes into one render
        self._render_timer = QTimer(self)
        self._render_timer.setSingleShot(True)
        self._render_timer.setInterval(250)
        self._render_timer.timeout.connect(self._render)

    # ------------------------------------------------------------------
    # Build UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._stack = QStackedWidget()

        self._view = QWebEngineView()
        self._page = _PreviewPage(self._view)
        self._page.settings().setAttribute(
            QWebEngineSettings.WebAttribute.LocalContentCanAccessFileUrls, True
        )
        self._page.jump_requested.connect(self.jump_requested)
        self._page.loadFinished.connect(self._on_load_finished)
        self._view.setPage(self._page)
        self._view.setFocusPolicy(Qt.FocusPolicy.NoFocus)

        self._source_view = QPlainTextEdit()
        self._source_view.setReadOnly(True)
        self._source_view.setFont(QFont("Monospace", 10))

        self._ast_view = QPlainTextEdit()
        self._ast_view.setReadOnly(True)
        self._ast_view.setFont(QFont("Monospace", 10))
        self._ast_view.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

        self._stack.addWidget(self._view)          # index 0
        self._stack.addWidget(self._source_view)   # index 1
        self._stack.addWidget(self._ast_view)      # index 2
        self._stack.addWidget(QWidget())           # index 3, preview off
        layout.addWidget(self._stack)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def highlighter(self) -> PreviewHighlighter:
        return self._highlighter

    def set_preview_type(self, kind: str) -> None:
        if kind not in _PAGES:
            return
        self._type = kind
        self._stack.setCurrentIndex(_PAGES[kind])
        self._render()

    def set_renderer(self, renderer: MarkdownRenderer) -> None:
        self._renderer = renderer
        self._render()

    def set_dark(self, dark: bool) -> None:
        self._dark = dark
        self._render()

    def set_path(self, path: Path | None) -> None:
        self._path = path

    def update_text(self, text: str) -> None:
        """Schedule a re-render of *text*."""
        self._text = text
        self._render_timer.start()

    def render_now(self, text: str, reset_scroll: bool = False) -> None:
        """Render *text* immediately.

        With *reset_scroll* the page starts at the top instead of keeping the
        previous document's scroll position; used when switching tabs.
        """
        self._text = text
        self._reset_scroll = reset_scroll
        self._render_timer.stop()
        self._render()

    def current_result(self) -> RenderResult | None:
        return self._result

    def highlight_at(self, offset: int) -> None:
        """Highlight the block that contains source offset *offset*."""
        self._caret_offset = offset
        if self._type != "web" or self._loading:
            return
        change = self._highlighter.highlight_at(offset)
        if change:
            self._page.runJavaScript(highlight_script(change))

    def scroll_to_fraction(self, fraction: float) -> None:
        self._scroll_fraction = fraction
        if self._type == "web":
            if self._loading:
                self._scroll_pending = True
            else:
                self._page.runJavaScript(scroll_script(fraction))
        else:
            view = self._source_view if self._type == "source" else self._ast_view
            bar = view.verticalScrollBar()
            bar.setValue(bar.minimum() + round((bar.maximum() - bar.minimum()) * fraction))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self) -> None:
        if self._type == "none":
            self._highlighter.set_tree(None)
            return
        try:
            self._result = self._renderer.render(self._text)
        except Exception as exc:
            logger.exception("Rendering failed: %s", exc)
            return

        if self._type == "source":
            self._source_view.setPlainText(self._result.source_html)
            self.scroll_to_fraction(self._scroll_fraction)
        elif self._type == "ast":
            self._ast_view.setPlainText(self._result.ast)
            self.scroll_to_fraction(self._scroll_fraction)
        else:
            self._load_web(self._result)

    def _load_web(self, result: RenderResult) -> None:
        # New page, new nodes: old references must not survive.
        self._highlighter.set_tree(build_tree(result.html))
        base = (
            QUrl.fromLocalFile(str(self._path.parent) + "/").toString()
            if self._path else None
        )
        if self._loading or self._reset_scroll:
            scroll_y = 0.0
        else:
            scroll_y = self._page.scrollPosition().y()
        self._reset_scroll = False
        html = build_page(
            result.html,
            stylesheet=preview_stylesheet(self._dark),
            base_url=base,
            scroll_y=scroll_y,
        )
        self._loading = True
        self._page.setHtml(html, QUrl(base) if base else QUrl("about:blank"))

    def _on_load_finished(self, ok: bool) -> None:
        self._loading = False
        if not ok:
            logger.warning("Preview page failed to load")
            return
        if self._scroll_pending:
            self._scroll_pending = False
            self._page.runJavaScript(scroll_script(self._scroll_fraction))
        if self._caret_offset >= 0:
            self.highlight_at(self._caret_offset)
