"""Markdown source editor: syntax highlighting, spell check, smart editing."""

import logging
import re
from pathlib import Path

from markdownify import markdownify as html_to_md
from platformdirs import user_data_dir
from spellchecker import SpellChecker

from PyQt6.QtCore import Qt, QEvent, QTimer, pyqtSignal
from PyQt6.QtGui import (
    QAction,
    QColor,
    QFont,
    QKeySequence,
    QShortcut,
    QSyntaxHighlighter,
    QTextCharFormat,
    QTextCursor,
    QTextDocument,
)
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.smart_edit import (
    count_words,
    duplicate_lines,
    enter_edit,
    image_markdown,
    link_markdown,
    move_lines,
    reflow_paragraphs,
    toggle_wrap,
)
from core.source_map import index_to_utf16, utf16_to_index

_APP_NAME = "MarkdownWriter"
_USER_DICT_PATH = Path(user_data_dir(_APP_NAME)) / "user_dictionary.txt"
_WORD_RE = re.compile(r"\b[A-Za-z]+(?:'[A-Za-z]+)*\b")
_FENCE_RE = re.compile(r"^\s{0,3}(```|~~~)")

logger = logging.getLogger(__name__)

_STYLE_ITEMS = ["Normal text", "Heading 1", "Heading 2", "Heading 3"]

# Block states used by the highlighter
_STATE_TEXT = 0
_STATE_FENCE = 1

_PLAIN_MODS = (Qt.KeyboardModifier.NoModifier, Qt.KeyboardModifier.KeypadModifier)

# ---------------------------------------------------------------------------
# Spell-checking helpers
# ---------------------------------------------------------------------------

def _load_spell_checker() -> SpellChecker:
    """Load US-English SpellChecker, merging the user's custom word list."""
    spell = SpellChecker(language="en")
    if _USER_DICT_PATH.exists():
        words = _USER_DICT_PATH.read_text(encoding="utf-8").split()
        if words:
            spell.word_frequency.load_words(words)
    return spell


def _add_to_user_dict(word: str, spell: SpellChecker) -> None:
    """Persist a word to the user dictionary and update the live checker."""
    word = word.lower()
    spell.word_frequency.load_words([word])
    _USER_DICT_PATH.parent.mkdir(parents=True, exist_ok=True)
    with _USER_DICT_PATH.open("a", encoding="utf-8") as f:
        f.write(word + "\n")
    logger.debug("Added '%s' to user dictionary", word)


def _fmt(color: str, *, bold: bool = False, italic: bool = False,
         mono: bool = False, underline: bool = False, strike: bool = False) -> QTextCharFormat:
    f = QTextCharFormat()
    f.setForeground(QColor(color))
    if bold:
        f.setFontWeight(QFont.Weight.Bold)
    if italic:
        f.setFontItalic(True)
    if mono:
        f.setFontFamilies(["Monospace"])
    if underline:
        f.setFontUnderline(True)
    if strike:
        f.setFontStrikeOut(True)
    return f


class MarkdownHighlighter(QSyntaxHighlighter):
    """Markdown syntax colouring plus red spell-check underlines.

    Fenced code blocks are tracked through the block state so their
    contents are neither styled nor spell-checked.
    """

    def __init__(self, document: QTextDocument, spell: SpellChecker | None) -> None:
        super().__init__(document)
        self._spell = spell
        self._spell_fmt = QTextCharFormat()
        self._spell_fmt.setUnderlineStyle(QTextCharFormat.UnderlineStyle.SpellCheckUnderline)
        self._spell_fmt.setUnderlineColor(Qt.GlobalColor.red)
        self._code_fmt = _fmt("#4e9a9a", mono=True)
        self._rules = [
            (re.compile(r"^#{1,6}\s.*"), _fmt("#3a6fc4", bold=True)),
            (re.compile(r"^\s{0,3}>.*"), _fmt("#7a8899", italic=True)),
            (re.compile(r"^\s*(?:[-+*]|\d+\.)\s"), _fmt("#2f9a8a", bold=True)),
            (re.compile(r"\*\*[^*\n]+\*\*|__[^_\n]+__"), _fmt("#8a5cc4", bold=True)),
            (re.compile(r"(?<![*\w])\*[^*\n]+\*(?!\*)|(?<![_\w])_[^_\n]+_(?!_)"),
             _fmt("#5a9a3a", italic=True)),
            (re.compile(r"~~[^~\n]+~~"), _fmt("#888888", strike=True)),
            (re.compile(r"!?\[[^\]\n]*\]\([^)\n]*\)"), _fmt("#3a6fc4", underline=True)),
            (re.compile(r"^\s*([-*_])(\s*\1){2,}\s*$"), _fmt("#999999")),
            (re.compile(r"`[^`\n]+`"), self._code_fmt),
        ]

    def set_spell_checker(self, spell: SpellChecker | None) -> None:
        self._spell = spell
        self.rehighlight()

    def highlightBlock(self, text: str) -> None:
        prev = self.previousBlockState()
        in_fence = prev == _STATE_FENCE
        if _FENCE_RE.match(text):
            self.setFormat(0, len(text), self._code_fmt)
            self.setCurrentBlockState(_STATE_TEXT if in_fence else _STATE_FENCE)
            return
        if in_fence:
            self.setFormat(0, len(text), self._code_fmt)
            self.setCurrentBlockState(_STATE_FENCE)
            return
        self.setCurrentBlockState(_STATE_TEXT)

        for pattern, fmt in self._rules:
            for m in pattern.finditer(text):
                self.setFormat(m.start(), m.end() - m.start(), fmt)

        if self._spell is None:
            return
        for m in _WORD_RE.finditer(text):
            word = m.group()
            if len(word) < 3 or word.isupper():
                continue
            if self.format(m.start()) == self._code_fmt:
                continue
            if self._spell.unknown([word]):
                fmt = QTextCharFormat(self.format(m.start()))
                fmt.merge(self._spell_fmt)
                self.setFormat(m.start(), len(word), fmt)


class MarkdownTextEdit(QPlainTextEdit):
    """QPlainTextEdit with smart Enter, line moves, HTML paste and spell menu."""

    def __init__(self, spell: SpellChecker, parent=None) -> None:
        super().__init__(parent)
        self._spell = spell
        self._highlighter: MarkdownHighlighter | None = None
        self.spell_enabled = True

    def set_highlighter(self, h: "MarkdownHighlighter") -> None:
        self._highlighter = h

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def keyPressEvent(self, event) -> None:
        key = event.key()
        mods = event.modifiers()
        alt = bool(mods & Qt.KeyboardModifier.AltModifier)
        shift = bool(mods & Qt.KeyboardModifier.ShiftModifier)

        if key in (Qt.Key.Key_Return, Qt.Key.Key_Enter) and mods in _PLAIN_MODS:
            self._smart_enter()
            return
        if alt and key in (Qt.Key.Key_Up, Qt.Key.Key_Down):
            if shift:
                self._duplicate_lines(up=key == Qt.Key.Key_Up)
            else:
                self._move_lines(up=key == Qt.Key.Key_Up)
            return
        super().keyPressEvent(event)

    def _smart_enter(self) -> None:
        cursor = self.textCursor()
        block_text = cursor.block().text()
        line = block_text[: cursor.positionInBlock()]
        remove, insert = enter_edit(line)
        cursor.beginEditBlock()
        if remove:
            cursor.movePosition(
                QTextCursor.MoveOperation.Left, QTextCursor.MoveMode.KeepAnchor, remove
            )
        cursor.insertText(insert)
        cursor.endEditBlock()
        self.setTextCursor(cursor)
        self.ensureCursorVisible()

    def _selected_line_range(self) -> tuple[int, int]:
        cursor = self.textCursor()
        doc = self.document()
        first = doc.findBlock(cursor.selectionStart()).blockNumber()
        last_block = doc.findBlock(cursor.selectionEnd())
        last = last_block.blockNumber()
        if cursor.hasSelection() and last > first and cursor.selectionEnd() == last_block.position():
            last -= 1
        return first, last

    def _replace_all_text(self, text: str, first: int, last: int) -> None:
        """Replace the document in one undo step and select lines first..last."""
        cursor = QTextCursor(self.document())
        cursor.beginEditBlock()
        cursor.select(QTextCursor.SelectionType.Document)
        cursor.insertText(text)
        cursor.endEditBlock()
        doc = self.document()
        start = doc.findBlockByNumber(first)
        end = doc.findBlockByNumber(last)
        sel = QTextCursor(doc)
        sel.setPosition(start.position())
        sel.setPosition(end.position() + end.length() - 1, QTextCursor.MoveMode.KeepAnchor)
        self.setTextCursor(sel)

    def _move_lines(self, up: bool) -> None:
        first, last = self._selected_line_range()
        text, new_first, new_last = move_lines(self.toPlainText(), first, last, up)
        if new_first != first:
            self._replace_all_text(text, new_first, new_last)

    def _duplicate_lines(self, up: bool) -> None:
        first, last = self._selected_line_range()
        text = duplicate_lines(self.toPlainText(), first, last)
        count = last - first + 1
        if up:
            self._replace_all_text(text, first, last)
        else:
            self._replace_all_text(text, first + count, last + count)

    # ------------------------------------------------------------------
    # Paste
    # ------------------------------------------------------------------

    def insertFromMimeData(self, source) -> None:
        if source.hasHtml() and not source.hasFormat("application/x-qt-richtext"):
            md = html_to_md(source.html(), heading_style="ATX", bullets="-").strip()
            if md:
                self.textCursor().insertText(md)
                return
        super().insertFromMimeData(source)

    # ------------------------------------------------------------------
    # Spell-check context menu
    # ------------------------------------------------------------------

    def contextMenuEvent(self, event) -> None:
        menu = self.createStandardContextMenu()
        cursor = self.cursorForPosition(event.pos())
        cursor.select(QTextCursor.SelectionType.WordUnderCursor)
        word = cursor.selectedText()

        if self.spell_enabled and word and len(word) >= 3 and self._spell.unknown([word]):
            menu.addSeparator()
            candidates = sorted(self._spell.candidates(word) or [])[:6]
            if candidates:
                for suggestion in candidates:
                    act = QAction(f"→ {suggestion}", menu)
                    act.triggered.connect(
                        lambda _, s=suggestion, c=cursor: (
                            c.insertText(s),
                            self.setTextCursor(c),
                        )
                    )
                    menu.addAction(act)
            else:
                no_act = QAction("(No suggestions)", menu)
                no_act.setEnabled(False)
                menu.addAction(no_act)

            menu.addSeparator()
            add_act = QAction(f'Add "{word}" to dictionary', menu)
            add_act.triggered.connect(lambda _, w=word: self._add_word(w))
            menu.addAction(add_act)

        menu.exec(event.globalPos())

    def _add_word(self, word: str) -> None:
        _add_to_user_dict(word, self._spell)
        if self._highlighter:
            self._highlighter.rehighlight()


class MarkdownEditor(QWidget):
    """Markdown source pane with formatting toolbar and find/replace bar.

    Signals:
        text_changed:   Emitted whenever the document content changes.
        caret_moved:    Source offset (str index) of the caret.
        scroll_changed: Vertical scroll position as a fraction in [0, 1].
    """

    text_changed = pyqtSignal()
    caret_moved = pyqtSignal(int)
    scroll_changed = pyqtSignal(float)
    link_requested = pyqtSignal()
    image_requested = pyqtSignal()

    def __init__(self, font_size: int = 11, spell_check: bool = True, parent=None) -> None:
        super().__init__(parent)
        self._spell = _load_spell_checker()
        self._font_size = font_size
        self._build_ui()
        self.set_spell_check(spell_check)

    # ------------------------------------------------------------------
    # Build UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        # --- Formatting toolbar ---
        toolbar = QWidget()
        tl = QHBoxLayout(toolbar)
        tl.setContentsMargins(2, 2, 2, 2)
        tl.setSpacing(4)

        self._style_combo = QComboBox()
        self._style_combo.addItems(_STYLE_ITEMS)
        self._style_combo.setFixedWidth(120)
        self._style_combo.setToolTip("Paragraph style")
        self._style_combo.currentIndexChanged.connect(self._on_style_changed)
        tl.addWidget(self._style_combo)

        tl.addSpacing(6)

        for label, tip, css, handler in (
            ("B", "Bold  (Ctrl+B)", "font-weight: bold;", lambda: self._wrap_selection("**")),
            ("I", "Italic  (Ctrl+I)", "font-style: italic;", lambda: self._wrap_selection("_")),
            ("S", "Strikethrough", "text-decoration: line-through;", lambda: self._wrap_selection("~~")),
            ("`", "Inline code  (Ctrl+K)", "font-family: monospace;", lambda: self._wrap_selection("`")),
        ):
            btn = QPushButton(label)
            btn.setFixedWidth(28)
            btn.setToolTip(tip)
            btn.setStyleSheet(css)
            btn.clicked.connect(handler)
            tl.addWidget(btn)

        sep1 = QFrame()
        sep1.setFrameShape(QFrame.Shape.VLine)
        sep1.setFrameShadow(QFrame.Shadow.Sunken)
        tl.addWidget(sep1)

        for label, tip, width, handler in (
            ('"', "Blockquote", 28, lambda: self._toggle_prefix("> ")),
            ("•", "Bullet list", 28, lambda: self._toggle_prefix("- ")),
            ("1.", "Numbered list", 28, lambda: self._toggle_prefix("1. ")),
            ("→|", "Increase indent  (Tab)", 32, self._increase_indent),
            ("|←", "Decrease indent  (Shift+Tab)", 32, self._decrease_indent),
            ("—", "Horizontal divider", 28, self._insert_divider),
        ):
            btn = QPushButton(label)
            btn.setFixedWidth(width)
            btn.setToolTip(tip)
            btn.clicked.connect(handler)
            tl.addWidget(btn)

        sep2 = QFrame()
        sep2.setFrameShape(QFrame.Shape.VLine)
        sep2.setFrameShadow(QFrame.Shadow.Sunken)
        tl.addWidget(sep2)

        link_btn = QPushButton("Link…")
        link_btn.setToolTip("Insert link  (Ctrl+L)")
        link_btn.clicked.connect(self.link_requested)
        tl.addWidget(link_btn)

        image_btn = QPushButton("Image…")
        image_btn.setToolTip("Insert image  (Ctrl+G)")
        image_btn.clicked.connect(self.image_requested)
        tl.addWidget(image_btn)

        find_btn = QPushButton("Find")
        find_btn.setToolTip("Find / Replace  (Ctrl+F / Ctrl+H)")
        find_btn.clicked.connect(lambda: self.show_find(replace=False))
        tl.addWidget(find_btn)

        tl.addStretch()
        layout.addWidget(toolbar)

        # --- Find / Replace bar (hidden by default) ---
        self._find_bar = self._build_find_bar()
        self._find_bar.hide()
        layout.addWidget(self._find_bar)

        # Keyboard shortcuts
        for seq, handler in (
            (QKeySequence.StandardKey.Find, lambda: self.show_find(replace=False)),
            (QKeySequence("Ctrl+H"), lambda: self.show_find(replace=True)),
            (QKeySequence.StandardKey.Bold, lambda: self._wrap_selection("**")),
            (QKeySequence.StandardKey.Italic, lambda: self._wrap_selection("_")),
            (QKeySequence("Ctrl+K"), lambda: self._wrap_selection("`")),
            (QKeySequence("Ctrl+L"), self.link_requested.emit),
            (QKeySequence("Ctrl+G"), self.image_requested.emit),
        ):
            sc = QShortcut(seq, self)
            sc.setContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
            sc.activated.connect(handler)

        # --- Source editor ---
        self._text = MarkdownTextEdit(self._spell)
        self._text.setFont(QFont("Monospace", self._font_size))
        self._text.setLineWrapMode(QPlainTextEdit.LineWrapMode.WidgetWidth)
        self._text.setPlaceholderText("Write Markdown here…")
        self._text.textChanged.connect(self.text_changed)
        self._text.cursorPositionChanged.connect(self._on_cursor_moved)
        self._text.verticalScrollBar().valueChanged.connect(self._on_scrolled)
        self._text.verticalScrollBar().rangeChanged.connect(lambda *_: self._on_scrolled())
        self._text.installEventFilter(self)
        self._highlighter = MarkdownHighlighter(self._text.document(), self._spell)
        self._text.set_highlighter(self._highlighter)
        layout.addWidget(self._text, stretch=1)

        # --- Word-count status strip ---
        wc_bar = QWidget()
        wcl = QHBoxLayout(wc_bar)
        wcl.setContentsMargins(6, 1, 6, 1)
        self._word_count_label = QLabel("0 words")
        self._word_count_label.setStyleSheet("color: gray; font-size: 10px;")
        wcl.addWidget(self._word_count_label)
        wcl.addStretch()
        self._position_label = QLabel("1:1")
        self._position_label.setStyleSheet("color: gray; font-size: 10px;")
        wcl.addWidget(self._position_label)
        layout.addWidget(wc_bar)

        # Debounce timer so large pastes don't stall the UI
        self._wc_timer = QTimer()
        self._wc_timer.setSingleShot(True)
        self._wc_timer.setInterval(400)
        self._wc_timer.timeout.connect(self._refresh_word_count)
        self._text.textChanged.connect(self._wc_timer.start)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> None:
        """Replace editor content and reset undo history."""
        self._text.setPlainText(text)
        self._text.document().setModified(False)
        cursor = self._text.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.Start)
        self._text.setTextCursor(cursor)

    def get_text(self) -> str:
        return self._text.toPlainText()

    def is_modified(self) -> bool:
        return self._text.document().isModified()

    def set_modified(self, value: bool) -> None:
        self._text.document().setModified(value)

    def caret_offset(self) -> int:
        return utf16_to_index(self._text.toPlainText(), self._text.textCursor().position())

    def go_to_offset(self, offset: int) -> None:
        """Move the caret to source offset *offset* and focus the editor."""
        cursor = self._text.textCursor()
        cursor.setPosition(index_to_utf16(self._text.toPlainText(), offset))
        self._text.setTextCursor(cursor)
        self._text.centerCursor()
        self._text.setFocus()

    def insert_text(self, text: str) -> None:
        self._text.textCursor().insertText(text)
        self._text.setFocus()

    def insert_link(self, url: str, text: str = "", title: str = "") -> None:
        cursor = self._text.textCursor()
        label = text or cursor.selectedText()
        cursor.insertText(link_markdown(url, label, title))
        self._text.setTextCursor(cursor)

    def insert_image(self, url: str, alt: str = "", title: str = "") -> None:
        cursor = self._text.textCursor()
        cursor.insertText(image_markdown(url, alt, title))
        self._text.setTextCursor(cursor)

    def format_paragraphs(self, wrap_length: int, selection_only: bool = False) -> None:
        """Re-wrap paragraphs at *wrap_length*, all or those in the selection."""
        text = self._text.toPlainText()
        lines = self._text._selected_line_range() if selection_only else None
        new_text = reflow_paragraphs(text, wrap_length, lines)
        if new_text == text:
            return
        offset = self.caret_offset()
        cursor = QTextCursor(self._text.document())
        cursor.beginEditBlock()
        cursor.select(QTextCursor.SelectionType.Document)
        cursor.insertText(new_text)
        cursor.endEditBlock()
        cursor.setPosition(index_to_utf16(new_text, min(offset, len(new_text))))
        self._text.setTextCursor(cursor)
        self._text.ensureCursorVisible()

    def selected_text(self) -> str:
        # QTextCursor reports paragraph breaks as U+2029
        return self._text.textCursor().selectedText().replace("\u2029", "\n")

    def set_spell_check(self, enabled: bool) -> None:
        self._text.spell_enabled = enabled
        self._highlighter.set_spell_checker(self._spell if enabled else None)

    def set_font_size(self, size: int) -> None:
        self._font_size = size
        self._text.setFont(QFont("Monospace", size))

    def focus_editor(self) -> None:
        self._text.setFocus()

    # ------------------------------------------------------------------
    # Caret / scroll
    # ------------------------------------------------------------------

    def _on_cursor_moved(self) -> None:
        cursor = self._text.textCursor()
        self._position_label.setText(
            f"{cursor.blockNumber() + 1}:{cursor.positionInBlock() + 1}"
        )
        self._update_style_combo()
        self.caret_moved.emit(self.caret_offset())

    def scroll_fraction(self) -> float:
        bar = self._text.verticalScrollBar()
        span = bar.maximum() - bar.minimum()
        return (bar.value() - bar.minimum()) / span if span > 0 else 0.0

    def _on_scrolled(self) -> None:
        self.scroll_changed.emit(self.scroll_fraction())

    # ------------------------------------------------------------------
    # Event filter: Tab / Shift+Tab indent
    # ------------------------------------------------------------------

    def eventFilter(self, obj, event) -> bool:
        if event.type() == QEvent.Type.KeyPress:
            key = event.key()
            mods = event.modifiers()

            # Find/replace input key handling
            if obj in (self._find_input, self._replace_input):
                if key == Qt.Key.Key_Escape:
                    self._hide_find()
                    return True
                if obj is self._find_input and key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
                    if mods & Qt.KeyboardModifier.ShiftModifier:
                        self._find_prev()
                    else:
                        self._find_next()
                    return True

            if obj is self._text:
                if key == Qt.Key.Key_Tab:
                    if mods & Qt.KeyboardModifier.ShiftModifier:
                        self._decrease_indent()
                    else:
                        self._increase_indent()
                    return True
                if key == Qt.Key.Key_Backtab:
                    self._decrease_indent()
                    return True

        return super().eventFilter(obj, event)

    # ------------------------------------------------------------------
    # Style dropdown
    # ------------------------------------------------------------------

    def _current_line(self) -> tuple[QTextCursor, str]:
        cursor = self._text.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.StartOfBlock)
        cursor.movePosition(
            QTextCursor.MoveOperation.EndOfBlock, QTextCursor.MoveMode.KeepAnchor
        )
        return cursor, cursor.selectedText()

    def _current_heading_level(self) -> int:
        """Return 0 for normal text, 1-3 for H1-H3."""
        _, line = self._current_line()
        for level in (3, 2, 1):
            if line.startswith("#" * level + " "):
                return level
        return 0

    def _update_style_combo(self) -> None:
        self._style_combo.blockSignals(True)
        self._style_combo.setCurrentIndex(self._current_heading_level())
        self._style_combo.blockSignals(False)

    def _on_style_changed(self, index: int) -> None:
        cursor, line = self._current_line()
        stripped = re.sub(r"^#{1,6} ", "", line)
        cursor.insertText(("#" * index + " " if index else "") + stripped)
        self._text.setTextCursor(cursor)
        self._text.setFocus()

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def _wrap_selection(self, marker: str) -> None:
        cursor = self._text.textCursor()
        if cursor.hasSelection():
            start = cursor.selectionStart()
            new = toggle_wrap(cursor.selectedText(), marker)
            cursor.insertText(new)
            cursor.setPosition(start)
            cursor.setPosition(start + index_to_utf16(new, len(new)), QTextCursor.MoveMode.KeepAnchor)
        else:
            cursor.insertText(marker * 2)
            cursor.movePosition(QTextCursor.MoveOperation.Left, n=len(marker))
        self._text.setTextCursor(cursor)

    def _toggle_prefix(self, prefix: str) -> None:
        cursor, line = self._current_line()
        cursor.insertText(line[len(prefix):] if line.startswith(prefix) else prefix + line)
        self._text.setTextCursor(cursor)

    def _increase_indent(self) -> None:
        cursor, line = self._current_line()
        cursor.insertText("    " + line)
        self._text.setTextCursor(cursor)

    def _decrease_indent(self) -> None:
        cursor, line = self._current_line()
        stripped = line[4:] if line.startswith("    ") else line.lstrip(" ")
        if stripped != line:
            cursor.insertText(stripped)
            self._text.setTextCursor(cursor)

    def _insert_divider(self) -> None:
        cursor = self._text.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.EndOfBlock)
        cursor.insertText("\n\n---\n\n")
        self._text.setTextCursor(cursor)

    # ------------------------------------------------------------------
    # Word count
    # ------------------------------------------------------------------

    def _refresh_word_count(self) -> None:
        count = count_words(self.get_text())
        self._word_count_label.setText(f"{count:,} words")

    # ------------------------------------------------------------------
    # Find / Replace
    # ------------------------------------------------------------------

    def _build_find_bar(self) -> QWidget:
        bar = QFrame()
        bar.setFrameShape(QFrame.Shape.StyledPanel)
        vl = QVBoxLayout(bar)
        vl.setContentsMargins(4, 2, 4, 2)
        vl.setSpacing(2)

        # --- Find row ---
        find_row = QWidget()
        fl = QHBoxLayout(find_row)
        fl.setContentsMargins(0, 0, 0, 0)
        fl.setSpacing(4)

        fl.addWidget(QLabel("Find:"))
        self._find_input = QLineEdit()
        self._find_input.setPlaceholderText("Search…")
        self._find_input.textChanged.connect(self._on_find_text_changed)
        self._find_input.installEventFilter(self)
        fl.addWidget(self._find_input)

        self._match_label = QLabel("")
        self._match_label.setMinimumWidth(90)
        fl.addWidget(self._match_label)

        prev_btn = QPushButton("▲")
        prev_btn.setFixedWidth(28)
        prev_btn.setToolTip("Previous match  (Shift+Enter)")
        prev_btn.clicked.connect(self._find_prev)
        fl.addWidget(prev_btn)

        next_btn = QPushButton("▼")
        next_btn.setFixedWidth(28)
        next_btn.setToolTip("Next match  (Enter)")
        next_btn.clicked.connect(self._find_next)
        fl.addWidget(next_btn)

        self._case_cb = QCheckBox("Case")
        self._case_cb.setToolTip("Match case")
        self._case_cb.toggled.connect(self._on_find_text_changed)
        fl.addWidget(self._case_cb)

        self._word_cb = QCheckBox("Whole word")
        self._word_cb.toggled.connect(self._on_find_text_changed)
        fl.addWidget(self._word_cb)

        close_btn = QPushButton("✕")
        close_btn.setFixedWidth(24)
        close_btn.setToolTip("Close  (Escape)")
        close_btn.clicked.connect(self._hide_find)
        fl.addWidget(close_btn)

        vl.addWidget(find_row)

        # --- Replace row (hidden when opened via Ctrl+F) ---
        self._replace_row = QWidget()
        rl = QHBoxLayout(self._replace_row)
        rl.setContentsMargins(0, 0, 0, 0)
        rl.setSpacing(4)

        rl.addWidget(QLabel("Replace:"))
        self._replace_input = QLineEdit()
        self._replace_input.setPlaceholderText("Replace with…")
        self._replace_input.returnPressed.connect(self._replace_one)
        self._replace_input.installEventFilter(self)
        rl.addWidget(self._replace_input)

        replace_btn = QPushButton("Replace")
        replace_btn.setToolTip("Replace current match, then advance")
        replace_btn.clicked.connect(self._replace_one)
        rl.addWidget(replace_btn)

        replace_all_btn = QPushButton("Replace All")
        replace_all_btn.clicked.connect(self._replace_all)
        rl.addWidget(replace_all_btn)

        rl.addStretch()
        vl.addWidget(self._replace_row)

        return bar

    def show_find(self, replace: bool = False) -> None:
        self._find_bar.show()
        self._replace_row.setVisible(replace)
        selected = self.selected_text()
        if selected and "\n" not in selected:
            self._find_input.setText(selected)
        self._find_input.selectAll()
        self._find_input.setFocus()
        self._on_find_text_changed()

    def _hide_find(self) -> None:
        self._find_bar.hide()
        self._text.setFocus()

    def _find_flags(self) -> QTextDocument.FindFlag:
        flags = QTextDocument.FindFlag(0)
        if self._case_cb.isChecked():
            flags |= QTextDocument.FindFlag.FindCaseSensitively
        if self._word_cb.isChecked():
            flags |= QTextDocument.FindFlag.FindWholeWords
        return flags

    def _count_matches(self, text: str) -> int:
        doc = self._text.document()
        flags = self._find_flags()
        count = 0
        cursor = QTextCursor(doc)
        while True:
            cursor = doc.find(text, cursor, flags)
            if cursor.isNull():
                break
            count += 1
        return count

    def _on_find_text_changed(self) -> None:
        text = self._find_input.text()
        if not text:
            self._match_label.setText("")
            return
        count = self._count_matches(text)
        self._match_label.setText("No results" if count == 0 else f"{count} match{'es' if count != 1 else ''}")
        # Jump to first result from top
        cursor = self._text.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.Start)
        self._text.setTextCursor(cursor)
        self._text.find(text, self._find_flags())

    def _find_next(self) -> None:
        text = self._find_input.text()
        if not text:
            return
        if not self._text.find(text, self._find_flags()):
            # Wrap to top
            cursor = self._text.textCursor()
            cursor.movePosition(QTextCursor.MoveOperation.Start)
            self._text.setTextCursor(cursor)
            self._text.find(text, self._find_flags())

    def _find_prev(self) -> None:
        text = self._find_input.text()
        if not text:
            return
        flags = self._find_flags() | QTextDocument.FindFlag.FindBackward
        if not self._text.find(text, flags):
            # Wrap to bottom
            cursor = self._text.textCursor()
            cursor.movePosition(QTextCursor.MoveOperation.End)
            self._text.setTextCursor(cursor)
            self._text.find(text, flags)

    def _replace_one(self) -> None:
        text = self._find_input.text()
        replacement = self._replace_input.text()
        if not text:
            return
        cursor = self._text.textCursor()
        if cursor.hasSelection():
            selected = cursor.selectedText()
            match = selected == text if self._case_cb.isChecked() else selected.lower() == text.lower()
            if match:
                cursor.insertText(replacement)
        self._find_next()

    def _replace_all(self) -> None:
        text = self._find_input.text()
        replacement = self._replace_input.text()
        if not text:
            return
        flags = self._find_flags()
        cursor = self._text.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.Start)
        self._text.setTextCursor(cursor)
        count = 0
        edit = QTextCursor(self._text.document())
        edit.beginEditBlock()
        while self._text.find(text, flags):
            self._text.textCursor().insertText(replacement)
            count += 1
        edit.endEditBlock()
        self._match_label.setText(f"Replaced {count}" if count else "No matches")
