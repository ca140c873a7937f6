"""Options dialog: editor, file and Markdown settings."""

from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QSpinBox,
    QVBoxLayout,
)

from config.settings import AppSettings
from core.file_handler import is_known_encoding
from core.markdown_renderer import MARKDOWN2, MARKDOWN_IT

# (settings value, label); "" keeps whatever the file was read with
_SEPARATORS = [
    ("", "Keep file's separator"),
    ("LF", "Unix (LF)"),
    ("CRLF", "Windows (CRLF)"),
    ("CR", "Classic Mac (CR)"),
]
_ENCODINGS = ["", "utf-8", "utf-16", "latin-1", "windows-1252", "iso-8859-15", "shift_jis"]
_RENDERERS = [(MARKDOWN_IT, "markdown-it (CommonMark)"), (MARKDOWN2, "markdown2")]
_EXTENSIONS = [("tables", "Tables"), ("strikethrough", "Strikethrough")]


class OptionsDialog(QDialog):
    """Modal dialog editing AppSettings; ``apply()`` writes them back."""

    def __init__(self, settings: AppSettings, parent=None) -> None:
        super().__init__(parent)
        self._settings = settings
        self.setWindowTitle("Options")
        self.resize(420, 360)
        self._build_ui()
        self._load()
        self._validate()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)

        editor_box = QGroupBox("Editor")
        form = QFormLayout(editor_box)
        self._font_size = QSpinBox()
        self._font_size.setRange(6, 48)
        self._wrap_length = QSpinBox()
        self._wrap_length.setRange(20, 400)
        self._wrap_length.setSuffix(" columns")
        form.addRow("Font size:", self._font_size)
        form.addRow("Format paragraphs at:", self._wrap_length)
        layout.addWidget(editor_box)

        files_box = QGroupBox("Files")
        form = QFormLayout(files_box)
        self._separator = QComboBox()
        for value, label in _SEPARATORS:
            self._separator.addItem(label, value)
        self._encoding = QComboBox()
        self._encoding.setEditable(True)
        for name in _ENCODINGS:
            self._encoding.addItem(name or "Auto (UTF-8, else Latin-1)", name)
        form.addRow("Line separator:", self._separator)
        form.addRow("Encoding:", self._encoding)
        layout.addWidget(files_box)

        md_box = QGroupBox("Markdown")
        form = QFormLayout(md_box)
        self._renderer = QComboBox()
        for value, label in _RENDERERS:
            self._renderer.addItem(label, value)
        form.addRow("Renderer:", self._renderer)
        self._ext_boxes: dict[str, QCheckBox] = {}
        for i, (name, label) in enumerate(_EXTENSIONS):
            box = QCheckBox(label)
            self._ext_boxes[name] = box
            form.addRow("Extensions:" if i == 0 else "", box)
        layout.addWidget(md_box)

        self._error = QLabel()
        self._error.setStyleSheet("color: #c0392b;")
        layout.addWidget(self._error)

        self._buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        layout.addWidget(self._buttons)

        self._encoding.currentTextChanged.connect(self._validate)

    def _load(self) -> None:
        s = self._settings
        self._font_size.setValue(s.font_size)
        self._wrap_length.setValue(s.wrap_length)
        self._select(self._separator, s.line_separator)
        if self._encoding.findData(s.encoding) >= 0:
            self._select(self._encoding, s.encoding)
        else:
            self._encoding.setEditText(s.encoding)
        self._select(self._renderer, s.renderer_type)
        enabled = set(s.markdown_extensions)
        for name, box in self._ext_boxes.items():
            box.setChecked(name in enabled)

    @staticmethod
    def _select(combo: QComboBox, value: str) -> None:
        idx = combo.findData(value)
        combo.setCurrentIndex(max(idx, 0))

    def encoding(self) -> str:
        idx = self._encoding.currentIndex()
        text = self._encoding.currentText()
        if idx >= 0 and text == self._encoding.itemText(idx):
            return self._encoding.itemData(idx)
        return text.strip()

    def _validate(self) -> None:
        ok = is_known_encoding(self.encoding())
        self._error.setText("" if ok else f"Unknown encoding: {self.encoding()}")
        self._buttons.button(QDialogButtonBox.StandardButton.Ok).setEnabled(ok)

    def apply(self) -> None:
        """Write the dialog's values to settings."""
        s = self._settings
        s.font_size = self._font_size.value()
        s.wrap_length = self._wrap_length.value()
        s.line_separator = self._separator.currentData()
        s.encoding = self.encoding()
        s.renderer_type = self._renderer.currentData()
        s.markdown_extensions = [n for n, box in self._ext_boxes.items() if box.isChecked()]
