"""Insert Link dialog."""

from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
)

from core.smart_edit import link_markdown


class LinkDialog(QDialog):
    """Modal dialog collecting a link URL, text and title."""

    def __init__(self, text: str = "", parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Insert Link")
        self.resize(480, 180)
        self._build_ui(text)
        self._update_preview()

    def _build_ui(self, text: str) -> None:
        layout = QVBoxLayout(self)

        form = QFormLayout()
        self._url_edit = QLineEdit()
        self._url_edit.setPlaceholderText("https://")
        self._text_edit = QLineEdit(text)
        self._title_edit = QLineEdit()
        form.addRow("URL:", self._url_edit)
        form.addRow("Text:", self._text_edit)
        form.addRow("Title:", self._title_edit)
        layout.addLayout(form)

        self._preview = QLabel()
        self._preview.setStyleSheet("font-family: monospace; color: gray;")
        layout.addWidget(self._preview)

        for edit in (self._url_edit, self._text_edit, self._title_edit):
            edit.textChanged.connect(self._update_preview)

        self._buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        layout.addWidget(self._buttons)

    def _update_preview(self) -> None:
        url = self.url()
        self._preview.setText(link_markdown(url, self.text(), self.title()) if url else "")
        ok = self._buttons.button(QDialogButtonBox.StandardButton.Ok)
        ok.setEnabled(bool(url))

    def url(self) -> str:
        return self._url_edit.text().strip()

    def text(self) -> str:
        return self._text_edit.text().strip()

    def title(self) -> str:
        return self._title_edit.text().strip()

    def markdown(self) -> str:
        """Return the Markdown for the entered link."""
        return link_markdown(self.url(), self.text(), self.title())
