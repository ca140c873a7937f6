"""Insert Image dialog."""

from pathlib import Path

from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from core.smart_edit import image_markdown


class ImageDialog(QDialog):
    """Modal dialog collecting an image URL, alt text and title.

    Local files picked with Browse are made relative to *base_dir* when
    they live beneath it, so the preview can resolve them.
    """

    def __init__(self, base_dir: Path | None = None, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Insert Image")
        self.resize(520, 200)
        self._base_dir = base_dir
        self._build_ui()
        self._update_preview()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)

        form = QFormLayout()
        url_row = QHBoxLayout()
        self._url_edit = QLineEdit()
        self._url_edit.setPlaceholderText("https:// or path/to/image.png")
        browse = QPushButton("Browse…")
        browse.clicked.connect(self._browse)
        url_row.addWidget(self._url_edit)
        url_row.addWidget(browse)
        self._alt_edit = QLineEdit()
        self._title_edit = QLineEdit()
        form.addRow("Image URL:", url_row)
        form.addRow("Alt text:", self._alt_edit)
        form.addRow("Title:", self._title_edit)
        layout.addLayout(form)

        self._preview = QLabel()
        self._preview.setStyleSheet("font-family: monospace; color: gray;")
        layout.addWidget(self._preview)

        for edit in (self._url_edit, self._alt_edit, self._title_edit):
            edit.textChanged.connect(self._update_preview)

        self._buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        layout.addWidget(self._buttons)

    def _browse(self) -> None:
        start = str(self._base_dir) if self._base_dir else ""
        path, _ = QFileDialog.getOpenFileName(
            self, "Choose Image", start,
            "Images (*.png *.jpg *.jpeg *.gif *.svg *.webp);;All Files (*)",
        )
        if not path:
            return
        chosen = Path(path)
        if self._base_dir:
            try:
                chosen = chosen.relative_to(self._base_dir)
            except ValueError:
                pass
        self._url_edit.setText(chosen.as_posix())

    def _update_preview(self) -> None:
        url = self.url()
        self._preview.setText(image_markdown(url, self.alt(), self.title()) if url else "")
        ok = self._buttons.button(QDialogButtonBox.StandardButton.Ok)
        ok.setEnabled(bool(url))

    def url(self) -> str:
        return self._url_edit.text().strip()

    def alt(self) -> str:
        return self._alt_edit.text().strip()

    def title(self) -> str:
        return self._title_edit.text().strip()

    def markdown(self) -> str:
        """Return the Markdown for the entered image."""
        return image_markdown(self.url(), self.alt(), self.title())
