"""Application-wide settings backed by QSettings.

Usage:
    from config.settings import AppSettings
    settings = AppSettings()
    settings.renderer_type = "markdown-it"
    kind = settings.preview_type
"""

import logging
import os
from pathlib import Path

from platformdirs import user_documents_dir
from PyQt6.QtCore import QSettings

logger = logging.getLogger(__name__)

APP_NAME = "MarkdownWriter"
APP_ORG = "MarkdownWriter"

PREVIEW_TYPES = ("web", "source", "ast", "none")


class AppSettings:
    """Thin wrapper around QSettings with typed property accessors."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings(APP_ORG, APP_NAME)

    # ------------------------------------------------------------------
    # Markdown
    # ------------------------------------------------------------------

    @property
    def renderer_type(self) -> str:
        return os.environ.get(
            "MDWRITER_RENDERER", self._qs.value("markdown/renderer", "markdown-it")
        )

    @renderer_type.setter
    def renderer_type(self, value: str) -> None:
        self._qs.setValue("markdown/renderer", value)

    @property
    def markdown_extensions(self) -> list[str]:
        raw = self._qs.value("markdown/extensions", "tables,strikethrough")
        if isinstance(raw, (list, tuple)):
            return [str(v) for v in raw if v]
        return [v for v in str(raw).split(",") if v]

    @markdown_extensions.setter
    def markdown_extensions(self, value: list[str]) -> None:
        self._qs.setValue("markdown/extensions", ",".join(value))

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    @property
    def preview_type(self) -> str:
        value = self._qs.value("preview/type", "web")
        return value if value in PREVIEW_TYPES else "web"

    @preview_type.setter
    def preview_type(self, value: str) -> None:
        self._qs.setValue("preview/type", value)

    # ------------------------------------------------------------------
    # Editor
    # ------------------------------------------------------------------

    @property
    def font_size(self) -> int:
        return int(self._qs.value("editor/font_size", 11))

    @font_size.setter
    def font_size(self, value: int) -> None:
        self._qs.setValue("editor/font_size", int(value))

    @property
    def spell_check(self) -> bool:
        return self._qs.value("editor/spell_check", True, type=bool)

    @spell_check.setter
    def spell_check(self, value: bool) -> None:
        self._qs.setValue("editor/spell_check", value)

    @property
    def wrap_length(self) -> int:
        """Column used by Format Paragraphs."""
        return int(self._qs.value("editor/wrap_length", 80))

    @wrap_length.setter
    def wrap_length(self, value: int) -> None:
        self._qs.setValue("editor/wrap_length", int(value))

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    @property
    def line_separator(self) -> str:
        """"LF", "CRLF", "CR" or "" (keep whatever the file had)."""
        return self._qs.value("files/line_separator", "")

    @line_separator.setter
    def line_separator(self, value: str) -> None:
        self._qs.setValue("files/line_separator", value)

    @property
    def encoding(self) -> str:
        """Explicit file encoding, "" for UTF-8 with latin-1 fallback."""
        return self._qs.value("files/encoding", "")

    @encoding.setter
    def encoding(self, value: str) -> None:
        self._qs.setValue("files/encoding", value)

    @property
    def last_file_path(self) -> str:
        return self._qs.value("files/last_file_path", "")

    @last_file_path.setter
    def last_file_path(self, value: str) -> None:
        self._qs.setValue("files/last_file_path", value)

    @property
    def open_files(self) -> list[str]:
        """Paths of the tabs open at last exit, in tab order."""
        raw = self._qs.value("files/open_files", [])
        if isinstance(raw, str):
            raw = [raw] if raw else []
        return [str(p) for p in raw or [] if p]

    @open_files.setter
    def open_files(self, value: list[str]) -> None:
        self._qs.setValue("files/open_files", list(value))

    @property
    def last_open_dir(self) -> str:
        return self._qs.value("files/last_open_dir", "")

    @last_open_dir.setter
    def last_open_dir(self, value: str) -> None:
        self._qs.setValue("files/last_open_dir", value)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def documents_dir(self) -> Path:
        return Path(user_documents_dir())

    # ------------------------------------------------------------------
    # Window geometry
    # ------------------------------------------------------------------

    @property
    def window_geometry(self) -> bytes | None:
        val = self._qs.value("window/geometry")
        return bytes(val) if val else None

    @window_geometry.setter
    def window_geometry(self, value: bytes) -> None:
        self._qs.setValue("window/geometry", value)

    @property
    def splitter_state(self) -> bytes | None:
        val = self._qs.value("window/splitter")
        return bytes(val) if val else None

    @splitter_state.setter
    def splitter_state(self, value: bytes) -> None:
        self._qs.setValue("window/splitter", value)

    @property
    def dark_mode(self) -> bool:
        return self._qs.value("ui/dark_mode", False, type=bool)

    @dark_mode.setter
    def dark_mode(self, value: bool) -> None:
        self._qs.setValue("ui/dark_mode", value)

    def sync(self) -> None:
        self._qs.sync()
