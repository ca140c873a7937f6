"""Tests for config.settings."""

import pytest
from PyQt6.QtCore import QSettings

from config.settings import AppSettings


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.delenv("MDWRITER_RENDERER", raising=False)
    qs = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
    return AppSettings(qs)


class TestDefaults:
    def test_markdown(self, settings):
        assert settings.renderer_type == "markdown-it"
        assert settings.markdown_extensions == ["tables", "strikethrough"]

    def test_preview(self, settings):
        assert settings.preview_type == "web"

    def test_files(self, settings):
        assert settings.line_separator == ""
        assert settings.encoding == ""
        assert settings.last_file_path == ""

    def test_window_state_absent(self, settings):
        assert settings.window_geometry is None
        assert settings.splitter_state is None


class TestRoundTrip:
    def test_renderer(self, settings):
        settings.renderer_type = "markdown2"
        assert settings.renderer_type == "markdown2"

    def test_env_overrides_renderer(self, settings, monkeypatch):
        settings.renderer_type = "markdown2"
        monkeypatch.setenv("MDWRITER_RENDERER", "markdown-it")
        assert settings.renderer_type == "markdown-it"

    def test_extensions(self, settings):
        settings.markdown_extensions = ["tables"]
        assert settings.markdown_extensions == ["tables"]

    def test_unknown_preview_type_falls_back(self, settings):
        settings.preview_type = "pdf"
        assert settings.preview_type == "web"

    def test_preview_type(self, settings):
        settings.preview_type = "ast"
        assert settings.preview_type == "ast"

    def test_font_size(self, settings):
        settings.font_size = 14
        assert settings.font_size == 14

    def test_line_separator(self, settings):
        settings.line_separator = "CRLF"
        assert settings.line_separator == "CRLF"

    def test_wrap_length(self, settings):
        assert settings.wrap_length == 80
        settings.wrap_length = 72
        assert settings.wrap_length == 72

    def test_open_files(self, settings):
        assert settings.open_files == []
        settings.open_files = ["/a/one.md", "/b/two.md"]
        assert settings.open_files == ["/a/one.md", "/b/two.md"]

    def test_single_open_file(self, settings):
        # INI storage hands a one-element list back as a plain string
        settings.open_files = ["/a/one.md"]
        assert settings.open_files == ["/a/one.md"]

    def test_encoding(self, settings):
        settings.encoding = "windows-1252"
        assert settings.encoding == "windows-1252"

    def test_dark_mode(self, settings):
        assert settings.dark_mode is False
        settings.dark_mode = True
        assert settings.dark_mode is True
