"""Tests for core.preview_bridge."""

from core.highlighter import HIGHLIGHT_CLASS, HighlightChange
from core.preview_bridge import (
    JUMP_SCHEME,
    build_page,
    highlight_script,
    jump_offset,
    jump_url,
    scroll_script,
)
from core.source_map import RenderedNode


class TestBuildPage:
    def test_wraps_body(self):
        page = build_page("<p>hi</p>\n")
        assert page.startswith("<!DOCTYPE html>")
        assert "<body>\n<p>hi</p>\n</body>" in page

    def test_page_script_uses_marker_and_scheme(self):
        page = build_page("")
        assert f"marker: '{HIGHLIGHT_CLASS}'" in page
        assert f"'{JUMP_SCHEME}:jump?offset='" in page

    def test_base_url(self):
        page = build_page("", base_url="file:///home/me/docs/")
        assert '<base href="file:///home/me/docs/">' in page

    def test_no_base_by_default(self):
        assert "<base" not in build_page("")

    def test_stylesheet(self):
        assert "<style>\nbody { color: red; }\n</style>" in build_page("", stylesheet="body { color: red; }")

    def test_scroll_restore(self):
        page = build_page("", scroll_y=240.7)
        assert '<body onload="window.scrollTo(0, 240);">' in page

    def test_no_scroll_restore_at_top(self):
        assert "onload" not in build_page("", scroll_y=0)


class TestScripts:
    def test_scroll_script(self):
        assert scroll_script(0.5) == "mdwPreview.scrollTo(0.5);"

    def test_scroll_script_int(self):
        assert scroll_script(1) == "mdwPreview.scrollTo(1.0);"

    def test_highlight_script(self):
        change = HighlightChange(
            removed=(RenderedNode("li", (0, 3), (1, 0)),),
            added=(RenderedNode("p", (5, 9), (2,)),),
        )
        assert highlight_script(change) == "mdwPreview.apply([[1, 0]], [[2]]);"

    def test_highlight_script_empty(self):
        assert highlight_script(HighlightChange()) == "mdwPreview.apply([], []);"


class TestJumpUrl:
    def test_jump_url(self):
        assert jump_url(42) == "mdwriter:jump?offset=42"

    def test_parse(self):
        assert jump_offset("mdwriter:jump?offset=42") == 42
        assert jump_offset(jump_url(0)) == 0

    def test_other_scheme(self):
        assert jump_offset("https://example.com/jump?offset=3") is None

    def test_other_path(self):
        assert jump_offset("mdwriter:open?offset=3") is None

    def test_bad_offset(self):
        assert jump_offset("mdwriter:jump?offset=x") is None
        assert jump_offset("mdwriter:jump?offset=-4") is None
        assert jump_offset("mdwriter:jump") is None
