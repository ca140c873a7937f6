"""Tests for core.markdown_renderer."""

import logging

from core.markdown_renderer import (
    MARKDOWN2,
    MARKDOWN_IT,
    MarkdownRenderer,
    normalize_newlines,
)
from core.source_map import build_tree


def positions(html):
    return [(n.tag, n.pos) for n in build_tree(html).iter() if n.pos is not None]


class TestPositions:
    def test_heading_and_paragraphs(self):
        result = MarkdownRenderer().render("# Title\n\nFirst para.\n\nSecond para.\n")
        assert positions(result.html) == [
            ("h1", (0, 7)),
            ("p", (9, 20)),
            ("p", (22, 34)),
        ]

    def test_tight_list(self):
        result = MarkdownRenderer().render("- a\n- b\n")
        assert positions(result.html) == [
            ("ul", (0, 7)),
            ("li", (0, 3)),
            ("li", (4, 7)),
        ]

    def test_fenced_code(self):
        result = MarkdownRenderer().render("```\ncode\n```\n")
        assert positions(result.html) == [("pre", (0, 12))]
        assert "<code>code\n</code>" in result.html

    def test_indented_code(self):
        result = MarkdownRenderer().render("    x = 1\n")
        assert positions(result.html) == [("pre", (0, 9))]

    def test_blockquote_nests(self):
        result = MarkdownRenderer().render("> quoted\n")
        assert positions(result.html) == [("blockquote", (0, 8)), ("p", (0, 8))]

    def test_table(self):
        text = "| a | b |\n|---|---|\n| 1 | 2 |\n"
        tags = [tag for tag, _ in positions(MarkdownRenderer().render(text).html)]
        assert tags[0] == "table"
        assert "tr" in tags

    def test_crlf_input(self):
        result = MarkdownRenderer().render("# T\r\n\r\npara\r\n")
        assert positions(result.html) == [("h1", (0, 3)), ("p", (5, 9))]

    def test_no_trailing_newline(self):
        result = MarkdownRenderer().render("last")
        assert positions(result.html) == [("p", (0, 4))]


class TestSourceHtml:
    def test_source_html_has_no_positions(self):
        result = MarkdownRenderer().render("# T\n\n- a\n")
        assert "data-pos" not in result.source_html
        assert "<h1>T</h1>" in result.source_html

    def test_to_html_has_no_positions(self):
        assert "data-pos" not in MarkdownRenderer().to_html("para\n")

    def test_raw_html_passes_through(self):
        html = MarkdownRenderer().to_html("<div>raw</div>\n")
        assert "<div>raw</div>" in html


class TestExtensions:
    def test_strikethrough_enabled_by_default(self):
        assert "<s>gone</s>" in MarkdownRenderer().to_html("~~gone~~")

    def test_tables_can_be_disabled(self):
        text = "| a | b |\n|---|---|\n| 1 | 2 |\n"
        assert "<table>" not in MarkdownRenderer(extensions=[]).to_html(text)

    def test_unknown_extension_ignored(self):
        renderer = MarkdownRenderer(extensions=["tables", "emoji"])
        assert renderer.extensions == ("tables",)


class TestMarkdown2:
    def test_renders_without_positions(self):
        result = MarkdownRenderer(MARKDOWN2).render("# Title\n\npara\n")
        assert "<h1>Title</h1>" in result.html
        assert "data-pos" not in result.html
        assert result.html == result.source_html

    def test_highlighter_tree_has_no_positions(self):
        result = MarkdownRenderer(MARKDOWN2).render("# Title\n\npara\n")
        assert positions(result.html) == []


class TestRendererType:
    def test_unknown_type_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING, logger="core.markdown_renderer"):
            renderer = MarkdownRenderer("pandoc")
        assert renderer.renderer_type == MARKDOWN_IT
        assert "Unknown renderer" in caplog.text


class TestAst:
    def test_token_dump(self):
        ast = MarkdownRenderer().ast("# Title\n\nSome *text*\n")
        lines = ast.splitlines()
        assert lines[0] == "heading_open h1 [0-1]"
        assert "inline [0-1]" in lines[1]
        assert any(line.strip() == "text 'Title'" for line in lines)
        assert any(line.startswith("paragraph_open p [2-3]") for line in lines)

    def test_nesting_is_indented(self):
        ast = MarkdownRenderer().ast("- a\n")
        lines = ast.splitlines()
        assert lines[0].startswith("bullet_list_open ul")
        assert lines[1].startswith("    list_item_open li")

    def test_empty(self):
        assert MarkdownRenderer().ast("") == ""


class TestNormalizeNewlines:
    def test_mixed(self):
        assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"
