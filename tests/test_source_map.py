"""Tests for core.source_map."""

from core.source_map import (
    LineIndex,
    RenderedNode,
    build_tree,
    format_pos,
    index_to_utf16,
    node_at_path,
    parse_pos,
    utf16_to_index,
)


class TestParsePos:
    def test_valid(self):
        assert parse_pos("3:17") == (3, 17)

    def test_empty_range(self):
        assert parse_pos("5:5") == (5, 5)

    def test_missing(self):
        assert parse_pos(None) is None
        assert parse_pos("") is None

    def test_malformed(self):
        assert parse_pos("abc") is None
        assert parse_pos("1:2:3") is None
        assert parse_pos("1:x") is None

    def test_negative_or_reversed(self):
        assert parse_pos("-1:4") is None
        assert parse_pos("9:4") is None

    def test_format_round_trip(self):
        assert parse_pos(format_pos(2, 8)) == (2, 8)


class TestUtf16:
    def test_ascii_is_identity(self):
        assert utf16_to_index("hello", 3) == 3
        assert index_to_utf16("hello", 3) == 3

    def test_astral_character_counts_twice(self):
        text = "a\U0001F600b"
        assert index_to_utf16(text, 2) == 3
        assert utf16_to_index(text, 3) == 2

    def test_clamped(self):
        assert utf16_to_index("abc", 10) == 3
        assert index_to_utf16("abc", -2) == 0


class TestLineIndex:
    def test_line_offsets(self):
        idx = LineIndex("ab\ncd\n\nef")
        assert idx.line_count == 4
        assert idx.offset_of_line(0) == 0
        assert idx.offset_of_line(1) == 3
        assert idx.offset_of_line(3) == 7
        assert idx.offset_of_line(9) == 9

    def test_line_of_offset(self):
        idx = LineIndex("ab\ncd\n")
        assert idx.line_of_offset(0) == 0
        assert idx.line_of_offset(2) == 0
        assert idx.line_of_offset(3) == 1

    def test_range_ends_on_newline(self):
        idx = LineIndex("# Title\n\nPara.\n")
        assert idx.range_of_lines(0, 1) == (0, 7)
        assert idx.range_of_lines(2, 3) == (9, 14)

    def test_range_past_end_uses_length(self):
        idx = LineIndex("no newline")
        assert idx.range_of_lines(0, 1) == (0, 10)


class TestBuildTree:
    HTML = (
        '<h1 data-pos="0:7">Title</h1>\n'
        '<ul>\n<li data-pos="9:12">a <em>b</em></li>\n</ul>\n'
        '<p data-pos="bogus">x</p>\n'
    )

    def test_root_is_unannotated_body(self):
        root = build_tree(self.HTML)
        assert root.tag == "body"
        assert root.pos is None
        assert root.path == ()

    def test_element_children_only(self):
        root = build_tree(self.HTML)
        assert [c.tag for c in root.children] == ["h1", "ul", "p"]

    def test_paths_and_positions(self):
        root = build_tree(self.HTML)
        li = node_at_path(root, (1, 0))
        assert li.tag == "li"
        assert li.pos == (9, 12)
        assert li.children[0].path == (1, 0, 0)
        assert root.children[0].start == 0
        assert root.children[0].end == 7

    def test_malformed_position_is_ignored(self):
        root = build_tree(self.HTML)
        assert root.children[2].pos is None

    def test_empty_html(self):
        root = build_tree("")
        assert root.children == ()

    def test_bad_path(self):
        root = build_tree(self.HTML)
        assert node_at_path(root, (7,)) is None
        assert node_at_path(root, (0, 0)) is None

    def test_block_inside_paragraph_is_hoisted(self):
        # The browser closes <p> at <div> and turns the stray </p> into an
        # empty paragraph; the snapshot must agree.
        html = '<p data-pos="0:16">a <div>b</div> c</p>\n<p data-pos="18:29">x</p>\n'
        root = build_tree(html)
        assert [c.tag for c in root.children] == ["p", "div", "p", "p"]
        assert root.children[3].pos == (18, 29)
        assert root.children[2].pos is None

    def test_table_gets_tbody(self):
        root = build_tree('<table data-pos="0:9"><tr><td>a</td></tr></table>')
        assert [c.tag for c in root.children[0].children] == ["tbody"]


class TestRenderedNode:
    def test_contains_is_inclusive(self):
        node = RenderedNode("p", (4, 9), (0,))
        assert node.contains(4)
        assert node.contains(9)
        assert not node.contains(10)

    def test_unannotated_contains_nothing(self):
        assert not RenderedNode("div").contains(0)

    def test_ancestry(self):
        outer = RenderedNode("ul", (0, 9), (1,))
        inner = RenderedNode("li", (0, 4), (1, 0))
        sibling = RenderedNode("p", (0, 4), (2,))
        assert outer.is_ancestor_of(inner)
        assert not inner.is_ancestor_of(outer)
        assert not outer.is_ancestor_of(sibling)
        assert not outer.is_ancestor_of(outer)

    def test_iter_is_preorder(self):
        root = build_tree(TestBuildTree.HTML)
        assert [n.tag for n in root.iter()] == ["body", "h1", "ul", "li", "em", "p"]
