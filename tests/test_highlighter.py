"""Tests for core.highlighter."""

import logging

import pytest

from core.highlighter import HighlightChange, PreviewHighlighter, scroll_offset
from core.markdown_renderer import MarkdownRenderer
from core.source_map import RenderedNode, build_tree


def node(tag, pos, path, *children):
    return RenderedNode(tag=tag, pos=pos, path=path, children=tuple(children))


def body(*children):
    return RenderedNode(tag="body", children=tuple(children))


@pytest.fixture
def two_lists():
    """body > ul(0:9)[li(0:4), li(5:9)], ul(10:19)[li(10:14), li(15:19)]"""
    return body(
        node("ul", (0, 9), (0,),
             node("li", (0, 4), (0, 0)),
             node("li", (5, 9), (0, 1))),
        node("ul", (10, 19), (1,),
             node("li", (10, 14), (1, 0)),
             node("li", (15, 19), (1, 1))),
    )


class TestHighlightAt:
    def test_deepest_block_wins(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        change = hl.highlight_at(6)
        assert [n.path for n in change.added] == [(0, 1)]
        assert hl.highlighted[0].tag == "li"

    def test_inline_resolves_to_block_ancestor(self):
        root = body(node("p", (0, 10), (0,), node("em", (2, 5), (0, 0))))
        hl = PreviewHighlighter(root)
        change = hl.highlight_at(3)
        assert [n.tag for n in change.added] == ["p"]

    def test_boundaries_are_inclusive(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        assert hl.highlight_at(4).added[0].path == (0, 0)
        assert hl.highlight_at(15).added[0].path == (1, 1)

    def test_gap_has_no_highlight(self):
        root = body(node("p", (0, 4), (0,)), node("p", (7, 9), (1,)))
        hl = PreviewHighlighter(root)
        hl.highlight_at(2)
        change = hl.highlight_at(5)
        assert change.added == ()
        assert [n.path for n in change.removed] == [(0,)]
        assert hl.highlighted == ()

    def test_past_end_has_no_highlight(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        assert not hl.highlight_at(100)

    def test_negative_offset(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        assert hl.highlight_at(-1).added == ()

    def test_no_tree(self):
        hl = PreviewHighlighter()
        change = hl.highlight_at(0)
        assert change == HighlightChange()
        assert not change

    def test_previous_highlight_is_removed(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        hl.highlight_at(1)
        change = hl.highlight_at(12)
        assert [n.path for n in change.removed] == [(0, 0)]
        assert [n.path for n in change.added] == [(1, 0)]

    def test_repeated_offset_is_idempotent(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        hl.highlight_at(6)
        first = hl.highlighted
        change = hl.highlight_at(6)
        assert hl.highlighted == first
        li = two_lists.children[0].children[1]
        assert change.removed == (li,)
        assert change.added == (li,)

    def test_at_most_one_highlight(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        for offset in range(0, 20):
            hl.highlight_at(offset)
            assert len(hl.highlighted) <= 1

    def test_unannotated_wrapper_is_walked(self):
        root = body(node("div", None, (0,), node("p", (0, 5), (0, 0))))
        hl = PreviewHighlighter(root)
        assert hl.highlight_at(3).added[0].path == (0, 0)

    def test_non_block_only_match(self):
        root = body(node("span", (0, 5), (0,)))
        hl = PreviewHighlighter(root)
        assert hl.highlight_at(2).added == ()


class TestPruning:
    def test_subtrees_before_offset_are_skipped(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        hl.highlight_at(15)
        # body, first ul (pruned), second ul, first li (pruned), second li
        assert hl.visited == 5
        assert hl.visited < sum(1 for _ in two_lists.iter())

    def test_full_walk_when_offset_is_early(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        hl.highlight_at(0)
        assert hl.visited == 7


class TestOverlap:
    def test_sibling_overlap_gives_no_highlight(self, caplog):
        root = body(node("p", (0, 10), (0,)), node("p", (5, 15), (1,)))
        hl = PreviewHighlighter(root)
        with caplog.at_level(logging.WARNING, logger="core.highlighter"):
            change = hl.highlight_at(7)
        assert change.added == ()
        assert hl.highlighted == ()
        assert "Overlapping source ranges" in caplog.text

    def test_overlap_clears_previous(self):
        root = body(node("p", (0, 10), (0,)), node("p", (5, 15), (1,)))
        hl = PreviewHighlighter(root)
        hl.highlight_at(2)
        change = hl.highlight_at(7)
        assert [n.path for n in change.removed] == [(0,)]


class TestTreeReplacement:
    def test_set_tree_drops_state(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        hl.highlight_at(1)
        hl.set_tree(body(node("p", (0, 3), (0,))))
        assert hl.highlighted == ()
        change = hl.highlight_at(1)
        assert change.removed == ()
        assert [n.path for n in change.added] == [(0,)]

    def test_reset(self, two_lists):
        hl = PreviewHighlighter(two_lists)
        hl.highlight_at(1)
        change = hl.reset()
        assert [n.path for n in change.removed] == [(0, 0)]
        assert hl.highlighted == ()


class TestRenderedDocument:
    TEXT = "# Title\n\nFirst para.\n\nSecond para.\n"

    @pytest.fixture
    def hl(self):
        result = MarkdownRenderer().render(self.TEXT)
        return PreviewHighlighter(build_tree(result.html))

    def test_heading(self, hl):
        assert hl.highlight_at(0).added[0].tag == "h1"
        assert hl.highlight_at(7).added[0].tag == "h1"

    def test_second_paragraph(self, hl):
        added = hl.highlight_at(self.TEXT.index("Second") + 2).added
        assert [n.path for n in added] == [(2,)]

    def test_blank_line_between_blocks(self, hl):
        assert hl.highlight_at(8).added == ()

    def test_list_item(self):
        text = "Intro\n\n- one\n- two\n"
        hl = PreviewHighlighter(build_tree(MarkdownRenderer().render(text).html))
        added = hl.highlight_at(text.index("two"))
        assert [(n.tag, n.path) for n in added.added] == [("li", (1, 1))]

    def test_raw_block_html_inside_paragraph(self):
        text = "a <div>b</div> c\n\nsecond para\n"
        hl = PreviewHighlighter(build_tree(MarkdownRenderer().render(text).html))
        added = hl.highlight_at(text.index("second")).added
        assert [(n.tag, n.path, n.pos) for n in added] == [("p", (3,), (18, 29))]


class TestScrollOffset:
    def test_half(self):
        assert scroll_offset(0.5, 1000, 200) == 400

    def test_bounds(self):
        assert scroll_offset(0.0, 1000, 200) == 0
        assert scroll_offset(1.0, 1000, 200) == 800

    def test_content_shorter_than_viewport(self):
        assert scroll_offset(0.7, 100, 300) == 0
