"""Maps a source caret offset to a highlighted block in the rendered preview.

The highlighter works on an immutable :class:`~core.source_map.RenderedNode`
snapshot of the current render.  It never touches the page itself; each
call returns a :class:`HighlightChange` describing which nodes lost and
which gained the marker, and the preview pane applies that difference to
the live document.

Public API
----------
    PreviewHighlighter.set_tree(root)      new render, drop all state
    PreviewHighlighter.highlight_at(off)   -> HighlightChange
    PreviewHighlighter.reset()             -> HighlightChange
    scroll_offset(fraction, content_h, viewport_h) -> float
"""

import logging
from dataclasses import dataclass

from core.source_map import RenderedNode

logger = logging.getLogger(__name__)

HIGHLIGHT_CLASS = "editor-selection"

# Only these structural tags ever receive the marker; inline matches
# resolve to their nearest block-level ancestor.
BLOCK_TAGS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "dl", "dt", "dd",
    "table", "thead", "tbody", "tr", "th", "td",
    "blockquote", "pre",
})


@dataclass(frozen=True)
class HighlightChange:
    removed: tuple[RenderedNode, ...] = ()
    added: tuple[RenderedNode, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.removed or self.added)


def scroll_offset(fraction: float, content_height: float, viewport_height: float) -> float:
    """Return the scroll top that puts *fraction* of the overflow above the viewport."""
    overflow = max(0.0, float(content_height) - float(viewport_height))
    return overflow * float(fraction)


class PreviewHighlighter:
    """Keeps the single highlighted block of one rendered tree.

    ``visited`` counts the nodes examined by the most recent walk.
    """

    def __init__(self, root: RenderedNode | None = None) -> None:
        self._root = root
        self._highlighted: list[RenderedNode] = []
        self.visited = 0

    @property
    def root(self) -> RenderedNode | None:
        return self._root

    @property
    def highlighted(self) -> tuple[RenderedNode, ...]:
        return tuple(self._highlighted)

    def set_tree(self, root: RenderedNode | None) -> None:
        """Adopt a freshly rendered tree.

        The previous tree's nodes no longer exist in the page, so the
        highlight state is dropped without producing a change.
        """
        self._root = root
        self._highlighted = []
        self.visited = 0

    def reset(self) -> HighlightChange:
        removed = tuple(self._highlighted)
        self._highlighted = []
        return HighlightChange(removed=removed)

    def highlight_at(self, offset: int) -> HighlightChange:
        removed = tuple(self._highlighted)
        self._highlighted = []
        self.visited = 0

        if self._root is None or offset < 0:
            return HighlightChange(removed=removed)

        candidates: list[RenderedNode] = []
        self._collect(self._root, offset, candidates)
        if not candidates:
            return HighlightChange(removed=removed)

        # Pre-order collection: each candidate must enclose the next one.
        for outer, inner in zip(candidates, candidates[1:]):
            if not outer.is_ancestor_of(inner):
                logger.warning(
                    "Overlapping source ranges at offset %d: <%s %s> and <%s %s>",
                    offset, outer.tag, outer.pos, inner.tag, inner.pos,
                )
                return HighlightChange(removed=removed)

        for node in reversed(candidates):
            if node.tag in BLOCK_TAGS:
                self._highlighted = [node]
                break

        return HighlightChange(removed=removed, added=tuple(self._highlighted))

    def _collect(self, node: RenderedNode, offset: int, result: list[RenderedNode]) -> None:
        self.visited += 1
        if node.pos is not None:
            start, end = node.pos
            if start <= offset <= end:
                result.append(node)
            if offset > end:
                return
        for child in node.children:
            self._collect(child, offset, result)
