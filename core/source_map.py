"""Source-position bookkeeping shared by the renderer and the preview.

The renderer stamps every block element with ``data-pos="start:end"``
(inclusive character offsets into the Markdown source).  This module turns
rendered HTML back into an immutable node snapshot that carries those
ranges, so the highlighter can walk it without touching the live page.

Nodes are addressed by *path*: the list of child-element indexes leading
from the document body to the node.  The preview page script resolves the
same path against ``document.body``.
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

POS_ATTR = "data-pos"
ROOT_TAG = "body"


def parse_pos(value: str | None) -> tuple[int, int] | None:
    """Parse a ``start:end`` annotation.

    Returns None for missing or malformed values, including negative
    offsets and ranges with ``start > end``; such nodes are treated as
    unannotated wrappers.
    """
    if not value:
        return None
    parts = value.split(":")
    if len(parts) != 2:
        return None
    try:
        start, end = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if start < 0 or start > end:
        return None
    return start, end


def format_pos(start: int, end: int) -> str:
    return f"{start}:{end}"


# Qt text positions count UTF-16 code units; Python indexes count code points.

def utf16_to_index(text: str, pos: int) -> int:
    """Convert a Qt (UTF-16) text position into a str index."""
    if text.isascii():
        return max(0, min(pos, len(text)))
    units = 0
    for i, ch in enumerate(text):
        if units >= pos:
            return i
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(text)


def index_to_utf16(text: str, index: int) -> int:
    """Convert a str index into a Qt (UTF-16) text position."""
    index = max(0, min(index, len(text)))
    if text.isascii():
        return index
    return index + sum(1 for ch in text[:index] if ord(ch) > 0xFFFF)


# ---------------------------------------------------------------------------
# Line index
# ---------------------------------------------------------------------------

class LineIndex:
    """Maps between zero-based line numbers and character offsets.

    ``range_of_lines(first, last)`` takes a half-open line range (the shape
    of markdown-it's ``token.map``) and returns an inclusive character
    range ending on the last line's terminator, so a caret sitting at the
    end of the last line still falls inside the block.
    """

    def __init__(self, text: str) -> None:
        self._length = len(text)
        starts = [0]
        pos = text.find("\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = text.find("\n", pos + 1)
        self._starts = starts

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def offset_of_line(self, line: int) -> int:
        if line <= 0:
            return 0
        if line >= len(self._starts):
            return self._length
        return self._starts[line]

    def line_of_offset(self, offset: int) -> int:
        offset = max(0, min(offset, self._length))
        return bisect_right(self._starts, offset) - 1

    def range_of_lines(self, first: int, last: int) -> tuple[int, int]:
        start = self.offset_of_line(first)
        if last >= len(self._starts):
            end = self._length
        else:
            end = self._starts[last] - 1
        return start, max(start, end)


# ---------------------------------------------------------------------------
# Rendered tree snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RenderedNode:
    tag: str
    pos: tuple[int, int] | None = None
    path: tuple[int, ...] = ()
    children: tuple["RenderedNode", ...] = field(default=(), repr=False)

    @property
    def start(self) -> int | None:
        return self.pos[0] if self.pos else None

    @property
    def end(self) -> int | None:
        return self.pos[1] if self.pos else None

    def contains(self, offset: int) -> bool:
        return self.pos is not None and self.pos[0] <= offset <= self.pos[1]

    def is_ancestor_of(self, other: "RenderedNode") -> bool:
        n = len(self.path)
        return len(other.path) > n and other.path[:n] == self.path

    def iter(self):
        """Pre-order iteration over this node and all descendants."""
        yield self
        for child in self.children:
            yield from child.iter()


def _build_node(el: Tag, path: tuple[int, ...]) -> RenderedNode:
    children = tuple(
        _build_node(child, path + (i,))
        for i, child in enumerate(c for c in el.children if isinstance(c, Tag))
    )
    raw = el.get(POS_ATTR)
    pos = parse_pos(raw if isinstance(raw, str) else None)
    if raw is not None and pos is None:
        logger.debug("Ignoring malformed %s=%r on <%s>", POS_ATTR, raw, el.name)
    return RenderedNode(tag=el.name.lower(), pos=pos, path=path, children=children)


def build_tree(html: str) -> RenderedNode:
    """Parse a rendered HTML body fragment into a snapshot tree.

    The returned root stands for ``<body>`` and is never annotated.
    Only element children are kept, mirroring ``Element.children`` in the
    browser.  The fragment goes through the HTML5 tree builder inside an
    explicit ``<body>``, the way the preview page embeds it, so misnested
    raw HTML (a ``<div>`` inside a ``<p>``) yields the same element paths
    the page script resolves.
    """
    soup = BeautifulSoup(f"<body>{html or ''}</body>", "html5lib")
    top = [c for c in soup.body.children if isinstance(c, Tag)]
    children = tuple(_build_node(el, (i,)) for i, el in enumerate(top))
    return RenderedNode(tag=ROOT_TAG, pos=None, path=(), children=children)


def node_at_path(root: RenderedNode, path: tuple[int, ...]) -> RenderedNode | None:
    node = root
    for index in path:
        if index < 0 or index >= len(node.children):
            return None
        node = node.children[index]
    return node
