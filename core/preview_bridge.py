"""Glue between the Python preview state and the page inside QWebEngineView.

Builds the preview document, the small page script that resolves node
paths against ``document.body``, and the JavaScript snippets the preview
pane runs for scrolling and highlighting.  Clicking an annotated block in
the page navigates to ``mdwriter:jump?offset=N``, which the preview page
intercepts and turns into an editor jump.
"""

import html
import json
from urllib.parse import parse_qs, urlsplit

from core.highlighter import HIGHLIGHT_CLASS, HighlightChange

JUMP_SCHEME = "mdwriter"

_PAGE_SCRIPT = """
var mdwPreview = {
  marker: '%(marker)s',

  nodeAt: function(path) {
    var node = document.body;
    for (var i = 0; i < path.length; i++) {
      if (!node || path[i] >= node.children.length)
        return null;
      node = node.children[path[i]];
    }
    return node;
  },

  apply: function(removed, added) {
    for (var i = 0; i < removed.length; i++) {
      var node = this.nodeAt(removed[i]);
      if (node) node.classList.remove(this.marker);
    }
    for (var j = 0; j < added.length; j++) {
      var node = this.nodeAt(added[j]);
      if (node) node.classList.add(this.marker);
    }
  },

  scrollTo: function(value) {
    window.scrollTo(0, (document.body.scrollHeight - window.innerHeight) * value);
  },
};

document.addEventListener('click', function(event) {
  if (event.target.closest('a[href]'))
    return;
  var el = event.target.closest('[data-pos]');
  if (!el)
    return;
  var start = parseInt(el.getAttribute('data-pos').split(':')[0], 10);
  if (!isNaN(start))
    window.location.href = '%(scheme)s:jump?offset=' + start;
});
"""


def build_page(
    body_html: str,
    stylesheet: str = "",
    base_url: str | None = None,
    scroll_y: float = 0.0,
) -> str:
    """Wrap a rendered body in a complete preview document."""
    base = f'<base href="{html.escape(base_url)}">\n' if base_url else ""
    onload = (
        f' onload="window.scrollTo(0, {int(scroll_y)});"' if scroll_y > 0 else ""
    )
    script = _PAGE_SCRIPT % {"marker": HIGHLIGHT_CLASS, "scheme": JUMP_SCHEME}
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"{base}"
        f"<style>\n{stylesheet}\n</style>\n"
        f"<script>{script}</script>\n"
        "</head>\n"
        f"<body{onload}>\n"
        f"{body_html}"
        "</body>\n"
        "</html>"
    )


def scroll_script(fraction: float) -> str:
    return f"mdwPreview.scrollTo({float(fraction)!r});"


def highlight_script(change: HighlightChange) -> str:
    removed = [list(n.path) for n in change.removed]
    added = [list(n.path) for n in change.added]
    return f"mdwPreview.apply({json.dumps(removed)}, {json.dumps(added)});"


def jump_url(offset: int) -> str:
    return f"{JUMP_SCHEME}:jump?offset={int(offset)}"


def jump_offset(url: str) -> int | None:
    """Return the source offset encoded in a jump URL, or None."""
    parts = urlsplit(url)
    if parts.scheme != JUMP_SCHEME or parts.path != "jump":
        return None
    values = parse_qs(parts.query).get("offset")
    if not values:
        return None
    try:
        offset = int(values[0])
    except ValueError:
        return None
    return offset if offset >= 0 else None
