"""Markdown → HTML rendering for the preview, the HTML source view and export.

Two renderer types are available:

``markdown-it``
    markdown-it-py (CommonMark + tables + strikethrough).  Every block
    element carries ``data-pos="start:end"`` so the preview can follow the
    editor caret.
``markdown2``
    markdown2 with its usual extras.  No position data; caret tracking in
    the preview simply does nothing.

The AST view always shows the markdown-it token stream.
"""

import logging
from dataclasses import dataclass

import markdown2
from markdown_it import MarkdownIt

from core.source_map import POS_ATTR, LineIndex, format_pos

logger = logging.getLogger(__name__)

MARKDOWN_IT = "markdown-it"
MARKDOWN2 = "markdown2"
RENDERER_TYPES = (MARKDOWN_IT, MARKDOWN2)

DEFAULT_EXTENSIONS = ("tables", "strikethrough")

# markdown-it rule name / markdown2 extra for each user-facing extension
_MDIT_RULES = {"tables": "table", "strikethrough": "strikethrough"}
_MD2_EXTRAS = {"tables": "tables", "strikethrough": "strike"}
_MD2_BASE_EXTRAS = ["fenced-code-blocks", "cuddled-lists"]


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


@dataclass
class RenderResult:
    html: str           # preview body, annotated when the renderer supports it
    source_html: str    # same body without annotations
    ast: str            # indented token dump


class MarkdownRenderer:
    """Renders Markdown text according to the configured renderer type."""

    def __init__(
        self,
        renderer_type: str = MARKDOWN_IT,
        extensions: tuple[str, ...] | list[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        if renderer_type not in RENDERER_TYPES:
            logger.warning("Unknown renderer '%s', using %s", renderer_type, MARKDOWN_IT)
            renderer_type = MARKDOWN_IT
        self.renderer_type = renderer_type
        self.extensions = tuple(e for e in extensions if e in _MDIT_RULES)
        self._md = self._build_markdown_it()

    # ------------------------------------------------------------------
    # markdown-it setup
    # ------------------------------------------------------------------

    def _build_markdown_it(self) -> MarkdownIt:
        md = MarkdownIt("commonmark", {"html": True})
        for ext in self.extensions:
            md.enable(_MDIT_RULES[ext])

        default_render_token = md.renderer.renderToken
        default_fence = md.renderer.rules["fence"]
        default_code_block = md.renderer.rules["code_block"]

        def pos_of(token, env) -> str | None:
            if not env.get("annotate") or not token.map or len(token.map) != 2:
                return None
            start, end = env["line_index"].range_of_lines(token.map[0], token.map[1])
            return format_pos(start, end)

        def render_token(tokens, idx, options, env):
            token = tokens[idx]
            if token.nesting == 1 and token.type.endswith("_open"):
                pos = pos_of(token, env)
                if pos is not None:
                    token.attrSet(POS_ATTR, pos)
            return default_render_token(tokens, idx, options, env)

        def with_pre_pos(default_rule):
            def rule(tokens, idx, options, env):
                out = default_rule(tokens, idx, options, env)
                pos = pos_of(tokens[idx], env)
                if pos is not None and out.startswith("<pre"):
                    out = f'<pre {POS_ATTR}="{pos}"' + out[len("<pre"):]
                return out
            return rule

        md.renderer.renderToken = render_token
        md.renderer.rules["fence"] = with_pre_pos(default_fence)
        md.renderer.rules["code_block"] = with_pre_pos(default_code_block)
        return md

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, text: str) -> RenderResult:
        text = normalize_newlines(text or "")
        if self.renderer_type == MARKDOWN2:
            body = self._render_markdown2(text)
            return RenderResult(html=body, source_html=body, ast=self.ast(text))

        source_html = self._md.render(text, {"annotate": False})
        annotated = self._md.render(
            text, {"annotate": True, "line_index": LineIndex(text)}
        )
        return RenderResult(html=annotated, source_html=source_html, ast=self.ast(text))

    def to_html(self, text: str) -> str:
        """Plain HTML body with no position data (for export)."""
        text = normalize_newlines(text or "")
        if self.renderer_type == MARKDOWN2:
            return self._render_markdown2(text)
        return self._md.render(text, {"annotate": False})

    def ast(self, text: str) -> str:
        tokens = self._md.parse(normalize_newlines(text or ""), {})
        lines: list[str] = []
        for token in tokens:
            lines.append(self._format_token(token, token.level))
            for child in token.children or ():
                lines.append(self._format_token(child, token.level + 1 + child.level))
        return "\n".join(lines)

    # ------------------------------------------------------------------

    def _render_markdown2(self, text: str) -> str:
        extras = list(_MD2_BASE_EXTRAS)
        extras += [_MD2_EXTRAS[e] for e in self.extensions]
        return str(markdown2.markdown(text, extras=extras))

    @staticmethod
    def _format_token(token, level: int) -> str:
        parts = [token.type]
        if token.tag and token.nesting >= 0 and token.type not in ("text", "inline"):
            parts.append(token.tag)
        if token.map:
            parts.append(f"[{token.map[0]}-{token.map[1]}]")
        if token.type in ("text", "code_inline", "fence", "code_block", "html_block", "html_inline"):
            content = token.content if len(token.content) <= 60 else token.content[:57] + "..."
            parts.append(repr(content))
        return "    " * level + " ".join(parts)
