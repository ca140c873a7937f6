"""Text-level editing helpers used by the Markdown editor.

Everything here works on plain strings so it can be tested without Qt;
the editor widget applies the results through QTextCursor.
"""

import re

from markdown_it import MarkdownIt

# Leading whitespace + list marker (or plain indentation) followed by content
_AUTO_INDENT_RE = re.compile(r"(\s*[*+-]\s+|\s*[0-9]+\.\s+|\s+)(.*)")
_ORDERED_RE = re.compile(r"(\s*)([0-9]+)(\.\s+)")

WRAP_LENGTH = 80

# Tables must parse as tables, not as paragraphs to reflow
_PARSER = MarkdownIt("commonmark").enable(["table", "strikethrough"])

# Placeholders used while reflowing; none of them is split on
_PROTECTED_SPACE = "\x01"
_PROTECTED_TAB = "\x02"
_LINE_BREAK = "\x03"
_HARD_BREAK_SPACES = _LINE_BREAK
_HARD_BREAK_BACKSLASH = _LINE_BREAK + "\\"

# Links, images, autolinks and inline HTML are kept on one line
_PROTECT_RE = re.compile(r"!?\[[^\]]*\]\([^)]*\)|<[A-Za-z/!][^>]*>")
_LIST_MARKER_RE = re.compile(r"[-+*]|[0-9]+\.")

# Patterns stripped before word counting so markdown syntax isn't counted
_MD_STRIP = [
    (re.compile(r"```.*?```", re.DOTALL), " "),   # fenced code blocks
    (re.compile(r"`[^`\n]+`"), " "),               # inline code
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""), # heading markers
    (re.compile(r"^[-*_]{3,}\s*$", re.MULTILINE), ""),  # horizontal rules
    (re.compile(r"!?\[([^\]]*)\]\([^\)]*\)"), r"\1"),   # links/images → label only
    (re.compile(r"\*{1,3}|_{1,3}|~~"), ""),        # bold/italic/strikethrough markers
    (re.compile(r"^>\s?", re.MULTILINE), ""),      # blockquote markers
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""), # list bullets
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""), # numbered list markers
]
_WCOUNT_RE = re.compile(r"[A-Za-z\u00C0-\u024F]+(?:[''\-][A-Za-z]+)*")


# ---------------------------------------------------------------------------
# Enter key
# ---------------------------------------------------------------------------

def continue_list(line: str) -> tuple[str, bool]:
    """Decide what Enter inserts after *line*.

    Returns ``(prefix, clear_line)``.  ``prefix`` is the indentation and
    list marker to repeat on the new line (ordered markers count up).
    ``clear_line`` is True when the line holds nothing but a marker; the
    caller then empties the line instead of starting a new item.
    """
    m = _AUTO_INDENT_RE.fullmatch(line)
    if not m:
        return "", False
    if not m.group(2):
        return "", True
    prefix = m.group(1)
    om = _ORDERED_RE.fullmatch(prefix)
    if om:
        prefix = f"{om.group(1)}{int(om.group(2)) + 1}{om.group(3)}"
    return prefix, False


def enter_edit(line: str) -> tuple[int, str]:
    """Return ``(remove, insert)`` for Enter pressed after *line*.

    ``remove`` characters before the caret are replaced by ``insert``.  A
    marker-only line is emptied and the caret still moves to a new line.
    """
    prefix, clear_line = continue_list(line)
    if clear_line:
        return len(line), "\n"
    return 0, "\n" + prefix


# ---------------------------------------------------------------------------
# Inline markers
# ---------------------------------------------------------------------------

def toggle_wrap(text: str, marker: str) -> str:
    """Wrap *text* in *marker*, or unwrap it if it is already wrapped.

    Surrounding whitespace stays outside the markers.
    """
    stripped = text.strip()
    if not stripped:
        return text + marker + marker
    lead = text[: len(text) - len(text.lstrip())]
    trail = text[len(text.rstrip()):]
    n = len(marker)
    if len(stripped) >= 2 * n and stripped.startswith(marker) and stripped.endswith(marker):
        inner = stripped[n:-n]
    else:
        inner = f"{marker}{stripped}{marker}"
    return f"{lead}{inner}{trail}"


def link_markdown(url: str, text: str = "", title: str = "") -> str:
    url = url.strip()
    text = text.strip()
    title = title.strip().replace('"', '\\"')
    if not text and not title:
        return f"<{url}>"
    suffix = f' "{title}"' if title else ""
    return f"[{text or url}]({url}{suffix})"


def image_markdown(url: str, alt: str = "", title: str = "") -> str:
    url = url.strip()
    title = title.strip().replace('"', '\\"')
    suffix = f' "{title}"' if title else ""
    return f"![{alt.strip()}]({url}{suffix})"


# ---------------------------------------------------------------------------
# Line operations
# ---------------------------------------------------------------------------

def move_lines(text: str, first: int, last: int, up: bool) -> tuple[str, int, int]:
    """Move lines ``first..last`` (inclusive) one line up or down.

    Returns the new text and the new line range.  Moving past either end
    of the document leaves the text unchanged.
    """
    lines = text.split("\n")
    first = max(0, first)
    last = min(last, len(lines) - 1)
    if up:
        if first == 0:
            return text, first, last
        block = lines[first:last + 1]
        lines[first - 1:last + 1] = block + [lines[first - 1]]
        return "\n".join(lines), first - 1, last - 1
    if last >= len(lines) - 1:
        return text, first, last
    block = lines[first:last + 1]
    lines[first:last + 2] = [lines[last + 1]] + block
    return "\n".join(lines), first + 1, last + 1


def duplicate_lines(text: str, first: int, last: int) -> str:
    lines = text.split("\n")
    block = lines[first:last + 1]
    lines[last + 1:last + 1] = block
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Paragraph reflow
# ---------------------------------------------------------------------------

def reflow_paragraphs(
    text: str,
    wrap_length: int = WRAP_LENGTH,
    lines: tuple[int, int] | None = None,
) -> str:
    """Re-wrap the paragraphs of *text* at *wrap_length* columns.

    Runs of spaces collapse to one and hard line breaks are kept.
    Continuation lines of a list item are indented under the item text;
    blockquote lines repeat their ``>`` prefix.  Links, images and inline
    HTML are never split.  With *lines* (first, last; inclusive) only
    paragraphs touching that line range are formatted.
    """
    tokens = _PARSER.parse(text)
    src = text.split("\n")
    edits = []
    parents: list[str] = []
    for i, token in enumerate(tokens):
        if token.nesting == -1:
            parents.pop()
            continue
        if token.type == "paragraph_open" and token.map:
            first, end = token.map
            if lines is None or (first <= lines[1] and end - 1 >= lines[0]):
                parent = parents[-1] if parents else ""
                edit = _format_paragraph(
                    src, first, end, tokens[i + 1].content, parent, wrap_length
                )
                if edit is not None:
                    edits.append(edit)
        if token.nesting == 1:
            parents.append(token.type)

    for first, end, new_lines in reversed(edits):
        src[first:end] = new_lines
    return "\n".join(src)


def _format_paragraph(src, first, end, content, parent, wrap_length):
    head = content.split("\n", 1)[0]
    col = src[first].find(head)
    if col < 0:
        return None
    first_indent = src[first][:col]
    if parent == "list_item_open":
        indent = " " * len(first_indent)
    elif parent == "blockquote_open":
        indent = first_indent
    else:
        indent = ""

    body = _wrap_words(_collect_words(content), wrap_length, indent, len(first_indent))
    new_lines = (first_indent + body).split("\n")
    if new_lines == src[first:end]:
        return None
    return first, end, new_lines


def _protect(match: re.Match) -> str:
    return match.group().replace(" ", _PROTECTED_SPACE).replace("\t", _PROTECTED_TAB)


def _collect_words(content: str) -> list[str]:
    rows = content.split("\n")
    parts = []
    for n, row in enumerate(rows):
        brk = ""
        if n < len(rows) - 1:
            if row.endswith("\\"):
                row, brk = row[:-1], _HARD_BREAK_BACKSLASH
            elif row.endswith("  "):
                brk = _HARD_BREAK_SPACES
        parts.append(row.strip())
        if brk:
            parts.append(brk)
    joined = _PROTECT_RE.sub(_protect, " ".join(parts)).replace("\t", " ")
    return [w for w in joined.split(" ") if w]


def _allow_wrap_before(word: str) -> bool:
    # A line starting with these would turn into a blockquote or list item
    return not (word.startswith(">") or _LIST_MARKER_RE.fullmatch(word))


def _wrap_words(words: list[str], wrap_length: int, indent: str, first_indent: int) -> str:
    out: list[str] = []
    line_length = first_indent
    first_word = True
    for word in words:
        if word.startswith(_LINE_BREAK):
            out.append("\\\n" if word == _HARD_BREAK_BACKSLASH else "  \n")
            line_length = 0
            first_word = True
            continue

        if (
            not first_word
            and line_length > len(indent)
            and line_length + 1 + len(word) > wrap_length
            and _allow_wrap_before(word)
        ):
            out.append("\n")
            line_length = 0
            first_word = True
        elif not first_word and line_length > len(indent):
            out.append(" ")
            line_length += 1

        if line_length == 0:
            out.append(indent)
            line_length = len(indent)

        out.append(word)
        line_length += len(word)
        first_word = False

    return "".join(out).replace(_PROTECTED_SPACE, " ").replace(_PROTECTED_TAB, "\t")


# ---------------------------------------------------------------------------
# Word count
# ---------------------------------------------------------------------------

def count_words(text: str) -> int:
    """Count words in *text* after stripping Markdown syntax."""
    for pattern, repl in _MD_STRIP:
        text = pattern.sub(repl, text)
    return len(_WCOUNT_RE.findall(text))
