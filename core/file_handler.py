"""Document load, save and export.

Reads .md / .markdown / .txt files and writes Markdown back with the
configured line separator.  HTML export renders through the same
MarkdownRenderer the preview uses, minus position annotations.
"""

import codecs
import html
import logging
from pathlib import Path

from core.markdown_renderer import MarkdownRenderer

logger = logging.getLogger(__name__)

SUPPORTED_READ_EXTENSIONS = {".md", ".markdown", ".txt"}
MAX_FILE_SIZE = 500_000
LINE_SEPARATORS = {"LF": "\n", "CRLF": "\r\n", "CR": "\r"}


class FileHandlerError(Exception):
    """Raised when a file cannot be read or written."""


# ------------------------------------------------------------------
# Reading
# ------------------------------------------------------------------

def read_file(path: Path, encoding: str | None = None) -> str:
    """Read a Markdown or text document.

    Args:
        path: Path to the file to read.
        encoding: Explicit encoding; UTF-8 with a latin-1 fallback if None.

    Returns:
        The document text.

    Raises:
        FileHandlerError: If the file is missing, unsupported, too large,
            binary or cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileHandlerError(f"File not found: {path}")

    ext = path.suffix.lower()
    if ext not in SUPPORTED_READ_EXTENSIONS:
        raise FileHandlerError(
            f"Unsupported file type: '{ext}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_READ_EXTENSIONS))}"
        )

    size = path.stat().st_size
    if size > MAX_FILE_SIZE:
        raise FileHandlerError(
            f"File too large: {size:,} bytes (limit {MAX_FILE_SIZE:,})"
        )

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise FileHandlerError(f"Cannot read file: {exc}") from exc

    if b"\x00" in data:
        raise FileHandlerError(f"Binary file ({size:,} bytes): {path.name}")

    return _decode(data, encoding)


def _decode(data: bytes, encoding: str | None) -> str:
    if encoding:
        try:
            return data.decode(encoding)
        except LookupError:
            logger.warning("Unknown encoding '%s', falling back to UTF-8", encoding)
        except UnicodeDecodeError as exc:
            raise FileHandlerError(f"Cannot decode as {encoding}: {exc}") from exc
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Fallback for files with non-UTF-8 encoding
        return data.decode("latin-1")


def is_known_encoding(name: str) -> bool:
    """True when *name* is empty (use the default) or a codec Python knows."""
    if not name:
        return True
    try:
        codecs.lookup(name)
    except LookupError:
        return False
    return True


def detect_line_separator(text: str) -> str:
    """Return the first line separator used in *text* ("\\n" if none)."""
    idx = text.find("\n")
    cr = text.find("\r")
    if cr != -1 and (idx == -1 or cr < idx):
        return "\r\n" if text[cr:cr + 2] == "\r\n" else "\r"
    return "\n"


# ------------------------------------------------------------------
# Writing
# ------------------------------------------------------------------

def write_markdown(
    text: str,
    path: Path,
    line_separator: str | None = None,
    encoding: str | None = None,
) -> None:
    """Write text to a Markdown file.

    Args:
        text: Markdown source (any line endings).
        path: Destination file path.
        line_separator: "\\n", "\\r\\n" or "\\r"; line endings are left as
            they are if None.
        encoding: Output encoding, UTF-8 if None.
    """
    path = Path(path)
    if line_separator:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        if line_separator != "\n":
            text = text.replace("\n", line_separator)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the separators exactly as given
        with path.open("w", encoding=encoding or "utf-8", newline="") as fh:
            fh.write(text)
    except (OSError, LookupError, UnicodeEncodeError) as exc:
        raise FileHandlerError(f"Cannot write {path}: {exc}") from exc
    logger.info("Wrote markdown: %s", path)


def export_html(
    text: str,
    path: Path,
    renderer: MarkdownRenderer,
    title: str = "",
    stylesheet: str = "",
) -> None:
    """Render *text* and write it as a standalone HTML page."""
    path = Path(path)
    body = renderer.to_html(text)
    page = (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{html.escape(title or path.stem)}</title>\n"
        + (f"<style>\n{stylesheet}\n</style>\n" if stylesheet else "")
        + "</head>\n"
        "<body>\n"
        f"{body}"
        "</body>\n"
        "</html>\n"
    )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(page, encoding="utf-8")
    except OSError as exc:
        raise FileHandlerError(f"Cannot write {path}: {exc}") from exc
    logger.info("Exported HTML: %s", path)
