"""Application theme helpers: Fusion palettes and preview CSS."""

from PyQt6.QtGui import QColor, QPalette
from PyQt6.QtWidgets import QApplication

from core.highlighter import HIGHLIGHT_CLASS


def apply_dark(app: QApplication) -> None:
    p = QPalette()
    p.setColor(QPalette.ColorRole.Window,          QColor(40,  40,  40))
    p.setColor(QPalette.ColorRole.WindowText,      QColor(220, 220, 220))
    p.setColor(QPalette.ColorRole.Base,            QColor(28,  28,  28))
    p.setColor(QPalette.ColorRole.AlternateBase,   QColor(48,  48,  48))
    p.setColor(QPalette.ColorRole.ToolTipBase,     QColor(28,  28,  28))
    p.setColor(QPalette.ColorRole.ToolTipText,     QColor(220, 220, 220))
    p.setColor(QPalette.ColorRole.Text,            QColor(220, 220, 220))
    p.setColor(QPalette.ColorRole.Button,          QColor(55,  55,  55))
    p.setColor(QPalette.ColorRole.ButtonText,      QColor(220, 220, 220))
    p.setColor(QPalette.ColorRole.BrightText,      QColor(255, 100, 100))
    p.setColor(QPalette.ColorRole.Link,            QColor(88,  166, 255))
    p.setColor(QPalette.ColorRole.Highlight,       QColor(58,  120, 200))
    p.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))
    p.setColor(QPalette.ColorRole.PlaceholderText, QColor(120, 120, 120))
    # Disabled variants
    p.setColor(QPalette.ColorGroup.Disabled, QPalette.ColorRole.Text,       QColor(100, 100, 100))
    p.setColor(QPalette.ColorGroup.Disabled, QPalette.ColorRole.ButtonText, QColor(100, 100, 100))
    app.setPalette(p)


def apply_light(app: QApplication) -> None:
    app.setPalette(app.style().standardPalette())


# GitHub-like preview styling; the editor-selection rule draws the caret block.
_PREVIEW_CSS = """
body {
  font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif;
  font-size: 15px; line-height: 1.6;
  color: %(fg)s; background: %(bg)s;
  margin: 0 auto; padding: 16px 24px; max-width: 900px;
}
h1, h2 { border-bottom: 1px solid %(rule)s; padding-bottom: .3em; }
a { color: %(link)s; }
code, pre { font-family: "DejaVu Sans Mono", Consolas, monospace; font-size: 90%%; }
code { background: %(code_bg)s; padding: .15em .3em; border-radius: 3px; }
pre { background: %(code_bg)s; padding: 12px; overflow: auto; border-radius: 4px; }
pre code { background: none; padding: 0; }
blockquote { margin: 0; padding: 0 1em; color: %(muted)s; border-left: 4px solid %(rule)s; }
table { border-collapse: collapse; }
th, td { border: 1px solid %(rule)s; padding: 4px 10px; }
hr { border: 0; border-top: 1px solid %(rule)s; }
img { max-width: 100%%; }
.%(marker)s { border-right: 4px solid %(marker_color)s; }
"""

_LIGHT = {
    "fg": "#24292e", "bg": "#ffffff", "rule": "#dfe2e5", "link": "#0366d6",
    "code_bg": "#f6f8fa", "muted": "#6a737d", "marker_color": "#f0ad4e",
}
_DARK = {
    "fg": "#dcdcdc", "bg": "#1c1c1c", "rule": "#3a3a3a", "link": "#58a6ff",
    "code_bg": "#2a2a2a", "muted": "#9a9a9a", "marker_color": "#c8873a",
}


def preview_stylesheet(dark: bool) -> str:
    colors = dict(_DARK if dark else _LIGHT, marker=HIGHLIGHT_CLASS)
    return _PREVIEW_CSS % colors
