import re
from typing import Optional

from .renderer import HtmlRenderer

BOLD_PATTERN = re.compile(r'\*\*(.*?)\*\*')
EMPHASIS_MARKER = "*"
CURRENCY_MARKER = "$"
_LINE_BREAKS = re.compile(r'\r\n|\r|\n')


def _strip_markers(segment: str) -> str:
    return segment.replace(EMPHASIS_MARKER, "").replace(CURRENCY_MARKER, "")


def _render_line(line: str, renderer: HtmlRenderer) -> str:
    parts = []
    last = 0
    for match in BOLD_PATTERN.finditer(line):
        parts.append(renderer.text(_strip_markers(line[last:match.start()])))
        parts.append(renderer.bold(renderer.text(_strip_markers(match.group(1)))))
        last = match.end()
    parts.append(renderer.text(_strip_markers(line[last:])))
    return "".join(parts)


def sanitize(raw_text: Optional[str], renderer: Optional[HtmlRenderer] = None) -> str:
    """
    Turn a raw model answer into display-safe rich text.

    ``**span**`` becomes bold, leftover ``*`` and every ``$`` are dropped and
    line breaks become ``<br/>``. Bold spans never cross a line break, the
    same as a line-by-line regex substitution would behave.
    """
    if not raw_text:
        return ""
    renderer = renderer or HtmlRenderer()
    lines = _LINE_BREAKS.split(raw_text)
    return renderer.line_break().join(_render_line(line, renderer) for line in lines)
