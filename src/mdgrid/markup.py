"""Inline markup scanning for table cells.

Cell text is split into tagged spans: delimiter spans (``**``, ``](url)``,
``<u>`` ...) that are never drawn, and content spans that carry the style of
the markup enclosing them. Plain width and cell drawing both walk the same
spans, so the width a cell is measured at is the width it is drawn at.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from mdgrid.utils import visible_width


class MarkupStyle(str, Enum):
    """Style carried by a content span."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    UNDERLINE = "underline"
    LINK = "link"


@dataclass(frozen=True)
class MarkupSpan:
    text: str
    delimiter: bool = False
    style: MarkupStyle | None = None


# Alternatives are tried left to right at each position, so ``**`` wins over
# ``*``. Inner text is the shortest run and is not scanned again.
_MARKUP_RE = re.compile(
    r"\*\*(?P<bold>.*?)\*\*"
    r"|\*(?P<italic>.*?)\*"
    r"|_(?P<underscore>.*?)_"
    r"|~~(?P<strike>.*?)~~"
    r"|`(?P<code>.*?)`"
    r"|<u>(?P<underline>.*?)</u>"
    r"|\[(?P<label>.*?)\]\((?P<url>.*?)\)"
)

# last matched group -> (group holding the visible text, style)
_KINDS: dict[str, tuple[str, MarkupStyle]] = {
    "bold": ("bold", MarkupStyle.BOLD),
    "italic": ("italic", MarkupStyle.ITALIC),
    "underscore": ("underscore", MarkupStyle.ITALIC),
    "strike": ("strike", MarkupStyle.STRIKETHROUGH),
    "code": ("code", MarkupStyle.CODE),
    "underline": ("underline", MarkupStyle.UNDERLINE),
    "url": ("label", MarkupStyle.LINK),
}

_LINE_BREAK_RE = re.compile(r"\n|<br\s*/?\s*>", re.IGNORECASE)


def scan_markup(text: str) -> list[MarkupSpan]:
    """Split *text* into delimiter and content spans in a single pass.

    Unmatched markup characters stay in plain content spans.
    """
    spans: list[MarkupSpan] = []
    pos = 0
    for match in _MARKUP_RE.finditer(text):
        if match.start() > pos:
            spans.append(MarkupSpan(text[pos : match.start()]))

        inner_group, style = _KINDS[match.lastgroup or ""]
        inner_start, inner_end = match.span(inner_group)
        spans.append(MarkupSpan(text[match.start() : inner_start], delimiter=True))
        if inner_end > inner_start:
            spans.append(MarkupSpan(text[inner_start:inner_end], style=style))
        spans.append(MarkupSpan(text[inner_end : match.end()], delimiter=True))
        pos = match.end()

    if pos < len(text):
        spans.append(MarkupSpan(text[pos:]))
    return spans


def strip_markup(text: str) -> str:
    """Return *text* with every markup delimiter removed."""
    return "".join(span.text for span in scan_markup(text) if not span.delimiter)


def plain_width(text: str) -> int:
    """Display width of *text* once its markup delimiters are removed."""
    return sum(visible_width(span.text) for span in scan_markup(text) if not span.delimiter)


def split_line_breaks(text: str) -> list[str]:
    """Split on newlines and ``<br>``/``<br/>``/``<br />`` tags (any case)."""
    return _LINE_BREAK_RE.split(text)
