"""Cell wrapping: how many terminal rows a cell takes, and what goes on each.

``wrapped_line_count`` and ``pack_cell_rows`` share one packing routine, so a
row height computed from the count always has room for the packed rows.
"""

from __future__ import annotations

import math

import grapheme

from mdgrid.markup import MarkupSpan, MarkupStyle, plain_width, scan_markup, split_line_breaks
from mdgrid.utils import grapheme_width, strip_ansi

_Glyph = tuple[str, int, "MarkupStyle | None"]

# Tabs are drawn as spaces so the terminal never expands them
TAB_TEXT = "   "
# Stands in for a glyph too wide for its cell
OVERFLOW_MARK = "\u2026"


def _glyphs(segment: str) -> list[_Glyph]:
    """Visible graphemes of one break-free segment, with width and style."""
    glyphs: list[_Glyph] = []
    for span in scan_markup(segment):
        if span.delimiter:
            continue
        for g in grapheme.graphemes(strip_ansi(span.text)):
            if g == "\t":
                glyphs.append((TAB_TEXT, len(TAB_TEXT), span.style))
            else:
                glyphs.append((g, grapheme_width(g), span.style))
    return glyphs


def _pack(glyphs: list[_Glyph], width: int) -> list[list[_Glyph]]:
    """Fill rows of *width* columns greedily; a glyph never straddles two rows.

    A glyph wider than the whole row is drawn as an ellipsis padded to *width*.
    """
    rows: list[list[_Glyph]] = [[]]
    used = 0
    for glyph in glyphs:
        w = glyph[1]
        if w > width:
            glyph = (OVERFLOW_MARK + " " * (width - 1), width, glyph[2])
            w = width
        if used + w > width and used > 0:
            rows.append([])
            used = 0
        rows[-1].append(glyph)
        used += w
    return rows


def _to_spans(row: list[_Glyph]) -> list[MarkupSpan]:
    """Merge neighbouring glyphs of the same style into spans."""
    spans: list[MarkupSpan] = []
    for g, _w, style in row:
        if spans and spans[-1].style is style:
            spans[-1] = MarkupSpan(spans[-1].text + g, style=style)
        else:
            spans.append(MarkupSpan(g, style=style))
    return spans


def wrapped_line_count(text: str, available_width: int) -> int:
    """Number of terminal rows *text* needs at *available_width* columns.

    Each explicit break (newline or ``<br>``) starts a new row; every segment
    takes ``ceil(plain_width / available_width)`` rows and at least one. Wide
    glyphs that would straddle a row edge move down, which can add rows.
    """
    if available_width <= 0:
        return 1

    total = 0
    for segment in split_line_breaks(text):
        rows = math.ceil(plain_width(segment) / available_width)
        packed = len(_pack(_glyphs(segment), available_width))
        total += max(1, rows, packed)
    return max(1, total)


def pack_cell_rows(text: str, available_width: int) -> list[list[MarkupSpan]]:
    """Lay *text* out in rows of at most *available_width* columns.

    Returns one list of styled content spans per row; delimiters are gone.
    """
    segments = split_line_breaks(text)
    if available_width <= 0:
        glyphs = [glyph for segment in segments for glyph in _glyphs(segment)]
        return [_to_spans(glyphs)]

    rows: list[list[MarkupSpan]] = []
    for segment in segments:
        rows.extend(_to_spans(row) for row in _pack(_glyphs(segment), available_width))
    return rows
