"""Grid rendering: draw a laid-out table with box-drawing characters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from mdgrid.markup import MarkupSpan, MarkupStyle
from mdgrid.table.types import CELL_PADDING, Table
from mdgrid.table.wrap import pack_cell_rows
from mdgrid.utils import BOLD, ITALIC, RESET, STRIKETHROUGH, UNDERLINE, visible_width

logger = logging.getLogger(__name__)

_H = "\u2500"
_V = "\u2502"


@dataclass
class TableTheme:
    """ANSI colour prefixes used when drawing a table. ``None`` means unstyled."""

    border_color: str | None = None
    header_color: str | None = None
    inline_code_bg: str | None = None
    inline_code_fg: str | None = None
    link_color: str | None = None


_FIXED_STYLES = {
    MarkupStyle.BOLD: BOLD,
    MarkupStyle.ITALIC: ITALIC,
    MarkupStyle.STRIKETHROUGH: STRIKETHROUGH,
    MarkupStyle.UNDERLINE: UNDERLINE,
}


def _style_codes(style: MarkupStyle | None, theme: TableTheme) -> str:
    if style is None:
        return ""
    if style is MarkupStyle.CODE:
        return (theme.inline_code_bg or "") + (theme.inline_code_fg or "")
    if style is MarkupStyle.LINK:
        return (theme.link_color or "") + UNDERLINE
    return _FIXED_STYLES[style]


def _border(widths: Sequence[int], left: str, joiner: str, right: str, color: str) -> str:
    inner = f"{_H}{joiner}{_H}".join(_H * max(0, w - CELL_PADDING) for w in widths)
    line = f"{left}{_H}{inner}{_H}{right}"
    return f"{color}{line}{RESET}" if color else line


def _cell_line(spans: list[MarkupSpan], content_width: int, base: str, theme: TableTheme) -> str:
    """One row of one cell, padded to the content box width."""
    parts: list[str] = []
    used = 0
    for span in spans:
        codes = _style_codes(span.style, theme)
        parts.append(f"{codes}{span.text}{RESET}{base}" if codes else span.text)
        used += visible_width(span.text)
    text = "".join(parts)
    if base:
        text = f"{base}{text}{RESET}"
    return text + " " * max(0, content_width - used)


def _row_block(
    cells: Sequence[str],
    widths: Sequence[int],
    height: int,
    *,
    base: str,
    theme: TableTheme,
    row_spacing: bool,
) -> list[str]:
    """All output lines of one table row: *height* content lines plus the spacer."""
    color = theme.border_color or ""

    def border(text: str) -> str:
        return f"{color}{text}{RESET}" if color else text

    left, joiner, right = border(f"{_V} "), border(f" {_V} "), border(f" {_V}")

    packed = [pack_cell_rows(cell, w - CELL_PADDING) for cell, w in zip(cells, widths)]
    if any(len(rows) > height for rows in packed):
        logger.debug("Row content exceeds its height of %d lines and was clipped", height)

    lines: list[str] = []
    for r in range(height + (1 if row_spacing else 0)):
        parts = [
            _cell_line(rows[r] if r < height and r < len(rows) else [], w - CELL_PADDING, base, theme)
            for rows, w in zip(packed, widths)
        ]
        lines.append(left + joiner.join(parts) + right)
    return lines


def render_grid(
    table: Table,
    column_widths: Sequence[int],
    row_heights: Sequence[int],
    header_height: int,
    *,
    theme: TableTheme | None = None,
    row_spacing: bool = True,
) -> list[str]:
    """Draw *table* with precomputed column widths and row heights.

    Each row block is its height plus one blank spacer line (unless
    *row_spacing* is off). Cell content is top-left aligned in a box of
    ``width - 2`` columns; header cells are bold.
    """
    if not column_widths:
        return []

    theme = theme or TableTheme()
    color = theme.border_color or ""
    header_style = f"{theme.header_color or ''}{BOLD}"

    lines = [_border(column_widths, "\u250c", "\u252c", "\u2510", color)]
    lines.extend(
        _row_block(
            table.headers,
            column_widths,
            max(1, header_height),
            base=header_style,
            theme=theme,
            row_spacing=row_spacing,
        )
    )
    lines.append(_border(column_widths, "\u251c", "\u253c", "\u2524", color))
    for row, height in zip(table.rows, row_heights):
        lines.extend(
            _row_block(row, column_widths, max(1, height), base="", theme=theme, row_spacing=row_spacing)
        )
    lines.append(_border(column_widths, "\u2514", "\u2534", "\u2518", color))
    return lines
