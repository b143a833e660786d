"""Column width allocation and row height computation."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from mdgrid.markup import plain_width
from mdgrid.table.types import CELL_PADDING, MIN_COLUMN_WIDTH, Table, TableLayout
from mdgrid.table.wrap import wrapped_line_count

logger = logging.getLogger(__name__)


def natural_column_widths(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[int]:
    """Widest plain cell per column (header included) plus padding."""
    widths: list[int] = []
    for i, header in enumerate(headers):
        widest = plain_width(header)
        for row in rows:
            cell = row[i] if i < len(row) else ""
            widest = max(widest, plain_width(cell or ""))
        widths.append(widest + CELL_PADDING)
    return widths


def allocate_column_widths(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    terminal_width: int,
) -> list[int]:
    """Compute the slot width of each column, padding included.

    Natural widths (never below ``MIN_COLUMN_WIDTH``) are kept when the table
    fits in *terminal_width*. Otherwise every column is scaled by the same
    factor and floored at ``MIN_COLUMN_WIDTH``; with many columns the floor
    can still push the table past the terminal edge.
    """
    natural = natural_column_widths(headers, rows)
    if not natural:
        return []

    # the total is taken before the floor, so an empty column counts 2
    total = sum(natural) + len(natural) + 1
    if total <= terminal_width:
        return [max(w, MIN_COLUMN_WIDTH) for w in natural]

    scale = terminal_width / total
    widths = [max(math.floor(w * scale), MIN_COLUMN_WIDTH) for w in natural]
    logger.debug("Scaled %d columns by %.3f to fit %d columns", len(widths), scale, terminal_width)

    rendered = sum(widths) + len(widths) + 1
    if rendered > terminal_width:
        logger.debug("Table is %d wide, overflows terminal width %d", rendered, terminal_width)
    return widths


def row_height(cells: Sequence[str], column_widths: Sequence[int]) -> int:
    """Tallest wrapped cell of a row, at least one line."""
    return max(
        [1]
        + [
            wrapped_line_count(cell, width - CELL_PADDING)
            for cell, width in zip(cells, column_widths)
        ]
    )


def compute_layout(table: Table, terminal_width: int) -> TableLayout:
    """Column widths, header height and data row heights for *table*."""
    widths = allocate_column_widths(table.headers, table.rows, terminal_width)
    return TableLayout(
        column_widths=tuple(widths),
        header_height=row_height(table.headers, widths),
        row_heights=tuple(row_height(row, widths) for row in table.rows),
    )
