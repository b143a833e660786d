"""Table layout engine: detect, allocate, wrap, draw.

Every stage is a pure function of its inputs; nothing is kept between calls.
"""

from __future__ import annotations

from typing import Sequence

from mdgrid.table.detect import (
    LineGroup,
    detect_table,
    group_lines,
    is_separator_row,
    is_table_row,
    parse_alignment,
    split_row,
)
from mdgrid.table.grid import TableTheme, render_grid
from mdgrid.table.layout import (
    allocate_column_widths,
    compute_layout,
    natural_column_widths,
    row_height,
)
from mdgrid.table.types import CELL_PADDING, MIN_COLUMN_WIDTH, Alignment, Table, TableLayout
from mdgrid.table.wrap import pack_cell_rows, wrapped_line_count


def render_table(
    table: Table,
    terminal_width: int,
    *,
    theme: TableTheme | None = None,
    row_spacing: bool = True,
) -> list[str]:
    """Lay out and draw *table* for a terminal *terminal_width* columns wide."""
    layout = compute_layout(table, terminal_width)
    return render_grid(
        table,
        layout.column_widths,
        layout.row_heights,
        layout.header_height,
        theme=theme,
        row_spacing=row_spacing,
    )


def render_table_block(
    lines: Sequence[str],
    terminal_width: int,
    *,
    theme: TableTheme | None = None,
    row_spacing: bool = True,
) -> list[str]:
    """Draw *lines* as a table, or return them unchanged if they are not one."""
    table = detect_table(lines)
    if table is None:
        return list(lines)
    return render_table(table, terminal_width, theme=theme, row_spacing=row_spacing)


__all__ = [
    "Alignment",
    "CELL_PADDING",
    "LineGroup",
    "MIN_COLUMN_WIDTH",
    "Table",
    "TableLayout",
    "TableTheme",
    "allocate_column_widths",
    "compute_layout",
    "detect_table",
    "group_lines",
    "is_separator_row",
    "is_table_row",
    "natural_column_widths",
    "pack_cell_rows",
    "parse_alignment",
    "render_grid",
    "render_table",
    "render_table_block",
    "row_height",
    "split_row",
    "wrapped_line_count",
]
