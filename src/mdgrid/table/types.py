"""Value types shared by the table pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

# Smallest slot a column may shrink to, padding included
MIN_COLUMN_WIDTH = 3
# One space either side of the cell content
CELL_PADDING = 2


class Alignment(str, Enum):
    """Column alignment marker from the separator row."""

    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class Table:
    """A parsed table: header cells plus data rows of raw Markdown text.

    Every row holds exactly ``len(headers)`` cells.
    """

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = ()
    alignments: tuple[Alignment, ...] = ()

    @classmethod
    def create(
        cls,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]] = (),
        alignments: Sequence[Alignment] = (),
    ) -> Table:
        """Build a table, padding short rows with empty cells and dropping extras."""
        n = len(headers)
        normalized = tuple(
            tuple(row[i] if i < len(row) and row[i] is not None else "" for i in range(n))
            for row in rows
        )
        aligned = tuple(alignments[i] if i < len(alignments) else Alignment.NONE for i in range(n))
        return cls(headers=tuple(headers), rows=normalized, alignments=aligned)

    @property
    def num_columns(self) -> int:
        return len(self.headers)


@dataclass(frozen=True)
class TableLayout:
    """Column widths and row heights for one table at one terminal width."""

    column_widths: tuple[int, ...]
    header_height: int
    row_heights: tuple[int, ...] = field(default=())

    @property
    def total_width(self) -> int:
        """Rendered line width: column slots plus one border per column and one more."""
        return sum(self.column_widths) + len(self.column_widths) + 1
