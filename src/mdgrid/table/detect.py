"""Table detection: decide whether a run of lines is a pipe table.

A table is a header row, a separator row directly below it (cells made of
``-`` and ``:`` only, e.g. ``|---|:--:|``), and zero or more data rows. A run
that does not open that way is not a table and its lines are left untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from mdgrid.table.types import Alignment, Table

logger = logging.getLogger(__name__)

_SEPARATOR_CHARS = frozenset("-:")


@dataclass(frozen=True)
class LineGroup:
    """Consecutive source lines that either all contain a pipe or none do."""

    lines: tuple[str, ...]
    table_candidate: bool


def _split_unescaped(text: str) -> list[str]:
    """Split on ``|`` not preceded by a backslash; ``\\|`` becomes ``|``."""
    cells: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and text[i + 1 : i + 2] == "|":
            current.append("|")
            i += 2
            continue
        if ch == "|":
            cells.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    cells.append("".join(current))
    return cells


def is_table_row(line: str) -> bool:
    """True when *line* has at least one unescaped pipe."""
    return len(_split_unescaped(line)) > 1


def split_row(line: str) -> list[str]:
    """Split a row into trimmed cells.

    The empty cell produced by a leading pipe, and the one produced by a
    trailing pipe, are dropped.
    """
    stripped = line.strip()
    cells = _split_unescaped(stripped)
    if stripped.startswith("|") and len(cells) > 1:
        cells = cells[1:]
    if stripped.endswith("|") and not stripped.endswith("\\|") and len(cells) > 1:
        cells = cells[:-1]
    return [cell.strip() for cell in cells]


def is_separator_row(line: str) -> bool:
    """True when every cell of *line* is a non-empty run of ``-`` and ``:``."""
    if not is_table_row(line):
        return False
    cells = split_row(line)
    return all(cell and set(cell) <= _SEPARATOR_CHARS for cell in cells)


def parse_alignment(cell: str) -> Alignment:
    """Alignment encoded by one separator cell (``:--``, ``:-:``, ``--:``)."""
    cell = cell.strip()
    left = cell.startswith(":")
    right = len(cell) > 1 and cell.endswith(":")
    if left and right:
        return Alignment.CENTER
    if left:
        return Alignment.LEFT
    if right:
        return Alignment.RIGHT
    return Alignment.NONE


def detect_table(lines: Sequence[str]) -> Table | None:
    """Parse *lines* as a table, or return ``None`` when they are not one.

    Data rows run until the first line without a pipe. Short rows are padded
    with empty cells; surplus cells are dropped.
    """
    if len(lines) < 2 or not is_table_row(lines[0]):
        return None
    if not is_separator_row(lines[1]):
        logger.debug("Pipe text without a separator row, leaving %d lines as text", len(lines))
        return None

    headers = split_row(lines[0])
    alignments = [parse_alignment(cell) for cell in split_row(lines[1])]
    rows: list[list[str]] = []
    for line in lines[2:]:
        if not is_table_row(line):
            break
        rows.append(split_row(line))
    return Table.create(headers, rows, alignments)


def group_lines(lines: Sequence[str]) -> list[LineGroup]:
    """Partition *lines* into runs of pipe lines and runs of other lines."""
    groups: list[LineGroup] = []
    current: list[str] = []
    current_kind: bool | None = None
    for line in lines:
        kind = is_table_row(line)
        if current and kind != current_kind:
            groups.append(LineGroup(tuple(current), bool(current_kind)))
            current = []
        current.append(line)
        current_kind = kind
    if current:
        groups.append(LineGroup(tuple(current), bool(current_kind)))
    return groups
