"""mdgrid: Markdown for fixed-width terminals, with box-drawn tables."""

# Components
from mdgrid.components import Markdown, MarkdownOptions, MarkdownTheme, render_markdown

# Settings
from mdgrid.config import Settings, TableSettings, ThemeSettings, load_settings, save_settings

# Inline markup
from mdgrid.markup import MarkupSpan, MarkupStyle, plain_width, scan_markup, split_line_breaks, strip_markup

# Table engine
from mdgrid.table import (
    Alignment,
    Table,
    TableLayout,
    TableTheme,
    allocate_column_widths,
    compute_layout,
    detect_table,
    render_grid,
    render_table,
    render_table_block,
    wrapped_line_count,
)

# Utilities
from mdgrid.utils import strip_ansi, visible_width, wrap_text_with_ansi

__all__ = [
    # Components
    "Markdown",
    "MarkdownOptions",
    "MarkdownTheme",
    "render_markdown",
    # Settings
    "Settings",
    "TableSettings",
    "ThemeSettings",
    "load_settings",
    "save_settings",
    # Inline markup
    "MarkupSpan",
    "MarkupStyle",
    "plain_width",
    "scan_markup",
    "split_line_breaks",
    "strip_markup",
    # Table engine
    "Alignment",
    "Table",
    "TableLayout",
    "TableTheme",
    "allocate_column_widths",
    "compute_layout",
    "detect_table",
    "render_grid",
    "render_table",
    "render_table_block",
    "wrapped_line_count",
    # Utilities
    "strip_ansi",
    "visible_width",
    "wrap_text_with_ansi",
]
