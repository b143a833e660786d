"""Renderable components."""

from mdgrid.components.markdown import (
    Markdown,
    MarkdownOptions,
    MarkdownTheme,
    render_markdown,
)

__all__ = [
    "Markdown",
    "MarkdownOptions",
    "MarkdownTheme",
    "render_markdown",
]
