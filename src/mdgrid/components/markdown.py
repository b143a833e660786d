"""Markdown component -- renders markdown text to styled terminal lines.

Blocks come from ``markdown-it-py`` as a ``SyntaxTreeNode`` tree, parsed with
the built-in table rule turned off. Paragraph lines that contain pipes are
handed to the table engine, which either draws a box table or leaves the lines
exactly as written.

Block rules run before table detection, so a pipe table is only seen as one
while its lines stay inside a single paragraph. A line starting with ``# ``
becomes a heading and a line starting with ``- `` or ``1. `` opens a list,
which splits such a table apart; rows that start with ``|`` are unaffected.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Sequence

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdgrid.table import TableTheme, detect_table, group_lines, render_table
from mdgrid.utils import (
    BOLD,
    DIM,
    ITALIC,
    RESET,
    STRIKETHROUGH,
    UNDERLINE,
    pad_to_width,
    visible_width,
    wrap_text_with_ansi,
)

logger = logging.getLogger(__name__)

PENDING_PLACEHOLDER = "…"

_RULE = "─"
_QUOTE_BAR = "│ "
_TAB = "   "

_BR_TAG_RE = re.compile(r"^<br\s*/?\s*>$", re.IGNORECASE)
_HTML_TAG_RE = re.compile(r"<[^>]+>")

SyntaxHighlightFn = Callable[[str, str], str]  # (code, language) -> highlighted


@dataclass
class MarkdownTheme:
    """ANSI prefixes per element, e.g. ``"\\x1b[36m"``. ``None`` means unstyled.

    ``text_style`` is applied to all prose and restored after every styled run.
    """

    text_style: str | None = None
    heading_color: str | None = None
    code_bg: str | None = None
    code_fg: str | None = None
    inline_code_bg: str | None = None
    inline_code_fg: str | None = None
    link_color: str | None = None
    blockquote_color: str | None = None
    hr_color: str | None = None
    table_border_color: str | None = None
    table_header_color: str | None = None

    def table_theme(self) -> TableTheme:
        return TableTheme(
            border_color=self.table_border_color,
            header_color=self.table_header_color,
            inline_code_bg=self.inline_code_bg,
            inline_code_fg=self.inline_code_fg,
            link_color=self.link_color,
        )


@dataclass
class MarkdownOptions:
    """Everything besides the text that shapes the output of :class:`Markdown`."""

    padding_x: int = 1
    padding_y: int = 0
    theme: MarkdownTheme = field(default_factory=MarkdownTheme)
    table_row_spacing: bool = True
    syntax_highlight_fn: SyntaxHighlightFn | None = None
    custom_bg_fn: Callable[[str], str] | None = None


@dataclass(frozen=True)
class _InlineStyle:
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    link: bool = False

    def codes(self, theme: MarkdownTheme) -> str:
        parts = [(theme.link_color or "") + UNDERLINE] if self.link else []
        for enabled, code in (
            (self.underline and not self.link, UNDERLINE),
            (self.bold, BOLD),
            (self.italic, ITALIC),
            (self.strikethrough, STRIKETHROUGH),
        ):
            if enabled:
                parts.append(code)
        return "".join(parts)


# inline container node -> style flag it turns on for its children
_INLINE_FLAGS = {"strong": "bold", "em": "italic", "s": "strikethrough", "link": "link"}

_parser = MarkdownIt("gfm-like").disable("table")


class Markdown:
    """Renders a markdown string to a list of terminal lines.

    ``text`` and ``pending`` are plain attributes; output is cached per
    (text, width, pending) and dropped by :meth:`configure` or
    :meth:`invalidate`. ``pending`` marks content still streaming in: it adds
    a dim placeholder line at the end and never changes the layout above it.
    """

    def __init__(self, text: str = "", *, pending: bool = False, **options: Any) -> None:
        self.text = text
        self.pending = pending
        self._options = MarkdownOptions(**options)
        self._cache: tuple[tuple[str, int, bool], list[str]] | None = None

    @property
    def options(self) -> MarkdownOptions:
        return self._options

    def configure(self, **changes: Any) -> None:
        """Replace some :class:`MarkdownOptions` fields."""
        self._options = replace(self._options, **changes)
        self._cache = None

    def invalidate(self) -> None:
        self._cache = None

    def render(self, width: int) -> list[str]:
        key = (self.text, width, self.pending)
        if self._cache is None or self._cache[0] != key:
            self._cache = (key, self._render(width))
        return self._cache[1]

    # -- document -----------------------------------------------------------

    @property
    def _theme(self) -> MarkdownTheme:
        return self._options.theme

    def _render(self, width: int) -> list[str]:
        opts = self._options
        content_width = max(1, width - 2 * opts.padding_x)

        body = self._render_blocks(SyntaxTreeNode(_parser.parse(self.text)).children, content_width)
        if self.pending:
            body.append(f"{DIM}{PENDING_PLACEHOLDER}{RESET}")
        if not body:
            return []

        indent = " " * opts.padding_x
        blank = [self._finish("", width)] * opts.padding_y
        return [*blank, *(self._finish(indent + line, width) for line in body), *blank]

    def _finish(self, line: str, width: int) -> str:
        line = pad_to_width(line, width)
        bg = self._options.custom_bg_fn
        return bg(line) if bg else line

    def _render_blocks(
        self, nodes: Sequence[SyntaxTreeNode], width: int, *, tight: bool = False
    ) -> list[str]:
        """Render sibling blocks, one blank line apart unless *tight*."""
        lines: list[str] = []
        for node in nodes:
            block = self._render_block(node, width)
            if not block:
                continue
            if lines and not tight:
                lines.append("")
            lines.extend(block)
        return lines

    def _render_block(self, node: SyntaxTreeNode, width: int) -> list[str]:
        kind = node.type
        theme = self._theme

        if kind == "paragraph":
            return self._render_paragraph(node.children[0] if node.children else None, width)
        if kind == "heading":
            return self._render_heading(node, width)
        if kind in ("fence", "code_block"):
            return self._render_code(node, width)
        if kind in ("bullet_list", "ordered_list"):
            return self._render_list(node, width)
        if kind == "blockquote":
            bar = f"{theme.blockquote_color or ''}{_QUOTE_BAR}{RESET}"
            return [bar + line for line in self._render_blocks(node.children, max(1, width - 2))]
        if kind == "hr":
            return [f"{theme.hr_color or ''}{DIM}{_RULE * width}{RESET}"]
        if kind == "html_block":
            content = node.content.rstrip("\n")
            if not content:
                return []
            return [
                wrapped
                for raw in content.split("\n")
                for wrapped in wrap_text_with_ansi(self._prose(raw), width)
            ]

        logger.debug("Skipping unsupported block %s", kind)
        return []

    # -- paragraphs and the tables inside them -------------------------------

    def _render_paragraph(self, inline: SyntaxTreeNode | None, width: int) -> list[str]:
        """Prose runs are wrapped; pipe runs become tables or stay verbatim.

        A table is set off from its neighbours by a blank line. Pipe lines
        that are not a table keep their exact text, markup included.
        """
        if inline is None:
            return []

        groups = group_lines(inline.content.split("\n"))
        if not any(group.table_candidate for group in groups):
            return wrap_text_with_ansi(self._prose(self._render_inline(inline)), width)

        lines: list[str] = []
        after_table = False
        for group in groups:
            table = detect_table(group.lines) if group.table_candidate else None
            if table is not None:
                chunk = render_table(
                    table,
                    width,
                    theme=self._theme.table_theme(),
                    row_spacing=self._options.table_row_spacing,
                )
            elif group.table_candidate:
                chunk = [w for line in group.lines for w in wrap_text_with_ansi(self._prose(line), width)]
            else:
                prose = SyntaxTreeNode(_parser.parseInline("\n".join(group.lines)))
                text = "".join(self._render_inline(node) for node in prose.children)
                chunk = wrap_text_with_ansi(self._prose(text), width)

            is_table = table is not None
            if lines and (is_table or after_table):
                lines.append("")
            lines.extend(chunk)
            after_table = is_table
        return lines

    # -- headings, code, lists ----------------------------------------------

    def _render_heading(self, node: SyntaxTreeNode, width: int) -> list[str]:
        level = int(node.tag[1:]) if node.tag[:1] == "h" else 1
        text = self._render_inline(node.children[0]) if node.children else ""
        lead = f"{self._theme.text_style or ''}{self._theme.heading_color or ''}"

        if level == 1:
            styled = f"{lead}{BOLD}{UNDERLINE}{text}{RESET}"
        elif level == 2:
            styled = f"{lead}{BOLD}{text}{RESET}"
        else:
            styled = f"{DIM}{'#' * level}{RESET} {lead}{BOLD}{text}{RESET}"
        return wrap_text_with_ansi(styled, width)

    def _render_code(self, node: SyntaxTreeNode, width: int) -> list[str]:
        code = node.content.removesuffix("\n")
        lang = node.info.strip() if node.type == "fence" else ""
        highlight = self._options.syntax_highlight_fn
        if lang and highlight:
            try:
                code = highlight(code, lang)
            except Exception:
                logger.debug("Syntax highlighting failed for %s", lang, exc_info=True)

        style = f"{self._theme.code_bg or ''}{self._theme.code_fg or ''}"
        return [
            f"{style}{pad_to_width(line, width)}{RESET}"
            for line in code.replace("\t", _TAB).split("\n")
        ]

    def _render_list(self, node: SyntaxTreeNode, width: int) -> list[str]:
        """Items are stacked without blank lines; nested blocks hang under the marker."""
        ordered = node.type == "ordered_list"
        first = int(node.attrs.get("start", 1)) if ordered else 1

        lines: list[str] = []
        for number, item in enumerate(node.children, first):
            marker = f"{number}. " if ordered else "- "
            hang = " " * visible_width(marker)
            # tight lists mark their paragraphs hidden
            tight = any(child.hidden for child in item.children)
            body = self._render_blocks(item.children, max(1, width - len(marker)), tight=tight) or [""]
            lines.append(marker + body[0])
            lines.extend(hang + line if line else "" for line in body[1:])
        return lines

    # -- inline -------------------------------------------------------------

    def _prose(self, text: str) -> str:
        base = self._theme.text_style
        return f"{base}{text}{RESET}" if base else text

    def _styled(self, text: str, style: _InlineStyle) -> str:
        codes = style.codes(self._theme)
        if not codes or not text:
            return text
        return f"{codes}{text}{RESET}{self._theme.text_style or ''}"

    def _note(self, text: str) -> str:
        """Dim parenthesised aside, used for link targets and image sources."""
        return f"{RESET}{DIM} ({text}){RESET}{self._theme.text_style or ''}"

    def _render_inline(self, node: SyntaxTreeNode, style: _InlineStyle = _InlineStyle()) -> str:
        """Flatten an inline subtree into one styled string; ``\\n`` marks hard breaks."""
        theme = self._theme
        parts: list[str] = []
        current = style

        for child in node.children:
            kind = child.type
            if kind == "text":
                parts.append(self._styled(child.content, current))
            elif kind == "softbreak":
                parts.append(" ")
            elif kind == "hardbreak":
                parts.append("\n")
            elif kind == "code_inline":
                code = f"{theme.inline_code_bg or ''}{theme.inline_code_fg or ''}"
                parts.append(f"{RESET}{code} {child.content} {RESET}{theme.text_style or ''}")
            elif kind in _INLINE_FLAGS:
                parts.append(self._render_inline(child, replace(current, **{_INLINE_FLAGS[kind]: True})))
                href = child.attrs.get("href") if kind == "link" else None
                if href:
                    parts.append(self._note(str(href)))
            elif kind == "image":
                parts.append(f"[{child.content or 'image'}]")
                src = child.attrs.get("src")
                if src:
                    parts.append(self._note(str(src)))
            elif kind == "html_inline":
                tag = child.content.strip().lower()
                if _BR_TAG_RE.match(tag):
                    parts.append("\n")
                elif tag in ("<u>", "</u>"):
                    current = replace(current, underline=tag == "<u>")
                else:
                    parts.append(self._styled(_HTML_TAG_RE.sub("", child.content), current))
            elif child.content:
                parts.append(self._styled(child.content, current))

        return "".join(parts)


def render_markdown(text: str, width: int, *, pending: bool = False, **options: Any) -> list[str]:
    """Render *text* once at *width* columns with a fresh component.

    Extra keyword options are :class:`MarkdownOptions` fields.
    """
    return Markdown(text, pending=pending, **options).render(width)
