"""Tests for the Markdown component, prose and tables."""

from __future__ import annotations

import re

import pytest

from mdgrid.components.markdown import (
    PENDING_PLACEHOLDER,
    Markdown,
    MarkdownOptions,
    MarkdownTheme,
    render_markdown,
)

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

_TABLE = "| Name | Age | City |\n|------|-----|------|\n| Alice | 30 | NYC |\n| Bob | 25 | LA |"


def _strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def _plain_lines(md_text: str, width: int = 80, **options) -> list[str]:
    """Render and strip ANSI and trailing padding for easy assertion."""
    md = Markdown(md_text, padding_x=0, padding_y=0, **options)
    return [_strip_ansi(line).rstrip() for line in md.render(width)]


def _raw(md_text: str, width: int = 80) -> str:
    return "".join(Markdown(md_text, padding_x=0, padding_y=0).render(width))


# ---------------------------------------------------------------------------
# Prose blocks
# ---------------------------------------------------------------------------


class TestMarkdownBlocks:
    """Headings, paragraphs, code, lists, quotes and rules."""

    def test_heading_levels(self) -> None:
        lines = _plain_lines("# Top\n\n### Third")
        assert "Top" in lines
        assert "### Third" in lines

    def test_h1_bold_and_underlined(self) -> None:
        raw = _raw("# Title")
        assert "\x1b[1m" in raw
        assert "\x1b[4m" in raw

    def test_paragraphs_separated_by_blank_line(self) -> None:
        assert _plain_lines("First.\n\nSecond.") == ["First.", "", "Second."]

    def test_paragraph_wraps(self) -> None:
        lines = _plain_lines("word " * 30, width=30)
        assert len(lines) > 1
        assert all(len(line) <= 30 for line in lines)

    def test_empty_and_blank_text(self) -> None:
        assert _plain_lines("") == []
        assert _plain_lines("  \n \n") == []

    def test_fenced_code_kept_verbatim(self) -> None:
        lines = _plain_lines("```python\nx = 1 | 2\n```")
        assert "x = 1 | 2" in lines

    def test_syntax_highlighter_failure_falls_back(self) -> None:
        def broken(code: str, lang: str) -> str:
            raise ValueError("no lexer")

        lines = _plain_lines("```go\nfunc main() {}\n```", syntax_highlight_fn=broken)
        assert "func main() {}" in lines

    def test_bullet_and_ordered_lists(self) -> None:
        lines = _plain_lines("- alpha\n- beta\n\n3. gamma\n4. delta")
        assert "- alpha" in lines
        assert "- beta" in lines
        assert "3. gamma" in lines
        assert "4. delta" in lines

    def test_nested_list_hangs_under_marker(self) -> None:
        assert _plain_lines("- outer\n  - inner\n- next") == ["- outer", "  - inner", "- next"]

    def test_loose_item_keeps_paragraph_gap(self) -> None:
        lines = _plain_lines("1. first\n\n   more\n2. second")
        assert lines == ["1. first", "", "   more", "2. second"]

    def test_blockquote_border(self) -> None:
        lines = _plain_lines("> quoted")
        assert lines[0] == "│ quoted"

    def test_horizontal_rule_spans_width(self) -> None:
        lines = _plain_lines("above\n\n---\n\nbelow", width=20)
        assert "─" * 20 in lines

    def test_inline_styles(self) -> None:
        raw = _raw("plain **bold** *it* ~~gone~~")
        assert "\x1b[1mbold" in raw
        assert "\x1b[3mit" in raw
        assert "\x1b[9mgone" in raw

    def test_link_shows_href(self) -> None:
        lines = _plain_lines("[docs](https://example.com)")
        assert lines == ["docs (https://example.com)"]

    def test_underline_tag_in_prose(self) -> None:
        raw = _raw("some <u>under</u> text")
        assert "\x1b[4munder" in raw
        assert "<u>" not in _strip_ansi(raw)

    def test_br_tag_in_prose_breaks_line(self) -> None:
        assert _plain_lines("one<br>two") == ["one", "two"]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestMarkdownTables:
    """Pipe tables become grids; anything that is not a table stays as written."""

    def test_table_drawn_with_box_characters(self) -> None:
        lines = _plain_lines(_TABLE)
        joined = "\n".join(lines)
        for ch in "┌┬┐├┼┤└┴┘":
            assert ch in joined
        for token in ("Name", "Age", "City", "Alice", "30", "NYC", "Bob", "25", "LA"):
            assert token in joined
        assert "|" not in joined

    def test_pseudo_table_stays_verbatim(self) -> None:
        lines = _plain_lines("| this has | pipes\nbut this is just prose")
        assert lines == ["| this has | pipes", "but this is just prose"]

    def test_pipe_rows_without_separator_stay_verbatim(self) -> None:
        assert _plain_lines("a | b\nc | d") == ["a | b", "c | d"]

    def test_markup_in_unrecognized_pipe_text_is_untouched(self) -> None:
        assert _plain_lines("**x** | y\nz | w") == ["**x** | y", "z | w"]

    def test_mixed_content_order(self) -> None:
        text = f"Intro text\n\n{_TABLE}\n\nOutro text"
        lines = _plain_lines(text)
        intro = lines.index("Intro text")
        top = next(i for i, line in enumerate(lines) if line.startswith("┌"))
        bottom = next(i for i, line in enumerate(lines) if line.startswith("└"))
        outro = lines.index("Outro text")
        assert intro < top < bottom < outro

    def test_table_directly_after_prose_line(self) -> None:
        lines = _plain_lines("Results:\n| A | B |\n|---|---|\n| 1 | 2 |")
        assert lines[0] == "Results:"
        assert lines[1] == ""
        assert lines[2].startswith("┌")

    def test_prose_directly_after_table(self) -> None:
        lines = _plain_lines("| A |\n|---|\n| 1 |\nTrailing words")
        assert lines[-1] == "Trailing words"
        assert any(line.startswith("└") for line in lines)

    def test_cell_markup_rendered_not_shown(self) -> None:
        text = "| **Bold** | `code` |\n|---|---|\n| [link](http://x.test) | ~~old~~ |"
        joined = "\n".join(_plain_lines(text))
        for token in ("Bold", "code", "link", "old"):
            assert token in joined
        for delimiter in ("**", "`", "](", "~~"):
            assert delimiter not in joined

    def test_br_in_cell(self) -> None:
        text = "| Column |\n|---|\n| Line 1<br>Line 2<br>Line 3 |"
        lines = _plain_lines(text)
        joined = "\n".join(lines)
        assert "<br" not in joined
        for part in ("Line 1", "Line 2", "Line 3"):
            assert part in joined

    def test_wide_table_on_narrow_terminal(self) -> None:
        header = "|" + "|".join(f" C{i} " for i in range(10)) + "|"
        sep = "|" + "|".join("---" for _ in range(10)) + "|"
        row = "|" + "|".join(" abcdefghijklmnopqrst " for _ in range(10)) + "|"
        lines = _plain_lines(f"{header}\n{sep}\n{row}", width=40)
        assert lines
        assert lines[0].startswith("┌")

    def test_small_table_in_tiny_terminal(self) -> None:
        lines = _plain_lines("| A | B | C |\n|---|---|---|\n| 1 | 2 | 3 |", width=10)
        joined = "\n".join(lines)
        for token in "ABC123":
            assert token in joined

    def test_table_inside_list_item(self) -> None:
        lines = _plain_lines("- | A | B |\n  |---|---|\n  | 1 | 2 |")
        assert any("┌" in line for line in lines)

    def test_border_theme_colour(self) -> None:
        theme = MarkdownTheme(table_border_color="\x1b[35m")
        md = Markdown(_TABLE, padding_x=0, padding_y=0, theme=theme)
        assert md.render(80)[0].startswith("\x1b[35m┌")

    def test_row_spacing_off(self) -> None:
        spaced = _plain_lines(_TABLE)
        compact = _plain_lines(_TABLE, table_row_spacing=False)
        # header and two data rows each lose their spacer line
        assert len(spaced) - len(compact) == 3

    def test_heading_marker_splits_table(self) -> None:
        # "# " makes the header line a heading before tables are looked for
        lines = _plain_lines("# | A | B |\n|---|---|\n| 1 | 2 |")
        assert lines == ["| A | B |", "", "|---|---|", "| 1 | 2 |"]

    def test_dash_row_becomes_list_item(self) -> None:
        lines = _plain_lines("| A | B |\n|---|---|\n- 1 | 2")
        assert lines[0].startswith("┌")
        assert any(line.startswith("└") for line in lines)
        assert lines[-1] == "- 1 | 2"


# ---------------------------------------------------------------------------
# Pending flag
# ---------------------------------------------------------------------------


class TestMarkdownPending:
    """Pending adds a placeholder line and changes nothing else."""

    def test_placeholder_appended(self) -> None:
        lines = render_markdown(_TABLE, 80, pending=True)
        assert _strip_ansi(lines[-1]).strip() == PENDING_PLACEHOLDER

    def test_table_lines_unchanged(self) -> None:
        done = render_markdown(_TABLE, 80)
        streaming = render_markdown(_TABLE, 80, pending=True)
        assert streaming[:-1] == done

    def test_pending_with_no_text(self) -> None:
        lines = render_markdown("", 80, pending=True)
        assert len(lines) == 1
        assert PENDING_PLACEHOLDER in lines[0]

    def test_pending_change_rerenders(self) -> None:
        md = Markdown("text")
        first = md.render(40)
        md.pending = True
        second = md.render(40)
        assert len(second) == len(first) + 1


# ---------------------------------------------------------------------------
# Caching and determinism
# ---------------------------------------------------------------------------


class TestMarkdownCache:
    def test_same_width_returns_cached_lines(self) -> None:
        md = Markdown(_TABLE)
        assert md.render(80) is md.render(80)

    def test_width_change_rerenders(self) -> None:
        md = Markdown(_TABLE)
        assert md.render(80) is not md.render(30)

    def test_same_text_keeps_cache(self) -> None:
        md = Markdown("same")
        lines = md.render(80)
        md.text = "same"
        assert md.render(80) is lines

    def test_new_text_changes_output(self) -> None:
        md = Markdown("before", padding_x=0)
        md.render(80)
        md.text = "after"
        assert _strip_ansi(md.render(80)[0]).rstrip() == "after"

    def test_configure_invalidates(self) -> None:
        md = Markdown("# Head")
        lines = md.render(80)
        md.configure(theme=MarkdownTheme(heading_color="\x1b[32m"))
        recolored = md.render(80)
        assert recolored is not lines
        assert "\x1b[32m" in "".join(recolored)

    def test_configure_keeps_other_options(self) -> None:
        md = Markdown("x", padding_x=3)
        md.configure(table_row_spacing=False)
        assert md.options == MarkdownOptions(padding_x=3, table_row_spacing=False)

    def test_configure_rejects_unknown_option(self) -> None:
        md = Markdown("x")
        with pytest.raises(TypeError):
            md.configure(colour="red")

    def test_unknown_constructor_option_rejected(self) -> None:
        with pytest.raises(TypeError):
            Markdown("x", margin=1)

    def test_invalidate_forces_rerender(self) -> None:
        md = Markdown("again")
        lines = md.render(80)
        md.invalidate()
        rerendered = md.render(80)
        assert rerendered is not lines
        assert rerendered == lines

    def test_fresh_instances_agree(self) -> None:
        text = f"# Report\n\n{_TABLE}\n\n- done"
        assert Markdown(text).render(50) == Markdown(text).render(50)


# ---------------------------------------------------------------------------
# Styling and padding
# ---------------------------------------------------------------------------


class TestMarkdownStyleAndPadding:
    def test_theme_text_style(self) -> None:
        md = Markdown("styled", padding_x=0, theme=MarkdownTheme(text_style="\x1b[3m"))
        raw = "".join(md.render(80))
        assert raw.startswith("\x1b[3mstyled\x1b[0m")

    def test_text_style_restored_after_bold(self) -> None:
        md = Markdown("a **b** c", padding_x=0, theme=MarkdownTheme(text_style="\x1b[3m"))
        raw = "".join(md.render(80))
        assert "\x1b[1mb\x1b[0m\x1b[3m c" in raw

    def test_horizontal_padding(self) -> None:
        lines = Markdown("pad", padding_x=2).render(20)
        assert lines[0].startswith("  pad")
        assert all(len(_strip_ansi(line)) == 20 for line in lines)

    def test_vertical_padding(self) -> None:
        lines = Markdown("pad", padding_x=0, padding_y=1).render(10)
        assert len(lines) == 3
        assert lines[0].strip() == ""
        assert lines[-1].strip() == ""

    def test_custom_background(self) -> None:
        md = Markdown("bg", padding_x=0, custom_bg_fn=lambda s: f"\x1b[44m{s}\x1b[0m")
        assert md.render(10)[0].startswith("\x1b[44m")

    def test_table_fits_inside_padding(self) -> None:
        md = Markdown(_TABLE, padding_x=3)
        for line in md.render(80):
            assert _strip_ansi(line).startswith("   ")
