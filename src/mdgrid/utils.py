"""Terminal text utilities: ANSI handling, display width, word wrapping.

Widths are measured per grapheme cluster (``grapheme``) with per code point
widths from ``wcwidth``, so wide East Asian characters count as two columns,
combining marks as zero and emoji sequences as two.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterator

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Escape sequences
# ---------------------------------------------------------------------------

RESET = "\x1b[0m"
BOLD = "\x1b[1m"
DIM = "\x1b[2m"
ITALIC = "\x1b[3m"
UNDERLINE = "\x1b[4m"
STRIKETHROUGH = "\x1b[9m"

# CSI (SGR and cursor/erase), OSC 8 hyperlinks, APC payloads
_ESCAPE_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJ]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)


def strip_ansi(text: str) -> str:
    """Remove every escape sequence from *text*."""
    return _ESCAPE_RE.sub("", text)


def iter_ansi_tokens(text: str) -> Iterator[tuple[str, bool]]:
    """Yield ``(token, is_escape)`` pairs: escape sequences and grapheme clusters."""
    pos = 0
    for match in _ESCAPE_RE.finditer(text):
        if match.start() > pos:
            for g in grapheme.graphemes(text[pos : match.start()]):
                yield g, False
        yield match.group(0), True
        pos = match.end()
    if pos < len(text):
        for g in grapheme.graphemes(text[pos:]):
            yield g, False


# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------

_VS16 = 0xFE0F
_ZWJ = 0x200D


def _is_emoji_sequence_member(cp: int) -> bool:
    return (
        cp in (_VS16, _ZWJ)
        or 0x1F3FB <= cp <= 0x1F3FF  # skin tone modifiers
        or 0x1F1E6 <= cp <= 0x1F1FF  # regional indicators
    )


def grapheme_width(g: str) -> int:
    """Return the terminal width of a single grapheme cluster.

    Control characters and lone combining marks are zero wide. Clusters that
    form an emoji sequence (VS16, ZWJ, skin tone, flags) or start in the
    pictographic ranges are two wide. Everything else takes the ``wcwidth``
    of its base character.
    """
    if not g:
        return 0
    if g == "\t":
        return 3

    base = ord(g[0])
    if len(g) == 1:
        if base < 0x20 or 0x7F <= base <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    if any(_is_emoji_sequence_member(ord(ch)) for ch in g[1:]) or _is_emoji_sequence_member(base):
        return 2
    if base >= 0x1F000 or 0x2600 <= base <= 0x27BF:
        return 2

    category = unicodedata.category(g[0])
    if category.startswith("M") or category == "Cf":
        return 0
    return max(_wcwidth.wcwidth(g[0]), 0)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


def visible_width(text: str) -> int:
    """Return the number of terminal columns *text* occupies.

    Escape sequences are ignored and tabs count as three columns. Pure ASCII
    takes a fast path; other strings are measured per grapheme and cached.
    """
    if not text:
        return 0

    stripped = strip_ansi(text)
    if not stripped:
        return 0
    stripped = stripped.replace("\t", "   ")

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# AnsiCodeTracker
# ---------------------------------------------------------------------------

_SGR_ON = {
    1: "bold",
    2: "dim",
    3: "italic",
    4: "underline",
    5: "blink",
    7: "inverse",
    8: "hidden",
    9: "strikethrough",
}
_SGR_OFF = {
    22: ("bold", "dim"),
    23: ("italic",),
    24: ("underline",),
    25: ("blink",),
    27: ("inverse",),
    28: ("hidden",),
    29: ("strikethrough",),
    39: ("fg_color",),
    49: ("bg_color",),
}
_ATTR_ORDER = (*_SGR_ON.values(), "fg_color", "bg_color")


class AnsiCodeTracker:
    """Track the active SGR attributes so they can be re-opened after a line break."""

    def __init__(self) -> None:
        self._active: dict[str, str] = {}

    def process(self, code: str) -> None:
        """Update tracked state from an SGR sequence like ``\\x1b[1;31m``."""
        if not code.startswith("\x1b[") or not code.endswith("m"):
            return

        params = code[2:-1].split(";") if code[2:-1] else ["0"]
        i = 0
        while i < len(params):
            val = int(params[i]) if params[i].isdigit() else 0
            if val == 0:
                self.clear()
            elif val in _SGR_ON:
                self._active[_SGR_ON[val]] = f"\x1b[{val}m"
            elif val in _SGR_OFF:
                for attr in _SGR_OFF[val]:
                    self._active.pop(attr, None)
            elif val in (38, 48):
                # 38;5;N / 38;2;R;G;B (and the 48 background forms)
                slot = "fg_color" if val == 38 else "bg_color"
                mode = params[i + 1] if i + 1 < len(params) else ""
                span = {"5": 3, "2": 5}.get(mode, 0)
                if span and i + span <= len(params):
                    self._active[slot] = "\x1b[" + ";".join(params[i : i + span]) + "m"
                    i += span
                    continue
            elif 30 <= val <= 37 or 90 <= val <= 97:
                self._active["fg_color"] = f"\x1b[{val}m"
            elif 40 <= val <= 47 or 100 <= val <= 107:
                self._active["bg_color"] = f"\x1b[{val}m"
            i += 1

    def clear(self) -> None:
        self._active.clear()

    def get_active_codes(self) -> str:
        """Return the codes that reopen the current state."""
        return "".join(self._active[attr] for attr in _ATTR_ORDER if attr in self._active)

    def has_active_codes(self) -> bool:
        return bool(self._active)

    def get_line_end_reset(self) -> str:
        return RESET if self._active else ""


# ---------------------------------------------------------------------------
# wrap_text_with_ansi
# ---------------------------------------------------------------------------


def wrap_text_with_ansi(text: str, width: int) -> list[str]:
    """Word-wrap *text* to *width* columns, preserving escape sequences.

    Embedded newlines start new lines. Styles active at a break are closed
    with a reset at the end of the line and reopened on the next one.
    """
    if width <= 0:
        return [text]

    tracker = AnsiCodeTracker()
    result: list[str] = []
    for physical_line in text.split("\n"):
        result.extend(_wrap_single_line(physical_line, width, tracker))
    return result


def _wrap_single_line(line: str, width: int, tracker: AnsiCodeTracker) -> list[str]:
    if not line:
        return [""]

    lines: list[str] = []
    current: list[str] = [tracker.get_active_codes()]
    widths: list[int] = [0]
    used = 0
    # index of the last space in ``current`` and the styles active at that point
    break_at: int | None = None
    break_codes = ""

    def close(parts: list[str], codes: str) -> str:
        return "".join(parts) + (RESET if codes else "")

    for token, is_escape in iter_ansi_tokens(line):
        if is_escape:
            tracker.process(token)
            current.append(token)
            widths.append(0)
            continue

        text = "   " if token == "\t" else token
        w = grapheme_width(token)

        if used + w > width and used > 0:
            if token == " ":
                codes = tracker.get_active_codes()
                lines.append(close(current, codes))
                current, widths, used = [codes], [0], 0
                break_at = None
                continue
            if break_at is not None:
                head, tail = current[: break_at + 1], current[break_at + 1 :]
                tail_widths = widths[break_at + 1 :]
                lines.append(close(head, break_codes))
                current, widths = [break_codes, *tail], [0, *tail_widths]
                used = sum(tail_widths)
            else:
                codes = tracker.get_active_codes()
                lines.append(close(current, codes))
                current, widths, used = [codes], [0], 0
            break_at = None

        current.append(text)
        widths.append(w)
        used += w
        if token == " ":
            break_at = len(current) - 1
            break_codes = tracker.get_active_codes()

    lines.append(close(current, tracker.get_active_codes()))
    return lines


# ---------------------------------------------------------------------------
# Padding helpers
# ---------------------------------------------------------------------------


def pad_to_width(text: str, width: int) -> str:
    """Right-pad *text* with spaces up to *width* visible columns."""
    return text + " " * max(0, width - visible_width(text))
