"""Rendering settings with JSON persistence.

Settings live in ``~/.mdgrid/settings.json`` using camelCase keys. Missing
keys keep their defaults; a missing file is not an error; a broken file
yields the defaults together with the error that was hit.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from mdgrid.components.markdown import MarkdownTheme

CONFIG_DIR_NAME = ".mdgrid"


# --- Settings schema ---


@dataclass
class TableSettings:
    """Table drawing options."""

    row_spacing: bool = True


@dataclass
class ThemeSettings:
    """ANSI colour prefixes, e.g. ``"\\x1b[36m"``. ``None`` leaves text unstyled."""

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

    def to_theme(self) -> MarkdownTheme:
        return MarkdownTheme(**asdict(self))


@dataclass
class Settings:
    """All rendering settings."""

    table: TableSettings = field(default_factory=TableSettings)
    theme: ThemeSettings = field(default_factory=ThemeSettings)
    padding_x: int = 0
    padding_y: int = 0

    def markdown_options(self) -> dict[str, Any]:
        """Keyword arguments for :class:`~mdgrid.components.markdown.Markdown`."""
        return {
            "padding_x": self.padding_x,
            "padding_y": self.padding_y,
            "theme": self.theme.to_theme(),
            "table_row_spacing": self.table.row_spacing,
        }


# --- camelCase <-> snake_case ---


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _section_from_dict(cls: type, data: Any) -> Any:
    """Build a dataclass section from *data*, ignoring unknown or mistyped keys."""
    section = cls()
    if not isinstance(data, dict):
        return section
    for f in fields(cls):
        key = _camel(f.name)
        if key not in data:
            continue
        value = data[key]
        default = getattr(section, f.name)
        if default is None:
            if value is None or isinstance(value, str):
                setattr(section, f.name, value)
        elif isinstance(default, bool):
            if isinstance(value, bool):
                setattr(section, f.name, value)
        elif isinstance(default, int):
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                setattr(section, f.name, value)
    return section


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """Build :class:`Settings` from a parsed JSON object."""
    settings = Settings(
        table=_section_from_dict(TableSettings, data.get("table")),
        theme=_section_from_dict(ThemeSettings, data.get("theme")),
    )
    top = _section_from_dict(Settings, {k: v for k, v in data.items() if k in ("paddingX", "paddingY")})
    settings.padding_x = top.padding_x
    settings.padding_y = top.padding_y
    return settings


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Serialize *settings* with camelCase keys, omitting ``None`` values."""

    def section(obj: Any) -> dict[str, Any]:
        return {_camel(k): v for k, v in asdict(obj).items() if v is not None}

    return {
        "table": section(settings.table),
        "theme": section(settings.theme),
        "paddingX": settings.padding_x,
        "paddingY": settings.padding_y,
    }


# --- Persistence ---


def default_settings_path() -> str:
    """Default settings file (~/.mdgrid/settings.json)."""
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME, "settings.json")


def load_settings(path: str | None = None) -> tuple[Settings, Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    path = path or default_settings_path()
    if not os.path.exists(path):
        return Settings(), None
    try:
        content = Path(path).read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as e:
        return Settings(), e
    if not isinstance(data, dict):
        return Settings(), ValueError(f"{path}: expected a JSON object")
    return settings_from_dict(data), None


def save_settings(settings: Settings, path: str | None = None) -> None:
    """Write *settings* as pretty-printed JSON, creating the directory if needed."""
    path = path or default_settings_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    Path(path).write_text(
        json.dumps(settings_to_dict(settings), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
