"""CLI entry point: render a Markdown file (or stdin) to the terminal."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path

from mdgrid.components.markdown import Markdown
from mdgrid.config import load_settings
from mdgrid.utils import strip_ansi

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mdgrid",
        description="Render Markdown, tables included, for a fixed-width terminal",
    )
    parser.add_argument("file", nargs="?", help="Markdown file to render (default: stdin)")
    parser.add_argument("-w", "--width", type=int, help="Terminal width in columns (default: detected)")
    parser.add_argument("--pending", action="store_true", help="Show the streaming placeholder line")
    parser.add_argument("--no-color", action="store_true", help="Strip ANSI styling from the output")
    parser.add_argument("--settings", help="Settings JSON file (default: ~/.mdgrid/settings.json)")
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings, error = load_settings(args.settings)
    if error is not None:
        logger.warning("Ignoring unreadable settings: %s", error)

    if args.file:
        try:
            text = Path(args.file).read_text(encoding="utf-8")
        except OSError as e:
            print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    width = args.width if args.width and args.width > 0 else shutil.get_terminal_size().columns
    logger.debug("Rendering %d characters at width %d", len(text), width)

    md = Markdown(text, pending=args.pending, **settings.markdown_options())
    for line in md.render(width):
        print((strip_ansi(line) if args.no_color else line).rstrip())


if __name__ == "__main__":
    main()
