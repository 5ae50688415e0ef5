"""Command-line interface for quill2html.

Usage::

    quill2html input.json                     # writes input.html
    quill2html input.json -o output.html      # explicit output path
    quill2html input.json --preset quill      # use Quill's class names
    quill2html --list-presets                 # list available presets
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from quill2html import __version__
from quill2html.converter import Converter
from quill2html.errors import Quill2HtmlError, RenderError
from quill2html.options import PRESETS

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quill2html",
        description="Render Quill Delta JSON files as HTML.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the Delta JSON file to convert.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output HTML file path. Defaults to <input>.html.",
    )
    parser.add_argument(
        "-p", "--preset",
        default="default",
        choices=PRESETS,
        help="Rendering preset (default: %(default)s).",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List available presets and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log rendering details to stderr.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if args.list_presets:
        print("Available presets:")
        for preset in PRESETS:
            print(f"  - {preset}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_suffix(".html")

    if args.verbose:
        print(f"Input:  {input_path}")
        print(f"Output: {output_path}")
        print(f"Preset: {args.preset}")

    try:
        converter = Converter(preset=args.preset)
        converter.convert_file(input_path, output_path, encoding=args.encoding)
    except RenderError as exc:
        logger.debug("Partial output before failure: %r", exc.html)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (Quill2HtmlError, OSError, UnicodeDecodeError, LookupError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Done. {output_path.stat().st_size} bytes written.")
    else:
        print(f"Converted: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
