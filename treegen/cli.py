"""Command-line interface for treegen."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, Optional

from . import __version__
from .config import CONFIG_FILENAME, DEFAULT_NAMESPACE, apply_overrides, load_config
from .driver import OUTPUT_FILENAME, check_output, ensure_roundtrip, generate, write_output
from .errors import TreegenError


def _run(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    config = apply_overrides(
        config,
        {
            # An empty --package means the default, as if it were not given.
            "package": args.package or None,
            "root": args.root,
            "suffix": args.suffix,
        },
    )

    result = generate(config)
    if args.verify:
        ensure_roundtrip(result)

    output_path = Path(OUTPUT_FILENAME)
    if args.check:
        diff = check_output(output_path, result.source)
        if diff:
            sys.stderr.write(diff)
            raise SystemExit(1)
        if not args.quiet:
            print(f"{output_path} is up to date.")
        return

    write_output(output_path, result.source)
    if not args.quiet:
        print(
            f"Wrote {len(result.models)} display model(s) "
            f"({result.node_count} node(s)) to {output_path}."
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treegen",
        description=(
            "Compile display model markup files into one Python module of "
            f"TreeNode literals ({OUTPUT_FILENAME})."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"treegen {__version__}",
        help="Show the treegen version and exit.",
    )
    parser.add_argument(
        "-p",
        "--package",
        default=None,
        help=f"Namespace recorded in the generated module (default: {DEFAULT_NAMESPACE}).",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Directory searched recursively for input files (default: current directory).",
    )
    parser.add_argument(
        "--suffix",
        default=None,
        help="File name suffix selecting input files (default: .xml).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to a YAML config file (default: {CONFIG_FILENAME} when present).",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help=f"Fail if {OUTPUT_FILENAME} is missing or out of date instead of writing it.",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Execute the generated module and compare it with the parsed trees before writing.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print the summary line.",
    )
    return parser


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        _run(args)
    except TreegenError as exc:
        raise SystemExit(f"treegen: {exc}") from exc


__all__ = ["build_parser", "main"]
