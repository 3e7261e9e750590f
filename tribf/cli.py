from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .compiler import BrainfuckCompiler
from .config import DEFAULT_TAPE_LENGTH, CompilerConfig, ConfigError, EofPolicy
from .instructions import format_listing


logger = logging.getLogger(__name__)


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8", errors="replace")


def _write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


def _eof_policy(args: argparse.Namespace) -> EofPolicy:
    if args.eof_zero:
        return EofPolicy.ZERO
    if args.eof_neg_one:
        return EofPolicy.NEG_ONE
    if args.eof_unchanged:
        return EofPolicy.UNCHANGED
    return EofPolicy.RAW


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tribf", description="Optimises and transpiles Brainfuck code to C")
    parser.add_argument("input", help="Name of the input file")
    parser.add_argument("-o", "--output", default="o.c", help="Name of the output file (default: o.c)")
    parser.add_argument(
        "-l",
        "--length",
        type=int,
        default=DEFAULT_TAPE_LENGTH,
        help=f"Length of the tape (default: {DEFAULT_TAPE_LENGTH})",
    )
    parser.add_argument(
        "-b",
        "--bits",
        type=int,
        default=8,
        help="Bit count of each cell (must be 8, 16, 32, or 64)",
    )
    eof_group = parser.add_mutually_exclusive_group()
    eof_group.add_argument("-z", "--eof-zero", action="store_true", help="EOFs write a 0")
    eof_group.add_argument("-n", "--eof-neg-one", action="store_true", help="EOFs write a -1")
    eof_group.add_argument("-u", "--eof-unchanged", action="store_true", help="EOFs leave the cell unchanged")
    parser.add_argument(
        "-O",
        "--optimize",
        type=int,
        default=3,
        help="Set optimization level (0, 1, 2, 3; default: 3)",
    )
    parser.add_argument(
        "--emit",
        choices=("c", "ir"),
        default="c",
        help="Write C source (default) or the optimized instruction listing",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details to stderr")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG)

    try:
        config = CompilerConfig(
            bits=args.bits,
            tape_length=args.length,
            eof=_eof_policy(args),
            optimize=args.optimize,
        )
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    try:
        source_text = _read_source(args.input)
    except OSError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    compiler = BrainfuckCompiler(config)
    instructions, stats = compiler.lower(source_text)
    logger.info(
        "optimization level %d: %d -> %d instructions",
        config.optimize,
        stats.input_length,
        stats.output_length,
    )

    if args.emit == "ir":
        output = format_listing(instructions) + "\n"
    else:
        output = compiler.emit(instructions)

    try:
        _write_output(args.output, output)
    except OSError as exc:
        print(f"Cannot write {args.output}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
