"""lfi3a: run a .lfi3a source file."""

from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path
from typing import Optional, Sequence

from .ast import dump, pretty
from .diagnostics import format_error
from .interpreter import DEFAULT_MAX_CALL_DEPTH, Interpreter, InterpreterError
from .lexer import tokenize
from .parser import ParseError, parse

SUFFIX = ".lfi3a"

_verbose = False


def main(argv: Optional[Sequence[str]] = None) -> int:
    global _verbose
    ap = argparse.ArgumentParser(prog="lfi3a", description="Run an lfi3a program")
    ap.add_argument("input", help=f"Source file ({SUFFIX})")
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Report pipeline stages on stderr",
    )
    ap.add_argument(
        "--no-color",
        action="store_true",
        help="Never colour error messages",
    )
    ap.add_argument(
        "--ast",
        action="store_true",
        help="Print the parsed tree instead of running it",
    )
    ap.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_CALL_DEPTH,
        help=f"Maximum function call depth (default: {DEFAULT_MAX_CALL_DEPTH})",
    )
    args = ap.parse_args(argv)
    _verbose = args.verbose
    color = not args.no_color and sys.stderr.isatty()

    if not args.input.endswith(SUFFIX):
        log_error(format_error(f"Only {SUFFIX} files are allowed", color=color))
        return 1

    path = Path(args.input)
    try:
        # Undecodable bytes pass through to the output unchanged.
        src = path.read_text(encoding="utf-8", errors="surrogateescape")
    except OSError:
        log_error(format_error(f"Cannot open file '{args.input}'", color=color))
        return 1
    _pass_through_raw_bytes(sys.stdout)

    try:
        log_step("lexing")
        tokens = tokenize(src)
        log_step("parsing")
        program = parse(tokens)
        if args.ast:
            for node in program:
                print(pretty(dump(node)))
            return 0
        log_step("running")
        Interpreter(max_call_depth=args.max_depth).run(program)
    except (ParseError, InterpreterError) as e:
        sys.stdout.flush()
        log_error(format_error(e.message, src, e.line, e.col, color=color))
        return 1
    return 0


def _pass_through_raw_bytes(stream) -> None:
    if isinstance(stream, io.TextIOWrapper):
        stream.reconfigure(errors="surrogateescape")


def log_step(msg: str) -> None:
    if _verbose:
        print(f"[lfi3a] {msg}...", file=sys.stderr)


def log_error(msg: str) -> None:
    print(msg, file=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
