"""Simple CLI to lex an lfi3a source file and print tokens."""

import argparse
from pathlib import Path

from .lexer import Lexer


def main() -> int:
    parser = argparse.ArgumentParser(description="Lex an lfi3a source file")
    parser.add_argument("path", type=Path, help="Path to lfi3a source (.lfi3a)")
    args = parser.parse_args()

    try:
        text = args.path.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"error: file not found: {args.path}")
        return 1

    for t in Lexer(text).scan():
        print(f"{t.kind.name}\t{t.lexeme!r}\t(line {t.line}, col {t.col})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
