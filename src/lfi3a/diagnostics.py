"""Rendering of lexer/parser/runtime faults for the error stream."""

from __future__ import annotations

from typing import List, Optional, Tuple

import colorama
from colorama import Fore, Style

_colorama_ready = False


def _ensure_colorama() -> None:
    global _colorama_ready
    if _colorama_ready:
        return
    _colorama_ready = True
    colorama.just_fix_windows_console()


def caret_lines(source: str, line: int, col: int) -> Optional[Tuple[str, str]]:
    """The source line at ``line`` and a caret under ``col``, if it exists."""
    lines = source.splitlines()
    if not (1 <= line <= len(lines)):
        return None
    src_line = lines[line - 1]
    caret = " " * (col - 1 if col and col > 0 else 0) + "^"
    return src_line, caret


def format_error(
    message: str,
    source: Optional[str] = None,
    line: Optional[int] = None,
    col: Optional[int] = None,
    color: bool = False,
) -> str:
    parts: List[str] = []
    head = "Error: "
    if color:
        _ensure_colorama()
        head = f"{Fore.RED}{Style.BRIGHT}Error:{Style.RESET_ALL} "
    if line is None:
        return head + message
    parts.append(f"{head}{message} at {line}:{col}")
    if source is not None:
        shown = caret_lines(source, line, col or 1)
        if shown is not None:
            src_line, caret = shown
            if color:
                caret = f"{Fore.RED}{caret}{Style.RESET_ALL}"
            parts.append(f"    {src_line}")
            parts.append(f"    {caret}")
    return "\n".join(parts)


__all__ = ["format_error", "caret_lines"]
