"""Runtime values for lfi3a.

Every value is text. Numbers are parsed from text when an operator needs them
and written back with integer collapse: ``5.0`` prints as ``5``, anything with
a fractional part uses fixed six-decimal notation (``5.500000``).
"""

from __future__ import annotations

import math
import re
from typing import Optional

TRUE = "s7i7"
FALSE = "ghalat"
ZERO = "0"

FALSY = {FALSE, "0", "", "0.0"}

_NUMBER = re.compile(
    r"""\s*[+-]?
    (?:
        (?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?
      | inf(?:inity)?
      | nan
    )\s*""",
    re.VERBOSE | re.IGNORECASE,
)


def is_truthy(value: str) -> bool:
    return value not in FALSY


def from_bool(flag: bool) -> str:
    return TRUE if flag else FALSE


def parse_number(text: str) -> Optional[float]:
    """The numeric reading of ``text``, or None when the whole text isn't one."""
    if not _NUMBER.fullmatch(text):
        return None
    return float(text)


def format_number(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return "%f" % value


__all__ = [
    "TRUE",
    "FALSE",
    "ZERO",
    "FALSY",
    "is_truthy",
    "from_bool",
    "parse_number",
    "format_number",
]
