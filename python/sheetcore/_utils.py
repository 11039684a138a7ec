"""Column letter and A1 address helpers (all indices zero-based)."""

from __future__ import annotations

import math
import re

_A1_RE = re.compile(r"^([A-Za-z]+)(\d+)$")


def column_letter(index: int) -> str:
    """Convert a zero-based column index to its letter label.

    ``0 -> "A"``, ``25 -> "Z"``, ``26 -> "AA"``, ``701 -> "ZZ"``.
    """
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    name = ""
    while index >= 0:
        name = chr(65 + index % 26) + name
        index = index // 26 - 1
    return name


def column_index(letters: str) -> int:
    """Convert column letter(s) to a zero-based index (``"AA" -> 26``)."""
    if not letters or not letters.isalpha() or not letters.isascii():
        raise ValueError(f"Invalid column letters: {letters!r}")
    col = 0
    for ch in letters.upper():
        col = col * 26 + (ord(ch) - 64)
    return col - 1


def rowcol_to_a1(row: int, col: int) -> str:
    """``(0, 0) -> "A1"``."""
    if row < 0:
        raise ValueError(f"Row index must be non-negative, got {row}")
    return f"{column_letter(col)}{row + 1}"


def a1_to_rowcol(ref: str) -> tuple[int, int]:
    """``"B3" -> (2, 1)``. Raises ValueError on anything that isn't a plain ref."""
    m = _A1_RE.match(ref.strip())
    if not m or int(m.group(2)) < 1:
        raise ValueError(f"Invalid cell reference: {ref!r}")
    return int(m.group(2)) - 1, column_index(m.group(1))


def format_number(value: float | int) -> str:
    """Render a computed number as cell text.

    Integral floats drop their fractional part (``6.0 -> "6"``); other
    values use the shortest round-trip representation.
    """
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)
