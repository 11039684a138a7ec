"""Formula text helpers: reference resolution, range splitting, numeric coercion."""

from __future__ import annotations

import re

from sheetcore._sheet import Sheet

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# Cell ref token inside an arithmetic formula: A1, aa23
CELL_REF_RE = re.compile(r"[A-Z]+[0-9]+", re.IGNORECASE)

# Aggregate argument: greedy, first '(' to last ')'
_GROUP_RE = re.compile(r"\((.*)\)")

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")
_LEADING_FLOAT_RE = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")


# ---------------------------------------------------------------------------
# Address resolution
# ---------------------------------------------------------------------------


def resolve_address(token: str) -> tuple[int | None, int]:
    """Resolve a cell token to zero-based ``(row, col)``.

    Permissive: leading letters fold into
    the column, the digits right after them become the 1-based row. A token
    with no parsable row yields ``row=None``; a token with no letters yields
    ``col=-1``. Both are out of bounds for every sheet.
    """
    upper = token.strip().upper()
    col = 0
    i = 0
    while i < len(upper) and "A" <= upper[i] <= "Z":
        col = col * 26 + (ord(upper[i]) - 64)
        i += 1
    col -= 1

    m = _LEADING_INT_RE.match(upper[i:])
    row = int(m.group(0)) - 1 if m else None
    return row, col


def split_range(range_text: str) -> tuple[str, str] | None:
    """``"A1:B10" -> ("A1", "B10")``; None when there is no ``:``.

    Text after a second ``:`` is ignored.
    """
    parts = range_text.split(":")
    if len(parts) < 2:
        return None
    return parts[0].strip(), parts[1].strip()


def extract_group(expr: str) -> str | None:
    """Greedy parenthesized group of an aggregate call, or None."""
    m = _GROUP_RE.search(expr)
    return m.group(1) if m else None


# ---------------------------------------------------------------------------
# Numeric coercion of cell text
# ---------------------------------------------------------------------------


def strip_non_numeric(text: str) -> str:
    """Drop every character that is not a digit, ``.`` or ``-``."""
    return _NON_NUMERIC_RE.sub("", text)


def parse_number_prefix(text: str) -> float | None:
    """Parse the longest leading decimal number (``"3-4" -> 3.0``), or None."""
    m = _LEADING_FLOAT_RE.match(text)
    if not m:
        return None
    return float(m.group(0))


def cell_number(sheet: Sheet, row: int | None, col: int | None) -> float:
    """Numeric reading of a cell for aggregates; missing or unparsable -> 0."""
    cell = sheet.get(row, col)
    if cell is None:
        return 0.0
    num = parse_number_prefix(strip_non_numeric(cell.value or ""))
    return num if num is not None else 0.0


def cell_operand(sheet: Sheet, token: str) -> str:
    """Text substituted for a cell token in an arithmetic formula."""
    row, col = resolve_address(token)
    cell = sheet.get(row, col)
    cleaned = strip_non_numeric(cell.value) if cell is not None and cell.value else ""
    return cleaned or "0"
