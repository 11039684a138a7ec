"""CSV codec: sheet <-> text with minimal quoting.

Fixed dialect: ``,`` delimiter, ``"`` quote, ``""`` escape. Formulas are
written as their source text so a round trip keeps them.
"""

from __future__ import annotations

import re

from sheetcore._cell import Cell
from sheetcore._sheet import Sheet

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_NEEDS_QUOTES = ('"', ',', '\n')


def _encode_field(raw: str) -> str:
    if any(ch in raw for ch in _NEEDS_QUOTES):
        return '"' + raw.replace('"', '""') + '"'
    return raw


def encode(sheet: Sheet) -> str:
    """Serialize *sheet*; each cell contributes ``formula`` if set, else ``value``."""
    return "\n".join(
        ",".join(_encode_field(cell.display_text or "") for cell in row)
        for row in sheet.iter_rows()
    )


def _parse_line(line: str) -> list[str]:
    """Split one line on commas outside quotes.

    ``""`` inside a quoted field is a literal quote. An unterminated quote
    runs to the end of the line.
    """
    fields: list[str] = []
    current = ""
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < length and line[i + 1] == '"':
                    current += '"'
                    i += 2
                    continue
                in_quotes = False
            else:
                current += ch
        elif ch == '"':
            in_quotes = True
        elif ch == ',':
            fields.append(current)
            current = ""
        else:
            current += ch
        i += 1

    fields.append(current)
    return fields


def decode(text: str) -> Sheet:
    """Parse CSV *text* into a rectangular sheet. Never raises.

    Blank lines are dropped. Fields are trimmed; a field starting with ``=``
    becomes a formula (its ``value`` holds the same text until recalculated).
    Short rows are padded with empty cells to the widest row.
    """
    lines = [line for line in _LINE_SPLIT_RE.split(text) if line.strip()]
    rows: list[list[Cell]] = []
    for line in lines:
        rows.append([Cell.from_text(field.strip()) for field in _parse_line(line)])

    width = max((len(row) for row in rows), default=0)
    for row in rows:
        row.extend(Cell() for _ in range(width - len(row)))
    return Sheet(rows)
