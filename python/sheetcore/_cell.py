"""Cell value type."""

from __future__ import annotations

from dataclasses import dataclass, field

from sheetcore._styles import CellStyle


@dataclass
class Cell:
    """One grid cell.

    ``value`` is the displayed text. ``formula``, when set, starts with ``=``
    and ``value`` holds its last evaluation result.
    """

    value: str = ""
    formula: str | None = None
    style: CellStyle = field(default_factory=CellStyle)

    @classmethod
    def from_text(cls, text: str) -> Cell:
        """Build a cell from user-entered text (``=``-prefix makes a formula)."""
        return cls(value=text, formula=text if text.startswith("=") else None)

    @property
    def display_text(self) -> str:
        """What the editor shows when the cell is selected: formula, else value."""
        return self.formula if self.formula is not None else self.value

    @property
    def is_formula(self) -> bool:
        return bool(self.formula)

    def clone(self) -> Cell:
        return Cell(value=self.value, formula=self.formula, style=self.style.copy())
