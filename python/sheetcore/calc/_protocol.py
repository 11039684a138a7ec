"""Evaluator protocol and recalculation result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sheetcore._sheet import Sheet


@dataclass(frozen=True)
class CellDelta:
    """A single cell's displayed value change from recalculation."""

    row: int
    col: int
    old_value: str
    new_value: str
    formula: str | None = None  # the formula that produced new_value


@dataclass(frozen=True)
class RecalcResult:
    """Result of one full recalculation pass."""

    sheet: Sheet  # the recalculated clone
    deltas: tuple[CellDelta, ...]  # formula cells whose value changed
    total_formula_cells: int = 0
    error_cells: int = 0  # formula cells that ended up as the error marker

    @property
    def changed(self) -> bool:
        return bool(self.deltas)


@runtime_checkable
class Evaluator(Protocol):
    """Protocol for formula evaluators used by the spreadsheet controller."""

    def evaluate(self, formula: str, sheet: Sheet) -> str | int | float:
        """Evaluate one formula string against *sheet*."""
        ...

    def calculate(self, sheet: Sheet) -> RecalcResult:
        """Re-evaluate every formula cell of a clone of *sheet* in row-major order."""
        ...
