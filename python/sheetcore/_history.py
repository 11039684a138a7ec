"""Snapshot-based undo/redo."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sheetcore._cell import Cell
from sheetcore._config import DEFAULT_CONFIG
from sheetcore._sheet import Sheet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Deep copy of the grid, selection anchor and layout metrics.

    The sheet held here is private to the snapshot; use :meth:`restore_sheet`
    to get a copy that is safe to mutate.
    """

    sheet: Sheet
    selected_row: int
    selected_col: int
    column_widths: tuple[int, ...]
    row_heights: tuple[int, ...]

    @classmethod
    def take(
        cls,
        sheet: Sheet,
        selected_row: int,
        selected_col: int,
        column_widths: Sequence[int],
        row_heights: Sequence[int],
    ) -> Snapshot:
        return cls(
            sheet=sheet.clone(),
            selected_row=selected_row,
            selected_col=selected_col,
            column_widths=tuple(column_widths),
            row_heights=tuple(row_heights),
        )

    def restore_sheet(self) -> Sheet:
        return self.sheet.clone()

    @property
    def selected_cell(self) -> Cell | None:
        return self.sheet.get(self.selected_row, self.selected_col)

    @property
    def formula_draft(self) -> str:
        """Formula-bar text for the selected cell: ``formula`` if set, else ``value``."""
        cell = self.selected_cell
        return cell.display_text if cell is not None else ""


class HistoryManager:
    """Two bounded stacks of :class:`Snapshot`.

    Any new push discards the redo branch. Pushing a snapshot equal to the
    most recent one is a no-op, so repeated pushes of an unchanged state
    never grow the history.
    """

    __slots__ = ("_past", "_future", "_max_history")

    def __init__(self, max_history: int = DEFAULT_CONFIG.max_history) -> None:
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self._past: list[Snapshot] = []
        self._future: list[Snapshot] = []
        self._max_history = max_history

    @property
    def max_history(self) -> int:
        return self._max_history

    @property
    def depth(self) -> int:
        """Number of undoable entries."""
        return len(self._past)

    @property
    def redo_depth(self) -> int:
        return len(self._future)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()

    def _append_past(self, snapshot: Snapshot) -> None:
        self._past.append(snapshot)
        # Evict oldest first
        while len(self._past) > self._max_history:
            self._past.pop(0)

    def push(self, snapshot: Snapshot) -> bool:
        """Record *snapshot*. Returns False when it duplicates the latest entry."""
        if self._past and self._past[-1] == snapshot:
            logger.debug("No change detected, skipping history push")
            return False
        self._append_past(snapshot)
        self._future.clear()
        logger.debug("History pushed (depth=%d)", len(self._past))
        return True

    def undo(self, current: Snapshot) -> Snapshot | None:
        """Step back: *current* goes to the redo stack, the latest entry is returned."""
        if not self._past:
            logger.debug("Undo requested with empty history")
            return None
        self._future.append(current)
        return self._past.pop()

    def redo(self, current: Snapshot) -> Snapshot | None:
        """Step forward: *current* goes back to the undo stack."""
        if not self._future:
            logger.debug("Redo requested with empty future")
            return None
        self._append_past(current)
        return self._future.pop()
