"""Interaction modes and the state carried by pointer-drag gestures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(Enum):
    """Transient interaction mode of a spreadsheet; at most one is active."""

    IDLE = "idle"
    EDITING = "editing"
    FILLING = "filling"
    RESIZING_COLUMN = "resizing-column"
    RESIZING_ROW = "resizing-row"


@dataclass(frozen=True)
class FillGesture:
    """Drag-fill started from ``(origin_row, origin_col)``."""

    origin_row: int
    origin_col: int

    def rows_to(self, pointer_row: int) -> range:
        """Rows covered when the pointer is over *pointer_row*, inclusive."""
        start = min(self.origin_row, pointer_row)
        end = max(self.origin_row, pointer_row)
        return range(start, end + 1)


@dataclass(frozen=True)
class ResizeGesture:
    """Column or row resize anchored at the size the drag started from."""

    index: int
    start_size: int
    min_size: int

    def size_for(self, delta: int) -> int:
        """New size after the pointer moved *delta* pixels from the drag origin."""
        return max(self.min_size, self.start_size + delta)
