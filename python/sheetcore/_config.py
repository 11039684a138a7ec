"""Engine defaults: grid size, layout metrics and history capacity."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SheetConfig:
    """Tunable defaults for a :class:`~sheetcore.Spreadsheet`."""

    default_rows: int = 100
    default_cols: int = 26
    default_column_width: int = 96  # px
    default_row_height: int = 21  # px
    min_column_width: int = 40
    min_row_height: int = 16
    max_history: int = 50

    def __post_init__(self) -> None:
        if self.default_rows < 0 or self.default_cols < 0:
            raise ValueError("Default grid dimensions must be non-negative")
        if self.max_history < 1:
            raise ValueError("max_history must be at least 1")


DEFAULT_CONFIG = SheetConfig()
