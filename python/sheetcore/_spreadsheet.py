"""Spreadsheet: the single mutator of a sheet, with selection, clipboard and history.

Every mutating intent follows the same sequence: snapshot the current state
into history, clone the sheet, change the clone, publish it, and (for edits
that can feed formulas) run one recalculation pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sheetcore._cell import Cell
from sheetcore._clipboard import Clip, RangeClip, SingleClip
from sheetcore._config import DEFAULT_CONFIG, SheetConfig
from sheetcore._csv import decode, encode
from sheetcore._gestures import FillGesture, Mode, ResizeGesture
from sheetcore._history import HistoryManager, Snapshot
from sheetcore._sheet import Sheet
from sheetcore._styles import STYLE_KEYS
from sheetcore._utils import rowcol_to_a1
from sheetcore.calc._evaluator import FormulaEngine
from sheetcore.calc._protocol import Evaluator, RecalcResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellRange:
    """Normalized selection rectangle, inclusive on both ends."""

    r1: int
    c1: int
    r2: int
    c2: int

    @classmethod
    def between(cls, row_a: int, col_a: int, row_b: int, col_b: int) -> CellRange:
        return cls(min(row_a, row_b), min(col_a, col_b), max(row_a, row_b), max(col_a, col_b))

    @property
    def shape(self) -> tuple[int, int]:
        return (self.r2 - self.r1 + 1, self.c2 - self.c1 + 1)

    def contains(self, row: int, col: int) -> bool:
        return self.r1 <= row <= self.r2 and self.c1 <= col <= self.c2

    def to_a1(self) -> str:
        start = rowcol_to_a1(self.r1, self.c1)
        if (self.r1, self.c1) == (self.r2, self.c2):
            return start
        return f"{start}:{rowcol_to_a1(self.r2, self.c2)}"


def _clamp(value: int, upper: int) -> int:
    return max(0, min(upper, value))


class Spreadsheet:
    """Headless spreadsheet editor state.

    Usage::

        ss = Spreadsheet(rows=3, cols=3)
        ss.commit_cell_edit(0, 0, "1")
        ss.commit_cell_edit(0, 1, "=A1*2")
        ss.sheet.cell(0, 1).value   # "2"
        ss.undo()
    """

    def __init__(
        self,
        rows: int | None = None,
        cols: int | None = None,
        config: SheetConfig | None = None,
        engine: Evaluator | None = None,
    ) -> None:
        self._config = config if config is not None else DEFAULT_CONFIG
        n_rows = self._config.default_rows if rows is None else rows
        n_cols = self._config.default_cols if cols is None else cols

        self._sheet = Sheet.blank(n_rows, n_cols)
        self._engine: Evaluator = engine if engine is not None else FormulaEngine()
        self._history = HistoryManager(self._config.max_history)
        self._column_widths: list[int] = [self._config.default_column_width] * n_cols
        self._row_heights: list[int] = [self._config.default_row_height] * n_rows

        self._selected_row = 0
        self._selected_col = 0
        self._range_start_row = 0
        self._range_start_col = 0
        self._range_end_row = 0
        self._range_end_col = 0
        self._formula_draft = ""

        self._clipboard: Clip | None = None
        self._mode = Mode.IDLE
        self._fill: FillGesture | None = None
        self._resize: ResizeGesture | None = None

    @classmethod
    def from_sheet(
        cls,
        sheet: Sheet,
        config: SheetConfig | None = None,
        engine: Evaluator | None = None,
    ) -> Spreadsheet:
        """Wrap a copy of *sheet* and bring its formula values up to date."""
        ss = cls(sheet.n_rows, sheet.n_cols, config=config, engine=engine)
        ss._sheet = sheet.clone()
        ss.recalculate()
        ss._formula_draft = ss._draft_for(0, 0)
        return ss

    # ------------------------------------------------------------------
    # Read-only state for the presentation layer
    # ------------------------------------------------------------------

    @property
    def sheet(self) -> Sheet:
        """The current sheet. Treat as read-only; mutate through this class."""
        return self._sheet

    @property
    def config(self) -> SheetConfig:
        return self._config

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def selected_row(self) -> int:
        return self._selected_row

    @property
    def selected_col(self) -> int:
        return self._selected_col

    @property
    def selection_range(self) -> CellRange:
        return CellRange.between(
            self._range_start_row, self._range_start_col,
            self._range_end_row, self._range_end_col,
        )

    @property
    def cell_address(self) -> str:
        """A1 label of the selection anchor, e.g. ``"C7"``."""
        return rowcol_to_a1(self._selected_row, self._selected_col)

    @property
    def formula_draft(self) -> str:
        return self._formula_draft

    @property
    def column_widths(self) -> tuple[int, ...]:
        return tuple(self._column_widths)

    @property
    def row_heights(self) -> tuple[int, ...]:
        return tuple(self._row_heights)

    @property
    def clipboard(self) -> Clip | None:
        return self._clipboard

    @property
    def has_clipboard(self) -> bool:
        return self._clipboard is not None and not self._clipboard.is_empty

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def cell(self, row: int, col: int) -> Cell:
        return self._sheet.cell(row, col)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _draft_for(self, row: int, col: int) -> str:
        cell = self._sheet.get(row, col)
        return cell.display_text if cell is not None else ""

    def _snapshot(self) -> Snapshot:
        return Snapshot.take(
            self._sheet,
            self._selected_row,
            self._selected_col,
            self._column_widths,
            self._row_heights,
        )

    def _push_history(self) -> bool:
        return self._history.push(self._snapshot())

    def _restore(self, snap: Snapshot) -> None:
        self._sheet = snap.restore_sheet()
        self._selected_row = snap.selected_row
        self._selected_col = snap.selected_col
        self._collapse_range()
        self._column_widths = list(snap.column_widths)
        self._row_heights = list(snap.row_heights)
        self._formula_draft = snap.formula_draft

    def _collapse_range(self) -> None:
        self._range_start_row = self._range_end_row = self._selected_row
        self._range_start_col = self._range_end_col = self._selected_col

    def _anchor_in_bounds(self) -> bool:
        return self._sheet.in_bounds(self._selected_row, self._selected_col)

    def _require_idle(self, action: str) -> None:
        if self._mode is not Mode.IDLE:
            raise RuntimeError(f"{action} requires idle mode, currently {self._mode.value}")

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_cell(self, row: int, col: int) -> None:
        """Move the anchor to ``(row, col)`` and collapse the range onto it."""
        self._sheet.cell(row, col)  # bounds check
        self._selected_row = row
        self._selected_col = col
        self._collapse_range()
        self._formula_draft = self._draft_for(row, col)

    def update_selection_range(self, row: int, col: int) -> None:
        """Move the far corner of the range (e.g. while dragging a selection)."""
        self._sheet.cell(row, col)
        self._range_end_row = row
        self._range_end_col = col

    def move_selection(self, d_row: int, d_col: int) -> None:
        """Arrow-key navigation, clamped to the sheet."""
        if not self._sheet.n_rows or not self._sheet.n_cols:
            return
        self.select_cell(
            _clamp(self._selected_row + d_row, self._sheet.n_rows - 1),
            _clamp(self._selected_col + d_col, self._sheet.n_cols - 1),
        )

    def extend_selection(self, d_row: int, d_col: int) -> None:
        """Shift+arrow: grow or shrink the range from its far corner."""
        if not self._sheet.n_rows or not self._sheet.n_cols:
            return
        self._range_end_row = _clamp(self._range_end_row + d_row, self._sheet.n_rows - 1)
        self._range_end_col = _clamp(self._range_end_col + d_col, self._sheet.n_cols - 1)

    def select_row_start(self) -> None:
        self.select_cell(self._selected_row, 0)

    def select_row_end(self) -> None:
        self.select_cell(self._selected_row, self._sheet.n_cols - 1)

    def select_origin(self) -> None:
        self.select_cell(0, 0)

    # ------------------------------------------------------------------
    # Cell edits
    # ------------------------------------------------------------------

    def update_cell_value(self, row: int, col: int, text: str) -> bool:
        """Set one cell's text without touching history or recalculating.

        Text starting with ``=`` also becomes the cell's formula. Returns
        False (and changes nothing) when the cell already shows *text*.
        Callers that want an undo step push history first.
        """
        if self._sheet.cell(row, col).value == text:
            return False

        sheet = self._sheet.clone()
        cell = sheet.cell(row, col)
        cell.value = text
        cell.formula = text if text.startswith("=") else None
        self._sheet = sheet

        self._formula_draft = cell.display_text
        return True

    def recalculate(self) -> RecalcResult:
        """Re-evaluate every formula cell and publish the result."""
        result = self._engine.calculate(self._sheet)
        self._sheet = result.sheet
        if result.error_cells:
            logger.debug("Recalculated %d formula cells, %d errors",
                         result.total_formula_cells, result.error_cells)
        return result

    def begin_edit(self) -> None:
        """Enter in-cell editing (Enter, double click, or typing on a cell)."""
        if self._mode is Mode.EDITING:
            return
        self._require_idle("begin_edit")
        self._mode = Mode.EDITING

    def cancel_edit(self) -> None:
        if self._mode is Mode.EDITING:
            self._mode = Mode.IDLE

    def commit_cell_edit(self, row: int, col: int, text: str) -> None:
        """Commit an in-cell edit as one undo step and recalculate."""
        self._sheet.cell(row, col)
        self._push_history()
        self.update_cell_value(row, col, text)
        self.recalculate()
        self.cancel_edit()

    def clear_cell(self, row: int, col: int) -> None:
        """Delete key: empty the cell's text and formula."""
        self.commit_cell_edit(row, col, "")

    def set_formula_draft(self, text: str) -> None:
        """Typing in the formula bar; nothing is applied until :meth:`apply_formula`."""
        self._formula_draft = text

    def apply_formula(self) -> bool:
        """Write the formula-bar draft into the selected cell and recalculate.

        A draft starting with ``=`` sets the formula (its value is produced by
        the recalculation); anything else is a literal that clears the formula.
        Returns False, changing nothing, when the sheet has no cells.
        """
        if not self._anchor_in_bounds():
            return False
        text = self._formula_draft or ""
        self._push_history()

        sheet = self._sheet.clone()
        cell = sheet.cell(self._selected_row, self._selected_col)
        if text.startswith("="):
            cell.formula = text
        else:
            cell.value = text
            cell.formula = None
        self._sheet = sheet

        self.recalculate()
        return True

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def copy_cell(self) -> SingleClip:
        """Copy the anchor cell's formula (or value) as a single clip."""
        clip = SingleClip(self._draft_for(self._selected_row, self._selected_col))
        self._clipboard = clip
        return clip

    def paste_cell(self) -> bool:
        """Paste a single clip into the anchor cell. Range clips are rejected."""
        clip = self._clipboard
        if clip is None or clip.is_empty or not self._anchor_in_bounds():
            return False
        if not isinstance(clip, SingleClip):
            logger.debug("Cannot paste a multi-cell range with single-cell paste")
            return False

        self._push_history()
        self.update_cell_value(self._selected_row, self._selected_col, clip.text)
        self.recalculate()
        return True

    def copy_range(self) -> RangeClip:
        """Copy the normalized selection rectangle."""
        rng = self.selection_range
        rows = []
        for r in range(rng.r1, rng.r2 + 1):
            row = []
            for c in range(rng.c1, rng.c2 + 1):
                cell = self._sheet.get(r, c)
                row.append(cell.display_text if cell is not None else "")
            rows.append(row)
        clip = RangeClip.from_rows(rows)
        self._clipboard = clip
        return clip

    def paste_range(self) -> bool:
        """Paste a range clip with its top-left at the anchor.

        Targets beyond the sheet edge are skipped. The whole paste is one
        undo step followed by one recalculation.
        """
        clip = self._clipboard
        if not isinstance(clip, RangeClip) or clip.is_empty:
            logger.debug("Range paste ignored: clipboard holds %r", clip)
            return False
        if not self._anchor_in_bounds():
            return False

        self._push_history()
        for dr, row in enumerate(clip.rows):
            for dc, text in enumerate(row):
                target_row = self._selected_row + dr
                target_col = self._selected_col + dc
                if not self._sheet.in_bounds(target_row, target_col):
                    continue
                self.update_cell_value(target_row, target_col, text)
        self.recalculate()
        return True

    # ------------------------------------------------------------------
    # Drag fill
    # ------------------------------------------------------------------

    def start_fill(self, row: int, col: int) -> None:
        """Begin dragging the fill handle of ``(row, col)``."""
        self._require_idle("start_fill")
        self._sheet.cell(row, col)
        self._push_history()
        self._fill = FillGesture(row, col)
        self._mode = Mode.FILLING

    def update_fill(self, pointer_row: int) -> None:
        """Copy the origin's value down (or up) to *pointer_row* in the origin column."""
        if self._mode is not Mode.FILLING or self._fill is None:
            return
        fill = self._fill
        value = self._sheet.cell(fill.origin_row, fill.origin_col).value
        target = _clamp(pointer_row, self._sheet.n_rows - 1)
        for r in fill.rows_to(target):
            self.update_cell_value(r, fill.origin_col, value)

    def stop_fill(self) -> None:
        if self._mode is not Mode.FILLING:
            return
        self._fill = None
        self._mode = Mode.IDLE
        self.recalculate()

    # ------------------------------------------------------------------
    # Column / row resize
    # ------------------------------------------------------------------

    def start_column_resize(self, col: int) -> None:
        self._require_idle("start_column_resize")
        if not 0 <= col < len(self._column_widths):
            raise IndexError(f"Column {col} is outside the sheet")
        self._push_history()
        self._resize = ResizeGesture(col, self._column_widths[col], self._config.min_column_width)
        self._mode = Mode.RESIZING_COLUMN

    def update_column_resize(self, delta: int) -> None:
        """Pointer moved *delta* px horizontally since the drag started."""
        if self._mode is not Mode.RESIZING_COLUMN or self._resize is None:
            return
        widths = list(self._column_widths)
        widths[self._resize.index] = self._resize.size_for(delta)
        self._column_widths = widths

    def stop_column_resize(self) -> None:
        if self._mode is not Mode.RESIZING_COLUMN:
            return
        self._push_history()
        self._resize = None
        self._mode = Mode.IDLE

    def start_row_resize(self, row: int) -> None:
        self._require_idle("start_row_resize")
        if not 0 <= row < len(self._row_heights):
            raise IndexError(f"Row {row} is outside the sheet")
        self._push_history()
        self._resize = ResizeGesture(row, self._row_heights[row], self._config.min_row_height)
        self._mode = Mode.RESIZING_ROW

    def update_row_resize(self, delta: int) -> None:
        """Pointer moved *delta* px vertically since the drag started."""
        if self._mode is not Mode.RESIZING_ROW or self._resize is None:
            return
        heights = list(self._row_heights)
        heights[self._resize.index] = self._resize.size_for(delta)
        self._row_heights = heights

    def stop_row_resize(self) -> None:
        if self._mode is not Mode.RESIZING_ROW:
            return
        self._push_history()
        self._resize = None
        self._mode = Mode.IDLE

    # ------------------------------------------------------------------
    # Styles
    # ------------------------------------------------------------------

    def apply_style(self, key: str, value: Any = None) -> None:
        """Toolbar style intent on the anchor cell.

        ``bold``/``italic``/``underline`` flip; ``align``, ``color`` and
        ``bg_color`` take *value* as given.
        """
        if key not in STYLE_KEYS:
            raise ValueError(f"Unknown style key: {key!r}")
        current = self._sheet.cell(self._selected_row, self._selected_col)
        new_style = current.style.toggled(key, value)

        self._push_history()
        sheet = self._sheet.clone()
        sheet.cell(self._selected_row, self._selected_col).style = new_style
        self._sheet = sheet

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        snap = self._history.undo(self._snapshot())
        if snap is None:
            return False
        self._restore(snap)
        logger.info("Undo: restored selection %s", self.cell_address)
        return True

    def redo(self) -> bool:
        snap = self._history.redo(self._snapshot())
        if snap is None:
            return False
        self._restore(snap)
        logger.info("Redo: restored selection %s", self.cell_address)
        return True

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def export_csv(self) -> str:
        return encode(self._sheet)

    def import_csv(self, text: str) -> None:
        """Replace the sheet with parsed CSV as one undo step."""
        self._push_history()
        sheet = decode(text)
        self._sheet = sheet
        self._column_widths = [self._config.default_column_width] * sheet.n_cols
        self._row_heights = [self._config.default_row_height] * sheet.n_rows
        self.recalculate()

        self._selected_row = 0
        self._selected_col = 0
        self._collapse_range()
        self._formula_draft = self._draft_for(0, 0)
        logger.info("Imported CSV: %d rows x %d cols", sheet.n_rows, sheet.n_cols)

    def __repr__(self) -> str:
        return (
            f"<Spreadsheet {self._sheet.n_rows}x{self._sheet.n_cols} "
            f"at {self.cell_address} [{self._mode.value}]>"
        )
