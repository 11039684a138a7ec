"""sheetcore - headless in-memory spreadsheet engine.

Usage::

    from sheetcore import Spreadsheet

    ss = Spreadsheet(rows=3, cols=3)
    ss.commit_cell_edit(0, 0, "1")
    ss.commit_cell_edit(1, 0, "2")
    ss.commit_cell_edit(0, 1, "=SUM(A1:A2)")
    print(ss.sheet["B1"].value)  # "3"

    ss.undo()
    csv_text = ss.export_csv()
"""

from sheetcore._cell import Cell
from sheetcore._clipboard import Clip, RangeClip, SingleClip
from sheetcore._config import DEFAULT_CONFIG, SheetConfig
from sheetcore._csv import decode, encode
from sheetcore._gestures import Mode
from sheetcore._history import HistoryManager, Snapshot
from sheetcore._sheet import Sheet
from sheetcore._spreadsheet import CellRange, Spreadsheet
from sheetcore._styles import CellStyle
from sheetcore._utils import a1_to_rowcol, column_index, column_letter, rowcol_to_a1
from sheetcore.calc import ERROR_MARKER, FormulaEngine, evaluate

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Cell",
    "CellRange",
    "CellStyle",
    "Clip",
    "DEFAULT_CONFIG",
    "ERROR_MARKER",
    "FormulaEngine",
    "HistoryManager",
    "Mode",
    "RangeClip",
    "Sheet",
    "SheetConfig",
    "SingleClip",
    "Snapshot",
    "Spreadsheet",
    "a1_to_rowcol",
    "column_index",
    "column_letter",
    "decode",
    "encode",
    "evaluate",
    "rowcol_to_a1",
]
