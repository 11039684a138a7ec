"""sheetcore.calc - Formula evaluation for sheetcore sheets."""

from sheetcore.calc._evaluator import ERROR_MARKER, FormulaEngine, FormulaError, evaluate
from sheetcore.calc._functions import FunctionRegistry, resolve_range_array
from sheetcore.calc._parser import resolve_address
from sheetcore.calc._protocol import CellDelta, Evaluator, RecalcResult

__all__ = [
    "CellDelta",
    "ERROR_MARKER",
    "Evaluator",
    "FormulaEngine",
    "FormulaError",
    "FunctionRegistry",
    "RecalcResult",
    "evaluate",
    "resolve_address",
    "resolve_range_array",
]
