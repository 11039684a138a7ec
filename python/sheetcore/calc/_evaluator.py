"""FormulaEngine: evaluates cell formulas and runs the recalculation pass.

Two formula shapes are understood:

* aggregates, ``=SUM(A1:B10)`` / ``AVG`` / ``MIN`` / ``MAX`` over one range;
* arithmetic, ``=A1*(B2+3)/2``, where every cell token is replaced by the
  numeric text of the referenced cell and the result is evaluated by a small
  recursive descent evaluator (``+ - * /``, unary signs, parentheses).
  Unary signs chain, so ``=A1-B1`` with ``B1 = "-3"`` reads as ``A1--3``
  and subtracts a negative number rather than failing to parse.

There is no dependency graph: :meth:`FormulaEngine.calculate` visits formula
cells in row-major order, so a formula sees the already-recomputed values of
cells above and to the left of it and the stale values of cells after it.
"""

from __future__ import annotations

import logging
import math
import re

from sheetcore._sheet import Sheet
from sheetcore._utils import format_number
from sheetcore.calc._functions import FunctionRegistry, resolve_range_array
from sheetcore.calc._parser import CELL_REF_RE, cell_operand, extract_group, split_range
from sheetcore.calc._protocol import CellDelta, RecalcResult

logger = logging.getLogger(__name__)

ERROR_MARKER = "#ERROR"


class FormulaError(ValueError):
    """An arithmetic expression could not be evaluated to a finite number."""


# ---------------------------------------------------------------------------
# Expression parsing helpers
# ---------------------------------------------------------------------------

_NUMBER_RE = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _find_matching_paren(expr: str, start: int) -> int:
    """Index of the ``')'`` matching the ``'('`` at *expr[start]*, or -1."""
    depth = 1
    for i in range(start + 1, len(expr)):
        ch = expr[i]
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
            if depth == 0:
                return i
    return -1


def _find_top_level_split(expr: str) -> tuple[str, str, str] | None:
    """Find the rightmost lowest-precedence binary operator at paren depth 0.

    Precedence (lowest to highest)::

        1. additive       (+, -)
        2. multiplicative (*, /)

    Right-to-left scan produces left-to-right associativity.
    Returns ``(left, op, right)`` or ``None``.
    """
    for ops in ("+-", "*/"):
        depth = 0
        i = len(expr) - 1
        while i > 0:
            ch = expr[i]
            # Parentheses are inverted for a right-to-left scan
            if ch == ')':
                depth += 1
            elif ch == '(':
                depth -= 1
            elif depth == 0 and ch in ops:
                j = i - 1
                while j >= 0 and expr[j] == ' ':
                    j -= 1
                # Unary sign: nothing or another operator before it
                if j < 0 or expr[j] in '(+-*/':
                    i -= 1
                    continue
                # Exponent sign in a literal like 2.5e-1
                if ch in '+-' and expr[j] in 'eE' and j >= 1 and expr[j - 1].isdigit():
                    i -= 1
                    continue
                left = expr[:i].strip()
                right = expr[i + 1:].strip()
                if left and right:
                    return (left, ch, right)
            i -= 1
    return None


def _binary_op(left: float, op: str, right: float) -> float:
    if op == '+':
        return left + right
    if op == '-':
        return left - right
    if op == '*':
        return left * right
    if right == 0:
        raise FormulaError("division by zero")
    return left / right


def _eval_expr(expr: str) -> float:
    """Recursively evaluate a purely numeric expression.

    Dispatch order (first match wins):

    1. Binary split at top level (paren-aware, precedence-correct)
    2. Parenthesized sub-expression ``(...)``
    3. Unary minus / plus
    4. Numeric literal
    """
    expr = expr.strip()
    if not expr:
        raise FormulaError("empty expression")

    split = _find_top_level_split(expr)
    if split:
        left, op, right = split
        return _binary_op(_eval_expr(left), op, _eval_expr(right))

    if expr.startswith('('):
        close = _find_matching_paren(expr, 0)
        if close == len(expr) - 1:
            return _eval_expr(expr[1:close])

    if expr.startswith('-'):
        return -_eval_expr(expr[1:])
    if expr.startswith('+'):
        return _eval_expr(expr[1:])

    if _NUMBER_RE.fullmatch(expr):
        # Preserve int for plain integer literals
        if expr.isdigit():
            return int(expr)
        return float(expr)

    raise FormulaError(f"cannot parse {expr!r}")


def _to_text(result: str | int | float | None) -> str:
    """Stringify an evaluation result for storage in ``Cell.value``."""
    if result is None:
        return ERROR_MARKER
    if isinstance(result, str):
        return result
    return format_number(result)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class FormulaEngine:
    """Evaluates formulas against a :class:`~sheetcore.Sheet` snapshot.

    Usage::

        engine = FormulaEngine()
        engine.evaluate("=SUM(A1:A3)", sheet)   # -> 6.0
        result = engine.calculate(sheet)         # recalculated clone
        sheet = result.sheet

    The engine never mutates the sheet it is given.
    """

    def __init__(self, functions: FunctionRegistry | None = None) -> None:
        self._functions = functions if functions is not None else FunctionRegistry()

    @property
    def functions(self) -> FunctionRegistry:
        return self._functions

    def evaluate(self, formula: str, sheet: Sheet) -> str | int | float:
        """Evaluate *formula* against *sheet*.

        Text that does not start with ``=`` is a literal and comes back
        unchanged. Arithmetic failures yield :data:`ERROR_MARKER`.
        """
        if not formula.startswith('='):
            return formula

        expr = formula[1:].strip()
        upper = expr.upper()

        name = self._functions.match_prefix(upper)
        if name is not None:
            return self._aggregate(name, upper, sheet)
        return self._calculate_expression(expr, sheet)

    def calculate(self, sheet: Sheet) -> RecalcResult:
        """Run one recalculation pass over a clone of *sheet*.

        Formula cells are evaluated in row-major order against the clone
        itself, and each result is written back before the next cell runs.
        """
        result = sheet.clone()
        deltas: list[CellDelta] = []
        total = 0
        errors = 0

        for row, col, cell in result.iter_cells():
            if not cell.formula:
                continue
            total += 1
            old_value = cell.value
            try:
                new_value = _to_text(self.evaluate(cell.formula, result))
            except Exception:  # noqa: BLE001
                logger.debug(
                    "Error evaluating %r at (%d, %d)", cell.formula, row, col,
                    exc_info=True,
                )
                new_value = ERROR_MARKER
            cell.value = new_value
            if new_value == ERROR_MARKER:
                errors += 1
            if new_value != old_value:
                deltas.append(CellDelta(
                    row=row,
                    col=col,
                    old_value=old_value,
                    new_value=new_value,
                    formula=cell.formula,
                ))

        return RecalcResult(
            sheet=result,
            deltas=tuple(deltas),
            total_formula_cells=total,
            error_cells=errors,
        )

    # ------------------------------------------------------------------
    # Formula shapes
    # ------------------------------------------------------------------

    def _aggregate(self, name: str, expr: str, sheet: Sheet) -> float | str:
        group = extract_group(expr)
        if group is None:
            return 0
        bounds = split_range(group)
        if bounds is None:
            logger.debug("%s argument is not a range: %r", name, group)
            return ERROR_MARKER
        values, area = resolve_range_array(sheet, *bounds)
        return self._functions.aggregate(name, values, area)

    def _calculate_expression(self, expr: str, sheet: Sheet) -> int | float | str:
        replaced = CELL_REF_RE.sub(lambda m: cell_operand(sheet, m.group(0)), expr)
        try:
            result = _eval_expr(replaced)
            if not math.isfinite(result):
                raise FormulaError(f"non-finite result {result!r}")
        except (FormulaError, OverflowError, RecursionError) as e:
            logger.debug("Cannot evaluate formula %r (as %r): %s", expr, replaced, e)
            return ERROR_MARKER
        return result


_default_engine = FormulaEngine()


def evaluate(formula: str, sheet: Sheet) -> str | int | float:
    """Evaluate *formula* against *sheet* with the default engine."""
    return _default_engine.evaluate(formula, sheet)
