"""Aggregate functions over rectangular cell ranges."""

from __future__ import annotations

from typing import Callable

import numpy as np

from sheetcore._sheet import Sheet
from sheetcore.calc._parser import cell_number, resolve_address

# An aggregate reduces the in-sheet values of a range. The second argument
# is the cell count of the whole rectangle; cells outside the sheet read as
# 0 and are not materialized.
Aggregate = Callable[[np.ndarray, int], float]

# ---------------------------------------------------------------------------
# Range resolution
# ---------------------------------------------------------------------------


def resolve_range_array(sheet: Sheet, start: str, end: str) -> tuple[np.ndarray, int]:
    """Resolve ``start:end`` to ``(values, area)``.

    ``values`` is a 2-D float array over the part of the inclusive rectangle
    that lies inside *sheet*; ``area`` counts every cell of the rectangle,
    in or out of bounds. Endpoints may be given in either order. A
    malformed endpoint (no row number) gives an empty array and area 0.
    """
    r1, c1 = resolve_address(start)
    r2, c2 = resolve_address(end)
    if r1 is None or r2 is None:
        return np.zeros((0, 0)), 0

    r_min, r_max = min(r1, r2), max(r1, r2)
    c_min, c_max = min(c1, c2), max(c1, c2)
    area = (r_max - r_min + 1) * (c_max - c_min + 1)

    # Clip to the sheet
    r_lo, r_hi = max(r_min, 0), min(r_max, sheet.n_rows - 1)
    c_lo, c_hi = max(c_min, 0), min(c_max, sheet.n_cols - 1)
    if r_lo > r_hi or c_lo > c_hi:
        return np.zeros((0, 0)), area

    values = np.zeros((r_hi - r_lo + 1, c_hi - c_lo + 1))
    for i, r in enumerate(range(r_lo, r_hi + 1)):
        for j, c in enumerate(range(c_lo, c_hi + 1)):
            values[i, j] = cell_number(sheet, r, c)
    return values, area


# ---------------------------------------------------------------------------
# Builtin aggregates
# ---------------------------------------------------------------------------


def _with_outside_zero(values: np.ndarray, area: int) -> np.ndarray:
    """Flattened *values*, plus one 0 when part of the range is off-sheet."""
    flat = values.ravel()
    if area > flat.size:
        flat = np.append(flat, 0.0)
    return flat


def _builtin_sum(values: np.ndarray, area: int) -> float:
    return float(np.sum(values))


def _builtin_avg(values: np.ndarray, area: int) -> float:
    return float(np.sum(values)) / area


def _builtin_min(values: np.ndarray, area: int) -> float:
    return float(np.min(_with_outside_zero(values, area)))


def _builtin_max(values: np.ndarray, area: int) -> float:
    return float(np.max(_with_outside_zero(values, area)))


_BUILTINS: dict[str, Aggregate] = {
    "SUM": _builtin_sum,
    "AVG": _builtin_avg,
    "MIN": _builtin_min,
    "MAX": _builtin_max,
}


class FunctionRegistry:
    """Registry of aggregate implementations keyed by upper-case name.

    Lookup is by prefix of the formula body, in registration order, so a
    body like ``SUM(A1:A3)`` (or ``SUMMARY(...)``) dispatches to ``SUM``.
    """

    def __init__(self) -> None:
        self._functions: dict[str, Aggregate] = dict(_BUILTINS)

    def register(self, name: str, func: Aggregate) -> None:
        self._functions[name.upper()] = func

    def get(self, name: str) -> Aggregate | None:
        return self._functions.get(name.upper())

    def match_prefix(self, expr: str) -> str | None:
        """Name of the first registered function *expr* starts with, or None."""
        upper = expr.upper()
        for name in self._functions:
            if upper.startswith(name):
                return name
        return None

    def aggregate(self, name: str, values: np.ndarray, area: int | None = None) -> float:
        """Reduce *values* with *name*; an empty range aggregates to 0.

        *area* defaults to ``values.size`` (a range fully inside the sheet).
        """
        if area is None:
            area = int(values.size)
        if area == 0:
            return 0.0
        func = self._functions[name.upper()]
        return func(values, area)

    @property
    def supported_functions(self) -> frozenset[str]:
        return frozenset(self._functions.keys())
