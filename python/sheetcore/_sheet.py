"""Sheet: a rectangular grid of cells with value semantics."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from sheetcore._cell import Cell
from sheetcore._utils import a1_to_rowcol


class Sheet:
    """Rectangular, zero-indexed grid of :class:`Cell`.

    Every row has the same length for the lifetime of the instance. The
    sheet exclusively owns the cells reachable from it; :meth:`clone` hands
    out a fully independent copy.
    """

    __slots__ = ("_rows", "_n_cols")

    def __init__(self, rows: list[list[Cell]] | None = None) -> None:
        rows = rows if rows is not None else []
        widths = {len(row) for row in rows}
        if len(widths) > 1:
            raise ValueError(f"Sheet rows must all have the same length, got {sorted(widths)}")
        self._rows: list[list[Cell]] = rows
        self._n_cols: int = widths.pop() if widths else 0

    @classmethod
    def blank(cls, rows: int, cols: int) -> Sheet:
        """Create a ``rows x cols`` sheet of empty cells."""
        if rows < 0 or cols < 0:
            raise ValueError("Sheet dimensions must be non-negative")
        sheet = cls([[Cell() for _ in range(cols)] for _ in range(rows)])
        # A sheet with no rows still remembers its width.
        sheet._n_cols = cols
        return sheet

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[Cell | str]]) -> Sheet:
        """Build a sheet from cells or raw text (``=``-prefixed text becomes a formula)."""
        grid: list[list[Cell]] = []
        for row in rows:
            grid.append([
                item.clone() if isinstance(item, Cell) else Cell.from_text(item)
                for item in row
            ])
        return cls(grid)

    # ------------------------------------------------------------------
    # Shape and access
    # ------------------------------------------------------------------

    @property
    def n_rows(self) -> int:
        return len(self._rows)

    @property
    def n_cols(self) -> int:
        return self._n_cols

    @property
    def shape(self) -> tuple[int, int]:
        return (self.n_rows, self.n_cols)

    def in_bounds(self, row: int | None, col: int | None) -> bool:
        if row is None or col is None:
            return False
        return 0 <= row < self.n_rows and 0 <= col < self._n_cols

    def get(self, row: int | None, col: int | None) -> Cell | None:
        """Cell at ``(row, col)``, or None when out of bounds (never wraps)."""
        if not self.in_bounds(row, col):
            return None
        return self._rows[row][col]  # type: ignore[index]

    def cell(self, row: int, col: int) -> Cell:
        """Strict access: raises IndexError when out of bounds."""
        found = self.get(row, col)
        if found is None:
            raise IndexError(f"Cell ({row}, {col}) is outside a {self.n_rows}x{self.n_cols} sheet")
        return found

    def __getitem__(self, key: str) -> Cell:
        """``sheet['A1']`` -> Cell."""
        row, col = a1_to_rowcol(key)
        return self.cell(row, col)

    def iter_rows(self) -> Iterator[list[Cell]]:
        yield from self._rows

    def iter_cells(self) -> Iterator[tuple[int, int, Cell]]:
        """Yield ``(row, col, cell)`` in row-major order."""
        for r, row in enumerate(self._rows):
            for c, cell in enumerate(row):
                yield r, c, cell

    def values(self) -> list[list[str]]:
        """Matrix of displayed values."""
        return [[cell.value for cell in row] for row in self._rows]

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def clone(self) -> Sheet:
        """Deep copy: no cell or style object is shared with the source."""
        copy = Sheet([[cell.clone() for cell in row] for row in self._rows])
        copy._n_cols = self._n_cols
        return copy

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sheet):
            return NotImplemented
        return self.shape == other.shape and self._rows == other._rows

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"<Sheet {self.n_rows}x{self.n_cols}>"
