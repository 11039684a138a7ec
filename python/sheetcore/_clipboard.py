"""Clipboard contents: one cell's text or a rectangle of texts, never both."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class SingleClip:
    """Text copied from a single cell."""

    text: str

    @property
    def is_empty(self) -> bool:
        return not self.text


@dataclass(frozen=True)
class RangeClip:
    """Rectangular block of texts copied from a selection range."""

    rows: tuple[tuple[str, ...], ...]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str]]) -> RangeClip:
        return cls(tuple(tuple(row) for row in rows))

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self.rows), len(self.rows[0]) if self.rows else 0)

    @property
    def is_empty(self) -> bool:
        return not self.rows


Clip = Union[SingleClip, RangeClip]
