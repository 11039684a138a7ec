"""Cell style record."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

BOOLEAN_KEYS = frozenset({"bold", "italic", "underline"})
COLOR_KEYS = frozenset({"bg_color", "color"})
STYLE_KEYS = BOOLEAN_KEYS | COLOR_KEYS | {"align"}
ALIGNMENTS = ("left", "center", "right")


@dataclass
class CellStyle:
    """Optional formatting flags. ``None`` means "use default rendering"."""

    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    bg_color: str | None = None
    color: str | None = None
    align: str | None = None

    def __post_init__(self) -> None:
        if self.align is not None and self.align not in ALIGNMENTS:
            raise ValueError(
                f"align must be one of {ALIGNMENTS}, got {self.align!r}"
            )

    def copy(self) -> CellStyle:
        return replace(self)

    def toggled(self, key: str, value: Any = None) -> CellStyle:
        """Return a new style with *key* changed.

        Boolean keys flip; ``align`` and colour keys take *value* literally.
        """
        if key not in STYLE_KEYS:
            raise ValueError(f"Unknown style key: {key!r}")
        if key in BOOLEAN_KEYS:
            return replace(self, **{key: not getattr(self, key)})
        return replace(self, **{key: value})

    @property
    def is_default(self) -> bool:
        return self == CellStyle()
