"""
Slot addressing for binders.

A binder is an unbounded sequence of card-sized cells addressed by a
zero-based integer. The layout only decides how those cells are cut
into pages; it never limits how many slots exist.
"""

from dataclasses import dataclass
from enum import Enum


class BinderLayout(str, Enum):
    """Page grid of a binder (columns x rows)."""

    GRID_2X2 = "GRID_2x2"
    GRID_3X3 = "GRID_3x3"
    GRID_4X3 = "GRID_4x3"

    @property
    def columns(self) -> int:
        return _GRID_DIMENSIONS[self][0]

    @property
    def rows(self) -> int:
        return _GRID_DIMENSIONS[self][1]

    @property
    def slots_per_page(self) -> int:
        return self.columns * self.rows


_GRID_DIMENSIONS: dict[BinderLayout, tuple[int, int]] = {
    BinderLayout.GRID_2X2: (2, 2),
    BinderLayout.GRID_3X3: (3, 3),
    BinderLayout.GRID_4X3: (4, 3),
}

DEFAULT_LAYOUT = BinderLayout.GRID_3X3


@dataclass(frozen=True, slots=True, order=True)
class SlotIndex:
    """
    A committed position within one binder.

    Attributes:
        value: Zero-based slot number (never negative)
    """

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; a slot of True is always a caller bug
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Slot index must be an int, got {type(self.value).__name__}")
        if self.value < 0:
            raise ValueError(f"Slot index must be non-negative, got {self.value}")

    def __int__(self) -> int:
        return self.value
