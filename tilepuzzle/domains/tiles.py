from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

CONSTRAINED_PRICE = 1
FREE_PRICE = 30
UNLIMITED = -1


class CostClass(Enum):
    CONSTRAINED = "constrained"
    FREE = "free"


class Direction(Enum):
    """Direction the *tile* travels when it slides into the blank."""
    LEFT = "L"
    UP = "U"
    RIGHT = "R"
    DOWN = "D"

    @property
    def letter(self) -> str:
        return self.value

    @property
    def reverse(self) -> "Direction":
        return _REVERSE[self]

    @property
    def source_offset(self) -> Tuple[int, int]:
        """Offset from the blank to the tile that moves in this direction."""
        return _SOURCE[self]


_REVERSE = {
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
}

# LEFT pulls the tile right of the blank, UP the tile below it, and so on.
_SOURCE = {
    Direction.LEFT: (0, 1),
    Direction.UP: (1, 0),
    Direction.RIGHT: (0, -1),
    Direction.DOWN: (-1, 0),
}

# Fixed expansion order shared by every strategy.
DIRECTIONS: Tuple[Direction, ...] = (Direction.LEFT, Direction.UP, Direction.RIGHT, Direction.DOWN)


@dataclass(frozen=True)
class Tile:
    value: int
    cost_class: CostClass = CostClass.FREE
    move_price: int = FREE_PRICE
    move_budget: int = UNLIMITED

    @classmethod
    def constrained(cls, value: int, budget: int, price: int = CONSTRAINED_PRICE) -> Tile:
        return cls(value, CostClass.CONSTRAINED, price, budget)

    @classmethod
    def free(cls, value: int, price: int = FREE_PRICE) -> Tile:
        return cls(value, CostClass.FREE, price, UNLIMITED)

    @property
    def is_blank(self) -> bool:
        return self.value == 0

    @property
    def is_constrained(self) -> bool:
        return self.cost_class is CostClass.CONSTRAINED

    def can_move(self) -> bool:
        return not self.is_constrained or self.move_budget > 0

    def after_move(self) -> Tile:
        """Copy of this tile with one move consumed (Free tiles are unchanged)."""
        if not self.is_constrained:
            return self
        return replace(self, move_budget=self.move_budget - 1)

    def __str__(self) -> str:
        return "_" if self.is_blank else str(self.value)
