"""Grid coordinates and the four canonical directions."""

from __future__ import annotations
from typing import NamedTuple, Tuple


class Coordinate(NamedTuple):
    """
    An immutable (row, col) position or direction vector.

    Rows grow downward and columns grow to the right, so UP is (-1, 0).
    """

    row: int
    col: int

    def __add__(self, other: Tuple[int, int]) -> Coordinate:  # type: ignore[override]
        return Coordinate(self.row + other[0], self.col + other[1])

    def __sub__(self, other: Tuple[int, int]) -> Coordinate:
        return Coordinate(self.row - other[0], self.col - other[1])

    def in_bounds(self, height: int, width: int) -> bool:
        """Check whether this coordinate lies on a height x width grid."""
        return 0 <= self.row < height and 0 <= self.col < width

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"

    def __repr__(self) -> str:
        return f"Coordinate({self.row}, {self.col})"


UP = Coordinate(-1, 0)
DOWN = Coordinate(1, 0)
LEFT = Coordinate(0, -1)
RIGHT = Coordinate(0, 1)

# Index order is fixed: connection flags are stored in this order everywhere.
DIRECTIONS: Tuple[Coordinate, ...] = (UP, DOWN, LEFT, RIGHT)

DIRECTION_NAMES = {UP: "UP", DOWN: "DOWN", LEFT: "LEFT", RIGHT: "RIGHT"}

_INDEX = {direction: i for i, direction in enumerate(DIRECTIONS)}
_OPPOSITE_INDEX = (1, 0, 3, 2)
_LEFT_TURN = {UP: LEFT, DOWN: RIGHT, LEFT: DOWN, RIGHT: UP}
_RIGHT_TURN = {UP: RIGHT, DOWN: LEFT, LEFT: UP, RIGHT: DOWN}


def to_index(direction: Coordinate) -> int:
    """Return the connection-flag index of a unit direction."""
    try:
        return _INDEX[direction]
    except KeyError:
        raise ValueError(f"Not a unit direction: {direction}") from None


def opposite_index(index: int) -> int:
    """Index of the direction pointing the other way."""
    if not 0 <= index < 4:
        raise ValueError(f"Direction index must be 0-3, got {index}")
    return _OPPOSITE_INDEX[index]


def opposite(direction: Coordinate) -> Coordinate:
    """Direction pointing the other way."""
    return DIRECTIONS[opposite_index(to_index(direction))]


def left_turn(direction: Coordinate) -> Coordinate:
    """Rotate a direction 90 degrees counter-clockwise."""
    try:
        return _LEFT_TURN[direction]
    except KeyError:
        raise ValueError(f"Not a unit direction: {direction}") from None


def right_turn(direction: Coordinate) -> Coordinate:
    """Rotate a direction 90 degrees clockwise."""
    try:
        return _RIGHT_TURN[direction]
    except KeyError:
        raise ValueError(f"Not a unit direction: {direction}") from None


def manhattan(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    """Manhattan distance between two positions."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
