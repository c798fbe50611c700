"""A single candidate edge between two adjacent cells."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List

from .coordinate import Coordinate, DIRECTION_NAMES

if TYPE_CHECKING:
    from .board import NumberlinkBoard


def evaluate_move(start: Coordinate, direction: Coordinate, board: NumberlinkBoard) -> int:
    """
    Score a move for ordering.

    Not implemented yet: every move scores 0, so ordering falls back to
    enumeration order.
    """
    return 0


@dataclass(frozen=True)
class Move:
    """Connect `start` to the neighbor at `start + direction`."""

    start: Coordinate
    direction: Coordinate
    score: int = field(default=0, compare=False)

    @classmethod
    def scored(cls, start: Coordinate, direction: Coordinate, board: NumberlinkBoard) -> Move:
        """Create a move with its heuristic score filled in."""
        return cls(start, direction, evaluate_move(start, direction, board))

    @property
    def end(self) -> Coordinate:
        return self.start + self.direction

    def __str__(self) -> str:
        name = DIRECTION_NAMES.get(self.direction, str(self.direction))
        return f"Move(start={self.start}, direction={name}, score={self.score})"


def order_moves(moves: Iterable[Move]) -> List[Move]:
    """Highest score first; equal scores keep their original order."""
    return sorted(moves, key=lambda move: -move.score)
