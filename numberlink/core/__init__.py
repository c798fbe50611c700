"""Core module for Numberlink board representation and propagation."""

from .coordinate import Coordinate, UP, DOWN, LEFT, RIGHT, DIRECTIONS
from .exceptions import (
    NumberlinkError,
    InvalidMove,
    ColorConflict,
    Overconstrained,
    PuzzleFormatError,
    SolverInvariantError,
)
from .location import Location
from .move import Move
from .board import NumberlinkBoard, MoveOutcome
from .validator import check_invariants, validate_solution

__all__ = [
    "Coordinate",
    "UP",
    "DOWN",
    "LEFT",
    "RIGHT",
    "DIRECTIONS",
    "NumberlinkError",
    "InvalidMove",
    "ColorConflict",
    "Overconstrained",
    "PuzzleFormatError",
    "SolverInvariantError",
    "Location",
    "Move",
    "NumberlinkBoard",
    "MoveOutcome",
    "check_invariants",
    "validate_solution",
]
