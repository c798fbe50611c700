"""Puzzle loading and color lookup."""

from .colors import ColorRegistry
from .puzzle_loader import (
    grid_from_strings,
    load_json,
    read_archive,
    load_archive,
    load_board,
    boards_from_rows,
)

__all__ = [
    "ColorRegistry",
    "grid_from_strings",
    "load_json",
    "read_archive",
    "load_archive",
    "load_board",
    "boards_from_rows",
]
