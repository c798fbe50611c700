"""Exception hierarchy for board propagation and solving."""

from __future__ import annotations
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .location import Location


class NumberlinkError(Exception):
    """Base exception for the numberlink package."""


class InvalidMove(NumberlinkError):
    """
    Raised when a move or a propagation step produces an illegal board.

    The search expects these routinely and discards the offending branch.
    Raised from the initial propagation of a freshly loaded puzzle, it means
    the puzzle itself is malformed.
    """

    def __init__(self, message: str, location: Optional[Location] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    @property
    def coordinate(self):
        """Coordinate of the offending cell, if known."""
        return self.location.coordinate if self.location is not None else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, location={self.location!r})"


class ColorConflict(InvalidMove):
    """Two connected cells resolved to different colors."""


class Overconstrained(InvalidMove):
    """A cell has fewer legal directions left than connections it still needs."""


class PuzzleFormatError(NumberlinkError, ValueError):
    """Raised when a puzzle file or string grid cannot be parsed."""


class SolverInvariantError(NumberlinkError):
    """Raised when every candidate combination of a cell was eliminated."""
