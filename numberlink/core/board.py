"""Numberlink board representation: the cell grid and its update queue."""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np

from .coordinate import Coordinate, DIRECTIONS, DOWN, RIGHT, to_index
from .exceptions import ColorConflict, InvalidMove, Overconstrained, PuzzleFormatError
from .location import Location
from .move import Move, order_moves


def grid_from_strings(rows: Sequence[str]) -> List[List[Location]]:
    """
    Parse text rows into a grid of locations.

    Raises:
        PuzzleFormatError: On empty input, ragged rows or unknown characters.
    """
    rows = [row.rstrip("\r\n") for row in rows]
    if not rows or not rows[0]:
        raise PuzzleFormatError("Board rows must not be empty")
    width = len(rows[0])

    grid = []
    for r, text in enumerate(rows):
        if len(text) != width:
            raise PuzzleFormatError(f"Row {r} has length {len(text)}, expected {width}")
        row = []
        for c, char in enumerate(text):
            if char == ".":
                row.append(Location((r, c)))
            elif "A" <= char <= "Z":
                row.append(Location((r, c), ord(char) - ord("A"), is_start=True))
            else:
                raise PuzzleFormatError(f"Unexpected character {char!r} at ({r}, {c})")
        grid.append(row)
    return grid


@dataclass
class MoveOutcome:
    """Result of simulating moves on a copy of a board: either a board or an error."""

    board: Optional[NumberlinkBoard] = None
    error: Optional[InvalidMove] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NumberlinkBoard:
    """
    A rectangular Numberlink board.

    Locations live in a flat list indexed by ``row * width + col``. Pending
    updates sit in a deduplicated FIFO queue; the order in which locations
    are checked does not change the result of propagation.
    """

    def __init__(self, grid: Sequence[Sequence[Location]]):
        """
        Build a board from a rectangular grid of locations.

        Args:
            grid: Rows of locations. The board takes ownership of them.
        """
        if not grid or not grid[0]:
            raise ValueError("Board grid must not be empty")

        width = len(grid[0])
        for row in grid:
            if len(row) != width:
                raise ValueError(f"Board grid must be rectangular, got row lengths "
                                 f"{[len(r) for r in grid]}")

        self.height = len(grid)
        self.width = width
        self._cells: List[Location] = []
        for r, row in enumerate(grid):
            for c, loc in enumerate(row):
                if loc.coordinate != (r, c):
                    raise ValueError(f"Location {loc.coordinate} placed at ({r}, {c})")
                self._cells.append(loc)

        self._pending: Deque[Coordinate] = deque()
        self._scheduled: Set[Coordinate] = set()
        self.moves: List[Move] = []

    @classmethod
    def from_strings(cls, rows: Sequence[str]) -> NumberlinkBoard:
        """
        Create a board from text rows and schedule every location.

        '.' is a blank square and 'A'..'Z' are endpoints with color index
        ``letter - 'A'``.
        """
        board = cls(grid_from_strings(rows))
        board.schedule_all()
        return board

    def copy(self) -> NumberlinkBoard:
        """Create a deep copy of the board, including its pending updates."""
        new_board = NumberlinkBoard.__new__(NumberlinkBoard)
        new_board.height = self.height
        new_board.width = self.width
        new_board._cells = [loc.copy() for loc in self._cells]
        new_board._pending = deque(self._pending)
        new_board._scheduled = set(self._scheduled)
        new_board.moves = []
        return new_board

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def in_bounds(self, coordinate: Tuple[int, int]) -> bool:
        return 0 <= coordinate[0] < self.height and 0 <= coordinate[1] < self.width

    def location(self, coordinate: Tuple[int, int]) -> Location:
        """Get the location at a coordinate."""
        row, col = coordinate
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise ValueError(f"Coordinate {coordinate} is outside a {self.height}x{self.width} board")
        return self._cells[row * self.width + col]

    def get_location(self, row: int, col: int) -> Location:
        """Get the location at (row, col)."""
        return self.location((row, col))

    def locations(self) -> Iterator[Location]:
        """All locations in row-major order."""
        return iter(self._cells)

    def rows(self) -> Iterator[List[Location]]:
        for r in range(self.height):
            yield self._cells[r * self.width:(r + 1) * self.width]

    # ------------------------------------------------------------------
    # Update queue
    # ------------------------------------------------------------------

    def schedule_update(self, location: Location) -> None:
        """Queue a location for checking unless it is already queued."""
        coordinate = location.coordinate
        if coordinate not in self._scheduled:
            self._scheduled.add(coordinate)
            self._pending.append(coordinate)

    def schedule_all(self) -> None:
        for loc in self._cells:
            self.schedule_update(loc)

    def clear_scheduled(self) -> None:
        self._pending.clear()
        self._scheduled.clear()

    def pending_updates(self) -> List[Coordinate]:
        """Coordinates waiting to be checked, in queue order."""
        return list(self._pending)

    def update_all(self) -> None:
        """
        Check scheduled locations until nothing is left to check.

        Raises:
            InvalidMove: If propagation reaches a contradiction. The board is
                left half-updated and should be discarded.
        """
        while self._pending:
            coordinate = self._pending.popleft()
            self._scheduled.discard(coordinate)
            self.location(coordinate).check_connections(self)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def apply_move(self, move: Move) -> None:
        """
        Make the connection described by `move`, then propagate.

        A move whose edge already exists only triggers propagation.

        Raises:
            ColorConflict: If the move joins two different colors.
            Overconstrained: If the move is blocked for any other reason, or
                propagation runs out of room somewhere.
        """
        if move.direction not in DIRECTIONS or not self.in_bounds(move.start):
            raise Overconstrained(f"{move} is not a move on this board")
        start = self.location(move.start)

        if not start.connections[to_index(move.direction)]:
            if start.remaining_connections() <= 0:
                raise Overconstrained(f"Location {start.coordinate} is already full", start)
            if start.is_blocking_connection(move.direction, self):
                end = move.end
                if (self.in_bounds(end) and start.color is not None
                        and self.location(end).color not in (None, start.color)):
                    raise ColorConflict(f"{move} joins two different colors", start)
                raise Overconstrained(f"{move} is blocked", start)
            start.connect_to(move.direction, self)

        start.dirty = True  # It has not been through check_connections yet
        self.schedule_update(start)
        if self.in_bounds(move.end):
            self.schedule_update(self.location(move.end))
        self.update_all()

    def apply_moves(self, moves: Iterable[Move]) -> None:
        for move in moves:
            self.apply_move(move)

    def simulate(self, moves: Iterable[Move]) -> MoveOutcome:
        """Apply moves to a copy of the board and report the outcome without raising."""
        board = self.copy()
        try:
            board.apply_moves(moves)
        except InvalidMove as e:
            return MoveOutcome(error=e)
        return MoveOutcome(board=board)

    def get_moves(self) -> List[Move]:
        """One move per open location and unblocked direction."""
        moves = []
        for loc in self._cells:
            if loc.remaining_connections() <= 0:
                continue
            moves.extend(loc.get_valid_moves(self))
        return moves

    def update_moves(self) -> List[Move]:
        """Refresh the score-ordered move list from the current state."""
        self.moves = order_moves(self.get_moves())
        return self.moves

    def get_open_locations(self) -> List[Location]:
        """Locations that still need at least one connection."""
        return [loc for loc in self._cells if loc.remaining_connections() > 0]

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def is_solved(self) -> bool:
        """Every location is fully connected and colored."""
        return all(
            loc.remaining_connections() == 0 and loc.color is not None
            for loc in self._cells
        )

    def count_open(self) -> int:
        return sum(1 for loc in self._cells if loc.remaining_connections() > 0)

    def diff(self, other: NumberlinkBoard) -> np.ndarray:
        """
        Mark locations whose connections or color differ from `other`.

        Returns:
            Boolean array of shape (height, width).
        """
        if (self.height, self.width) != (other.height, other.width):
            raise ValueError(
                f"Cannot diff a {self.height}x{self.width} board "
                f"against a {other.height}x{other.width} board"
            )
        mask = np.zeros((self.height, self.width), dtype=bool)
        for loc, other_loc in zip(self._cells, other._cells):
            if loc.connections != other_loc.connections or loc.color != other_loc.color:
                mask[loc.coordinate] = True
        return mask

    def color_grid(self) -> np.ndarray:
        """Color index per location, -1 where unresolved."""
        grid = np.full((self.height, self.width), -1, dtype=np.int32)
        for loc in self._cells:
            if loc.color is not None:
                grid[loc.coordinate] = loc.color
        return grid

    def connection_grid(self) -> np.ndarray:
        """Connection flags as a (height, width, 4) boolean array."""
        grid = np.zeros((self.height, self.width, 4), dtype=bool)
        for loc in self._cells:
            grid[loc.coordinate] = loc.connections
        return grid

    def simple_readout(self) -> str:
        """Plain-text rendering for debugging and test output."""
        header = "   " + "".join(f"{i % 10} " for i in range(self.width))
        lines = ["", header, ""]
        right, down = to_index(RIGHT), to_index(DOWN)

        for r, row in enumerate(self.rows()):
            cells = []
            below = []
            for loc in row:
                cells.append("." if loc.color is None else chr(ord("A") + loc.color))
                cells.append("-" if loc.connections[right] else " ")
                below.append("| " if loc.connections[down] else "  ")
            lines.append(f"{r % 10}| " + "".join(cells) + f"|{r}")
            lines.append("   " + "".join(below))

        lines.append(header)
        return "\n".join(lines) + "\n"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NumberlinkBoard):
            return NotImplemented
        return (
            self.height == other.height
            and self.width == other.width
            and self._cells == other._cells
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.simple_readout()

    def __repr__(self) -> str:
        return f"NumberlinkBoard({self.height}x{self.width}, open={self.count_open()})"
