"""Per-cell state and the local deduction rules that drive propagation."""

from __future__ import annotations
from math import comb
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from .coordinate import (
    Coordinate,
    DIRECTIONS,
    left_turn,
    opposite_index,
    right_turn,
    to_index,
)
from .exceptions import ColorConflict, Overconstrained
from .move import Move

if TYPE_CHECKING:
    from .board import NumberlinkBoard


class Location:
    """
    A single grid square.

    A location never stores references to its neighbors. Every neighbor is
    looked up through the owning board, so copying a board only has to copy
    its locations.

    Attributes:
        coordinate: Fixed position on the board.
        connections: Four flags in UP, DOWN, LEFT, RIGHT order.
        color: Color index, or None while unresolved.
        is_start: True for puzzle endpoints, which take a single connection.
        dirty: Set when the location changed since it was last checked.
    """

    __slots__ = ("coordinate", "connections", "color", "is_start", "dirty")

    def __init__(self, coordinate: Tuple[int, int], color: Optional[int] = None, is_start: bool = False):
        self.coordinate = Coordinate(*coordinate)
        self.connections: List[bool] = [False, False, False, False]
        self.color = color
        self.is_start = is_start
        self.dirty = False

    def copy(self) -> Location:
        """Create an independent copy of this location."""
        new_loc = Location(self.coordinate, self.color, self.is_start)
        new_loc.connections = self.connections[:]
        new_loc.dirty = self.dirty
        return new_loc

    # ------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------

    def count_connections(self) -> int:
        """Number of connections made so far."""
        return sum(self.connections)

    def max_connections(self) -> int:
        """1 for start and end locations, 2 everywhere else."""
        return 1 if self.is_start else 2

    def remaining_connections(self) -> int:
        return self.max_connections() - self.count_connections()

    # ------------------------------------------------------------------
    # Connecting and coloring
    # ------------------------------------------------------------------

    def connect_to(self, direction: Coordinate, board: NumberlinkBoard) -> None:
        """
        Connect this location to its neighbor in `direction`.

        Sets the flag on both ends and pushes any resolved color across the
        new edge. Assumes the caller already checked the connection is legal.

        Raises:
            ColorConflict: If both ends are colored and the colors differ.
        """
        index = to_index(direction)
        other = board.location(self.coordinate + direction)

        if self.color is not None and other.color is not None and self.color != other.color:
            raise ColorConflict(
                f"Connecting {self.coordinate} to {other.coordinate} joins colors "
                f"{self.color} and {other.color}",
                self,
            )

        self.connections[index] = True
        other.connections[opposite_index(index)] = True
        other.dirty = True

        if self.color != other.color:
            self.update_color(board)

    def update_color(self, board: NumberlinkBoard) -> None:
        """
        Spread resolved colors along every connected path through this location.

        Works through an explicit stack rather than recursion. A location that
        picks up a color while it still needs connections is marked dirty and
        rescheduled, since knowing its color can force new connections.

        Raises:
            ColorConflict: If two connected locations hold different colors.
        """
        pending = [self]
        while pending:
            loc = pending.pop()
            for index, direction in enumerate(DIRECTIONS):
                if not loc.connections[index]:
                    continue
                other = board.location(loc.coordinate + direction)

                if loc.color is None:
                    if other.color is not None:
                        loc.color = other.color
                        loc._color_resolved(board)
                        # Walk again so earlier colorless neighbors pick it up
                        pending.append(loc)
                elif other.color is None:
                    other.color = loc.color
                    other._color_resolved(board)
                    pending.append(other)
                elif other.color != loc.color:
                    raise ColorConflict(
                        f"Color conflict between {loc.coordinate} ({loc.color}) "
                        f"and {other.coordinate} ({other.color})",
                        loc,
                    )

    def _color_resolved(self, board: NumberlinkBoard) -> None:
        if self.remaining_connections() > 0:
            self.dirty = True
            board.schedule_update(self)

    # ------------------------------------------------------------------
    # Legality
    # ------------------------------------------------------------------

    def is_blocking_connection(self, direction: Coordinate, board: NumberlinkBoard) -> bool:
        """
        Check whether a connection in `direction` is ruled out.

        A direction is blocked when it is already connected, leaves the board,
        joins two different colors, runs into a full location, or would bend
        the path back on itself.
        """
        if self.connections[to_index(direction)]:
            return True

        target = self.coordinate + direction
        if not board.in_bounds(target):
            return True

        other = board.location(target)
        if self.color is not None and other.color is not None and self.color != other.color:
            return True

        if other.count_connections() >= other.max_connections():
            return True

        return self.is_u_turn(direction, other, board)

    def is_u_turn(self, direction: Coordinate, other: Location, board: NumberlinkBoard) -> bool:
        """
        Check whether connecting to `other` closes a U-turn.

        Looks at the 2x2 square on each side of the new edge. The edge is
        forbidden if it would be the third edge of that square, or if all four
        squares of it already carry the same color.
        """
        dir_index = to_index(direction)

        for side in (left_turn(direction), right_turn(direction)):
            side_coordinate = self.coordinate + side
            far_coordinate = other.coordinate + side
            if not (board.in_bounds(side_coordinate) and board.in_bounds(far_coordinate)):
                continue

            side_index = to_index(side)
            neighbor = board.location(side_coordinate)

            if self.connections[side_index] and (
                neighbor.connections[dir_index] or other.connections[side_index]
            ):
                return True
            if other.connections[side_index] and neighbor.connections[dir_index]:
                return True

            if self.color is not None and self.color == other.color == neighbor.color:
                if board.location(far_coordinate).color == self.color:
                    return True

        return False

    def get_valid_moves(self, board: NumberlinkBoard) -> List[Move]:
        """One move per direction that is not blocked."""
        return [
            Move.scored(self.coordinate, direction, board)
            for direction in DIRECTIONS
            if not self.is_blocking_connection(direction, board)
        ]

    def count_move_combinations(self, board: NumberlinkBoard) -> int:
        """How many ways this location could make its remaining connections."""
        remaining = self.remaining_connections()
        if remaining <= 0:
            return 0
        return comb(len(self.get_valid_moves(board)), remaining)

    # ------------------------------------------------------------------
    # Local deduction
    # ------------------------------------------------------------------

    def check_connections(self, board: NumberlinkBoard) -> None:
        """
        Make every connection that can be proven from this location alone.

        Raises:
            Overconstrained: If fewer directions are open than connections needed.
            ColorConflict: If a forced connection joins two different colors.
        """
        need = self.remaining_connections()
        connected = False

        if need > 0:
            open_directions = [
                direction for direction in DIRECTIONS
                if not self.is_blocking_connection(direction, board)
            ]

            if len(open_directions) == need:
                # Exactly as many options as connections needed; take them all
                for direction in open_directions:
                    if self.is_blocking_connection(direction, board):
                        raise Overconstrained(
                            f"Forced connections from {self.coordinate} block each other",
                            self,
                        )
                    self.connect_to(direction, board)
                connected = True
            elif len(open_directions) > need:
                loose_end = self._find_loose_end(open_directions, board)
                if loose_end is not None:
                    self.connect_to(loose_end, board)
                    connected = True
            else:
                raise Overconstrained(
                    f"Location {self.coordinate} needs {need} connection(s) "
                    f"but only {len(open_directions)} direction(s) are open",
                    self,
                )

        if self.dirty or connected:
            # A new edge can change what any neighbor is allowed to do
            for direction in DIRECTIONS:
                target = self.coordinate + direction
                if board.in_bounds(target):
                    board.schedule_update(board.location(target))

        self.dirty = False

    def _find_loose_end(
        self, open_directions: Sequence[Coordinate], board: NumberlinkBoard
    ) -> Optional[Coordinate]:
        """The single open direction leading to a location of this color, if any."""
        if self.color is None:
            return None
        matches = [
            direction for direction in open_directions
            if board.location(self.coordinate + direction).color == self.color
        ]
        return matches[0] if len(matches) == 1 else None

    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return (
            self.coordinate == other.coordinate
            and self.connections == other.connections
            and self.color == other.color
            and self.is_start == other.is_start
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        flags = "".join("1" if flag else "0" for flag in self.connections)
        return (
            f"Location({self.coordinate}, color={self.color}, "
            f"start={self.is_start}, connections={flags})"
        )
