"""Iterative-deepening forced-move search on top of constraint propagation."""

from __future__ import annotations
from itertools import combinations
from typing import List, Optional

from .base_solver import BaseSolver
from ..core.board import NumberlinkBoard
from ..core.coordinate import Coordinate, manhattan
from ..core.exceptions import SolverInvariantError
from ..core.location import Location
from ..core.move import Move
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


class LookaheadSolver(BaseSolver):
    """
    Solver that only ever makes moves it can prove.

    Each step looks for a location whose remaining connections can be made
    in exactly one way that neither fails propagation nor leads to a board
    proven unsolvable within the current lookahead depth. The depth grows
    from 0 to `max_depth` until such a location is found. The solver never
    guesses, so it stops with a partially solved board when no proof fits
    inside `max_depth`.

    Features:
    - Cheap short-circuit for locations with no choice left
    - Cells with the fewest combinations are tried first
    - Deadliness checks start next to the last changed cell, optionally
      limited to `focus_radius` of it
    """

    name = "Lookahead"

    def __init__(self, max_depth: int = 4, focus_radius: Optional[int] = None,
                 max_steps: Optional[int] = None):
        """
        Initialize the lookahead solver.

        Args:
            max_depth: Deepest lookahead tried before giving up on a step.
            focus_radius: Manhattan radius around a changed cell that the
                          deadliness check examines. None examines every
                          open location.
            max_steps: Optional cap on the number of forced steps.
        """
        super().__init__()
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        if focus_radius is not None and focus_radius < 0:
            raise ValueError(f"focus_radius must be non-negative, got {focus_radius}")
        self.max_depth = max_depth
        self.focus_radius = focus_radius
        self.max_steps = max_steps

    def _solve(self, board: NumberlinkBoard) -> Optional[NumberlinkBoard]:
        """Solve by repeated forced moves; returns the last board reached."""
        history = self.solve_steps(board)
        return history[-1]

    def solve_steps(self, board: NumberlinkBoard) -> List[NumberlinkBoard]:
        """
        Run the forced-move loop and record every intermediate board.

        Args:
            board: The puzzle. It is copied, never modified.

        Returns:
            Snapshots after each forced step, initial propagated board first.

        Raises:
            InvalidMove: If the puzzle is contradictory from the start.
            SolverInvariantError: If a location runs out of combinations.
        """
        board = board.copy()
        board.update_all()
        self.history = [board]
        self.stats.extra["max_depth_used"] = 0

        while not board.is_solved():
            if self.max_steps is not None and len(self.history) - 1 >= self.max_steps:
                LOGGER.info("Stopped after %d steps", self.max_steps)
                break

            forced = None
            for depth in range(self.max_depth + 1):
                forced = self.find_forced_move(board, depth)
                if forced is not None:
                    self.stats.extra["max_depth_used"] = max(
                        self.stats.extra["max_depth_used"], depth
                    )
                    break
                LOGGER.debug("No forced move at depth %d, deepening", depth)

            if forced is None:
                LOGGER.info(
                    "No forced move within depth %d; %d location(s) still open",
                    self.max_depth, board.count_open(),
                )
                break

            board = board.copy()
            board.apply_moves(forced)
            self.history.append(board)
            self.stats.iterations += 1
            LOGGER.debug("Step %d: %s", self.stats.iterations, ", ".join(str(m) for m in forced))

        if board.is_solved():
            LOGGER.info("Solved in %d step(s)", len(self.history) - 1)
        return self.history

    def find_forced_move(self, board: NumberlinkBoard, depth_limit: int) -> Optional[List[Move]]:
        """
        Find a combination of moves that must be part of the solution.

        Args:
            board: The current board. It is not modified.
            depth_limit: Lookahead depth used to rule out combinations.

        Returns:
            The forced moves, or None if no location is forced at this depth.

        Raises:
            SolverInvariantError: If every combination of some location fails.
        """
        open_locations = board.get_open_locations()

        # No choice at all: every remaining direction has to be taken
        for loc in open_locations:
            moves = loc.get_valid_moves(board)
            if len(moves) == loc.remaining_connections():
                return moves

        ordered = sorted(
            open_locations,
            key=lambda loc: (loc.count_move_combinations(board), loc.coordinate),
        )
        for loc in ordered:
            survivors = self._surviving_combinations(board, loc, depth_limit, limit=2)
            if len(survivors) == 1:
                return survivors[0]
            if not survivors:
                LOGGER.error(
                    "Every combination of %s was eliminated at depth %d\n%s",
                    loc.coordinate, depth_limit, board.simple_readout(),
                )
                raise SolverInvariantError(
                    f"No surviving combination for {loc.coordinate} at depth {depth_limit}"
                )

        return None

    def is_deadly(self, board: NumberlinkBoard, depth_limit: int,
                  target: Optional[Coordinate] = None) -> bool:
        """
        Check whether a board is provably unsolvable within `depth_limit`.

        A board is deadly if some open location has fewer legal directions
        than connections it needs, or if every combination of some open
        location fails or is itself deadly one level down. At depth 0 the
        answer is always False.

        Args:
            board: The board to examine. It is not modified.
            depth_limit: Remaining lookahead depth.
            target: The location that changed last. When given, open
                    locations are examined closest first, and only those
                    within `focus_radius` if a radius is set.
        """
        if depth_limit <= 0:
            return False

        open_locations = board.get_open_locations()
        for loc in open_locations:
            if len(loc.get_valid_moves(board)) < loc.remaining_connections():
                return True

        if target is not None:
            examined = [
                loc for loc in open_locations
                if self.focus_radius is None
                or manhattan(loc.coordinate, target) <= self.focus_radius
            ]
            examined.sort(key=lambda loc: (manhattan(loc.coordinate, target), loc.coordinate))
        else:
            examined = sorted(
                open_locations,
                key=lambda loc: (loc.count_move_combinations(board), loc.coordinate),
            )

        for loc in examined:
            if not self._surviving_combinations(board, loc, depth_limit - 1, limit=1):
                return True
        return False

    def _surviving_combinations(self, board: NumberlinkBoard, loc: Location, depth_limit: int,
                                limit: Optional[int] = None) -> List[List[Move]]:
        """Combinations of `loc`'s valid moves that survive simulation and lookahead."""
        survivors = []
        moves = loc.get_valid_moves(board)

        for combo in combinations(moves, loc.remaining_connections()):
            self.stats.nodes_explored += 1
            outcome = board.simulate(combo)
            if not outcome.ok:
                continue
            if self.is_deadly(outcome.board, depth_limit, target=loc.coordinate):
                continue
            survivors.append(list(combo))
            if limit is not None and len(survivors) >= limit:
                break

        return survivors
