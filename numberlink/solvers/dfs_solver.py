"""Depth-first search solver with backtracking over propagated moves."""

from __future__ import annotations
from typing import Optional

from .base_solver import BaseSolver
from ..core.board import NumberlinkBoard
from ..core.exceptions import InvalidMove
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


class DFSSolver(BaseSolver):
    """
    Depth-First Search solver using recursive backtracking.

    Tries every move in score order, copying the board per move and letting
    propagation reject bad branches. Kept as a baseline for the lookahead
    solver; it does not scale past small boards.
    """

    name = "DFS+Backtracking"

    def __init__(self, max_depth: Optional[int] = None):
        """
        Initialize the DFS solver.

        Args:
            max_depth: Give up on a branch past this many moves. Defaults to
                       the number of locations on the board.
        """
        super().__init__()
        self.max_depth = max_depth

    def _solve(self, board: NumberlinkBoard) -> Optional[NumberlinkBoard]:
        """Solve using DFS; returns the initial propagated board if the search fails."""
        board.update_all()
        self.history = [board]
        limit = self.max_depth if self.max_depth is not None else board.width * board.height

        solution = self._search(board, 0, limit)
        if solution is None:
            LOGGER.info("DFS exhausted after %d node(s)", self.stats.nodes_explored)
            return board
        self.history.append(solution)
        return solution

    def _search(self, board: NumberlinkBoard, depth: int, limit: int) -> Optional[NumberlinkBoard]:
        """Recursive search. Returns a solved board or None."""
        self.stats.iterations += 1
        if board.is_solved():
            return board
        if depth >= limit:
            return None

        for move in board.update_moves():
            child = board.copy()
            self.stats.nodes_explored += 1
            try:
                child.apply_move(move)
            except InvalidMove:
                self.stats.backtracks += 1
                continue

            result = self._search(child, depth + 1, limit)
            if result is not None:
                return result

        self.stats.backtracks += 1
        return None
