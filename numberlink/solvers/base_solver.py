"""Base solver interface and common utilities."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple
import time
import tracemalloc

from ..core.board import NumberlinkBoard
from ..core.exceptions import NumberlinkError
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass
class SolverStats:
    """Statistics from a solver run."""
    # Core metrics
    solved: bool = False
    time_seconds: float = 0.0
    memory_bytes: int = 0
    iterations: int = 0

    # Search metrics
    backtracks: int = 0
    nodes_explored: int = 0

    # Additional metadata
    algorithm: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "solved": self.solved,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "iterations": self.iterations,
            "backtracks": self.backtracks,
            "nodes_explored": self.nodes_explored,
            "algorithm": self.algorithm,
            **self.extra
        }


class BaseSolver(ABC):
    """Abstract base class for Numberlink solvers."""

    name: str = "BaseSolver"

    def __init__(self):
        self.stats = SolverStats(algorithm=self.name)
        self.history: List[NumberlinkBoard] = []

    def solve(self, board: NumberlinkBoard) -> Tuple[Optional[NumberlinkBoard], SolverStats]:
        """
        Solve a Numberlink puzzle with timing and memory tracking.

        Args:
            board: The puzzle to solve. It is not modified.

        Returns:
            Tuple of (best board reached or None, stats). The board is only
            fully solved when ``stats.solved`` is True.
        """
        self.stats = SolverStats(algorithm=self.name)
        self.history = []

        # Start memory tracking
        tracemalloc.start()

        # Start timing
        start_time = time.perf_counter()

        try:
            solution = self._solve(board.copy())
            self.stats.solved = solution is not None and solution.is_solved()
        except NumberlinkError as e:
            LOGGER.warning("%s failed: %s", self.name, e)
            self.stats.extra["error"] = str(e)
            solution = self.history[-1] if self.history else None

        # End timing
        self.stats.time_seconds = time.perf_counter() - start_time

        # Get memory usage
        current, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        self.stats.memory_bytes = peak

        return solution, self.stats

    @abstractmethod
    def _solve(self, board: NumberlinkBoard) -> Optional[NumberlinkBoard]:
        """
        Internal solve method to be implemented by subclasses.

        Args:
            board: A copy of the puzzle to solve (can be modified).

        Returns:
            The best board reached, or None if nothing was reached.
        """
        pass

    def reset_stats(self) -> None:
        """Reset solver statistics."""
        self.stats = SolverStats(algorithm=self.name)
