"""Benchmarking framework for comparing Numberlink solvers."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Iterable, Optional
from concurrent.futures import ThreadPoolExecutor, TimeoutError
import json
import os

from tqdm import tqdm

from ..core.board import NumberlinkBoard
from ..core.validator import validate_solution
from ..loader.puzzle_loader import read_archive
from ..solvers import BaseSolver, LookaheadSolver
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass
class BenchmarkResult:
    """Results from a single benchmark run."""
    puzzle_id: int
    size: str
    algorithm: str
    solved: bool
    time_seconds: float
    memory_bytes: int
    iterations: int
    backtracks: int
    nodes_explored: int
    remaining_open: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "puzzle_id": self.puzzle_id,
            "size": self.size,
            "algorithm": self.algorithm,
            "solved": self.solved,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "memory_mb": self.memory_bytes / (1024 * 1024),
            "iterations": self.iterations,
            "backtracks": self.backtracks,
            "nodes_explored": self.nodes_explored,
            "remaining_open": self.remaining_open,
            **self.extra
        }


class Benchmark:
    """
    Benchmark framework for comparing Numberlink solving algorithms.

    Runs every solver on every puzzle and collects performance metrics.
    Puzzles listed in `skip` are left out, which is how archive puzzles with
    more than one solution are excluded.
    """

    def __init__(
        self,
        puzzles: Dict[int, NumberlinkBoard],
        solvers: Optional[Dict[str, BaseSolver]] = None,
        skip: Iterable[int] = (),
        timeout_seconds: float = 60.0,
    ):
        """
        Initialize the benchmark.

        Args:
            puzzles: Dict of puzzle_id -> puzzle board.
            solvers: Dict of solver_name -> solver_instance (default: lookahead only).
            skip: Puzzle ids to leave out.
            timeout_seconds: Maximum time per puzzle per solver.
        """
        self.skip = set(skip)
        self.puzzles = {pid: board for pid, board in puzzles.items() if pid not in self.skip}
        self.timeout_seconds = timeout_seconds

        if solvers is None:
            self.solvers = {"Lookahead": LookaheadSolver()}
        else:
            self.solvers = solvers

        self.results: List[BenchmarkResult] = []

    @classmethod
    def from_archive(cls, path: str, limit: Optional[int] = None, **kwargs) -> Benchmark:
        """Build a benchmark from the puzzles of an archive file."""
        puzzles = {}
        for pid, rows in enumerate(read_archive(path)):
            if limit is not None and pid >= limit:
                break
            puzzles[pid] = NumberlinkBoard.from_strings(rows)
        LOGGER.info("Loaded %d puzzle(s) from %s", len(puzzles), path)
        return cls(puzzles, **kwargs)

    def run(self, show_progress: bool = True) -> List[BenchmarkResult]:
        """
        Run the full benchmark suite.

        Returns:
            List of BenchmarkResult objects.
        """
        self.results = []
        total_tests = len(self.puzzles) * len(self.solvers)

        pbar = tqdm(total=total_tests, desc="Benchmarking", disable=not show_progress)

        for puzzle_id, puzzle in self.puzzles.items():
            for solver_name, solver in self.solvers.items():
                result = self._run_single(puzzle, puzzle_id, solver_name, solver)
                self.results.append(result)
                pbar.update(1)

        pbar.close()
        return self.results

    def _run_single(
        self,
        puzzle: NumberlinkBoard,
        puzzle_id: int,
        solver_name: str,
        solver: BaseSolver
    ) -> BenchmarkResult:
        """Run a single solver on a single puzzle."""
        size = f"{puzzle.height}x{puzzle.width}"

        # Use ThreadPoolExecutor to enforce timeout. The executor is not used
        # as a context manager, since leaving the block would wait for the
        # timed-out solve to finish.
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(solver.solve, puzzle)
        try:
            solution, stats = future.result(timeout=self.timeout_seconds)
        except TimeoutError:
            executor.shutdown(wait=False, cancel_futures=True)
            LOGGER.warning("%s timed out on puzzle %d", solver_name, puzzle_id)
            return BenchmarkResult(
                puzzle_id=puzzle_id,
                size=size,
                algorithm=solver_name,
                solved=False,
                time_seconds=self.timeout_seconds,
                memory_bytes=0,
                iterations=0,
                backtracks=0,
                nodes_explored=0,
                remaining_open=puzzle.count_open(),
                extra={"error": "Timeout"}
            )
        executor.shutdown(wait=False)

        solved = stats.solved and validate_solution(puzzle, solution)
        if stats.solved and not solved:
            LOGGER.error("%s produced an invalid solution for puzzle %d", solver_name, puzzle_id)

        return BenchmarkResult(
            puzzle_id=puzzle_id,
            size=size,
            algorithm=solver_name,
            solved=solved,
            time_seconds=stats.time_seconds,
            memory_bytes=stats.memory_bytes,
            iterations=stats.iterations,
            backtracks=stats.backtracks,
            nodes_explored=stats.nodes_explored,
            remaining_open=solution.count_open() if solution is not None else puzzle.count_open(),
            extra=dict(stats.extra)
        )

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics from benchmark results."""
        summary = {
            "total_puzzles": len(self.puzzles),
            "skipped": sorted(self.skip),
            "solvers_tested": list(self.solvers.keys()),
            "results_by_algorithm": {},
            "results_by_size": {}
        }

        # Group by algorithm
        for solver_name in self.solvers:
            solver_results = [r for r in self.results if r.algorithm == solver_name]
            if solver_results:
                solved = [r for r in solver_results if r.solved]
                times = [r.time_seconds for r in solver_results]
                memory = [r.memory_bytes for r in solver_results]

                summary["results_by_algorithm"][solver_name] = {
                    "accuracy": len(solved) / len(solver_results) * 100,
                    "avg_time_seconds": sum(times) / len(times),
                    "max_time_seconds": max(times),
                    "min_time_seconds": min(times),
                    "avg_memory_mb": sum(memory) / len(memory) / (1024 * 1024),
                    "total_solved": len(solved),
                    "total_tested": len(solver_results)
                }

        # Group by board size
        for size in sorted({r.size for r in self.results}):
            size_results = [r for r in self.results if r.size == size]
            summary["results_by_size"][size] = {}

            for solver_name in self.solvers:
                solver_size_results = [r for r in size_results if r.algorithm == solver_name]
                if solver_size_results:
                    solved = [r for r in solver_size_results if r.solved]
                    times = [r.time_seconds for r in solver_size_results]

                    summary["results_by_size"][size][solver_name] = {
                        "accuracy": len(solved) / len(solver_size_results) * 100,
                        "avg_time_seconds": sum(times) / len(times),
                        "solved": len(solved),
                        "tested": len(solver_size_results)
                    }

        return summary

    def save_results(self, output_dir: str) -> None:
        """Save benchmark results and summary to JSON files."""
        os.makedirs(output_dir, exist_ok=True)

        # Save raw results as JSON
        results_file = os.path.join(output_dir, "benchmark_results.json")
        with open(results_file, "w") as f:
            json.dump([r.to_dict() for r in self.results], f, indent=2)

        # Save summary
        summary_file = os.path.join(output_dir, "benchmark_summary.json")
        with open(summary_file, "w") as f:
            json.dump(self.get_summary(), f, indent=2)

        LOGGER.info("Results saved to %s", output_dir)
