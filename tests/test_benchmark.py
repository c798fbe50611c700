"""Tests for the benchmark runner, board rendering and the command line."""

import json
import logging
import threading
import time

import matplotlib
matplotlib.use("Agg")

import pytest

from numberlink.benchmark import Benchmark, BenchmarkResult, Visualizer
from numberlink.cli import main
from numberlink.core.board import NumberlinkBoard
from numberlink.solvers import BaseSolver, DFSSolver, LookaheadSolver
from numberlink.utils.logger import configure_logging, get_logger


class SleepingSolver(BaseSolver):
    """Solver that takes far longer than the benchmark allows."""

    name = "Sleeping"

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def solve(self, board):
        # Skips the memory tracking of BaseSolver.solve, which is process-wide
        self.release.wait(2.0)
        return None, self.stats

    def _solve(self, board):
        return None


class TestBenchmark:
    """Tests for Benchmark."""

    def test_run_with_skip(self, small_board, medium_board):
        benchmark = Benchmark(
            {0: small_board, 1: medium_board},
            solvers={"Lookahead": LookaheadSolver(), "DFS": DFSSolver()},
            skip=[1],
        )
        results = benchmark.run(show_progress=False)

        assert len(results) == 2
        assert all(r.puzzle_id == 0 for r in results)
        assert all(r.solved for r in results)
        assert all(r.remaining_open == 0 for r in results)

        summary = benchmark.get_summary()
        assert summary["total_puzzles"] == 1
        assert summary["skipped"] == [1]
        assert summary["results_by_algorithm"]["Lookahead"]["accuracy"] == 100
        assert "3x3" in summary["results_by_size"]

    def test_unsolvable_puzzle(self):
        benchmark = Benchmark({0: NumberlinkBoard.from_strings(["A.B"])})
        (result,) = benchmark.run(show_progress=False)
        assert not result.solved
        assert "error" in result.extra

    def test_timeout_returns_promptly(self, small_board):
        solver = SleepingSolver()
        benchmark = Benchmark({0: small_board}, solvers={"Sleeping": solver},
                              timeout_seconds=0.2)
        start = time.perf_counter()
        (result,) = benchmark.run(show_progress=False)
        elapsed = time.perf_counter() - start
        solver.release.set()

        assert elapsed < 1.0
        assert not result.solved
        assert result.extra["error"] == "Timeout"
        assert result.time_seconds == 0.2

    def test_from_archive(self, data_dir):
        benchmark = Benchmark.from_archive(str(data_dir / "archive.txt"), limit=2, skip=[0])
        assert list(benchmark.puzzles) == [1]

    def test_save_results(self, small_board, tmp_path):
        benchmark = Benchmark({0: small_board})
        benchmark.run(show_progress=False)
        benchmark.save_results(str(tmp_path))

        with open(tmp_path / "benchmark_results.json") as f:
            results = json.load(f)
        assert results[0]["algorithm"] == "Lookahead"
        assert results[0]["solved"] is True
        assert (tmp_path / "benchmark_summary.json").exists()


class TestVisualizer:
    """Tests for Visualizer."""

    def test_save_board(self, small_board, tmp_path):
        small_board.update_all()
        visualizer = Visualizer(output_dir=str(tmp_path))
        path = visualizer.save_board(small_board, "board.png")
        assert (tmp_path / "board.png").exists()
        assert path.endswith("board.png")

    def test_save_playback(self, idle_small_board, tmp_path):
        history = LookaheadSolver().solve_steps(idle_small_board)
        visualizer = Visualizer(output_dir=str(tmp_path))
        visualizer.save_playback(history, "playback.png", columns=2)
        assert (tmp_path / "playback.png").exists()

    def test_empty_playback(self, tmp_path):
        with pytest.raises(ValueError):
            Visualizer(output_dir=str(tmp_path)).save_playback([])

    def test_charts(self, tmp_path):
        results = [
            BenchmarkResult(puzzle_id=i, size="3x3", algorithm=name, solved=True,
                            time_seconds=0.01 * (i + 1), memory_bytes=1024,
                            iterations=i, backtracks=0, nodes_explored=10 * i)
            for i in range(3)
            for name in ("Lookahead", "DFS")
        ]
        visualizer = Visualizer(results, output_dir=str(tmp_path))
        charts = visualizer.generate_all()
        assert len(charts) == 4
        for chart in charts:
            assert chart.endswith(".png")
        summary = visualizer.generate_summary_table()
        with open(summary) as f:
            assert "| Lookahead |" in f.read()


class TestCommandLine:
    """Tests for the numberlink command."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        """The command reconfigures the root logger; put it back afterwards."""
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_solve_archive(self, data_dir, capsys):
        main(["solve", str(data_dir / "archive.txt"), "--index", "0"])
        out = capsys.readouterr().out
        assert "Solved" in out

    def test_solve_json_with_render(self, data_dir, tmp_path, capsys):
        target = tmp_path / "solved.png"
        main(["solve", str(data_dir / "test2.json"), "--steps", "--render", str(target)])
        assert target.exists()
        assert "Solved" in capsys.readouterr().out

    def test_solve_missing_file(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["solve", str(tmp_path / "missing.json")])
        assert excinfo.value.code == 1

    def test_solve_invalid_puzzle(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("3 1\nA.B\n")
        with pytest.raises(SystemExit) as excinfo:
            main(["solve", str(path)])
        assert excinfo.value.code == 1

    def test_benchmark(self, data_dir, tmp_path, capsys):
        main(["benchmark", str(data_dir / "archive.txt"), "--skip", "1",
              "--output", str(tmp_path), "--no-charts"])
        assert (tmp_path / "benchmark_results.json").exists()
        assert "2/2 solved" in capsys.readouterr().out

    def test_configure_logging(self):
        configure_logging(logging.DEBUG)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert "%(levelname)-7s" in root.handlers[0].formatter._fmt
        assert get_logger().name == "numberlink"
        assert get_logger("numberlink.core").name == "numberlink.core"

    def test_get_logger_leaves_root_alone(self):
        root = logging.getLogger()
        root.handlers[:] = []
        logger = get_logger("numberlink.solvers")
        assert logger.name == "numberlink.solvers"
        assert root.handlers == []

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])
