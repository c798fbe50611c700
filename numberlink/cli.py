"""Command-line interface for the Numberlink solver."""

import argparse
import logging
import os
import sys

from .benchmark import Benchmark
from .benchmark.visualizer import Visualizer
from .core.exceptions import PuzzleFormatError
from .loader import load_board
from .solvers import DFSSolver, LookaheadSolver
from .utils.logger import configure_logging

# Archive puzzles known to have more than one solution
DEFAULT_SKIP = [155, 176]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="numberlink",
        description="Numberlink Puzzle Solver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve the fourth puzzle of an archive and show every forced step
  numberlink solve boards/imported.txt --index 3 --steps

  # Solve a JSON puzzle and save a picture of the result
  numberlink solve puzzle.json --render solved.png

  # Benchmark the first 50 archive puzzles
  numberlink benchmark boards/imported.txt --limit 50 --output results/
        """
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log every forced move"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve a Numberlink puzzle")
    solve_parser.add_argument("file", help="JSON puzzle or text archive")
    solve_parser.add_argument(
        "--index", "-i", type=int, default=0,
        help="Puzzle position inside an archive (default: 0)"
    )
    solve_parser.add_argument(
        "--algorithm", "-a", choices=["lookahead", "dfs"], default="lookahead",
        help="Solving algorithm to use (default: lookahead)"
    )
    solve_parser.add_argument(
        "--depth", "-d", type=int, default=4,
        help="Maximum lookahead depth (default: 4)"
    )
    solve_parser.add_argument(
        "--steps", action="store_true",
        help="Print the board after every forced step"
    )
    solve_parser.add_argument(
        "--render", type=str, default=None,
        help="Save a picture of the final board to this PNG file"
    )

    # Benchmark command
    bench_parser = subparsers.add_parser("benchmark", help="Run solver benchmarks on an archive")
    bench_parser.add_argument("archive", help="Text archive of puzzles")
    bench_parser.add_argument(
        "--limit", "-n", type=int, default=None,
        help="Only use the first N puzzles"
    )
    bench_parser.add_argument(
        "--skip", type=int, nargs="*", default=DEFAULT_SKIP,
        help="Puzzle indices to leave out (default: 155 176)"
    )
    bench_parser.add_argument(
        "--depth", "-d", type=int, default=4,
        help="Maximum lookahead depth (default: 4)"
    )
    bench_parser.add_argument(
        "--timeout", type=float, default=60.0,
        help="Seconds allowed per puzzle (default: 60)"
    )
    bench_parser.add_argument(
        "--output", "-o", type=str, default="results",
        help="Output directory for results (default: results)"
    )
    bench_parser.add_argument(
        "--no-charts", action="store_true",
        help="Skip chart generation"
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "solve":
        cmd_solve(args)
    elif args.command == "benchmark":
        cmd_benchmark(args)


def cmd_solve(args):
    """Handle the solve command."""
    try:
        board = load_board(args.file, index=args.index, propagate=False)
    except (OSError, PuzzleFormatError) as e:
        print(f"Error loading puzzle: {e}")
        sys.exit(1)

    print("Input puzzle:")
    print(board.simple_readout())

    if args.algorithm == "dfs":
        solver = DFSSolver()
    else:
        solver = LookaheadSolver(max_depth=args.depth)

    solution, stats = solver.solve(board)

    if "error" in stats.extra:
        print(f"✗ Solver failed: {stats.extra['error']}")
        sys.exit(1)

    if args.steps:
        for i, step in enumerate(solver.history[1:], 1):
            print(f"--- Step {i} ---")
            print(step.simple_readout())

    if stats.solved:
        print(f"✓ Solved in {stats.time_seconds:.4f}s")
    else:
        print(f"✗ Stuck with {solution.count_open()} open location(s)")
    print(f"  Steps: {stats.iterations:,}")
    print(f"  Boards simulated: {stats.nodes_explored:,}")
    print(f"  Memory: {stats.memory_bytes / 1024:.2f} KB")
    print(solution.simple_readout())

    if args.render:
        output_dir = os.path.dirname(args.render) or "."
        visualizer = Visualizer(output_dir=output_dir)
        path = visualizer.save_board(solution, os.path.basename(args.render))
        print(f"Board saved to {path}")


def cmd_benchmark(args):
    """Handle the benchmark command."""
    print("=" * 60)
    print("NUMBERLINK SOLVER BENCHMARK")
    print("=" * 60)
    print(f"Archive: {args.archive}")
    print(f"Skipping: {', '.join(str(i) for i in args.skip) or 'none'}")
    print(f"Lookahead depth: {args.depth}")
    print("=" * 60)

    try:
        benchmark = Benchmark.from_archive(
            args.archive,
            limit=args.limit,
            solvers={"Lookahead": LookaheadSolver(max_depth=args.depth)},
            skip=args.skip,
            timeout_seconds=args.timeout,
        )
    except (OSError, PuzzleFormatError) as e:
        print(f"Error loading archive: {e}")
        sys.exit(1)

    results = benchmark.run(show_progress=True)
    benchmark.save_results(args.output)

    summary = benchmark.get_summary()
    for name, data in summary["results_by_algorithm"].items():
        print(f"{name}: {data['total_solved']}/{data['total_tested']} solved, "
              f"avg {data['avg_time_seconds']:.4f}s")

    if not args.no_charts and results:
        visualizer = Visualizer(results, output_dir=args.output)
        for path in visualizer.generate_all():
            print(f"  Chart saved: {path}")
        print(f"  Summary saved: {visualizer.generate_summary_table()}")


if __name__ == "__main__":
    main()
