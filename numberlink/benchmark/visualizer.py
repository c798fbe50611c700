"""Board rendering, solve playback and benchmark charts."""

from __future__ import annotations
import os
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import seaborn as sns
import numpy as np

from .benchmark import BenchmarkResult
from ..core.board import NumberlinkBoard
from ..core.coordinate import DIRECTIONS
from ..loader.colors import ColorRegistry


class Visualizer:
    """
    Visualization generator for Numberlink boards and benchmark results.

    Boards are painted like the flow games: a colored disc per square, thick
    bars toward connected neighbors, a black inner disc on endpoints and
    gray for squares whose color is still unknown.
    """

    # Color palette for algorithms
    COLORS = {
        "Lookahead": "#3498db",  # Blue
        "DFS": "#2ecc71",        # Green
    }

    UNKNOWN_COLOR = "#808080"
    HIGHLIGHT_COLOR = "#f1c40f"

    DISC_RADIUS = 0.425
    BAR_WIDTH = 0.4
    ENDPOINT_RADIUS = 0.25

    def __init__(self, results: Optional[List[BenchmarkResult]] = None, output_dir: str = "results",
                 colors: Optional[ColorRegistry] = None):
        """
        Initialize the visualizer.

        Args:
            results: List of benchmark results, needed only for the charts.
            output_dir: Directory to save generated images.
            colors: Registry used to paint color indices.
        """
        self.results = results or []
        self.output_dir = output_dir
        self.colors = colors if colors is not None else ColorRegistry.default()
        os.makedirs(output_dir, exist_ok=True)

        # Set style
        plt.style.use('seaborn-v0_8-whitegrid')
        sns.set_palette("husl")

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    def _rgb(self, color: Optional[int]):
        if color is None:
            return self.UNKNOWN_COLOR
        return tuple(c / 255 for c in self.colors.rgb_of(color))

    def draw_board(self, board: NumberlinkBoard, ax=None,
                   highlight: Optional[np.ndarray] = None, title: Optional[str] = None):
        """
        Paint a board onto a matplotlib axis.

        Args:
            board: Board to draw.
            ax: Axis to draw on; a new figure is created if omitted.
            highlight: Optional boolean mask, e.g. from ``board.diff``.
            title: Optional axis title.

        Returns:
            The axis drawn on.
        """
        if ax is None:
            _, ax = plt.subplots(figsize=(max(3, board.width * 0.6), max(3, board.height * 0.6)))

        ax.add_patch(mpatches.Rectangle((-0.5, -0.5), board.width, board.height, color="black"))

        for loc in board.locations():
            row, col = loc.coordinate
            fill = self._rgb(loc.color)

            if highlight is not None and highlight[row, col]:
                ax.add_patch(mpatches.Rectangle(
                    (col - 0.5, row - 0.5), 1, 1,
                    fill=False, edgecolor=self.HIGHLIGHT_COLOR, linewidth=2,
                ))

            ax.add_patch(mpatches.Circle((col, row), self.DISC_RADIUS, color=fill))

            # Each square draws its half of every edge
            for index, (d_row, d_col) in enumerate(DIRECTIONS):
                if not loc.connections[index]:
                    continue
                half = self.BAR_WIDTH / 2
                x0 = min(col, col + d_col * 0.5) - (half if d_col == 0 else 0)
                y0 = min(row, row + d_row * 0.5) - (half if d_row == 0 else 0)
                w = self.BAR_WIDTH if d_col == 0 else 0.5
                h = self.BAR_WIDTH if d_row == 0 else 0.5
                ax.add_patch(mpatches.Rectangle((x0, y0), w, h, color=fill))

            if loc.is_start:
                ax.add_patch(mpatches.Circle((col, row), self.ENDPOINT_RADIUS, color="black"))

        ax.set_xlim(-0.5, board.width - 0.5)
        ax.set_ylim(board.height - 0.5, -0.5)
        ax.set_aspect("equal")
        ax.axis("off")
        if title:
            ax.set_title(title, fontsize=10)
        return ax

    def save_board(self, board: NumberlinkBoard, filename: str = "board.png",
                   highlight: Optional[np.ndarray] = None) -> str:
        """Render a single board to a PNG file and return its path."""
        fig, ax = plt.subplots(figsize=(max(3, board.width * 0.6), max(3, board.height * 0.6)))
        self.draw_board(board, ax=ax, highlight=highlight)

        path = os.path.join(self.output_dir, filename)
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return path

    def save_playback(self, history: Sequence[NumberlinkBoard], filename: str = "playback.png",
                      columns: int = 4) -> str:
        """
        Render a solve history as a grid of frames.

        Each frame highlights the squares that changed since the previous one.
        """
        if not history:
            raise ValueError("History must contain at least one board")

        rows = (len(history) + columns - 1) // columns
        fig, axes = plt.subplots(rows, columns, figsize=(columns * 3, rows * 3), squeeze=False)

        for i, ax in enumerate(axes.flat):
            if i >= len(history):
                ax.axis("off")
                continue
            highlight = history[i].diff(history[i - 1]) if i > 0 else None
            title = "start" if i == 0 else f"step {i}"
            self.draw_board(history[i], ax=ax, highlight=highlight, title=title)

        plt.tight_layout()
        path = os.path.join(self.output_dir, filename)
        plt.savefig(path, dpi=100, bbox_inches='tight')
        plt.close(fig)
        return path

    # ------------------------------------------------------------------
    # Benchmark charts
    # ------------------------------------------------------------------

    def generate_all(self) -> List[str]:
        """
        Generate all benchmark charts.

        Returns:
            List of paths to generated chart files.
        """
        charts = []

        charts.append(self.plot_time_comparison())
        charts.append(self.plot_accuracy_by_size())
        charts.append(self.plot_time_distribution())
        charts.append(self.plot_nodes_comparison())

        return charts

    def plot_time_comparison(self) -> str:
        """Create bar chart comparing average solve times."""
        fig, ax = plt.subplots(figsize=(10, 6))

        algorithms = sorted(set(r.algorithm for r in self.results))
        avg_times = []
        colors = []

        for algo in algorithms:
            times = [r.time_seconds for r in self.results if r.algorithm == algo]
            avg_times.append(np.mean(times))
            colors.append(self.COLORS.get(algo, "#95a5a6"))

        bars = ax.bar(algorithms, avg_times, color=colors, edgecolor='black', linewidth=0.5)

        # Add value labels on bars
        for bar, time in zip(bars, avg_times):
            height = bar.get_height()
            ax.annotate(f'{time:.4f}s',
                        xy=(bar.get_x() + bar.get_width() / 2, height),
                        xytext=(0, 3),
                        textcoords="offset points",
                        ha='center', va='bottom', fontsize=10)

        ax.set_xlabel('Algorithm', fontsize=12)
        ax.set_ylabel('Average Time (seconds)', fontsize=12)
        ax.set_title('Average Solve Time by Algorithm', fontsize=14, fontweight='bold')
        ax.set_ylim(bottom=0)

        plt.tight_layout()
        path = os.path.join(self.output_dir, "time_comparison.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close()

        return path

    def plot_accuracy_by_size(self) -> str:
        """Create grouped bar chart of solve rate by board size and algorithm."""
        fig, ax = plt.subplots(figsize=(12, 6))

        algorithms = sorted(set(r.algorithm for r in self.results))
        sizes = sorted(set(r.size for r in self.results),
                       key=lambda s: tuple(int(v) for v in s.split("x")))

        x = np.arange(len(sizes))
        width = 0.8 / max(1, len(algorithms))

        for i, algo in enumerate(algorithms):
            accuracies = []
            for size in sizes:
                subset = [r for r in self.results if r.algorithm == algo and r.size == size]
                solved = sum(1 for r in subset if r.solved)
                accuracies.append((solved / len(subset)) * 100 if subset else 0)

            offset = (i - len(algorithms) / 2 + 0.5) * width
            ax.bar(x + offset, accuracies, width,
                   label=algo,
                   color=self.COLORS.get(algo, "#95a5a6"),
                   edgecolor='black', linewidth=0.5)

        ax.set_xlabel('Board Size', fontsize=12)
        ax.set_ylabel('Solved (%)', fontsize=12)
        ax.set_title('Solve Rate by Board Size and Algorithm', fontsize=14, fontweight='bold')
        ax.set_xticks(x)
        ax.set_xticklabels(sizes)
        ax.legend(title='Algorithm', bbox_to_anchor=(1.05, 1), loc='upper left')
        ax.set_ylim(0, 115)
        ax.axhline(y=100, color='gray', linestyle='--', alpha=0.3)

        plt.tight_layout()
        path = os.path.join(self.output_dir, "accuracy_by_size.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close()

        return path

    def plot_time_distribution(self) -> str:
        """Create box plot showing time distribution."""
        fig, ax = plt.subplots(figsize=(12, 6))

        algorithms = sorted(set(r.algorithm for r in self.results))
        data = [[r.time_seconds for r in self.results if r.algorithm == algo] for algo in algorithms]

        bp = ax.boxplot(data, patch_artist=True)
        ax.set_xticks(range(1, len(algorithms) + 1))
        ax.set_xticklabels(algorithms)

        # Color boxes
        for patch, algo in zip(bp['boxes'], algorithms):
            patch.set_facecolor(self.COLORS.get(algo, "#95a5a6"))
            patch.set_alpha(0.7)

        ax.set_xlabel('Algorithm', fontsize=12)
        ax.set_ylabel('Time (seconds)', fontsize=12)
        ax.set_title('Solve Time Distribution by Algorithm', fontsize=14, fontweight='bold')

        plt.tight_layout()
        path = os.path.join(self.output_dir, "time_distribution.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close()

        return path

    def plot_nodes_comparison(self) -> str:
        """Scatter simulated boards against solve time, one color per algorithm."""
        fig, ax = plt.subplots(figsize=(10, 6))

        for algo in sorted(set(r.algorithm for r in self.results)):
            subset = [r for r in self.results if r.algorithm == algo]
            ax.scatter([max(1, r.nodes_explored) for r in subset],
                       [r.time_seconds for r in subset],
                       label=algo, color=self.COLORS.get(algo, "#95a5a6"),
                       edgecolor='black', linewidth=0.5, alpha=0.8)

        ax.set_xscale('log')
        ax.set_xlabel('Boards Simulated (Log Scale)', fontsize=12)
        ax.set_ylabel('Time (seconds)', fontsize=12)
        ax.set_title('Search Effort vs Solve Time', fontsize=14, fontweight='bold')
        ax.legend(title='Algorithm')

        plt.tight_layout()
        path = os.path.join(self.output_dir, "nodes_vs_time.png")
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close()

        return path

    def generate_summary_table(self) -> str:
        """Generate a markdown summary table."""
        algorithms = sorted(set(r.algorithm for r in self.results))

        lines = [
            "# Benchmark Summary\n",
            "| Algorithm | Solved | Avg Time | Avg Memory | Avg Steps | Avg Boards Simulated |",
            "|-----------|--------|----------|------------|-----------|----------------------|"
        ]

        for algo in algorithms:
            algo_results = [r for r in self.results if r.algorithm == algo]

            solved = sum(1 for r in algo_results if r.solved)
            accuracy = (solved / len(algo_results)) * 100 if algo_results else 0

            avg_time = np.mean([r.time_seconds for r in algo_results])
            avg_memory = np.mean([r.memory_bytes / (1024 * 1024) for r in algo_results])
            avg_iters = np.mean([r.iterations for r in algo_results])
            avg_nodes = np.mean([r.nodes_explored for r in algo_results])

            lines.append(
                f"| {algo} | {accuracy:.1f}% | {avg_time:.4f}s | {avg_memory:.2f} MB "
                f"| {int(avg_iters):,} | {int(avg_nodes):,} |"
            )

        content = "\n".join(lines)

        path = os.path.join(self.output_dir, "benchmark_summary.md")
        with open(path, "w") as f:
            f.write(content)

        return path
