"""Solvers module for Numberlink puzzles."""

from .base_solver import BaseSolver, SolverStats
from .dfs_solver import DFSSolver
from .lookahead_solver import LookaheadSolver

__all__ = [
    "BaseSolver",
    "SolverStats",
    "DFSSolver",
    "LookaheadSolver",
]
