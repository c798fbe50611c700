"""Shared fixtures for the Numberlink test suite."""

from pathlib import Path

import pytest

from numberlink.core.board import NumberlinkBoard

DATA_DIR = Path(__file__).resolve().parent / "data"

# Two flows on a 3x3 board, solvable by propagation alone
SMALL_PUZZLE = [
    "...",
    ".B.",
    "ABA",
]

# Three flows on a 7x7 board, solvable by propagation alone
MEDIUM_PUZZLE = [
    ".......",
    "AB.....",
    ".......",
    "...B...",
    "C.C....",
    "A......",
    ".......",
]

MEDIUM_SOLUTION_COLORS = [
    "AAAAAAA",
    "ABBBBBA",
    "CCCCCBA",
    "CBBBCBA",
    "CBCCCBA",
    "ABBBBBA",
    "AAAAAAA",
]


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def small_board() -> NumberlinkBoard:
    """The 3x3 puzzle with every location scheduled."""
    return NumberlinkBoard.from_strings(SMALL_PUZZLE)


@pytest.fixture
def idle_small_board() -> NumberlinkBoard:
    """The 3x3 puzzle with nothing scheduled."""
    board = NumberlinkBoard.from_strings(SMALL_PUZZLE)
    board.clear_scheduled()
    return board


@pytest.fixture
def medium_board() -> NumberlinkBoard:
    return NumberlinkBoard.from_strings(MEDIUM_PUZZLE)
