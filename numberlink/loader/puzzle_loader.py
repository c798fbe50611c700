"""Readers for JSON puzzle files and line-based puzzle archives."""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .colors import ColorRegistry
from ..core.board import NumberlinkBoard, grid_from_strings
from ..core.exceptions import PuzzleFormatError
from ..core.location import Location
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

PathLike = Union[str, Path]

__all__ = [
    "grid_from_strings",
    "load_json",
    "read_archive",
    "load_archive",
    "load_board",
    "boards_from_rows",
]


def _flow_endpoints(name: str, value: Any) -> Tuple[int, int, int, int]:
    """Return (start_row, start_col, end_row, end_col) for one flow entry."""
    if isinstance(value, dict):
        try:
            return int(value["Sy"]), int(value["Sx"]), int(value["Ey"]), int(value["Ex"])
        except (KeyError, TypeError, ValueError) as e:
            raise PuzzleFormatError(f"Flow {name!r} needs integer Sx, Sy, Ex, Ey: {e}") from e

    if not isinstance(value, list) or len(value) != 4:
        raise PuzzleFormatError(f"Flow {name!r} must be [startCol, startRow, endCol, endRow]")
    try:
        start_col, start_row, end_col, end_row = (int(v) for v in value)
    except (TypeError, ValueError) as e:
        raise PuzzleFormatError(f"Flow {name!r} has a non-integer coordinate") from e
    return start_row, start_col, end_row, end_col


def load_json(path: PathLike, colors: Optional[ColorRegistry] = None) -> NumberlinkBoard:
    """
    Load a puzzle from a JSON file.

    The file holds ``{"size": N, "flows": {name: [startCol, startRow, endCol,
    endRow]}}``; optional ``"width"`` and ``"height"`` override ``size`` for
    rectangular boards. Flows whose color name is unknown are skipped.

    Args:
        path: Puzzle file.
        colors: Registry that maps flow names to color indices.

    Returns:
        The board with every location scheduled for propagation.

    Raises:
        PuzzleFormatError: If the file is malformed.
    """
    colors = colors if colors is not None else ColorRegistry.default()

    with open(path) as f:
        try:
            data: Dict[str, Any] = json.load(f)
        except json.JSONDecodeError as e:
            raise PuzzleFormatError(f"{path}: invalid JSON: {e}") from e

    try:
        height = int(data.get("height", data["size"]))
        width = int(data.get("width", data["size"]))
        flows = data["flows"]
    except (KeyError, TypeError, ValueError) as e:
        raise PuzzleFormatError(f"{path}: needs 'size' and 'flows': {e}") from e
    if height <= 0 or width <= 0:
        raise PuzzleFormatError(f"{path}: board must be at least 1x1, got {height}x{width}")

    starts: Dict[Tuple[int, int], int] = {}
    for name, value in flows.items():
        color = colors.index_of(name)
        if color is None:
            LOGGER.warning("%s: unknown color %r, skipping flow", path, name)
            continue

        start_row, start_col, end_row, end_col = _flow_endpoints(name, value)
        for row, col in ((start_row, start_col), (end_row, end_col)):
            if not (0 <= row < height and 0 <= col < width):
                raise PuzzleFormatError(f"{path}: flow {name!r} endpoint ({row}, {col}) is off the board")
            if (row, col) in starts:
                raise PuzzleFormatError(f"{path}: two endpoints at ({row}, {col})")
            starts[(row, col)] = color

    grid: List[List[Location]] = []
    for r in range(height):
        row = []
        for c in range(width):
            if (r, c) in starts:
                row.append(Location((r, c), starts[(r, c)], is_start=True))
            else:
                row.append(Location((r, c)))
        grid.append(row)

    board = NumberlinkBoard(grid)
    board.schedule_all()
    LOGGER.debug("Loaded %dx%d puzzle with %d flow(s) from %s", height, width, len(starts) // 2, path)
    return board


def read_archive(path: PathLike) -> List[List[str]]:
    """
    Read every puzzle from an archive file.

    A line starting with a digit holds ``width height`` and is followed by
    `height` rows of '.' and 'A'..'Z'. Any other line is ignored.

    Returns:
        The rows of each puzzle, in file order.

    Raises:
        PuzzleFormatError: If a header is malformed or its rows are missing.
    """
    with open(path) as f:
        lines = [line.rstrip("\r\n") for line in f]

    puzzles = []
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if not line or not line[0].isdigit():
            continue

        parts = line.split()
        try:
            width, height = int(parts[0]), int(parts[1])
        except (IndexError, ValueError) as e:
            raise PuzzleFormatError(f"{path}: bad header {line!r} on line {i}") from e

        rows = lines[i:i + height]
        if len(rows) < height:
            raise PuzzleFormatError(
                f"{path}: puzzle on line {i} needs {height} rows, found {len(rows)}"
            )
        for row in rows:
            if len(row) != width:
                raise PuzzleFormatError(
                    f"{path}: puzzle on line {i} has a row of length {len(row)}, expected {width}"
                )
        puzzles.append(rows)
        i += height

    return puzzles


def load_archive(path: PathLike, index: int) -> NumberlinkBoard:
    """
    Load one puzzle from an archive by its position in the file.

    Returns:
        The board with every location scheduled for propagation.

    Raises:
        PuzzleFormatError: If the archive is malformed or `index` is out of range.
    """
    puzzles = read_archive(path)
    if not 0 <= index < len(puzzles):
        raise PuzzleFormatError(f"{path}: no puzzle {index}, archive holds {len(puzzles)}")
    return NumberlinkBoard.from_strings(puzzles[index])


def load_board(path: PathLike, index: int = 0, colors: Optional[ColorRegistry] = None,
               propagate: bool = True) -> NumberlinkBoard:
    """
    Load a puzzle from a JSON file or an archive, picked by file extension.

    Args:
        path: A ``.json`` puzzle or a text archive.
        index: Puzzle position when `path` is an archive.
        colors: Color registry for JSON puzzles.
        propagate: Drain propagation before returning.

    Raises:
        PuzzleFormatError: If the file is malformed.
        InvalidMove: If propagation proves the puzzle contradictory.
    """
    if Path(path).suffix.lower() == ".json":
        board = load_json(path, colors)
    else:
        board = load_archive(path, index)

    if propagate:
        board.update_all()
    return board


def boards_from_rows(puzzles: Sequence[Sequence[str]]) -> List[NumberlinkBoard]:
    """Build boards for every puzzle returned by :func:`read_archive`."""
    return [NumberlinkBoard.from_strings(rows) for rows in puzzles]
