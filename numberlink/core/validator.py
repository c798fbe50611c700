"""Validation utilities for Numberlink boards and solutions."""

from __future__ import annotations
from typing import TYPE_CHECKING, Dict, List, Set

from .coordinate import Coordinate, DIRECTIONS, opposite_index

if TYPE_CHECKING:
    from .board import NumberlinkBoard


def check_invariants(board: NumberlinkBoard) -> List[str]:
    """
    Check the structural invariants every reachable board must satisfy.

    - connection flags are mirrored on both ends of every edge
    - no location holds more connections than it is allowed
    - connected locations never carry two different colors
    - no edge leaves the board

    Args:
        board: The board to check.

    Returns:
        A list of human-readable problems, empty if the board is consistent.
    """
    problems = []

    for loc in board.locations():
        if loc.count_connections() > loc.max_connections():
            problems.append(
                f"{loc.coordinate} has {loc.count_connections()} connections, "
                f"max is {loc.max_connections()}"
            )

        for index, direction in enumerate(DIRECTIONS):
            if not loc.connections[index]:
                continue
            target = loc.coordinate + direction
            if not board.in_bounds(target):
                problems.append(f"{loc.coordinate} is connected off the board")
                continue
            other = board.location(target)
            if not other.connections[opposite_index(index)]:
                problems.append(f"Edge {loc.coordinate} -> {target} is not mirrored")
            if loc.color is not None and other.color is not None and loc.color != other.color:
                problems.append(
                    f"Connected {loc.coordinate} and {target} have colors "
                    f"{loc.color} and {other.color}"
                )

    return problems


def _trace_path(board: NumberlinkBoard, start: Coordinate) -> List[Coordinate]:
    """Follow connections from an endpoint until the path stops."""
    path = [start]
    previous = None
    current = start

    while True:
        loc = board.location(current)
        following = None
        for index, direction in enumerate(DIRECTIONS):
            target = current + direction
            if loc.connections[index] and target != previous:
                following = target
                break
        if following is None or following == start:
            return path
        path.append(following)
        previous, current = current, following
        if len(path) > board.width * board.height:
            return path


def validate_solution(puzzle: NumberlinkBoard, solution: NumberlinkBoard) -> bool:
    """
    Validate that a solution correctly solves the puzzle.

    Args:
        puzzle: The original puzzle.
        solution: The proposed solution.

    Returns:
        True if the solution is complete, consistent, keeps the puzzle's
        endpoints and joins each endpoint pair with a single path.
    """
    if (puzzle.height, puzzle.width) != (solution.height, solution.width):
        return False

    # Endpoints and their colors must be untouched
    endpoints: Dict[int, List[Coordinate]] = {}
    for loc in puzzle.locations():
        other = solution.location(loc.coordinate)
        if loc.is_start != other.is_start:
            return False
        if loc.is_start:
            if loc.color != other.color:
                return False
            endpoints.setdefault(loc.color, []).append(loc.coordinate)

    if not solution.is_solved() or check_invariants(solution):
        return False

    covered: Set[Coordinate] = set()
    for color, ends in endpoints.items():
        if len(ends) != 2:
            return False
        path = _trace_path(solution, ends[0])
        if path[-1] != ends[1]:
            return False
        if any(solution.location(coordinate).color != color for coordinate in path):
            return False
        covered.update(path)

    # Every location must sit on one of the endpoint paths, so no loops are left over
    return len(covered) == solution.width * solution.height
