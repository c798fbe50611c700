"""Unit tests for coordinates, moves and the Numberlink board."""

import pytest
import numpy as np

from numberlink.core.board import NumberlinkBoard, grid_from_strings
from numberlink.core.coordinate import (
    Coordinate,
    DIRECTIONS,
    DOWN,
    LEFT,
    RIGHT,
    UP,
    left_turn,
    manhattan,
    opposite,
    opposite_index,
    right_turn,
    to_index,
)
from numberlink.core.exceptions import (
    ColorConflict,
    InvalidMove,
    Overconstrained,
    PuzzleFormatError,
)
from numberlink.core.location import Location
from numberlink.core.move import Move, order_moves
from numberlink.core.validator import check_invariants

from conftest import SMALL_PUZZLE


class TestCoordinate:
    """Tests for coordinates and direction helpers."""

    def test_addition(self):
        """Adding a direction moves one square."""
        assert Coordinate(2, 3) + DOWN == Coordinate(3, 3)
        assert Coordinate(2, 3) + LEFT == (2, 2)
        assert isinstance(Coordinate(0, 0) + RIGHT, Coordinate)

    def test_direction_indices(self):
        """The index order UP, DOWN, LEFT, RIGHT is fixed."""
        assert [to_index(d) for d in (UP, DOWN, LEFT, RIGHT)] == [0, 1, 2, 3]
        assert DIRECTIONS == (UP, DOWN, LEFT, RIGHT)

    def test_opposites(self):
        """Opposite directions and indices pair up."""
        assert opposite(UP) == DOWN
        assert opposite(LEFT) == RIGHT
        assert [opposite_index(i) for i in range(4)] == [1, 0, 3, 2]

    def test_turns(self):
        """Left and right turns rotate by 90 degrees."""
        assert left_turn(UP) == LEFT
        assert right_turn(UP) == RIGHT
        assert left_turn(RIGHT) == UP
        assert right_turn(DOWN) == LEFT
        for d in DIRECTIONS:
            assert right_turn(left_turn(d)) == d

    def test_invalid_direction(self):
        """Non-unit vectors are rejected."""
        with pytest.raises(ValueError):
            to_index(Coordinate(1, 1))
        with pytest.raises(ValueError):
            left_turn(Coordinate(0, 0))
        with pytest.raises(ValueError):
            opposite_index(4)

    def test_bounds_and_distance(self):
        """Bounds take the board size explicitly."""
        assert Coordinate(2, 2).in_bounds(3, 3)
        assert not Coordinate(3, 0).in_bounds(3, 3)
        assert not Coordinate(0, -1).in_bounds(3, 3)
        assert manhattan((0, 0), (2, 3)) == 5

    def test_str(self):
        assert str(Coordinate(1, 2)) == "(1, 2)"


class TestMove:
    """Tests for moves."""

    def test_end(self):
        move = Move(Coordinate(1, 1), UP)
        assert move.end == Coordinate(0, 1)

    def test_equality_ignores_score(self):
        assert Move(Coordinate(0, 0), RIGHT, score=5) == Move(Coordinate(0, 0), RIGHT)

    def test_order_moves(self):
        """Higher scores first, ties keep their order."""
        a = Move(Coordinate(0, 0), RIGHT, score=0)
        b = Move(Coordinate(0, 1), DOWN, score=3)
        c = Move(Coordinate(1, 0), UP, score=0)
        assert order_moves([a, b, c]) == [b, a, c]
        assert order_moves([a, b, c])[1] is a


class TestBoardConstruction:
    """Tests for building boards."""

    def test_from_strings(self, small_board):
        """Letters become endpoints and every location is scheduled."""
        assert (small_board.height, small_board.width) == (3, 3)
        assert small_board.get_location(1, 1).is_start
        assert small_board.get_location(1, 1).color == 1
        assert small_board.get_location(2, 0).color == 0
        assert small_board.get_location(0, 0).color is None
        assert len(small_board.pending_updates()) == 9

    def test_rectangular_board(self):
        board = NumberlinkBoard.from_strings(["A..A", "B..B"])
        assert (board.height, board.width) == (2, 4)

    def test_empty_grid_rejected(self):
        with pytest.raises(ValueError):
            NumberlinkBoard([])

    def test_ragged_grid_rejected(self):
        grid = [[Location((0, 0)), Location((0, 1))], [Location((1, 0))]]
        with pytest.raises(ValueError):
            NumberlinkBoard(grid)

    def test_misplaced_location_rejected(self):
        grid = [[Location((0, 1))]]
        with pytest.raises(ValueError):
            NumberlinkBoard(grid)

    def test_bad_strings(self):
        """Ragged rows and unknown characters are format errors."""
        with pytest.raises(PuzzleFormatError):
            grid_from_strings(["...", ".."])
        with pytest.raises(PuzzleFormatError):
            grid_from_strings(["a.."])
        with pytest.raises(PuzzleFormatError):
            grid_from_strings([])

    def test_location_out_of_bounds(self, small_board):
        assert not small_board.in_bounds((3, 0))
        with pytest.raises(ValueError):
            small_board.location((3, 0))
        with pytest.raises(ValueError):
            small_board.get_location(0, -1)


class TestBoardQueue:
    """Tests for the update queue."""

    def test_schedule_is_idempotent(self, idle_small_board):
        loc = idle_small_board.get_location(0, 0)
        idle_small_board.schedule_update(loc)
        idle_small_board.schedule_update(loc)
        assert idle_small_board.pending_updates() == [(0, 0)]

    def test_clear_and_schedule_all(self, small_board):
        small_board.clear_scheduled()
        assert small_board.pending_updates() == []
        small_board.schedule_all()
        assert len(small_board.pending_updates()) == 9

    def test_update_all_drains(self, small_board):
        small_board.update_all()
        assert small_board.pending_updates() == []
        assert small_board.is_solved()

    def test_propagation_order_does_not_matter(self):
        """Draining in reverse order reaches the same board."""
        forward = NumberlinkBoard.from_strings(SMALL_PUZZLE)
        forward.update_all()

        backward = NumberlinkBoard.from_strings(SMALL_PUZZLE)
        backward.clear_scheduled()
        for loc in reversed(list(backward.locations())):
            backward.schedule_update(loc)
        backward.update_all()

        assert forward == backward

    def test_contradiction_surfaces(self):
        """A puzzle whose colors cannot meet fails during propagation."""
        board = NumberlinkBoard.from_strings(["A.B"])
        with pytest.raises(InvalidMove):
            board.update_all()


class TestBoardMoves:
    """Tests for applying and simulating moves."""

    def test_get_moves(self, idle_small_board):
        """One move per open location and free direction."""
        moves = idle_small_board.get_moves()
        assert Move(Coordinate(0, 0), DOWN) in moves
        assert Move(Coordinate(0, 0), RIGHT) in moves
        assert Move(Coordinate(0, 0), UP) not in moves
        # Colors differ between the bottom-row endpoints
        assert Move(Coordinate(2, 0), RIGHT) not in moves

    def test_update_moves(self, idle_small_board):
        moves = idle_small_board.update_moves()
        assert moves == idle_small_board.moves
        assert len(moves) == len(idle_small_board.get_moves())

    def test_apply_move_propagates(self, idle_small_board):
        idle_small_board.apply_move(Move(Coordinate(0, 0), DOWN))
        assert idle_small_board.is_solved()
        assert check_invariants(idle_small_board) == []

    def test_apply_existing_connection_is_noop(self, idle_small_board):
        idle_small_board.apply_move(Move(Coordinate(0, 0), DOWN))
        before = idle_small_board.copy()
        idle_small_board.apply_move(Move(Coordinate(0, 0), DOWN))
        assert idle_small_board == before

    def test_apply_color_conflict(self, idle_small_board):
        with pytest.raises(ColorConflict):
            idle_small_board.apply_move(Move(Coordinate(2, 0), RIGHT))

    def test_apply_off_board(self, idle_small_board):
        with pytest.raises(Overconstrained):
            idle_small_board.apply_move(Move(Coordinate(0, 0), UP))

    def test_apply_diagonal_direction(self, idle_small_board):
        with pytest.raises(Overconstrained):
            idle_small_board.apply_move(Move(Coordinate(0, 0), Coordinate(1, 1)))

    def test_apply_start_off_board(self, idle_small_board):
        with pytest.raises(Overconstrained):
            idle_small_board.apply_move(Move(Coordinate(5, 5), DOWN))
        with pytest.raises(Overconstrained):
            idle_small_board.apply_move(Move(Coordinate(-1, 0), DOWN))

    def test_simulate_reports_malformed_move(self, idle_small_board):
        outcome = idle_small_board.simulate([Move(Coordinate(0, 0), Coordinate(0, 2))])
        assert not outcome.ok
        assert isinstance(outcome.error, Overconstrained)
        assert outcome.error.coordinate is None

    def test_apply_to_full_location(self):
        board = NumberlinkBoard.from_strings(["A.", ".."])
        board.clear_scheduled()
        board.get_location(0, 0).connect_to(RIGHT, board)
        with pytest.raises(Overconstrained):
            board.apply_move(Move(Coordinate(0, 0), DOWN))

    def test_simulate_leaves_board_untouched(self, idle_small_board):
        before = idle_small_board.copy()
        outcome = idle_small_board.simulate([Move(Coordinate(0, 0), DOWN)])
        assert outcome.ok
        assert outcome.board.is_solved()
        assert idle_small_board == before

    def test_simulate_reports_error(self, idle_small_board):
        outcome = idle_small_board.simulate([Move(Coordinate(2, 0), RIGHT)])
        assert not outcome.ok
        assert outcome.board is None
        assert isinstance(outcome.error, ColorConflict)

    def test_clone_then_same_moves(self, idle_small_board):
        """A copy replays the same moves to the same state."""
        clone = idle_small_board.copy()
        moves = [Move(Coordinate(0, 0), DOWN), Move(Coordinate(0, 0), RIGHT)]
        idle_small_board.apply_moves(moves)
        clone.apply_moves(moves)
        assert idle_small_board == clone
        assert not idle_small_board.diff(clone).any()

    def test_copy_is_independent(self, idle_small_board):
        clone = idle_small_board.copy()
        clone.get_location(0, 0).connect_to(DOWN, clone)
        assert idle_small_board.get_location(0, 0).count_connections() == 0


class TestBoardState:
    """Tests for board queries and rendering."""

    def test_open_locations(self, idle_small_board):
        assert len(idle_small_board.get_open_locations()) == 9
        assert idle_small_board.count_open() == 9
        idle_small_board.apply_move(Move(Coordinate(0, 0), DOWN))
        assert idle_small_board.get_open_locations() == []

    def test_diff(self, idle_small_board):
        other = idle_small_board.copy()
        other.get_location(0, 0).connect_to(RIGHT, other)
        mask = idle_small_board.diff(other)
        assert mask.dtype == bool
        assert mask.shape == (3, 3)
        assert mask.sum() == 2
        assert mask[0, 0] and mask[0, 1]

    def test_diff_size_mismatch(self, small_board):
        with pytest.raises(ValueError):
            small_board.diff(NumberlinkBoard.from_strings(["AA"]))

    def test_color_and_connection_grids(self, small_board):
        small_board.update_all()
        colors = small_board.color_grid()
        np.testing.assert_array_equal(colors, [[0, 0, 0], [0, 1, 0], [0, 1, 0]])
        connections = small_board.connection_grid()
        assert connections.shape == (3, 3, 4)
        assert connections[0, 0].tolist() == [False, True, False, True]

    def test_simple_readout(self):
        board = NumberlinkBoard.from_strings(["..", ".."])
        board.clear_scheduled()
        board.get_location(0, 0).color = 0
        board.get_location(0, 0).connect_to(RIGHT, board)
        board.get_location(0, 0).connect_to(DOWN, board)
        readout = board.simple_readout()
        assert "0| A-A |0" in readout
        assert "   | " in readout
        assert "1| A . |1" in readout
