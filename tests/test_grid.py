"""Tests for the floor grid."""

import numpy as np
import pytest

from evacroute.exceptions import InvalidPositionError, MalformedLayoutError
from evacroute.routing.grid import GridMap, place_user
from evacroute.routing.models import CellCode, Direction, Position


class TestParseSerialize:
    """Tests for parsing and serializing layouts."""

    def test_parse_rows_and_cells(self):
        grid = GridMap.parse("U..|.0.|..S")
        assert grid.height == 3
        assert grid.width == 3
        assert grid.rows[1] == [".", "0", "."]

    @pytest.mark.parametrize("layout", [
        "U..|...|..S",
        "0000|0UF0|0.S0|0000",
        "x",
        "P.PZ|abcd",
    ])
    def test_round_trip(self, layout):
        """serialize(parse(s)) == s for well-formed layouts."""
        assert GridMap.parse(layout).serialize() == layout

    def test_str_is_serialize(self):
        grid = GridMap.parse("U.|.S")
        assert str(grid) == "U.|.S"

    def test_custom_delimiter(self):
        grid = GridMap.parse("U.;.S", delimiter=";")
        assert grid.height == 2
        assert grid.serialize() == "U.;.S"

    def test_empty_layout_rejected(self):
        with pytest.raises(MalformedLayoutError):
            GridMap.parse("")

    def test_ragged_rows_rejected(self):
        with pytest.raises(MalformedLayoutError, match="Row 1"):
            GridMap.parse("U..|..|..S")

    def test_empty_row_rejected(self):
        with pytest.raises(MalformedLayoutError):
            GridMap.parse("U..||..S")


class TestAccessors:
    """Tests for grid accessors."""

    def test_get_and_set(self):
        grid = GridMap.parse("...|...")
        grid.set(Position(2, 1), CellCode.FIRE)
        assert grid.get(Position(2, 1)) == "F"
        assert grid.serialize() == "...|..F"

    def test_in_bounds(self):
        grid = GridMap.parse("...|...")
        assert grid.in_bounds(Position(2, 1))
        assert not grid.in_bounds(Position(3, 0))
        assert not grid.in_bounds(Position(0, 2))
        assert not grid.in_bounds(Position(-1, 0))

    def test_copy_is_independent(self):
        grid = GridMap.parse("...")
        clone = grid.copy()
        clone.set(Position(0, 0), CellCode.WALL)
        assert grid.serialize() == "..."
        assert clone.serialize() == "0.."

    def test_to_array(self):
        arr = GridMap.parse("U0|.S").to_array()
        assert arr.shape == (2, 2)
        assert arr[0, 1] == "0"
        assert np.array_equal(arr == "S", np.array([[False, False], [False, True]]))


class TestFindPosition:
    """Tests for locating cells."""

    def test_find_user_and_exit(self):
        grid = GridMap.parse("...|.U.|..S")
        assert grid.find_position(CellCode.USER) == Position(1, 1)
        assert grid.find_position(CellCode.EXIT) == Position(2, 2)

    def test_not_found(self):
        assert GridMap.parse("...|...").find_position(CellCode.EXIT) is None

    def test_first_in_scan_order_wins(self):
        """Duplicates are ignored: rows top-to-bottom, then columns left-to-right."""
        grid = GridMap.parse("..S|S..|...")
        assert grid.find_position(CellCode.EXIT) == Position(2, 0)
        assert grid.count(CellCode.EXIT) == 2


class TestPlaceUser:
    """Tests for stamping the user into a floor plan."""

    def test_place_user(self):
        assert place_user("...|..S", row=1, column=0) == "...|U.S"

    def test_out_of_range(self):
        with pytest.raises(InvalidPositionError):
            place_user("...|..S", row=2, column=0)
        with pytest.raises(InvalidPositionError):
            place_user("...|..S", row=0, column=3)


class TestPosition:
    """Tests for grid positions."""

    def test_move_and_direction(self):
        pos = Position(2, 2)
        assert pos.move(Direction.NORTH) == Position(2, 1)
        assert pos.move(Direction.WEST) == Position(1, 2)
        assert pos.direction_to(Position(2, 3)) == Direction.SOUTH
        assert pos.direction_to(pos) is None

    def test_moves_only_by_direction(self):
        with pytest.raises(TypeError):
            Position(0, 0) + (1, 0)
