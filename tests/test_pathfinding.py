"""Tests for A* pathfinding with the hazard tie-break."""

import random
from collections import deque

import pytest

from evacroute.routing.grid import GridMap
from evacroute.routing.hazards import expand_hazards
from evacroute.routing.models import Position
from evacroute.routing.pathfinding import (
    PathStopReason,
    find_path,
    is_traversable,
)


def bfs_distance(grid: GridMap, start: Position, goal: Position, allow_hazard: bool = False):
    """Brute-force shortest path length, or None if unreachable."""
    seen = {start}
    queue = deque([(start, 0)])
    while queue:
        pos, dist = queue.popleft()
        if pos == goal:
            return dist
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nxt = Position(pos.x + dx, pos.y + dy)
            if nxt not in seen and is_traversable(grid, nxt, allow_hazard):
                seen.add(nxt)
                queue.append((nxt, dist + 1))
    return None


def assert_valid_path(grid: GridMap, path: list[Position], allow_hazard: bool = False):
    for prev, pos in zip(path, path[1:]):
        assert prev.manhattan_distance(pos) == 1, f"{prev} -> {pos} is not a unit step"
        assert is_traversable(grid, pos, allow_hazard), f"{pos} is not traversable"


def random_grid(rng: random.Random, width: int, height: int) -> tuple[GridMap, Position, Position]:
    cells = [[rng.choice("....0.F") for _ in range(width)] for _ in range(height)]
    start = Position(rng.randrange(width), rng.randrange(height))
    goal = Position(rng.randrange(width), rng.randrange(height))
    while goal == start:
        goal = Position(rng.randrange(width), rng.randrange(height))
    cells[start.y][start.x] = "U"
    cells[goal.y][goal.x] = "S"
    return GridMap(cells), start, goal


class TestTraversable:
    """Tests for the traversability predicate."""

    def test_walls_and_fire_blocked(self):
        grid = GridMap.parse("0F.|ZUS")
        assert not is_traversable(grid, Position(0, 0))
        assert not is_traversable(grid, Position(1, 0))
        assert is_traversable(grid, Position(2, 0))

    def test_hazard_only_when_allowed(self):
        grid = GridMap.parse("Z")
        assert not is_traversable(grid, Position(0, 0))
        assert is_traversable(grid, Position(0, 0), allow_hazard=True)

    def test_out_of_bounds(self):
        grid = GridMap.parse("..")
        assert not is_traversable(grid, Position(2, 0))
        assert not is_traversable(grid, Position(0, -1))

    def test_markers_and_unknown_codes_are_floor(self):
        grid = GridMap.parse("PUSx")
        for x in range(4):
            assert is_traversable(grid, Position(x, 0))


class TestFindPath:
    """Tests for find_path."""

    def test_open_grid_east_then_south(self):
        """U at top-left, exit bottom-right: 4 steps, eastward run first."""
        grid = GridMap.parse("U..|...|..S")
        result = find_path(grid, Position(0, 0), Position(2, 2))

        assert result.success
        assert result.reason == PathStopReason.SUCCESS
        assert result.steps == 4
        assert result.path == [
            Position(0, 0), Position(1, 0), Position(2, 0), Position(2, 1), Position(2, 2),
        ]

    def test_path_includes_start_and_goal(self):
        grid = GridMap.parse("U.S")
        result = find_path(grid, Position(0, 0), Position(2, 0))
        assert result.path[0] == Position(0, 0)
        assert result.path[-1] == Position(2, 0)
        assert len(result) == 3

    def test_start_equals_goal(self):
        grid = GridMap.parse("U..")
        result = find_path(grid, Position(0, 0), Position(0, 0))
        assert result
        assert result.reason == PathStopReason.ALREADY_AT_EXIT
        assert result.path == [Position(0, 0)]
        assert result.steps == 0

    def test_routes_around_walls(self):
        grid = GridMap.parse("U0.|.0.|..S")
        result = find_path(grid, Position(0, 0), Position(2, 2))
        assert result.steps == 4
        assert result.path[1] == Position(0, 1)
        assert_valid_path(grid, result.path)

    def test_no_diagonal_moves(self):
        grid = GridMap.parse("U0|0S")
        result = find_path(grid, Position(0, 0), Position(1, 1))
        assert not result
        assert result.path == []
        assert result.reason == PathStopReason.NO_PATH_EXISTS

    def test_enclosed_user_has_no_path(self):
        grid = expand_hazards(GridMap.parse("000...|0U0...|000..S"))
        strict = find_path(grid, Position(1, 1), Position(5, 2))
        relaxed = find_path(grid, Position(1, 1), Position(5, 2), allow_hazard=True)
        assert not strict
        assert not relaxed

    def test_start_on_hazard_is_allowed(self):
        """The start cell itself is never checked."""
        grid = expand_hazards(GridMap.parse("0F...|U....|.....|....S"))
        assert grid.get(Position(0, 1)) == "Z"

        result = find_path(grid, Position(0, 1), Position(4, 3))
        assert result
        assert result.hazard_crossings == 0

    def test_strict_refuses_hazard(self):
        grid = expand_hazards(GridMap.parse("U...S|00F00"))
        assert not find_path(grid, Position(0, 0), Position(4, 0))

        relaxed = find_path(grid, Position(0, 0), Position(4, 0), allow_hazard=True)
        assert relaxed
        assert relaxed.steps == 4
        assert relaxed.hazard_crossings == 3
        assert_valid_path(grid, relaxed.path, allow_hazard=True)

    def test_result_repr(self):
        grid = GridMap.parse("U.S")
        assert "2 steps" in repr(find_path(grid, Position(0, 0), Position(2, 0)))


class TestTieBreak:
    """Among equal-length routes, the one with fewer hazard crossings wins."""

    def test_prefers_safer_equal_length_route(self):
        # Two 4-step routes around the centre wall; the top one runs beside the fire
        grid = expand_hazards(GridMap.parse("U..F.|.0...|..S.."))
        result = find_path(grid, Position(0, 0), Position(2, 2), allow_hazard=True)

        assert result.steps == 4
        assert result.hazard_crossings == 0
        assert Position(0, 2) in result.path

    def test_fewest_crossings_when_hazard_unavoidable(self):
        # Both 6-step routes cross buffer cells: three above the wall, two below
        layout = (
            "..F..|"
            ".....|"
            "U000S|"
            ".....|"
            "....F"
        )
        grid = expand_hazards(GridMap.parse(layout))
        start, goal = Position(0, 2), Position(4, 2)
        assert bfs_distance(grid, start, goal) is None

        result = find_path(grid, start, goal, allow_hazard=True)
        assert result.steps == 6
        assert result.hazard_crossings == 2
        assert Position(2, 3) in result.path

    def test_length_never_traded_for_safety(self):
        # Safe detour is longer; relaxed search takes the shorter hazardous route
        layout = (
            "U.Z.S|"
            ".000.|"
            "....."
        )
        grid = GridMap.parse(layout)
        result = find_path(grid, Position(0, 0), Position(4, 0), allow_hazard=True)
        assert result.steps == 4
        assert result.hazard_crossings == 1


class TestOptimality:
    """Strict-phase paths are as short as a brute-force search."""

    @pytest.mark.parametrize("seed", range(40))
    def test_matches_bfs(self, seed):
        rng = random.Random(seed)
        grid, start, goal = random_grid(rng, rng.randint(2, 7), rng.randint(2, 7))
        hazard_grid = expand_hazards(grid)

        for allow_hazard in (False, True):
            expected = bfs_distance(hazard_grid, start, goal, allow_hazard)
            result = find_path(hazard_grid, start, goal, allow_hazard)
            if expected is None:
                assert not result
                assert result.path == []
            else:
                assert result.steps == expected
                assert result.path[0] == start and result.path[-1] == goal
                assert_valid_path(hazard_grid, result.path, allow_hazard)
