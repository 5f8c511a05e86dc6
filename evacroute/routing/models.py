"""
Data models for evacuation routing.

Cell codes, grid positions and compass directions shared by the grid,
hazard, pathfinding and instruction modules.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CellCode(str, Enum):
    """Single-character cell codes used in floor layouts."""

    WALL = "0"
    FIRE = "F"
    USER = "U"
    EXIT = "S"
    HAZARD = "Z"  # derived only, never authoritative input
    PATH = "P"  # output-only annotation
    FLOOR = "."  # canonical floor; any unknown character is floor too


ROW_DELIMITER = "|"


class Direction(Enum):
    """Cardinal movement directions, listed in clockwise order."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def delta(self) -> tuple[int, int]:
        """Get (dx, dy) for this direction."""
        deltas = {
            Direction.NORTH: (0, -1),
            Direction.EAST: (1, 0),
            Direction.SOUTH: (0, 1),
            Direction.WEST: (-1, 0),
        }
        return deltas[self]

    def turn_to(self, other: "Direction") -> Optional[str]:
        """
        Name the turn needed to face another direction.

        Returns "right", "left" or "around", or None when no turn is needed.
        """
        diff = (CLOCKWISE.index(other) - CLOCKWISE.index(self)) % 4
        return {1: "right", 2: "around", 3: "left"}.get(diff)


CLOCKWISE = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)

# Neighbor expansion order for the search: west, east, north, south
SEARCH_DIRECTIONS = (Direction.WEST, Direction.EAST, Direction.NORTH, Direction.SOUTH)


@dataclass(frozen=True, order=True)
class Position:
    """A cell on the floor map (x = column, y = row)."""

    x: int
    y: int

    def manhattan_distance(self, other: "Position") -> int:
        """Number of unit moves with 4-directional movement."""
        return abs(self.x - other.x) + abs(self.y - other.y)

    def chebyshev_distance(self, other: "Position") -> int:
        """Number of moves with 8-directional movement."""
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def direction_to(self, other: "Position") -> Optional[Direction]:
        """Get the compass direction of an orthogonally adjacent position."""
        if other.x > self.x:
            return Direction.EAST
        if other.x < self.x:
            return Direction.WEST
        if other.y > self.y:
            return Direction.SOUTH
        if other.y < self.y:
            return Direction.NORTH
        return None

    def move(self, direction: Direction) -> "Position":
        """Get position after moving one step in a direction."""
        dx, dy = direction.delta
        return Position(self.x + dx, self.y + dy)
