"""
Pathfinding for evacuation routes.

Implements 4-directional A* over the floor grid with a safety-aware
tie-break: among frontier nodes with equal f, the one that has crossed
fewer hazard buffer cells is expanded first. Path length optimality is
unaffected since the tie-break sits on top of f, not inside it.

Hazard buffer cells are only traversable when the caller allows it; the
strict/relaxed sequencing lives in route.py, the planner itself is
stateless per call.
"""

import heapq
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .grid import GridMap
from .models import SEARCH_DIRECTIONS, CellCode, Position

logger = logging.getLogger(__name__)


class PathStopReason(Enum):
    """Reasons why pathfinding stopped."""
    SUCCESS = "success"
    ALREADY_AT_EXIT = "already_at_exit"
    NO_PATH_EXISTS = "no_path_exists"


@dataclass
class PathResult:
    """Result of a pathfinding operation."""
    path: list[Position]
    reason: PathStopReason
    hazard_crossings: int = 0
    message: str = ""

    @property
    def success(self) -> bool:
        """Whether a path was found."""
        return self.reason in (PathStopReason.SUCCESS, PathStopReason.ALREADY_AT_EXIT)

    @property
    def steps(self) -> int:
        """Number of moves along the path."""
        return max(len(self.path) - 1, 0)

    def __bool__(self) -> bool:
        """Allow `if result:` to check for success."""
        return self.success

    def __iter__(self):
        """Allow `for pos in result:` to iterate path."""
        return iter(self.path)

    def __len__(self) -> int:
        """Return number of positions on the path."""
        return len(self.path)

    def __repr__(self) -> str:
        if self.success:
            return (
                f"PathResult(path=[{self.steps} steps], reason={self.reason.value}, "
                f"hazard_crossings={self.hazard_crossings})"
            )
        return f"PathResult(path=[], reason={self.reason.value}, message='{self.message}')"


@dataclass
class SearchNode:
    """One entry of the search arena. `parent` is an arena index."""
    pos: Position
    g: int
    h: int
    hazard_crossings: int = 0
    parent: Optional[int] = None

    @property
    def f(self) -> int:
        return self.g + self.h


@dataclass
class _SearchArena:
    """Nodes of a single search, addressed by integer handle."""
    nodes: list[SearchNode] = field(default_factory=list)

    def add(self, node: SearchNode) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def __getitem__(self, index: int) -> SearchNode:
        return self.nodes[index]

    def reconstruct(self, index: int) -> list[Position]:
        """Follow predecessor handles back to the start."""
        path = []
        current: Optional[int] = index
        while current is not None:
            node = self.nodes[current]
            path.append(node.pos)
            current = node.parent
        path.reverse()
        return path


def is_traversable(grid: GridMap, pos: Position, allow_hazard: bool = False) -> bool:
    """
    Check whether a cell may be entered.

    Walls and fire are never traversable; hazard buffer only when allowed.
    """
    if not grid.in_bounds(pos):
        return False
    code = grid.get(pos)
    if code in (CellCode.WALL.value, CellCode.FIRE.value):
        return False
    if code == CellCode.HAZARD.value and not allow_hazard:
        return False
    return True


def find_path(
    grid: GridMap,
    start: Position,
    goal: Position,
    allow_hazard: bool = False,
) -> PathResult:
    """
    Find a shortest path from start to goal using A*.

    Args:
        grid: Hazard-expanded floor grid
        start: Starting position (its own cell code is not checked)
        goal: Target position
        allow_hazard: Whether hazard buffer cells may be crossed

    Returns:
        PathResult with the full path (start and goal inclusive), or an
        empty path with reason NO_PATH_EXISTS
    """
    if start == goal:
        return PathResult([start], PathStopReason.ALREADY_AT_EXIT, message="Already at the exit")

    arena = _SearchArena()
    start_index = arena.add(SearchNode(start, g=0, h=start.manhattan_distance(goal)))

    # Priority queue: (f, hazard_crossings, counter, arena index)
    # Counter keeps equal keys first-in-first-out
    counter = 0
    open_heap = [(arena[start_index].f, 0, counter, start_index)]
    open_nodes: dict[Position, int] = {start: start_index}
    closed: set[Position] = set()

    while open_heap:
        f, crossings, _, index = heapq.heappop(open_heap)
        node = arena[index]

        # Skip entries superseded by a better estimate for the same cell
        if node.pos in closed or (f, crossings) != (node.f, node.hazard_crossings):
            continue

        if node.pos == goal:
            path = arena.reconstruct(index)
            logger.debug(
                f"find_path: {len(path) - 1} steps from {start} to {goal}, "
                f"{node.hazard_crossings} hazard crossings, {len(arena.nodes)} nodes"
            )
            return PathResult(path, PathStopReason.SUCCESS, hazard_crossings=node.hazard_crossings)

        del open_nodes[node.pos]
        closed.add(node.pos)

        for direction in SEARCH_DIRECTIONS:
            neighbor = node.pos.move(direction)
            if neighbor in closed or not is_traversable(grid, neighbor, allow_hazard):
                continue

            g = node.g + 1
            neighbor_crossings = node.hazard_crossings + (
                1 if grid.get(neighbor) == CellCode.HAZARD.value else 0
            )

            existing = open_nodes.get(neighbor)
            if existing is None:
                neighbor_index = arena.add(SearchNode(
                    neighbor,
                    g=g,
                    h=neighbor.manhattan_distance(goal),
                    hazard_crossings=neighbor_crossings,
                    parent=index,
                ))
                open_nodes[neighbor] = neighbor_index
            else:
                record = arena[existing]
                if not (g < record.g or (g == record.g and neighbor_crossings < record.hazard_crossings)):
                    continue
                record.g = g
                record.hazard_crossings = neighbor_crossings
                record.parent = index
                neighbor_index = existing

            counter += 1
            record = arena[neighbor_index]
            heapq.heappush(open_heap, (record.f, record.hazard_crossings, counter, neighbor_index))

    logger.debug(
        f"find_path: no path from {start} to {goal} (allow_hazard={allow_hazard}, "
        f"{len(closed)} cells explored)"
    )
    return PathResult(
        [],
        PathStopReason.NO_PATH_EXISTS,
        message=f"No path from {start} to {goal}",
    )
