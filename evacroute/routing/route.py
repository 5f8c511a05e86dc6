"""
Two-phase evacuation route planning.

1. Strict search: hazard buffer cells are impassable.
2. Relaxed search: hazard buffer cells may be crossed; the plan carries a warning.
3. Neither finds a path: terminal failure plan with an error instruction.
"""

import logging
from dataclasses import dataclass, field

from .grid import GridMap
from .hazards import expand_hazards
from .instructions import METERS_PER_CELL, generate_instructions
from .models import CellCode, Position
from .pathfinding import PathResult, find_path

logger = logging.getLogger(__name__)

HAZARD_WARNING = "WARNING: This path passes through fire zones. Proceed with extreme caution!"
NO_PATH_WARNING = "ERROR: No path to exit found. Seek immediate assistance!"
NO_PATH_INSTRUCTION = "No safe path to exit available. Seek immediate assistance!"

# Cells never overwritten by the path marker
_UNMARKED = (CellCode.USER.value, CellCode.EXIT.value, CellCode.FIRE.value)


@dataclass
class RoutePlan:
    """Outcome of planning a route on one layout."""
    result: PathResult
    layout: str
    warning: str = ""
    instructions: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.result.success

    @property
    def crosses_hazard(self) -> bool:
        """Whether the route was only found by crossing hazard buffer cells."""
        return self.success and bool(self.warning)

    @property
    def cursor(self) -> int:
        """Initial instruction index: 0 on success, -1 on total failure."""
        return 0 if self.success else -1

    @property
    def path(self) -> list[Position]:
        return self.result.path


def mark_path(grid: GridMap, path: list[Position]) -> GridMap:
    """
    Stamp path markers onto a copy of the grid.

    Markers left over from an earlier route are cleared first. User, exit
    and fire cells keep their code.
    """
    marked = grid.copy()
    for pos, code in grid.cells():
        if code == CellCode.PATH.value:
            marked.set(pos, CellCode.FLOOR)
    for pos in path:
        if marked.get(pos) not in _UNMARKED:
            marked.set(pos, CellCode.PATH)
    return marked


def plan_evacuation(
    grid: GridMap,
    start: Position,
    goal: Position,
    meters_per_cell: int = METERS_PER_CELL,
) -> RoutePlan:
    """
    Plan a route from start to goal, preferring hazard-free paths.

    Args:
        grid: Authoritative floor grid (no hazard buffer cells)
        start: User position
        goal: Exit position
        meters_per_cell: Distance represented by one grid cell

    Returns:
        RoutePlan with annotated layout, warning and instructions
    """
    hazard_grid = expand_hazards(grid)

    result = find_path(hazard_grid, start, goal, allow_hazard=False)
    warning = ""
    if not result:
        logger.info("No hazard-free path, retrying with hazard crossing allowed")
        result = find_path(hazard_grid, start, goal, allow_hazard=True)
        if result:
            warning = HAZARD_WARNING

    if not result:
        logger.warning(f"No path from {start} to exit {goal}, even through fire zones")
        return RoutePlan(
            result=result,
            layout=mark_path(grid, []).serialize(),
            warning=NO_PATH_WARNING,
            instructions=[NO_PATH_INSTRUCTION],
        )

    return RoutePlan(
        result=result,
        layout=mark_path(grid, result.path).serialize(),
        warning=warning,
        instructions=generate_instructions(result.path, meters_per_cell),
    )
