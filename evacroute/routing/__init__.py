"""Routing kernel: grid, hazard buffers, A* search and instructions."""

from .grid import GridMap, place_user
from .hazards import expand_hazards, hazard_mask
from .instructions import EXIT_REACHED, generate_instructions
from .models import ROW_DELIMITER, CellCode, Direction, Position
from .pathfinding import PathResult, PathStopReason, SearchNode, find_path, is_traversable
from .route import (
    HAZARD_WARNING,
    NO_PATH_INSTRUCTION,
    NO_PATH_WARNING,
    RoutePlan,
    mark_path,
    plan_evacuation,
)

__all__ = [
    # Grid
    "GridMap",
    "place_user",
    "ROW_DELIMITER",
    "CellCode",
    "Direction",
    "Position",
    # Hazards
    "expand_hazards",
    "hazard_mask",
    # Search
    "PathResult",
    "PathStopReason",
    "SearchNode",
    "find_path",
    "is_traversable",
    # Instructions
    "EXIT_REACHED",
    "generate_instructions",
    # Two-phase planning
    "HAZARD_WARNING",
    "NO_PATH_INSTRUCTION",
    "NO_PATH_WARNING",
    "RoutePlan",
    "mark_path",
    "plan_evacuation",
]
