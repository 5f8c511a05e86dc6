"""Turn-by-turn instructions for a path."""

import logging
from typing import Optional, Sequence

from .models import Direction, Position

logger = logging.getLogger(__name__)

EXIT_REACHED = "You have reached the exit"
METERS_PER_CELL = 10


def _straight(cells: int, turn: Optional[str], meters_per_cell: int) -> str:
    instruction = f"Go straight {cells * meters_per_cell} meters"
    if turn:
        instruction += f" and turn {turn}"
    return instruction


def generate_instructions(
    path: Sequence[Position],
    meters_per_cell: int = METERS_PER_CELL,
) -> list[str]:
    """
    Convert a path into natural-language directions.

    Consecutive steps in the same direction are merged into one
    "Go straight N meters" instruction. When the direction changes, the
    finished run is emitted with the turn towards the new direction
    ("right", "left" or "around"). The last run has no turn, and the
    exit message always closes the list.

    Args:
        path: Positions from start to exit, inclusive
        meters_per_cell: Distance represented by one grid cell

    Returns:
        Ordered list of instruction strings
    """
    if not path:
        return []

    instructions: list[str] = []
    current: Optional[Direction] = None
    run = 0

    for prev, pos in zip(path, path[1:]):
        direction = prev.direction_to(pos)
        if direction == current:
            run += 1
            continue
        if current is not None:
            instructions.append(_straight(run, current.turn_to(direction), meters_per_cell))
        current = direction
        run = 1

    # Single-cell path: no straight segment, only the closing message
    if current is not None:
        instructions.append(_straight(run, None, meters_per_cell))

    instructions.append(EXIT_REACHED)
    return instructions
