"""
Hazard buffer expansion.

Every cell in the ring of eight neighbours around a fire cell is treated as
unsafe (hazard buffer), except fire and wall cells which keep their code.
The ring is computed from the original fire cells only, so buffers never
spread further than one cell from a fire source.
"""

import logging

import numpy as np

from .grid import GridMap
from .models import CellCode

logger = logging.getLogger(__name__)


def hazard_mask(grid: GridMap) -> np.ndarray:
    """
    Compute which cells become hazard buffer.

    Args:
        grid: Original floor grid

    Returns:
        (height, width) boolean array, True where the cell becomes hazard buffer
    """
    cells = grid.to_array()
    fire = cells == CellCode.FIRE.value
    wall = cells == CellCode.WALL.value

    # Dilate the fire mask by one cell in all 8 directions
    padded = np.pad(fire, 1, mode="constant", constant_values=False)
    near_fire = np.zeros_like(fire)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            near_fire |= padded[1 + dy:1 + dy + grid.height, 1 + dx:1 + dx + grid.width]

    return near_fire & ~fire & ~wall


def expand_hazards(grid: GridMap) -> GridMap:
    """
    Build a new grid with hazard buffer cells stamped around every fire.

    The input grid is not modified.
    """
    mask = hazard_mask(grid)
    expanded = grid.copy()
    for y, x in zip(*np.nonzero(mask)):
        expanded.rows[y][x] = CellCode.HAZARD.value

    logger.debug(f"Hazard expansion marked {int(mask.sum())} buffer cells")
    return expanded
