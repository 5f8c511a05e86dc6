"""
Floor map grid.

A layout string is a sequence of rows joined by "|", each row a run of
single-character cell codes, e.g. "U..|.0.|..S".
"""

import logging
from typing import Iterator, Optional

import numpy as np

from ..exceptions import InvalidPositionError, MalformedLayoutError
from .models import ROW_DELIMITER, CellCode, Position

logger = logging.getLogger(__name__)


class GridMap:
    """
    Rectangular grid of cell codes.

    Example usage:
        grid = GridMap.parse("U..|...|..S")
        user = grid.find_position(CellCode.USER)   # Position(x=0, y=0)
        grid.serialize()                           # "U..|...|..S"
    """

    def __init__(self, rows: list[list[str]], delimiter: str = ROW_DELIMITER):
        if not rows or not rows[0]:
            raise MalformedLayoutError("Layout has no cells")
        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise MalformedLayoutError(
                    f"Row {y} has {len(row)} cells, expected {width}"
                )
        self.rows = rows
        self.delimiter = delimiter

    @classmethod
    def parse(cls, layout: str, delimiter: str = ROW_DELIMITER) -> "GridMap":
        """
        Parse a layout string into a grid.

        Raises:
            MalformedLayoutError: if the layout is empty or not rectangular
        """
        if not layout:
            raise MalformedLayoutError("Layout string is empty")
        return cls([list(row) for row in layout.split(delimiter)], delimiter)

    def serialize(self) -> str:
        """Join cells per row and rows by the delimiter (inverse of parse)."""
        return self.delimiter.join("".join(row) for row in self.rows)

    def __str__(self) -> str:
        return self.serialize()

    def __repr__(self) -> str:
        return f"GridMap({self.width}x{self.height}, {self.serialize()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridMap):
            return NotImplemented
        return self.rows == other.rows

    @property
    def width(self) -> int:
        return len(self.rows[0])

    @property
    def height(self) -> int:
        return len(self.rows)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def get(self, pos: Position) -> str:
        return self.rows[pos.y][pos.x]

    def set(self, pos: Position, code: str) -> None:
        self.rows[pos.y][pos.x] = code.value if isinstance(code, CellCode) else code

    def copy(self) -> "GridMap":
        return GridMap([list(row) for row in self.rows], self.delimiter)

    def cells(self) -> Iterator[tuple[Position, str]]:
        """Iterate (position, code) in scan order: rows top-to-bottom, columns left-to-right."""
        for y, row in enumerate(self.rows):
            for x, code in enumerate(row):
                yield Position(x, y), code

    def find_position(self, code: str) -> Optional[Position]:
        """
        Find the first cell holding a code, in scan order.

        If the code appears more than once only the first occurrence is
        returned; later ones are ignored.
        """
        for pos, cell in self.cells():
            if cell == code:
                return pos
        return None

    def count(self, code: str) -> int:
        """Number of cells holding a code."""
        return sum(1 for _, cell in self.cells() if cell == code)

    def to_array(self) -> np.ndarray:
        """Get the grid as a (height, width) numpy array of 1-character strings."""
        return np.array(self.rows, dtype="<U1")


def place_user(layout: str, row: int, column: int, delimiter: str = ROW_DELIMITER) -> str:
    """
    Stamp the user cell into a floor plan.

    Args:
        layout: Floor plan layout string
        row: Row index (y)
        column: Column index (x)

    Returns:
        Updated layout string

    Raises:
        InvalidPositionError: if row/column lies outside the plan
        MalformedLayoutError: if the plan itself cannot be parsed
    """
    grid = GridMap.parse(layout, delimiter)
    pos = Position(column, row)
    if not grid.in_bounds(pos):
        raise InvalidPositionError(
            f"Position row={row}, column={column} is outside a {grid.height}x{grid.width} plan"
        )
    grid.set(pos, CellCode.USER)
    logger.debug(f"Placed user at {pos}")
    return grid.serialize()
