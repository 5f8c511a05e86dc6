"""Terminal rendering of layouts and route results."""

from rich.text import Text

from .controller.state import RouteResult
from .routing.grid import GridMap
from .routing.models import CellCode

CELL_STYLES = {
    CellCode.WALL.value: "white on grey30",
    CellCode.FIRE.value: "bold red",
    CellCode.HAZARD.value: "yellow",
    CellCode.USER.value: "bold cyan",
    CellCode.EXIT.value: "bold green",
    CellCode.PATH.value: "green",
}


def render_grid(grid: GridMap) -> Text:
    """One line per row, each cell coloured by its code."""
    text = Text()
    for y, row in enumerate(grid.rows):
        if y:
            text.append("\n")
        for code in row:
            text.append(code, style=CELL_STYLES.get(code, "dim"))
    return text


def render_result(result: RouteResult) -> Text:
    """Render the annotated layout followed by the warning and numbered instructions."""
    text = render_grid(GridMap.parse(result.layout))
    text.append("\n")

    if result.warning:
        style = "yellow bold" if result.success else "red bold"
        text.append(f"\n{result.warning}\n", style=style)

    for i, instruction in enumerate(result.instructions, start=1):
        text.append(f"\n{i:2d}. ", style="dim")
        text.append(instruction)
    return text
