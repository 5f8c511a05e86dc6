"""
In-memory map document store.

Holds building floor plans and the single "current map" document, and
pushes the current layout to subscribers after every write. Writes are
last-write-wins; nothing is persisted across restarts.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from ..exceptions import BuildingNotFoundError, FloorNotFoundError
from ..routing.grid import place_user

if TYPE_CHECKING:
    from ..controller.state import RouteResult

logger = logging.getLogger(__name__)

ChangeListener = Callable[[Optional[str]], Awaitable[Any]]


def floor_key(floor_number: int) -> str:
    """Document key of a floor plan."""
    return f"floor_{floor_number}"


class MapDocumentStore:
    """
    Document store for floor plans and the current map.

    Example usage:
        store = MapDocumentStore()
        store.add_floor("HQ", 1, "....|.0.S|....")
        store.subscribe(controller.handle_change)
        store.update_position("HQ", 1, row=0, column=0)
        await store.drain()
    """

    def __init__(self) -> None:
        self._buildings: dict[str, dict[str, str]] = {}
        self._current: Optional[dict[str, Any]] = None
        self._listeners: list[ChangeListener] = []
        self._pending: set[asyncio.Task] = set()

    # =========================================================================
    # Floor plans
    # =========================================================================

    def add_floor(self, building_name: str, floor_number: int, layout: str) -> None:
        """Store (or replace) the plan of one floor."""
        self._buildings.setdefault(building_name, {})[floor_key(floor_number)] = layout

    def get_floor(self, building_name: str, floor_number: int) -> str:
        """
        Get the plan of one floor.

        Raises:
            BuildingNotFoundError: if the building is unknown
            FloorNotFoundError: if the building has no such floor
        """
        building = self._buildings.get(building_name)
        if building is None:
            raise BuildingNotFoundError(f"Building not found: {building_name}")
        layout = building.get(floor_key(floor_number))
        if layout is None:
            raise FloorNotFoundError(f"Floor not found: {building_name} floor {floor_number}")
        return layout

    def update_position(
        self,
        building_name: str,
        floor_number: int,
        row: int,
        column: int,
    ) -> str:
        """
        Place the user on a floor plan and make it the current map.

        Args:
            building_name: Building holding the plan
            floor_number: Floor of the building
            row: User row (y)
            column: User column (x)

        Returns:
            The new current layout

        Raises:
            ValueError: if a required field is missing
            BuildingNotFoundError, FloorNotFoundError: if the plan does not exist
            InvalidPositionError: if row/column lies outside the plan
        """
        if not building_name or floor_number is None or row is None or column is None:
            raise ValueError("Missing required fields")

        layout = place_user(self.get_floor(building_name, floor_number), row, column)
        self.set_current({
            "buildingName": building_name,
            "floorNumber": floor_number,
            "layout": layout,
        })
        logger.info(f"User position updated to row={row}, column={column} on {building_name} floor {floor_number}")
        return layout

    # =========================================================================
    # Current map document
    # =========================================================================

    def get_current(self) -> Optional[dict[str, Any]]:
        """Get a copy of the current map document, or None if never written."""
        return dict(self._current) if self._current is not None else None

    def set_current(self, document: dict[str, Any]) -> None:
        """Replace the current map document."""
        self._current = dict(document)
        self._notify()

    def update_current(self, fields: dict[str, Any]) -> None:
        """Merge fields into the current map document."""
        self._current = {**(self._current or {}), **fields}
        self._notify()

    async def write_result(self, result: "RouteResult") -> None:
        """Persist a route result into the current map document."""
        self.update_current(result.to_document())

    # =========================================================================
    # Change notifications
    # =========================================================================

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register an async listener called with the current layout after every write.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        layout = self._current.get("layout") if self._current else None
        loop = asyncio.get_running_loop()
        for listener in list(self._listeners):
            task = loop.create_task(self._deliver(listener, layout))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _deliver(self, listener: ChangeListener, layout: Optional[str]) -> None:
        try:
            await listener(layout)
        except Exception as e:
            logger.exception(f"Error in change listener: {e}")

    async def drain(self) -> None:
        """Wait until every pending notification (and any it triggered) has been delivered."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
