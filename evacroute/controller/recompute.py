"""
Reactive route recomputation.

The controller listens for changes to the current map layout and, for each
new layout, re-plans the evacuation route and writes the result to its
sinks. It keeps three guarantees:

- Debounce: a layout identical to the last processed one (or to the one the
  controller itself just wrote) is ignored.
- Single-flight: while a cycle is running, further notifications are
  dropped, not queued.
- Bounded retry: only the persistence step is retried, with exponential
  backoff. A layout is never reprocessed after its cycle ends, even if the
  write failed.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Protocol, Sequence

from ..config import ControllerConfig
from ..exceptions import MalformedLayoutError, PersistenceError
from ..routing import CellCode, GridMap, plan_evacuation
from .retry import retry_with_backoff
from .state import (
    RecomputeOutcome,
    RecomputePhase,
    RecomputeState,
    RouteResult,
    fingerprint,
)

if TYPE_CHECKING:
    from ..storage.store import MapDocumentStore

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    """Anything that can persist a route result."""

    async def write_result(self, result: RouteResult) -> None:
        ...


class ReactiveRecomputeController:
    """
    Drives route recomputation for one monitored map.

    Example usage:
        store = MapDocumentStore()
        controller = ReactiveRecomputeController([store, JsonFileExporter(path)])
        controller.attach(store)
        store.set_current({"layout": "U..|...|..S"})   # triggers a cycle
        await store.drain()
    """

    def __init__(
        self,
        sinks: Sequence[ResultSink],
        config: Optional[ControllerConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the controller.

        Args:
            sinks: Persistence collaborators, written in order on every commit
            config: Retry and instruction settings
            sleep: Awaitable sleep function (injectable for tests)
        """
        self.sinks = list(sinks)
        self.config = config or ControllerConfig()
        self.state = RecomputeState()
        self._sleep = sleep

    @property
    def busy(self) -> bool:
        return self.state.busy

    def attach(self, store: "MapDocumentStore") -> Callable[[], None]:
        """Subscribe to a store's change notifications. Returns the unsubscribe callable."""
        return store.subscribe(self.handle_change)

    async def handle_change(self, layout: Optional[str]) -> RecomputeOutcome:
        """
        Handle a change notification carrying the current layout.

        Returns:
            What the notification led to

        Raises:
            PersistenceError: if the result could not be written after all retries
        """
        if self.state.busy:
            logger.info("Already processing an update, skipping...")
            return RecomputeOutcome.SKIPPED_BUSY

        if not layout:
            logger.debug("Notification without a layout, ignoring")
            return RecomputeOutcome.NO_LAYOUT

        layout_fingerprint = fingerprint(layout)
        if self.state.is_known(layout_fingerprint):
            logger.info("Layout unchanged, skipping update...")
            return RecomputeOutcome.SKIPPED_DUPLICATE

        logger.info("Layout changed, processing update...")
        self.state.busy = True
        self.state.phase = RecomputePhase.COMPUTING
        outcome = RecomputeOutcome.FAILED
        try:
            outcome = await self._recompute(layout)
            return outcome
        except PersistenceError as e:
            self.state.last_error = e
            logger.error(f"Recompute failed: {e}")
            raise
        finally:
            self.state.busy = False
            self.state.last_fingerprint = layout_fingerprint
            self.state.last_outcome = outcome
            self.state.cycles += 1
            if outcome == RecomputeOutcome.COMMITTED:
                self.state.phase = RecomputePhase.COMMITTED
            elif outcome == RecomputeOutcome.MISSING_ENTITY:
                self.state.phase = RecomputePhase.IDLE
            else:
                self.state.phase = RecomputePhase.FAILED

    async def _recompute(self, layout: str) -> RecomputeOutcome:
        try:
            grid = GridMap.parse(layout)
        except MalformedLayoutError as e:
            self.state.last_error = e
            logger.error(f"Malformed layout, not routing: {e}")
            return RecomputeOutcome.MALFORMED_LAYOUT

        user = grid.find_position(CellCode.USER)
        exit_pos = grid.find_position(CellCode.EXIT)
        if user is None or exit_pos is None:
            logger.warning("User or exit not found on the map")
            return RecomputeOutcome.MISSING_ENTITY

        for code, label, pos in ((CellCode.USER, "user", user), (CellCode.EXIT, "exit", exit_pos)):
            occurrences = grid.count(code)
            if occurrences > 1:
                logger.warning(f"{occurrences} {label} cells on the map, using the first at {pos}")

        plan = plan_evacuation(grid, user, exit_pos, self.config.meters_per_cell)
        result = RouteResult.from_plan(plan)
        if not plan.success:
            logger.warning("No path found, even allowing fire zone crossings")

        await self._persist(result)

        self.state.last_result = result
        self.state.last_error = None
        self.state.committed_fingerprint = fingerprint(result.layout)
        logger.info(
            "Path and instructions updated" + (" with warning" if result.warning else "")
        )
        return RecomputeOutcome.COMMITTED

    async def _persist(self, result: RouteResult) -> None:
        """Write the result to every sink, retrying the whole write on failure."""

        async def write() -> None:
            if self.config.commit_delay > 0:
                await self._sleep(self.config.commit_delay)
            for sink in self.sinks:
                await sink.write_result(result)

        try:
            await retry_with_backoff(
                write,
                max_attempts=self.config.max_attempts,
                base_delay=self.config.base_delay,
                sleep=self._sleep,
            )
        except Exception as e:
            raise PersistenceError(
                f"Could not persist route result after {self.config.max_attempts} attempts: {e}",
                attempts=self.config.max_attempts,
            ) from e
