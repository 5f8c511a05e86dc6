"""JSON file export of route results."""

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..controller.state import RouteResult

logger = logging.getLogger(__name__)


class JsonFileExporter:
    """Mirrors every committed route result to a JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def write_result(self, result: "RouteResult") -> None:
        """Write the result record, replacing the previous file."""
        await asyncio.to_thread(self._write, result.to_document())

    def _write(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Error saving map to {self.path}: {e}")
            raise
        logger.info(f"Map saved to {self.path}")
