"""
Recompute state and result records.

These dataclasses describe what the controller remembers between cycles
and what it hands to the persistence collaborators.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..routing.route import RoutePlan


class RecomputePhase(Enum):
    """Controller phase within a recompute cycle."""

    IDLE = "idle"
    COMPUTING = "computing"
    COMMITTED = "committed"
    FAILED = "failed"


class RecomputeOutcome(Enum):
    """What a single change notification led to."""

    NO_LAYOUT = "no_layout"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_BUSY = "skipped_busy"
    MISSING_ENTITY = "missing_entity"
    MALFORMED_LAYOUT = "malformed_layout"
    COMMITTED = "committed"
    FAILED = "failed"  # recorded in state only; handle_change raises instead


def fingerprint(layout: str) -> str:
    """Change-detection fingerprint of a layout string."""
    return hashlib.sha256(layout.encode("utf-8")).hexdigest()


@dataclass
class RouteResult:
    """
    Atomic result record written once per recompute cycle.

    The four fields are always persisted together.
    """

    layout: str
    warning: str
    instructions: list[str]
    current_instruction_index: int

    @classmethod
    def from_plan(cls, plan: RoutePlan) -> "RouteResult":
        return cls(
            layout=plan.layout,
            warning=plan.warning,
            instructions=list(plan.instructions),
            current_instruction_index=plan.cursor,
        )

    @property
    def success(self) -> bool:
        return self.current_instruction_index >= 0

    def to_document(self) -> dict[str, Any]:
        """Serialise with the field names used by the map document."""
        return {
            "layout": self.layout,
            "warning": self.warning,
            "instructions": list(self.instructions),
            "currentInstructionIndex": self.current_instruction_index,
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "RouteResult":
        return cls(
            layout=data.get("layout", ""),
            warning=data.get("warning", ""),
            instructions=list(data.get("instructions", [])),
            current_instruction_index=int(data.get("currentInstructionIndex", -1)),
        )


@dataclass
class RecomputeState:
    """Per-map controller state, kept across recompute cycles."""

    last_fingerprint: Optional[str] = None
    committed_fingerprint: Optional[str] = None  # layout this controller last wrote
    busy: bool = False
    phase: RecomputePhase = RecomputePhase.IDLE
    last_outcome: Optional[RecomputeOutcome] = None
    last_result: Optional[RouteResult] = None
    last_error: Optional[BaseException] = None
    cycles: int = 0

    def is_known(self, layout_fingerprint: str) -> bool:
        """Whether this fingerprint was already processed or written by us."""
        return layout_fingerprint in (self.last_fingerprint, self.committed_fingerprint)
