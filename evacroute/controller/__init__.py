"""Reactive recompute controller and its retry policy."""

from .recompute import ReactiveRecomputeController, ResultSink
from .retry import retry_with_backoff
from .state import (
    RecomputeOutcome,
    RecomputePhase,
    RecomputeState,
    RouteResult,
    fingerprint,
)

__all__ = [
    "ReactiveRecomputeController",
    "ResultSink",
    "retry_with_backoff",
    "RecomputeOutcome",
    "RecomputePhase",
    "RecomputeState",
    "RouteResult",
    "fingerprint",
]
