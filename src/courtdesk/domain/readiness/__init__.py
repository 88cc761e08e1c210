"""Coordination of independent asynchronous feeds."""

from __future__ import annotations

from .barrier import (
    UNRESOLVED,
    Failed,
    FeedOutcome,
    ReadinessBarrier,
    SettledCallback,
    SettledOutcomes,
    Succeeded,
    UnknownFeedError,
    Unresolved,
)

__all__ = [
    "UNRESOLVED",
    "Failed",
    "FeedOutcome",
    "ReadinessBarrier",
    "SettledCallback",
    "SettledOutcomes",
    "Succeeded",
    "UnknownFeedError",
    "Unresolved",
]
