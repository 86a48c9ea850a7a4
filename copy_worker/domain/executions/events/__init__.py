"""Domain events for Executions bounded context."""

from .execution_events import (
    ExecutionCompletedEvent,
    ExecutionFailedEvent,
    ExecutionNeedsReconciliationEvent,
    ExecutionStartedEvent,
)

__all__ = [
    "ExecutionStartedEvent",
    "ExecutionCompletedEvent",
    "ExecutionFailedEvent",
    "ExecutionNeedsReconciliationEvent",
]
