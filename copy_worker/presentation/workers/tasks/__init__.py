"""Celery tasks."""

from .execution_tasks import (
    dispatch_execution,
    enqueue_execution,
    execute_copy_trade,
    recover_stale_jobs,
)

__all__ = [
    "execute_copy_trade",
    "recover_stale_jobs",
    "enqueue_execution",
    "dispatch_execution",
]
