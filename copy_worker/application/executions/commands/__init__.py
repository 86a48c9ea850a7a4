"""Commands for Executions bounded context."""

from .execution_commands import (
    CancelJobCommand,
    EnqueueJobCommand,
    ExecuteJobCommand,
    RecoverStaleJobsCommand,
    RejectJobCommand,
)

__all__ = [
    "ExecuteJobCommand",
    "EnqueueJobCommand",
    "RejectJobCommand",
    "CancelJobCommand",
    "RecoverStaleJobsCommand",
]
