"""Enums for Executions bounded context."""

from enum import Enum


class JobStatus(str, Enum):
    """Execution job lifecycle status.

    State machine:
        QUEUED → PROCESSING → EXECUTED
        QUEUED → FAILED (validation/risk rejection, cancellation)
        PROCESSING → FAILED (risk rejection, exchange error, reconciliation)
    """

    QUEUED = "queued"
    """Job enqueued, waiting for a worker."""

    PROCESSING = "processing"
    """Worker claimed the job; an order may be in flight."""

    EXECUTED = "executed"
    """Order filled on the exchange (fully or partially)."""

    FAILED = "failed"
    """Job failed; error_message holds the reason."""

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.EXECUTED, JobStatus.FAILED)


class OrderSide(str, Enum):
    """Direction of the copied trade."""

    BUY = "buy"
    SELL = "sell"
