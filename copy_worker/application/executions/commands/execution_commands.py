"""Execution job commands."""

from dataclasses import dataclass
from decimal import Decimal

from copy_worker.application.shared import Command


@dataclass(frozen=True)
class ExecuteJobCommand(Command):
    """Command to execute one copy-trade job.

    Orchestrates:
    1. Load or create the job; resolve redeliveries (idempotency by ID)
    2. Phase 1: claim the job and run the risk gate under the account lock
    3. Submit the IOC order (retry + circuit breaker inside the connector)
    4. Phase 2: record the fill or the failure
    5. Publish domain events

    Example:
        >>> command = ExecuteJobCommand(
        ...     execution_id="job-1",
        ...     source_signal="sig-9",
        ...     account="acc-1",
        ...     exchange="binance",
        ...     base="BTC",
        ...     quote="USDT",
        ...     side="buy",
        ...     requested_size=Decimal("0.01"),
        ...     max_slippage=Decimal("0.5"),
        ... )
        >>> outcome = await handler.handle(command)
    """

    execution_id: str
    """Job ID; idempotency key and exchange client order ID."""

    source_signal: str
    """ID of the master signal being copied."""

    account: str
    """Follower account."""

    exchange: str
    """Venue name (binance, kucoin, kraken)."""

    base: str
    quote: str

    side: str
    """"buy" or "sell"."""

    requested_size: Decimal
    """Base asset quantity before risk adjustment."""

    max_slippage: Decimal
    """Max slippage in percent, (0, 10]."""


@dataclass(frozen=True)
class EnqueueJobCommand(ExecuteJobCommand):
    """Command to persist a QUEUED job before it is dispatched to the worker."""

    pass


@dataclass(frozen=True)
class RejectJobCommand(Command):
    """Command to fail a delivery whose payload cannot become a job."""

    execution_id: str
    reason: str


@dataclass(frozen=True)
class CancelJobCommand(Command):
    """Command to cancel a job no worker has claimed yet."""

    execution_id: str


@dataclass(frozen=True)
class RecoverStaleJobsCommand(Command):
    """Command to fail PROCESSING jobs older than the stale timeout."""

    older_than_seconds: int
