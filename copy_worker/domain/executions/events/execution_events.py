"""Domain Events for Executions bounded context."""

from dataclasses import dataclass
from decimal import Decimal

from copy_worker.domain.shared import DomainEvent


@dataclass(frozen=True)
class ExecutionStartedEvent(DomainEvent):
    """Event: worker claimed the job (queued → processing)."""

    execution_id: str
    account: str
    attempt: int


@dataclass(frozen=True)
class ExecutionCompletedEvent(DomainEvent):
    """Event: order filled on the exchange.

    Critical event - the follower's funds were spent.
    """

    execution_id: str
    account: str
    source_signal: str
    symbol: str
    side: str
    exchange_order_id: str
    filled_quantity: Decimal
    average_price: Decimal
    fee_amount: Decimal


@dataclass(frozen=True)
class ExecutionFailedEvent(DomainEvent):
    """Event: job failed (validation, risk rejection, exchange error, cancel)."""

    execution_id: str
    account: str
    source_signal: str
    error_message: str


@dataclass(frozen=True)
class ExecutionNeedsReconciliationEvent(DomainEvent):
    """Event: order state unknown after an interrupted attempt.

    Requires manual or automated comparison with the exchange order history
    (client order ID = execution_id).
    """

    execution_id: str
    account: str
    exchange: str
    reason: str
