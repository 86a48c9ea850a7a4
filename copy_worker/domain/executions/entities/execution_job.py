"""ExecutionJob Aggregate Root - one follower's copy of one signal.

The job is executed with a two-phase pattern:
1. Phase 1 (CLAIM): QUEUED → PROCESSING, commit before touching the exchange
2. Exchange Call: submit the IOC order
3. Phase 2 (REPORT): PROCESSING → EXECUTED or FAILED, commit

A job left in PROCESSING means the exchange call may or may not have happened,
so it is never re-submitted; it is failed for reconciliation instead.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from copy_worker.domain.exchanges.value_objects import OrderResult
from copy_worker.domain.shared import AggregateRoot

from ..events import (
    ExecutionCompletedEvent,
    ExecutionFailedEvent,
    ExecutionNeedsReconciliationEvent,
    ExecutionStartedEvent,
)
from ..exceptions import InvalidJobStateError, JobValidationError
from ..value_objects import AssetPair, JobStatus, OrderSide

MAX_SLIPPAGE_PERCENT = Decimal("10")

# Storage bounds of the execution_jobs columns
ID_MAX_LENGTH = 64
EXCHANGE_MAX_LENGTH = 20
ASSET_MAX_LENGTH = 20
SIZE_MAX_DIGITS = 20
SIZE_DECIMAL_PLACES = 8
SLIPPAGE_MAX_DIGITS = 6
SLIPPAGE_DECIMAL_PLACES = 3

CANCELLED_REASON = "cancelled"
RECONCILIATION_PREFIX = "Needs reconciliation"


class ExecutionJob(AggregateRoot):
    """ExecutionJob Aggregate Root.

    Rules:
    - Job is created in QUEUED status
    - Only QUEUED → PROCESSING → {EXECUTED | FAILED} and QUEUED → FAILED
    - PROCESSING → PROCESSING is forbidden (no double submission)
    - Job is immutable once EXECUTED or FAILED

    Example:
        >>> job = ExecutionJob(
        ...     id="job-1",
        ...     source_signal="sig-9",
        ...     account="acc-1",
        ...     exchange="binance",
        ...     asset_pair=AssetPair("BTC", "USDT"),
        ...     side=OrderSide.BUY,
        ...     requested_size=Decimal("0.01"),
        ...     max_slippage=Decimal("0.5"),
        ... )
        >>> job.start_processing()
        >>> await uow.commit()  # Phase 1
        >>> result = await exchange.submit_order(request)
        >>> job.mark_executed(result)
        >>> await uow.commit()  # Phase 2
    """

    def __init__(
        self,
        id: str,
        source_signal: str,
        account: str,
        exchange: str,
        asset_pair: AssetPair,
        side: OrderSide,
        requested_size: Decimal,
        max_slippage: Decimal,
        status: JobStatus = JobStatus.QUEUED,
        attempts: int = 0,
        created_at: Optional[datetime] = None,
        started_at: Optional[datetime] = None,
        completed_at: Optional[datetime] = None,
        exchange_order_id: Optional[str] = None,
        filled_quantity: Optional[Decimal] = None,
        average_price: Optional[Decimal] = None,
        fee_amount: Optional[Decimal] = None,
        stop_loss_price: Optional[Decimal] = None,
        take_profit_price: Optional[Decimal] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Initialize execution job.

        Status and execution details are only passed when the job is
        reconstituted from persistence.

        Raises:
            JobValidationError: If a required field is missing or out of range.
        """
        if not id:
            raise JobValidationError("Execution ID is required")

        super().__init__(id)

        self._validate_required(id, source_signal=source_signal, account=account, exchange=exchange)
        self._validate_lengths(
            id,
            (
                ("id", id, ID_MAX_LENGTH),
                ("source_signal", source_signal, ID_MAX_LENGTH),
                ("account", account, ID_MAX_LENGTH),
                ("exchange", exchange, EXCHANGE_MAX_LENGTH),
                ("base", asset_pair.base, ASSET_MAX_LENGTH),
                ("quote", asset_pair.quote, ASSET_MAX_LENGTH),
            ),
        )
        self._validate_size(id, requested_size)
        self._validate_slippage(id, max_slippage)

        # Core attributes
        self.source_signal = source_signal
        self.account = account
        self.exchange = exchange.lower()
        self.asset_pair = asset_pair
        self.side = side
        self.requested_size = requested_size
        self.max_slippage = max_slippage

        # State
        self.status = status
        self.attempts = attempts

        # Execution details
        self.exchange_order_id = exchange_order_id
        self.filled_quantity = filled_quantity
        self.average_price = average_price
        self.fee_amount = fee_amount
        self.stop_loss_price = stop_loss_price
        self.take_profit_price = take_profit_price

        # Timestamps
        self.created_at = created_at or datetime.now(timezone.utc)
        self.started_at = started_at
        self.completed_at = completed_at

        self.error_message = error_message

    @property
    def id(self) -> str:
        return self._id

    @property
    def symbol(self) -> str:
        return self.asset_pair.symbol

    # ==================== Transitions ====================

    def start_processing(self) -> None:
        """Claim the job (Phase 1).

        Raises:
            InvalidJobStateError: If job is not QUEUED.
        """
        self._ensure_status(JobStatus.QUEUED, action="start processing")

        self.status = JobStatus.PROCESSING
        self.attempts += 1
        self.started_at = datetime.now(timezone.utc)

        self.add_domain_event(
            ExecutionStartedEvent(
                execution_id=self.id,
                account=self.account,
                attempt=self.attempts,
            )
        )

    def mark_executed(
        self,
        order_result: OrderResult,
        stop_loss_price: Optional[Decimal] = None,
        take_profit_price: Optional[Decimal] = None,
    ) -> None:
        """Record the fill (Phase 2: CONFIRM).

        A partial fill is still an execution; filled_quantity holds the
        actual amount.

        Raises:
            InvalidJobStateError: If job is not PROCESSING.
        """
        self._ensure_status(JobStatus.PROCESSING, action="mark executed")

        self.status = JobStatus.EXECUTED
        self.exchange_order_id = order_result.order_id
        self.filled_quantity = order_result.filled_quantity
        self.average_price = order_result.avg_fill_price
        self.fee_amount = order_result.fee_amount
        self.stop_loss_price = stop_loss_price
        self.take_profit_price = take_profit_price
        self.completed_at = datetime.now(timezone.utc)

        self.add_domain_event(
            ExecutionCompletedEvent(
                execution_id=self.id,
                account=self.account,
                source_signal=self.source_signal,
                symbol=self.symbol,
                side=self.side.value,
                exchange_order_id=order_result.order_id,
                filled_quantity=order_result.filled_quantity,
                average_price=order_result.avg_fill_price,
                fee_amount=order_result.fee_amount,
            )
        )

    def mark_failed(self, error_message: str) -> None:
        """Mark job as failed (Phase 2: ROLLBACK, or rejection before claim).

        Raises:
            InvalidJobStateError: If job is already EXECUTED or FAILED.
        """
        self._ensure_not_terminal(action="mark failed")

        self.status = JobStatus.FAILED
        self.error_message = error_message
        self.completed_at = datetime.now(timezone.utc)

        self.add_domain_event(
            ExecutionFailedEvent(
                execution_id=self.id,
                account=self.account,
                source_signal=self.source_signal,
                error_message=error_message,
            )
        )

    def mark_needs_reconciliation(self, reason: str) -> None:
        """Fail an interrupted PROCESSING job whose order state is unknown.

        Raises:
            InvalidJobStateError: If job is not PROCESSING.
        """
        self._ensure_status(JobStatus.PROCESSING, action="mark for reconciliation")

        self.mark_failed(f"{RECONCILIATION_PREFIX}: {reason}")

        self.add_domain_event(
            ExecutionNeedsReconciliationEvent(
                execution_id=self.id,
                account=self.account,
                exchange=self.exchange,
                reason=reason,
            )
        )

    def cancel(self) -> None:
        """Cancel a job that no worker has claimed yet.

        Raises:
            InvalidJobStateError: If job is not QUEUED.
        """
        self._ensure_status(JobStatus.QUEUED, action="cancel")
        self.mark_failed(CANCELLED_REASON)

    # ==================== Queries ====================

    @property
    def is_queued(self) -> bool:
        return self.status == JobStatus.QUEUED

    @property
    def is_processing(self) -> bool:
        return self.status == JobStatus.PROCESSING

    @property
    def is_executed(self) -> bool:
        return self.status == JobStatus.EXECUTED

    @property
    def is_failed(self) -> bool:
        return self.status == JobStatus.FAILED

    @property
    def is_terminal(self) -> bool:
        """Check if job is in a final state (cannot change)."""
        return self.status.is_terminal

    # ==================== Validation ====================

    def _ensure_status(self, expected: JobStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidJobStateError(
                f"Cannot {action}: invalid status",
                execution_id=self.id,
                current_status=self.status.value,
                expected_status=expected.value,
            )

    def _ensure_not_terminal(self, action: str) -> None:
        if self.is_terminal:
            raise InvalidJobStateError(
                f"Cannot {action}: job is final",
                execution_id=self.id,
                current_status=self.status.value,
            )

    @staticmethod
    def _validate_required(execution_id: str, **fields: str) -> None:
        for name, value in fields.items():
            if not value:
                raise JobValidationError(f"{name} is required", execution_id=execution_id)

    @staticmethod
    def _validate_lengths(execution_id: str, fields: tuple[tuple[str, str, int], ...]) -> None:
        for name, value, max_length in fields:
            if len(value) > max_length:
                raise JobValidationError(
                    f"{name} must be at most {max_length} characters",
                    execution_id=execution_id,
                )

    @staticmethod
    def _validate_size(execution_id: str, requested_size: Decimal) -> None:
        if requested_size <= Decimal("0"):
            raise JobValidationError(
                "Requested size must be positive",
                execution_id=execution_id,
                requested_size=str(requested_size),
            )
        if not fits_numeric(requested_size, SIZE_MAX_DIGITS, SIZE_DECIMAL_PLACES):
            raise JobValidationError(
                f"Requested size must have at most {SIZE_DECIMAL_PLACES} decimal places "
                f"and {SIZE_MAX_DIGITS - SIZE_DECIMAL_PLACES} integer digits",
                execution_id=execution_id,
                requested_size=str(requested_size),
            )

    @staticmethod
    def _validate_slippage(execution_id: str, max_slippage: Decimal) -> None:
        if not Decimal("0") < max_slippage <= MAX_SLIPPAGE_PERCENT:
            raise JobValidationError(
                f"Max slippage must be in (0, {MAX_SLIPPAGE_PERCENT}]%",
                execution_id=execution_id,
                max_slippage=str(max_slippage),
            )
        if not fits_numeric(max_slippage, SLIPPAGE_MAX_DIGITS, SLIPPAGE_DECIMAL_PLACES):
            raise JobValidationError(
                f"Max slippage must have at most {SLIPPAGE_DECIMAL_PLACES} decimal places",
                execution_id=execution_id,
                max_slippage=str(max_slippage),
            )

    def __repr__(self) -> str:
        return (
            f"ExecutionJob(id={self.id}, account={self.account}, symbol={self.symbol}, "
            f"side={self.side.value}, status={self.status.value})"
        )


def fits_numeric(value: Decimal, max_digits: int, decimal_places: int) -> bool:
    """Whether value is stored unchanged in a NUMERIC(max_digits, decimal_places) column."""
    _, digits, exponent = value.normalize().as_tuple()
    places = max(-exponent, 0)
    integer_digits = max(len(digits) + exponent, 0)
    return places <= decimal_places and integer_digits <= max_digits - decimal_places
