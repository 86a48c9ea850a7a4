"""ExecutionJob ORM Model - SQLAlchemy mapping for the ExecutionJob aggregate."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from copy_worker.domain.executions.entities.execution_job import (
    ASSET_MAX_LENGTH,
    EXCHANGE_MAX_LENGTH,
    ID_MAX_LENGTH,
    SIZE_DECIMAL_PLACES,
    SIZE_MAX_DIGITS,
    SLIPPAGE_DECIMAL_PLACES,
    SLIPPAGE_MAX_DIGITS,
)

from .base import Base


class ExecutionJobModel(Base):
    """ORM model for ExecutionJob aggregate.

    Persistence only, no business logic. Failed rows keep their error text
    and double as the dead-letter record.
    """

    __tablename__ = "execution_jobs"

    # Job ID from the producer (idempotency key)
    id: Mapped[str] = mapped_column(String(ID_MAX_LENGTH), primary_key=True)

    source_signal: Mapped[str] = mapped_column(String(ID_MAX_LENGTH), nullable=False, index=True)
    account: Mapped[str] = mapped_column(String(ID_MAX_LENGTH), nullable=False)
    exchange: Mapped[str] = mapped_column(String(EXCHANGE_MAX_LENGTH), nullable=False)

    base_asset: Mapped[str] = mapped_column(String(ASSET_MAX_LENGTH), nullable=False)
    quote_asset: Mapped[str] = mapped_column(String(ASSET_MAX_LENGTH), nullable=False)
    side: Mapped[str] = mapped_column(String(10), nullable=False)  # "buy" or "sell"

    requested_size: Mapped[Decimal] = mapped_column(
        Numeric(precision=SIZE_MAX_DIGITS, scale=SIZE_DECIMAL_PLACES), nullable=False
    )
    max_slippage: Mapped[Decimal] = mapped_column(
        Numeric(precision=SLIPPAGE_MAX_DIGITS, scale=SLIPPAGE_DECIMAL_PLACES), nullable=False
    )

    # "queued", "processing", "executed", "failed"
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Execution data (filled after the exchange call)
    exchange_order_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    filled_quantity: Mapped[Decimal | None] = mapped_column(Numeric(precision=20, scale=8), nullable=True)
    average_price: Mapped[Decimal | None] = mapped_column(Numeric(precision=20, scale=8), nullable=True)
    fee_amount: Mapped[Decimal | None] = mapped_column(Numeric(precision=20, scale=8), nullable=True)
    stop_loss_price: Mapped[Decimal | None] = mapped_column(Numeric(precision=20, scale=8), nullable=True)
    take_profit_price: Mapped[Decimal | None] = mapped_column(Numeric(precision=20, scale=8), nullable=True)

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # Risk gate: account activity lookups
        Index("ix_execution_jobs_account_status_started", "account", "status", "started_at"),
        # Stale job recovery
        Index("ix_execution_jobs_status_started", "status", "started_at"),
    )

    def __repr__(self) -> str:
        return f"<ExecutionJobModel(id={self.id}, account={self.account}, status={self.status})>"
