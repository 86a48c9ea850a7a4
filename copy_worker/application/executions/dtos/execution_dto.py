"""Execution DTOs - data transfer objects for workers and API responses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from copy_worker.domain.executions.entities import ExecutionJob


@dataclass
class ExecutionOutcomeDTO:
    """Structured outcome stored in the queue result backend.

    Example:
        >>> ExecutionOutcomeDTO(executed=True, execution_id="job-1").to_dict()
        {'executed': True, 'executionId': 'job-1'}
    """

    executed: bool
    execution_id: str
    error: Optional[str] = None

    @classmethod
    def from_entity(cls, job: ExecutionJob) -> "ExecutionOutcomeDTO":
        if job.is_executed:
            return cls(executed=True, execution_id=job.id)
        return cls(
            executed=False,
            execution_id=job.id,
            error=job.error_message or f"Job is {job.status.value}",
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"executed": self.executed, "executionId": self.execution_id}
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class ExecutionJobDTO:
    """Execution job data transfer object."""

    id: str
    source_signal: str
    account: str
    exchange: str
    symbol: str
    side: str
    requested_size: Decimal
    max_slippage: Decimal
    status: str
    attempts: int
    exchange_order_id: Optional[str]
    filled_quantity: Optional[Decimal]
    average_price: Optional[Decimal]
    fee_amount: Optional[Decimal]
    stop_loss_price: Optional[Decimal]
    take_profit_price: Optional[Decimal]
    error_message: Optional[str]
    created_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]

    @classmethod
    def from_entity(cls, job: ExecutionJob) -> "ExecutionJobDTO":
        return cls(
            id=job.id,
            source_signal=job.source_signal,
            account=job.account,
            exchange=job.exchange,
            symbol=job.symbol,
            side=job.side.value,
            requested_size=job.requested_size,
            max_slippage=job.max_slippage,
            status=job.status.value,
            attempts=job.attempts,
            exchange_order_id=job.exchange_order_id,
            filled_quantity=job.filled_quantity,
            average_price=job.average_price,
            fee_amount=job.fee_amount,
            stop_loss_price=job.stop_loss_price,
            take_profit_price=job.take_profit_price,
            error_message=job.error_message,
            created_at=job.created_at,
            started_at=job.started_at,
            completed_at=job.completed_at,
        )
