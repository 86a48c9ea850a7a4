"""Pydantic schemas for Executions API responses."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExecutionResponse(BaseModel):
    """Execution job state.

    Example:
        {
            "id": "job-1",
            "source_signal": "sig-9",
            "account": "acc-1",
            "exchange": "binance",
            "symbol": "BTC/USDT",
            "side": "buy",
            "requested_size": "0.01",
            "max_slippage": "0.5",
            "status": "executed",
            "attempts": 1,
            "exchange_order_id": "8389765",
            "filled_quantity": "0.01",
            "average_price": "50010.5",
            ...
        }
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    source_signal: str
    account: str
    exchange: str
    symbol: str
    side: str
    requested_size: Decimal
    max_slippage: Decimal
    status: str = Field(..., description="queued, processing, executed or failed")
    attempts: int
    exchange_order_id: Optional[str] = None
    filled_quantity: Optional[Decimal] = None
    average_price: Optional[Decimal] = None
    fee_amount: Optional[Decimal] = None
    stop_loss_price: Optional[Decimal] = None
    take_profit_price: Optional[Decimal] = None
    error_message: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error type")
    message: str
    details: Optional[Any] = None
