"""Pydantic schemas for execution job payloads.

Queue payload::

    {
        "execution": {
            "id": "job-1",
            "source_signal": "sig-9",
            "account": "acc-1",
            "exchange": "binance",
            "base": "BTC",
            "quote": "USDT",
            "side": "buy",
            "requested_size": "0.01",
            "max_slippage": "0.5"
        }
    }

camelCase keys (``sourceSignal``, ``requestedSize``, ``maxSlippage``) and a
combined ``assetPair: "BTC/USDT"`` are accepted as well.
"""

from decimal import Decimal
from typing import Any, Optional, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from copy_worker.application.executions.commands import ExecuteJobCommand
from copy_worker.domain.executions.entities.execution_job import (
    ASSET_MAX_LENGTH,
    EXCHANGE_MAX_LENGTH,
    ID_MAX_LENGTH,
    SIZE_DECIMAL_PLACES,
    SIZE_MAX_DIGITS,
    SLIPPAGE_DECIMAL_PLACES,
    SLIPPAGE_MAX_DIGITS,
)
from copy_worker.domain.executions.value_objects import AssetPair


class ExecutionPayload(BaseModel):
    """One execution job as carried by the queue message."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1, max_length=ID_MAX_LENGTH, description="Execution job ID")
    source_signal: str = Field(
        ...,
        min_length=1,
        max_length=ID_MAX_LENGTH,
        validation_alias=AliasChoices("source_signal", "sourceSignal"),
    )
    account: str = Field(..., min_length=1, max_length=ID_MAX_LENGTH)
    exchange: str = Field(
        ..., min_length=1, max_length=EXCHANGE_MAX_LENGTH, description="binance, kucoin or kraken"
    )
    base: str = Field(..., min_length=1, max_length=ASSET_MAX_LENGTH)
    quote: str = Field(..., min_length=1, max_length=ASSET_MAX_LENGTH)
    side: str = Field(..., description="buy or sell")
    requested_size: Decimal = Field(
        ...,
        gt=0,
        max_digits=SIZE_MAX_DIGITS,
        decimal_places=SIZE_DECIMAL_PLACES,
        validation_alias=AliasChoices("requested_size", "requestedSize"),
    )
    max_slippage: Decimal = Field(
        ...,
        gt=0,
        le=10,
        max_digits=SLIPPAGE_MAX_DIGITS,
        decimal_places=SLIPPAGE_DECIMAL_PLACES,
        validation_alias=AliasChoices("max_slippage", "maxSlippage"),
        description="Max slippage in percent",
    )

    @model_validator(mode="before")
    @classmethod
    def split_asset_pair(cls, data: Any) -> Any:
        """Fill base/quote from ``assetPair`` ("BTC/USDT") when given."""
        if not isinstance(data, dict):
            return data

        pair = data.get("assetPair", data.get("asset_pair"))
        if pair is None or ("base" in data and "quote" in data):
            return data
        if not isinstance(pair, str):
            raise ValueError("assetPair must be a string like 'BTC/USDT'")

        asset_pair = AssetPair.parse(pair)
        return {**data, "base": asset_pair.base, "quote": asset_pair.quote}

    @field_validator("side")
    @classmethod
    def validate_side(cls, v: str) -> str:
        if v.lower() not in ("buy", "sell"):
            raise ValueError("side must be 'buy' or 'sell'")
        return v.lower()

    @field_validator("exchange")
    @classmethod
    def normalize_exchange(cls, v: str) -> str:
        return v.lower()

    @field_validator("base", "quote")
    @classmethod
    def normalize_asset(cls, v: str) -> str:
        return v.upper()

    def to_command(self, command_class: Type[ExecuteJobCommand] = ExecuteJobCommand) -> ExecuteJobCommand:
        return command_class(
            execution_id=self.id,
            source_signal=self.source_signal,
            account=self.account,
            exchange=self.exchange,
            base=self.base,
            quote=self.quote,
            side=self.side,
            requested_size=self.requested_size,
            max_slippage=self.max_slippage,
        )

    def to_message(self) -> dict[str, Any]:
        """Queue message body (JSON-safe, decimals as strings)."""
        return {"execution": self.model_dump(mode="json")}


class ExecutionTaskPayload(BaseModel):
    execution: ExecutionPayload


def parse_task_payload(payload: Any) -> ExecutionPayload:
    """Validate a queue message.

    Raises:
        pydantic.ValidationError: If the message is malformed.
    """
    return ExecutionTaskPayload.model_validate(payload).execution


def extract_execution_id(payload: Any) -> Optional[str]:
    """Best-effort job ID from a message that may fail validation."""
    if not isinstance(payload, dict):
        return None
    execution = payload.get("execution")
    if not isinstance(execution, dict):
        return None
    execution_id = execution.get("id")
    if isinstance(execution_id, str) and execution_id.strip():
        return execution_id.strip()
    return None
