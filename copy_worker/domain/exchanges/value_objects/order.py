"""Order value objects - what we send to an exchange and what comes back."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from copy_worker.domain.shared import ValueObject, validate_value_object


class OrderStatus(str, Enum):
    """Status of an order on the exchange."""

    FILLED = "filled"
    """Order fully filled."""

    PARTIALLY_FILLED = "partially_filled"
    """Order filled in part; the IOC remainder was cancelled."""


@dataclass(frozen=True)
class OrderRequest(ValueObject):
    """Immediate-or-cancel limit order derived from an approved execution job.

    Example:
        >>> request = OrderRequest(
        ...     client_order_id="job-1",
        ...     symbol="BTC/USDT",
        ...     side="buy",
        ...     quantity=Decimal("0.01"),
        ...     limit_price=Decimal("50250"),
        ... )
    """

    client_order_id: str
    """Idempotency key on the exchange side (the execution job ID)."""

    symbol: str
    """Trading pair in BASE/QUOTE form."""

    side: str
    """"buy" or "sell"."""

    quantity: Decimal
    """Base asset quantity."""

    limit_price: Decimal
    """Worst acceptable price (reference price adjusted by slippage)."""

    def __post_init__(self) -> None:
        validate_value_object(bool(self.client_order_id), "Client order ID is required")
        validate_value_object(self.side in ("buy", "sell"), f"Invalid order side: {self.side}")
        validate_value_object(self.quantity > Decimal("0"), "Order quantity must be positive")
        validate_value_object(self.limit_price > Decimal("0"), "Limit price must be positive")


@dataclass(frozen=True)
class OrderResult(ValueObject):
    """Normalized result of an executed order.

    Adapters convert raw exchange responses into this single format.

    Example:
        >>> result = OrderResult(
        ...     order_id="12345",
        ...     status=OrderStatus.FILLED,
        ...     symbol="BTC/USDT",
        ...     filled_quantity=Decimal("0.01"),
        ...     avg_fill_price=Decimal("50010"),
        ...     total_cost=Decimal("500.10"),
        ...     fee_amount=Decimal("0.5"),
        ... )
    """

    order_id: str
    status: OrderStatus
    symbol: str
    filled_quantity: Decimal
    avg_fill_price: Decimal
    total_cost: Decimal
    fee_amount: Decimal
    fee_currency: str = "USDT"

    def __post_init__(self) -> None:
        if self.filled_quantity <= Decimal("0"):
            raise ValueError("Filled quantity must be positive")

        if self.avg_fill_price <= Decimal("0"):
            raise ValueError("Average fill price must be positive")

        if self.total_cost <= Decimal("0"):
            raise ValueError("Total cost must be positive")

        if self.fee_amount < Decimal("0"):
            raise ValueError("Fee amount cannot be negative")
