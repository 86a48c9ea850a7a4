"""Risk value objects - account limits, account activity and risk decision."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from copy_worker.domain.shared import ValueObject, validate_value_object


@dataclass(frozen=True)
class RiskParameters(ValueObject):
    """Per-account risk limits.

    Owned by account configuration; the worker only reads them.

    Example:
        >>> params = RiskParameters(
        ...     account_id="acc-1",
        ...     max_investment=Decimal("1000"),
        ...     stop_loss_percent=Decimal("2"),
        ...     take_profit_percent=Decimal("6"),
        ... )
    """

    account_id: str
    max_investment: Decimal
    """Maximum notional (quote currency) of a single execution."""

    stop_loss_percent: Optional[Decimal] = None
    take_profit_percent: Optional[Decimal] = None

    max_slippage_percent: Optional[Decimal] = None
    """Account cap on slippage; the effective value is min(job, account)."""

    risk_multiplier: Decimal = Decimal("1")
    """Scales the copied size (0.5 = copy half of the master size)."""

    max_executions_per_day: int = 0
    """Daily cap on executed jobs. 0 disables the cap."""

    cooldown_seconds: int = 0
    """Minimum gap between two executions on the account."""

    is_active: bool = True

    def __post_init__(self) -> None:
        validate_value_object(bool(self.account_id), "Account ID is required")
        validate_value_object(self.max_investment > Decimal("0"), "Max investment must be positive")
        validate_value_object(self.risk_multiplier > Decimal("0"), "Risk multiplier must be positive")
        validate_value_object(self.max_executions_per_day >= 0, "Daily execution cap cannot be negative")
        validate_value_object(self.cooldown_seconds >= 0, "Cooldown cannot be negative")

        for name in ("stop_loss_percent", "take_profit_percent", "max_slippage_percent"):
            value = getattr(self, name)
            validate_value_object(
                value is None or Decimal("0") < value < Decimal("100"),
                f"{name} must be between 0 and 100",
            )


@dataclass(frozen=True)
class AccountActivity(ValueObject):
    """Recent execution activity of an account, read by the risk gate."""

    executions_today: int = 0
    last_executed_at: Optional[datetime] = None


@dataclass(frozen=True)
class RiskDecision(ValueObject):
    """Outcome of the risk gate.

    Approved decisions carry the (possibly reduced) size and the prices the
    order is built from.
    """

    approved: bool
    reason: Optional[str] = None
    size: Optional[Decimal] = None
    limit_price: Optional[Decimal] = None
    stop_loss_price: Optional[Decimal] = None
    take_profit_price: Optional[Decimal] = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def reject(cls, reason: str) -> "RiskDecision":
        return cls(approved=False, reason=reason)
