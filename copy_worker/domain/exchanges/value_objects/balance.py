"""Balance value object - account balance for one asset."""

from dataclasses import dataclass
from decimal import Decimal

from copy_worker.domain.shared import ValueObject


@dataclass(frozen=True)
class Balance(ValueObject):
    """Account balance on an exchange.

    Example:
        >>> balance = Balance(asset="USDT", free=Decimal("1000"), locked=Decimal("100"))
        >>> balance.total  # Decimal("1100")
    """

    asset: str
    free: Decimal
    locked: Decimal

    @property
    def total(self) -> Decimal:
        return self.free + self.locked

    def __post_init__(self) -> None:
        if self.free < Decimal("0"):
            raise ValueError("Free balance cannot be negative")

        if self.locked < Decimal("0"):
            raise ValueError("Locked balance cannot be negative")
