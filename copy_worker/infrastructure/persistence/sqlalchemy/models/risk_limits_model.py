"""Account risk limits ORM Model.

Rows are owned by account configuration; the worker only reads them.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RiskLimitsModel(Base):
    __tablename__ = "account_risk_limits"

    account_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    max_investment: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=8), nullable=False)
    stop_loss_percent: Mapped[Decimal | None] = mapped_column(Numeric(precision=6, scale=3), nullable=True)
    take_profit_percent: Mapped[Decimal | None] = mapped_column(Numeric(precision=6, scale=3), nullable=True)
    max_slippage_percent: Mapped[Decimal | None] = mapped_column(Numeric(precision=6, scale=3), nullable=True)
    risk_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=4), nullable=False, default=Decimal("1")
    )

    max_executions_per_day: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cooldown_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<RiskLimitsModel(account_id={self.account_id}, active={self.is_active})>"
