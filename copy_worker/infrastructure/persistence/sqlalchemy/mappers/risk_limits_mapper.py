"""RiskLimits Mapper - ORM row → RiskParameters value object."""

from decimal import Decimal

from copy_worker.domain.executions.value_objects import RiskParameters
from copy_worker.infrastructure.persistence.sqlalchemy.models import RiskLimitsModel


class RiskLimitsMapper:
    def to_value_object(self, model: RiskLimitsModel) -> RiskParameters:
        """Convert row to RiskParameters.

        Raises:
            ValueError: If the stored limits are invalid.
        """
        return RiskParameters(
            account_id=model.account_id,
            max_investment=model.max_investment,
            stop_loss_percent=model.stop_loss_percent,
            take_profit_percent=model.take_profit_percent,
            max_slippage_percent=model.max_slippage_percent,
            risk_multiplier=model.risk_multiplier if model.risk_multiplier is not None else Decimal("1"),
            max_executions_per_day=model.max_executions_per_day or 0,
            cooldown_seconds=model.cooldown_seconds or 0,
            is_active=bool(model.is_active),
        )

    def to_model(self, params: RiskParameters) -> RiskLimitsModel:
        return RiskLimitsModel(
            account_id=params.account_id,
            max_investment=params.max_investment,
            stop_loss_percent=params.stop_loss_percent,
            take_profit_percent=params.take_profit_percent,
            max_slippage_percent=params.max_slippage_percent,
            risk_multiplier=params.risk_multiplier,
            max_executions_per_day=params.max_executions_per_day,
            cooldown_seconds=params.cooldown_seconds,
            is_active=params.is_active,
        )
