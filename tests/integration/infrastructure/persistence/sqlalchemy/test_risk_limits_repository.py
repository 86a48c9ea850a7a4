"""Integration tests for SQLAlchemyRiskLimitsRepository."""

from decimal import Decimal

import pytest

from copy_worker.infrastructure.persistence.sqlalchemy import (
    RiskLimitsModel,
    SQLAlchemyRiskLimitsRepository,
)


class TestRiskLimitsRepository:
    @pytest.mark.asyncio
    async def test_get_for_account(self, session_factory, seed_risk_limits):
        await seed_risk_limits(max_executions_per_day=5, cooldown_seconds=60)

        async with session_factory() as session:
            params = await SQLAlchemyRiskLimitsRepository(session).get_for_account("acc-1", for_update=True)

        assert params is not None
        assert params.account_id == "acc-1"
        assert params.max_investment == Decimal("1000")
        assert params.stop_loss_percent == Decimal("2")
        assert params.max_slippage_percent is None
        assert params.risk_multiplier == Decimal("1")
        assert params.max_executions_per_day == 5
        assert params.cooldown_seconds == 60
        assert params.is_active is True

    @pytest.mark.asyncio
    async def test_missing_account(self, session_factory):
        async with session_factory() as session:
            assert await SQLAlchemyRiskLimitsRepository(session).get_for_account("acc-1") is None

    @pytest.mark.asyncio
    async def test_invalid_row_is_treated_as_missing(self, session_factory):
        async with session_factory() as session:
            session.add(RiskLimitsModel(account_id="acc-1", max_investment=Decimal("0")))
            await session.commit()

        async with session_factory() as session:
            assert await SQLAlchemyRiskLimitsRepository(session).get_for_account("acc-1") is None
