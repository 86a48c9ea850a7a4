"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest


@pytest.fixture
def sample_job_data():
    """Field values for building an ExecutionJob in tests."""
    from copy_worker.domain.executions.value_objects import AssetPair, OrderSide

    return {
        "id": "job-1",
        "source_signal": "sig-9",
        "account": "acc-1",
        "exchange": "binance",
        "asset_pair": AssetPair("BTC", "USDT"),
        "side": OrderSide.BUY,
        "requested_size": Decimal("0.01"),
        "max_slippage": Decimal("0.5"),
    }


@pytest.fixture
def make_job(sample_job_data):
    """Factory building a QUEUED job, with overrides."""
    from copy_worker.domain.executions.entities import ExecutionJob

    def _make(**overrides):
        return ExecutionJob(**{**sample_job_data, **overrides})

    return _make


@pytest.fixture
def sample_order_result():
    from copy_worker.domain.exchanges.value_objects import OrderResult, OrderStatus

    return OrderResult(
        order_id="BINANCE-123456",
        status=OrderStatus.FILLED,
        symbol="BTC/USDT",
        filled_quantity=Decimal("0.01"),
        avg_fill_price=Decimal("50010"),
        total_cost=Decimal("500.1"),
        fee_amount=Decimal("0.5"),
    )


@pytest.fixture
def risk_params():
    from copy_worker.domain.executions.value_objects import RiskParameters

    return RiskParameters(
        account_id="acc-1",
        max_investment=Decimal("1000"),
        stop_loss_percent=Decimal("2"),
        take_profit_percent=Decimal("6"),
    )
