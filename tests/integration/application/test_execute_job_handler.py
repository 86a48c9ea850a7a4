"""Integration tests for ExecuteJobHandler (SQLite + paper exchange)."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import ccxt.async_support as ccxt
import pytest

from copy_worker.application.executions.commands import ExecuteJobCommand
from copy_worker.application.executions.handlers import ExecuteJobHandler
from copy_worker.config import Settings
from copy_worker.domain.exchanges.exceptions import (
    ExchangeAPIError,
    ExchangeConnectionError,
    OrderStateUnknownError,
)
from copy_worker.domain.exchanges.value_objects import OrderResult, OrderStatus
from copy_worker.domain.executions.value_objects import JobStatus
from copy_worker.infrastructure.exchanges.adapters import CCXTExchangeAdapter
from copy_worker.infrastructure.exchanges.circuit_breakers import CircuitBreaker, CircuitBreakerRegistry
from copy_worker.infrastructure.exchanges.factories import ExchangeFactory
from copy_worker.infrastructure.exchanges.retry import RetryPolicy
from copy_worker.infrastructure.persistence.sqlalchemy import SQLAlchemyUnitOfWork


@pytest.fixture
def command():
    return ExecuteJobCommand(
        execution_id="job-1",
        source_signal="sig-9",
        account="acc-1",
        exchange="binance",
        base="BTC",
        quote="USDT",
        side="buy",
        requested_size=Decimal("0.01"),
        max_slippage=Decimal("0.5"),
    )


@pytest.fixture
def handler(uow, exchange_factory, event_bus):
    return ExecuteJobHandler(uow=uow, exchange_factory=exchange_factory, event_bus=event_bus)


@pytest.fixture
def load_job(session_factory):
    async def _load(execution_id="job-1"):
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            return await uow.jobs.get_by_id(execution_id)

    return _load


@pytest.fixture
def save_job(session_factory):
    async def _save(job):
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            await uow.jobs.save(job)
            await uow.commit()

    return _save


class TestSuccessfulExecution:
    @pytest.mark.asyncio
    async def test_buy_is_executed(self, handler, command, seed_risk_limits, load_job, event_bus):
        await seed_risk_limits()

        outcome = await handler.handle(command)

        assert outcome.to_dict() == {"executed": True, "executionId": "job-1"}

        job = await load_job()
        assert job.status == JobStatus.EXECUTED
        assert job.attempts == 1
        assert job.exchange_order_id.startswith("paper-")
        assert job.filled_quantity == Decimal("0.01")
        assert job.average_price == Decimal("50000")
        assert job.stop_loss_price == Decimal("49000")
        assert job.take_profit_price == Decimal("53000")
        assert job.error_message is None
        assert event_bus.names() == ["ExecutionStartedEvent", "ExecutionCompletedEvent"]

    @pytest.mark.asyncio
    async def test_order_request_fields(self, handler, command, seed_risk_limits, paper_exchange):
        await seed_risk_limits(risk_multiplier=Decimal("0.5"))
        paper_exchange.submit_order = AsyncMock(wraps=paper_exchange.submit_order)

        await handler.handle(command)

        request = paper_exchange.submit_order.await_args.args[0]
        assert request.client_order_id == "job-1"
        assert request.symbol == "BTC/USDT"
        assert request.side == "buy"
        assert request.quantity == Decimal("0.005")
        assert request.limit_price == Decimal("50250")

    @pytest.mark.asyncio
    async def test_sell_is_executed(self, handler, command, seed_risk_limits, load_job):
        await seed_risk_limits()

        outcome = await handler.handle(replace(command, side="SELL"))

        assert outcome.executed is True
        job = await load_job()
        assert job.stop_loss_price == Decimal("51000")
        assert job.take_profit_price == Decimal("47000")

    @pytest.mark.asyncio
    async def test_partial_fill_is_executed(self, handler, command, seed_risk_limits, paper_exchange, load_job):
        await seed_risk_limits()
        paper_exchange.submit_order = AsyncMock(
            return_value=OrderResult(
                order_id="8389765",
                status=OrderStatus.PARTIALLY_FILLED,
                symbol="BTC/USDT",
                filled_quantity=Decimal("0.004"),
                avg_fill_price=Decimal("50010"),
                total_cost=Decimal("200.04"),
                fee_amount=Decimal("0.2"),
            )
        )

        outcome = await handler.handle(command)

        assert outcome.executed is True
        job = await load_job()
        assert job.status == JobStatus.EXECUTED
        assert job.filled_quantity == Decimal("0.004")
        assert job.exchange_order_id == "8389765"


class TestRiskRejections:
    @pytest.mark.asyncio
    async def test_no_risk_limits(self, handler, command, paper_exchange, load_job, event_bus):
        paper_exchange.submit_order = AsyncMock()

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error == "Risk rejected: No risk limits configured for account acc-1"
        paper_exchange.submit_order.assert_not_called()

        job = await load_job()
        assert job.status == JobStatus.FAILED
        assert job.attempts == 1
        assert event_bus.names() == ["ExecutionStartedEvent", "ExecutionFailedEvent"]

    @pytest.mark.asyncio
    async def test_inactive_account(self, handler, command, seed_risk_limits):
        await seed_risk_limits(is_active=False)

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert "disabled" in outcome.error

    @pytest.mark.asyncio
    async def test_daily_cap(self, handler, command, seed_risk_limits, make_job, save_job, load_job):
        await seed_risk_limits(max_executions_per_day=1)
        await save_job(
            make_job(
                id="job-0",
                status=JobStatus.EXECUTED,
                attempts=1,
                started_at=datetime.now(timezone.utc),
            )
        )

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error == "Risk rejected: Daily execution limit reached (1)"
        assert (await load_job()).status == JobStatus.FAILED

    @pytest.mark.asyncio
    async def test_cooldown(self, handler, command, seed_risk_limits, make_job, save_job):
        await seed_risk_limits(cooldown_seconds=300)
        await save_job(
            make_job(
                id="job-0",
                status=JobStatus.EXECUTED,
                attempts=1,
                started_at=datetime.now(timezone.utc) - timedelta(seconds=10),
            )
        )

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error.startswith("Risk rejected: Cooldown active")

    @pytest.mark.asyncio
    async def test_own_attempt_is_not_counted(self, handler, command, seed_risk_limits):
        await seed_risk_limits(max_executions_per_day=1, cooldown_seconds=300)

        outcome = await handler.handle(command)

        assert outcome.executed is True


class TestExchangeFailures:
    @pytest.mark.asyncio
    async def test_submit_error(self, handler, command, seed_risk_limits, paper_exchange, load_job, event_bus):
        await seed_risk_limits()
        paper_exchange.submit_order = AsyncMock(
            side_effect=ExchangeConnectionError("submit_order failed after retries")
        )

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error == "Exchange error: submit_order failed after retries"

        job = await load_job()
        assert job.status == JobStatus.FAILED
        assert job.exchange_order_id is None
        assert event_bus.names() == ["ExecutionStartedEvent", "ExecutionFailedEvent"]

    @pytest.mark.asyncio
    async def test_unknown_order_state_needs_reconciliation(
        self, handler, command, seed_risk_limits, paper_exchange, load_job, event_bus
    ):
        await seed_risk_limits()
        paper_exchange.submit_order = AsyncMock(
            side_effect=OrderStateUnknownError("Order lookup failed after read timeout")
        )

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error.startswith("Needs reconciliation: order state unknown")

        job = await load_job()
        assert job.status == JobStatus.FAILED
        assert job.attempts == 1
        assert event_bus.names() == [
            "ExecutionStartedEvent",
            "ExecutionFailedEvent",
            "ExecutionNeedsReconciliationEvent",
        ]

    @pytest.mark.asyncio
    async def test_resubmission_answered_with_duplicate_id_needs_reconciliation(
        self, handler, command, seed_risk_limits, paper_exchange, load_job, event_bus
    ):
        await seed_risk_limits()
        client = MagicMock()
        client.create_order = AsyncMock(
            side_effect=[ccxt.RequestTimeout("read timeout"), ccxt.DuplicateOrderId("duplicate")]
        )
        client.fetch_order = AsyncMock(side_effect=ccxt.OrderNotFound("unknown order"))
        client.amount_to_precision = MagicMock(side_effect=lambda symbol, value: f"{value:.5f}")
        client.price_to_precision = MagicMock(side_effect=lambda symbol, value: f"{value:.2f}")
        live = CCXTExchangeAdapter(
            name="binance",
            client=client,
            retry_policy=RetryPolicy(max_retries=2, base_delay=0.001),
            circuit_breaker=CircuitBreaker("binance", failure_threshold=10),
        )
        # Paper prices, live order placement
        paper_exchange.submit_order = live.submit_order

        outcome = await handler.handle(command)

        assert client.create_order.await_count == 2
        assert outcome.executed is False
        assert outcome.error.startswith("Needs reconciliation: order state unknown")
        assert (await load_job()).status == JobStatus.FAILED
        assert "ExecutionNeedsReconciliationEvent" in event_bus.names()

    @pytest.mark.asyncio
    async def test_price_unavailable(self, handler, command, seed_risk_limits, load_job):
        await seed_risk_limits()

        outcome = await handler.handle(replace(command, base="ETH"))

        assert outcome.executed is False
        assert outcome.error.startswith("Exchange error: No paper price for symbol")

        job = await load_job()
        assert job.status == JobStatus.FAILED
        assert job.attempts == 0
        assert job.started_at is None

    @pytest.mark.asyncio
    async def test_limit_not_crossed(self, handler, command, seed_risk_limits, paper_exchange):
        await seed_risk_limits()
        # Price moves above the buy limit between the quote and the fill
        paper_exchange.get_reference_price = AsyncMock(side_effect=[Decimal("50000"), Decimal("51000")])

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error.startswith("Exchange error: IOC order was not filled")

    @pytest.mark.asyncio
    async def test_exchange_is_closed(self, handler, command, seed_risk_limits, paper_exchange):
        await seed_risk_limits()
        paper_exchange.close = AsyncMock()

        await handler.handle(command)

        paper_exchange.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unsupported_exchange(self, uow, event_bus, command, load_job):
        handler = ExecuteJobHandler(
            uow=uow,
            exchange_factory=ExchangeFactory(Settings(), CircuitBreakerRegistry()),
            event_bus=event_bus,
        )

        outcome = await handler.handle(replace(command, exchange="ftx"))

        assert outcome.executed is False
        assert outcome.error.startswith("Unsupported exchange: ftx")
        assert (await load_job()).status == JobStatus.FAILED


class TestRedelivery:
    @pytest.mark.asyncio
    async def test_final_job_is_not_resubmitted(self, handler, command, seed_risk_limits, paper_exchange):
        await seed_risk_limits()
        paper_exchange.submit_order = AsyncMock(wraps=paper_exchange.submit_order)

        first = await handler.handle(command)
        second = await handler.handle(command)

        assert first.to_dict() == second.to_dict() == {"executed": True, "executionId": "job-1"}
        paper_exchange.submit_order.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_job_returns_stored_error(self, handler, command):
        first = await handler.handle(command)
        second = await handler.handle(command)

        assert second.executed is False
        assert second.error == first.error

    @pytest.mark.asyncio
    async def test_processing_job_needs_reconciliation(
        self, handler, command, seed_risk_limits, paper_exchange, make_job, save_job, load_job, event_bus
    ):
        await seed_risk_limits()
        await save_job(
            make_job(status=JobStatus.PROCESSING, attempts=1, started_at=datetime.now(timezone.utc))
        )
        paper_exchange.submit_order = AsyncMock()

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error.startswith("Needs reconciliation")
        paper_exchange.submit_order.assert_not_called()

        job = await load_job()
        assert job.status == JobStatus.FAILED
        assert job.attempts == 1
        assert "ExecutionNeedsReconciliationEvent" in event_bus.names()

    @pytest.mark.asyncio
    async def test_cancelled_job_is_skipped(self, handler, command, make_job, save_job, paper_exchange):
        job = make_job()
        job.cancel()
        await save_job(job)
        paper_exchange.submit_order = AsyncMock()

        outcome = await handler.handle(command)

        assert outcome.to_dict() == {"executed": False, "executionId": "job-1", "error": "cancelled"}
        paper_exchange.submit_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_fill_after_recovery_keeps_failed_status(
        self, handler, command, seed_risk_limits, paper_exchange, session_factory, load_job
    ):
        await seed_risk_limits()
        submit = paper_exchange.submit_order

        async def recover_then_fill(request):
            async with SQLAlchemyUnitOfWork(session_factory) as other:
                job = await other.jobs.get_by_id(request.client_order_id, for_update=True)
                job.mark_needs_reconciliation("no result after 600s in processing")
                await other.jobs.save(job)
                await other.commit()
            return await submit(request)

        paper_exchange.submit_order = recover_then_fill

        outcome = await handler.handle(command)

        assert outcome.executed is False
        assert outcome.error.startswith("Needs reconciliation")
        job = await load_job()
        assert job.status == JobStatus.FAILED
        assert job.exchange_order_id is None


class TestInvalidCommand:
    @pytest.mark.asyncio
    async def test_invalid_without_row(self, handler, command, load_job, exchange_factory):
        outcome = await handler.handle(replace(command, requested_size=Decimal("0")))

        assert outcome.executed is False
        assert "Requested size must be positive" in outcome.error
        assert await load_job() is None
        assert exchange_factory.created == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_slippage": Decimal("0.0004")},
            {"requested_size": Decimal("0.000000001")},
        ],
    )
    async def test_value_beyond_stored_precision_is_rejected(
        self, handler, command, load_job, exchange_factory, overrides
    ):
        outcome = await handler.handle(replace(command, **overrides))

        assert outcome.executed is False
        assert "decimal places" in outcome.error
        assert await load_job() is None
        assert exchange_factory.created == []

    @pytest.mark.asyncio
    async def test_values_at_stored_precision_survive_reload(self, handler, command, seed_risk_limits, load_job):
        await seed_risk_limits()

        outcome = await handler.handle(
            replace(command, requested_size=Decimal("0.01000001"), max_slippage=Decimal("0.001"))
        )

        assert outcome.executed is True
        job = await load_job()
        assert job.requested_size == Decimal("0.01000001")
        assert job.max_slippage == Decimal("0.001")

    @pytest.mark.asyncio
    async def test_invalid_with_queued_row(self, handler, command, make_job, save_job, load_job):
        await save_job(make_job())

        outcome = await handler.handle(replace(command, side="hold"))

        assert outcome.executed is False
        job = await load_job()
        assert job.status == JobStatus.FAILED
        assert job.error_message == outcome.error
