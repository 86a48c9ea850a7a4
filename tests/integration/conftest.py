"""Fixtures for integration tests (in-memory SQLite, paper exchange)."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from copy_worker.domain.executions.value_objects import RiskParameters
from copy_worker.infrastructure.exchanges.adapters import PaperExchangeAdapter
from copy_worker.infrastructure.messaging import EventBus
from copy_worker.infrastructure.persistence.sqlalchemy import Base, SQLAlchemyUnitOfWork
from copy_worker.infrastructure.persistence.sqlalchemy.mappers import RiskLimitsMapper


class StubExchangeFactory:
    """Returns the given adapter for every supported exchange name."""

    def __init__(self, exchange):
        self.exchange = exchange
        self.created: list[str] = []

    def create_exchange(self, exchange_name: str):
        self.created.append(exchange_name)
        return self.exchange


class RecordingEventBus(EventBus):
    """Event bus that keeps every published event."""

    def __init__(self) -> None:
        super().__init__()
        self.published = []

    async def publish(self, event) -> None:
        self.published.append(event)
        await super().publish(event)

    def names(self) -> list[str]:
        return [event.event_name for event in self.published]


@pytest.fixture
async def engine():
    # One shared connection keeps the in-memory database alive across sessions
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def uow(session_factory):
    return SQLAlchemyUnitOfWork(session_factory)


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
def paper_exchange():
    return PaperExchangeAdapter("binance", prices={"BTC/USDT": Decimal("50000")})


@pytest.fixture
def exchange_factory(paper_exchange):
    return StubExchangeFactory(paper_exchange)


@pytest.fixture
def seed_risk_limits(session_factory):
    """Insert an account_risk_limits row; defaults match the ``risk_params`` fixture."""

    async def _seed(**overrides):
        fields = {
            "account_id": "acc-1",
            "max_investment": Decimal("1000"),
            "stop_loss_percent": Decimal("2"),
            "take_profit_percent": Decimal("6"),
            **overrides,
        }
        async with session_factory() as session:
            session.add(RiskLimitsMapper().to_model(RiskParameters(**fields)))
            await session.commit()

    return _seed


@pytest.fixture
def execution_message():
    """Queue message for job-1 (0.01 BTC buy on binance)."""

    def _message(**overrides):
        execution = {
            "id": "job-1",
            "source_signal": "sig-9",
            "account": "acc-1",
            "exchange": "binance",
            "base": "BTC",
            "quote": "USDT",
            "side": "buy",
            "requested_size": "0.01",
            "max_slippage": "0.5",
            **overrides,
        }
        return {"execution": execution}

    return _message
