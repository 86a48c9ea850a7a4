"""Unit tests for EventBus and RedisEventPublisher."""

import json
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from copy_worker.domain.executions.events import (
    ExecutionCompletedEvent,
    ExecutionFailedEvent,
    ExecutionNeedsReconciliationEvent,
    ExecutionStartedEvent,
)
from copy_worker.infrastructure.messaging import (
    EventBus,
    RedisEventPublisher,
    event_to_dict,
    get_event_bus,
    reset_event_bus,
)


@pytest.fixture
def failed_event():
    return ExecutionFailedEvent(
        execution_id="job-1",
        account="acc-1",
        source_signal="sig-9",
        error_message="Risk rejected: limit reached",
    )


@pytest.fixture
def completed_event():
    return ExecutionCompletedEvent(
        execution_id="job-1",
        account="acc-1",
        source_signal="sig-9",
        symbol="BTC/USDT",
        side="buy",
        exchange_order_id="8389765",
        filled_quantity=Decimal("0.01"),
        average_price=Decimal("50010"),
        fee_amount=Decimal("0.5"),
    )


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publish_to_subscribers_of_type(self, failed_event):
        bus = EventBus()
        on_failed = AsyncMock()
        on_started = AsyncMock()
        bus.subscribe(ExecutionFailedEvent, on_failed)
        bus.subscribe(ExecutionStartedEvent, on_started)

        await bus.publish(failed_event)

        on_failed.assert_awaited_once_with(failed_event)
        on_started.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, failed_event):
        bus = EventBus()
        broken = AsyncMock(side_effect=RuntimeError("redis down"))
        healthy = AsyncMock()
        bus.subscribe(ExecutionFailedEvent, broken)
        bus.subscribe(ExecutionFailedEvent, healthy)

        await bus.publish(failed_event)

        healthy.assert_awaited_once_with(failed_event)

    @pytest.mark.asyncio
    async def test_unsubscribe(self, failed_event):
        bus = EventBus()
        handler = AsyncMock()
        bus.subscribe(ExecutionFailedEvent, handler)

        bus.unsubscribe(ExecutionFailedEvent, handler)
        await bus.publish_all([failed_event])

        handler.assert_not_called()
        assert bus.get_subscribers_count(ExecutionFailedEvent) == 0

    def test_singleton_reset(self):
        bus = get_event_bus()
        assert get_event_bus() is bus

        reset_event_bus()

        assert get_event_bus() is not bus


class TestRedisEventPublisher:
    def test_event_to_dict_is_json_safe(self, completed_event):
        data = event_to_dict(completed_event)

        assert data["event"] == "ExecutionCompletedEvent"
        assert data["execution_id"] == "job-1"
        assert data["filled_quantity"] == "0.01"
        assert isinstance(data["event_id"], str)
        assert isinstance(data["occurred_at"], str)
        json.dumps(data)

    @pytest.mark.asyncio
    async def test_publish_sends_json_to_channel(self, failed_event):
        client = AsyncMock()
        client.publish.return_value = 1
        publisher = RedisEventPublisher(client, "copy-execution:events")

        await publisher.publish(failed_event)

        channel, payload = client.publish.await_args.args
        assert channel == "copy-execution:events"
        assert json.loads(payload)["error_message"] == "Risk rejected: limit reached"

    @pytest.mark.asyncio
    async def test_subscribes_to_outcome_events_only(self):
        bus = EventBus()
        publisher = RedisEventPublisher(AsyncMock(), "events")

        publisher.subscribe_to(bus)

        for event_type in (
            ExecutionCompletedEvent,
            ExecutionFailedEvent,
            ExecutionNeedsReconciliationEvent,
        ):
            assert bus.get_subscribers_count(event_type) == 1
        assert bus.get_subscribers_count(ExecutionStartedEvent) == 0

    @pytest.mark.asyncio
    async def test_close(self):
        client = AsyncMock()

        await RedisEventPublisher(client, "events").close()

        client.aclose.assert_awaited_once()
