"""Redis Event Publisher - forwards execution outcome events to pub/sub.

Downstream services (notifications, statistics, the dashboard) subscribe to
the channel instead of polling the jobs table.
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

import redis.asyncio as redis

from copy_worker.domain.executions.events import (
    ExecutionCompletedEvent,
    ExecutionFailedEvent,
    ExecutionNeedsReconciliationEvent,
)
from copy_worker.domain.shared import DomainEvent

from .event_bus import EventBus

logger = logging.getLogger(__name__)

OUTCOME_EVENTS = (
    ExecutionCompletedEvent,
    ExecutionFailedEvent,
    ExecutionNeedsReconciliationEvent,
)


def _json_value(value: Any) -> Any:
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def event_to_dict(event: DomainEvent) -> dict[str, Any]:
    """Serialize a domain event to a JSON-compatible dict.

    Example:
        >>> event_to_dict(ExecutionFailedEvent(execution_id="job-1", ...))
        {"event": "ExecutionFailedEvent", "event_id": "...", "execution_id": "job-1", ...}
    """
    data = {key: _json_value(value) for key, value in asdict(event).items()}
    return {"event": event.event_name, **data}


class RedisEventPublisher:
    """Publishes domain events as JSON to a Redis channel.

    Example:
        >>> publisher = RedisEventPublisher(redis.from_url(url), "copy-execution:events")
        >>> publisher.subscribe_to(event_bus)
        >>> ...
        >>> await publisher.close()
    """

    def __init__(self, client: redis.Redis, channel: str) -> None:
        self._client = client
        self.channel = channel

    @classmethod
    def from_url(cls, url: str, channel: str) -> "RedisEventPublisher":
        return cls(redis.from_url(url), channel)

    def subscribe_to(self, event_bus: EventBus) -> None:
        """Subscribe to the outcome events of execution jobs."""
        for event_type in OUTCOME_EVENTS:
            event_bus.subscribe(event_type, self.publish)

    async def publish(self, event: DomainEvent) -> None:
        payload = json.dumps(event_to_dict(event))
        receivers = await self._client.publish(self.channel, payload)
        logger.debug(
            "redis_publisher.published",
            extra={"event_type": event.event_name, "channel": self.channel, "receivers": receivers},
        )

    async def close(self) -> None:
        await self._client.aclose()
