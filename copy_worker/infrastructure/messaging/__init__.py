"""Messaging infrastructure - in-process event bus and Redis publisher."""

from .event_bus import EventBus, get_event_bus, reset_event_bus
from .redis_publisher import OUTCOME_EVENTS, RedisEventPublisher, event_to_dict

__all__ = [
    "EventBus",
    "get_event_bus",
    "reset_event_bus",
    "RedisEventPublisher",
    "OUTCOME_EVENTS",
    "event_to_dict",
]
