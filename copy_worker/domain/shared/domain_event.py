"""Base DomainEvent class for event-driven architecture.

A DomainEvent records a fact that other parts of the system may react to
(publish to Redis, notify the follower, update statistics) without the
domain knowing who listens.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for all domain events.

    Events are immutable, named in the past tense (ExecutionCompleted,
    ExecutionFailed) and carry everything a subscriber needs.

    Example:
        >>> @dataclass(frozen=True)
        ... class ExecutionCompletedEvent(DomainEvent):
        ...     execution_id: str
        ...     account: str

        >>> event_bus.subscribe(ExecutionCompletedEvent, publish_to_redis)
    """

    event_id: UUID = field(default_factory=uuid4, init=False)
    """Unique event ID (auto-generated)."""

    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), init=False
    )
    """When the event happened (auto-generated, UTC)."""

    @property
    def event_name(self) -> str:
        """Event class name (e.g., "ExecutionCompletedEvent")."""
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.event_name}(event_id={self.event_id}, occurred_at={self.occurred_at})"
