"""Base AggregateRoot class for domain model.

AggregateRoot is the entity that guards the consistency of its aggregate and
records the domain events produced by its state changes.
"""

from typing import Hashable, List

from .domain_event import DomainEvent
from .entity import Entity


class AggregateRoot(Entity):
    """Base class for aggregate roots.

    Rules:
    1. Outside code holds references to the root only
    2. The aggregate is saved and loaded as a whole
    3. State changes go through root methods
    4. Events are collected here and published after a successful commit

    Example:
        >>> job.mark_executed(order_result)
        >>> events = job.get_domain_events()  # [ExecutionCompletedEvent(...)]
        >>> await event_bus.publish_all(events)
        >>> job.clear_domain_events()
    """

    def __init__(self, id: Hashable | None = None) -> None:
        super().__init__(id)
        self._domain_events: List[DomainEvent] = []

    def add_domain_event(self, event: DomainEvent) -> None:
        """Add domain event to pending events list.

        Events are not published immediately; the application layer publishes
        them after the transaction commits.
        """
        self._domain_events.append(event)

    def get_domain_events(self) -> List[DomainEvent]:
        """Get a copy of all pending domain events."""
        return self._domain_events.copy()

    def clear_domain_events(self) -> None:
        """Clear pending events once they have been published."""
        self._domain_events.clear()

    @property
    def has_domain_events(self) -> bool:
        return len(self._domain_events) > 0
