"""Base Entity class for domain model.

An entity is distinguished by its identity, not by its attributes. Two
execution jobs with equal fields but different IDs are different jobs.
"""

from abc import ABC
from typing import Hashable


class Entity(ABC):
    """Base class for all domain entities.

    Example:
        >>> job1 = ExecutionJob(id="job-1", ...)
        >>> job2 = ExecutionJob(id="job-1", ...)
        >>> job1 == job2  # True (same ID)
    """

    def __init__(self, id: Hashable | None = None) -> None:
        """Initialize entity with optional ID.

        Args:
            id: Unique identifier. None for entities not yet persisted.
        """
        self._id = id

    @property
    def id(self) -> Hashable | None:
        """Get entity ID."""
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False

        # Two unsaved entities are only equal to themselves
        if self._id is None and other._id is None:
            return self is other

        return type(self) is type(other) and self._id == other._id

    def __hash__(self) -> int:
        if self._id is None:
            return hash(id(self))
        return hash(self._id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"
