"""Base Query class for CQRS pattern.

A query reads data and has no side effects.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Query(ABC):
    """Base class for all queries.

    Example:
        >>> @dataclass(frozen=True)
        ... class GetExecutionQuery(Query):
        ...     execution_id: str
    """

    pass
