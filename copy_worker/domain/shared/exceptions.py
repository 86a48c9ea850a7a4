"""Base domain exceptions.

Domain exceptions represent violated business rules. They carry a message
plus keyword context that ends up in the job's error record and in logs.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain errors.

    Example:
        >>> raise DomainException("Execution rejected", execution_id="job-1")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error message.
            **context: Additional context (execution_id, account, etc).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class AggregateNotFound(DomainException):
    """Raised when an aggregate is not found.

    Example:
        >>> raise AggregateNotFound("Execution job not found", execution_id="job-1")
    """

    pass


class InvalidStateTransition(DomainException):
    """Raised for invalid state transitions.

    Example:
        >>> raise InvalidStateTransition(
        ...     "Cannot transition from failed to executed",
        ...     from_status="failed",
        ...     to_status="executed",
        ... )
    """

    pass
