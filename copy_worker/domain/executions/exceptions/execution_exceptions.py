"""Exceptions for Executions bounded context."""

from copy_worker.domain.shared import AggregateNotFound, DomainException, InvalidStateTransition


class JobValidationError(DomainException):
    """Raised when job fields are missing or malformed."""

    pass


class InvalidJobStateError(InvalidStateTransition):
    """Raised when an operation is not allowed in the job's current status."""

    pass


class RiskRejectedError(DomainException):
    """Raised when the account's risk limits reject the job."""

    pass


class ExecutionJobNotFoundError(AggregateNotFound):
    """Raised when an execution job does not exist."""

    pass
