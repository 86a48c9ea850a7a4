"""Exceptions for Executions bounded context."""

from .execution_exceptions import (
    ExecutionJobNotFoundError,
    InvalidJobStateError,
    JobValidationError,
    RiskRejectedError,
)

__all__ = [
    "JobValidationError",
    "InvalidJobStateError",
    "RiskRejectedError",
    "ExecutionJobNotFoundError",
]
