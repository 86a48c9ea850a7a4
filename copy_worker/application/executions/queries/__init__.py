"""Queries for Executions bounded context."""

from .get_execution import GetExecutionQuery

__all__ = ["GetExecutionQuery"]
