"""Entities for Executions bounded context."""

from .execution_job import ExecutionJob

__all__ = ["ExecutionJob"]
