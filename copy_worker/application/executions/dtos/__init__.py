"""DTOs for Executions bounded context."""

from .execution_dto import ExecutionJobDTO, ExecutionOutcomeDTO

__all__ = ["ExecutionJobDTO", "ExecutionOutcomeDTO"]
