"""Repository ports for Executions bounded context."""

from .execution_job_repository import ExecutionJobRepository
from .risk_limits_repository import RiskLimitsRepository

__all__ = ["ExecutionJobRepository", "RiskLimitsRepository"]
