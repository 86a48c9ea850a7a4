"""SQLAlchemy repository implementations."""

from .execution_job_repository import SQLAlchemyExecutionJobRepository
from .risk_limits_repository import SQLAlchemyRiskLimitsRepository

__all__ = ["SQLAlchemyExecutionJobRepository", "SQLAlchemyRiskLimitsRepository"]
