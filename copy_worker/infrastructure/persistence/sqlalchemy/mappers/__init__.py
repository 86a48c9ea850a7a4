"""Mappers between domain objects and ORM models."""

from .execution_job_mapper import ExecutionJobMapper, as_utc
from .risk_limits_mapper import RiskLimitsMapper

__all__ = ["ExecutionJobMapper", "RiskLimitsMapper", "as_utc"]
