"""SQLAlchemy ORM models."""

from .base import Base
from .execution_job_model import ExecutionJobModel
from .risk_limits_model import RiskLimitsModel

__all__ = ["Base", "ExecutionJobModel", "RiskLimitsModel"]
