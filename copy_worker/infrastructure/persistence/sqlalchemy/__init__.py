"""SQLAlchemy persistence layer."""

from .database import create_engine, create_session_factory, create_tables
from .models import Base, ExecutionJobModel, RiskLimitsModel
from .repositories import SQLAlchemyExecutionJobRepository, SQLAlchemyRiskLimitsRepository
from .unit_of_work import SQLAlchemyUnitOfWork, create_unit_of_work

__all__ = [
    # ORM Models
    "Base",
    "ExecutionJobModel",
    "RiskLimitsModel",
    # Repositories
    "SQLAlchemyExecutionJobRepository",
    "SQLAlchemyRiskLimitsRepository",
    # Unit of Work
    "SQLAlchemyUnitOfWork",
    "create_unit_of_work",
    # Engine
    "create_engine",
    "create_session_factory",
    "create_tables",
]
