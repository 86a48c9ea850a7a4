"""Dependency injection for FastAPI.

Provides dependencies for API routes:
- Unit of Work (one per request)
- Event bus
- Task dispatcher
- Health checker
"""

from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from copy_worker.application.executions.handlers import CancelJobHandler, GetExecutionHandler
from copy_worker.infrastructure.health import HealthChecker
from copy_worker.infrastructure.messaging import EventBus, get_event_bus
from copy_worker.infrastructure.persistence.sqlalchemy import (
    SQLAlchemyUnitOfWork,
    create_unit_of_work,
)
from copy_worker.presentation.workers.tasks.execution_tasks import Dispatcher, dispatch_execution

# ============================================================================
# GLOBAL DEPENDENCIES (initialized in the application lifespan)
# ============================================================================

_session_factory: Optional[async_sessionmaker[AsyncSession]] = None
_health_checker: Optional[HealthChecker] = None


def init_dependencies(
    session_factory: async_sessionmaker[AsyncSession],
    health_checker: HealthChecker,
) -> None:
    global _session_factory, _health_checker
    _session_factory = session_factory
    _health_checker = health_checker


async def get_unit_of_work() -> SQLAlchemyUnitOfWork:
    """Get a Unit of Work for the request.

    Raises:
        RuntimeError: If dependencies not initialized.
    """
    if _session_factory is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies() first.")

    return create_unit_of_work(_session_factory)


async def get_health_checker() -> HealthChecker:
    if _health_checker is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies() first.")

    return _health_checker


async def get_bus() -> EventBus:
    return get_event_bus()


async def get_dispatcher() -> Dispatcher:
    return dispatch_execution


# ============================================================================
# HANDLERS
# ============================================================================


async def get_execution_handler(
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
) -> GetExecutionHandler:
    return GetExecutionHandler(uow)


async def get_cancel_job_handler(
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
    event_bus: Annotated[EventBus, Depends(get_bus)],
) -> CancelJobHandler:
    return CancelJobHandler(uow, event_bus)


# ============================================================================
# TYPE ALIASES (for cleaner route signatures)
# ============================================================================

UnitOfWorkDep = Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
DispatcherDep = Annotated[Dispatcher, Depends(get_dispatcher)]
HealthCheckerDep = Annotated[HealthChecker, Depends(get_health_checker)]
GetExecutionHandlerDep = Annotated[GetExecutionHandler, Depends(get_execution_handler)]
CancelJobHandlerDep = Annotated[CancelJobHandler, Depends(get_cancel_job_handler)]
