"""SQLAlchemy Unit of Work implementation."""

import logging
from types import TracebackType
from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from copy_worker.application.shared import UnitOfWork
from copy_worker.domain.executions.repositories import (
    ExecutionJobRepository,
    RiskLimitsRepository,
)
from copy_worker.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyExecutionJobRepository,
    SQLAlchemyRiskLimitsRepository,
)

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of Unit of Work pattern.

    Every ``async with`` block opens a new session (one transaction) and
    closes it on exit; an exception inside the block rolls back.

    Example:
        >>> session_factory = async_sessionmaker(engine, expire_on_commit=False)
        >>> uow = SQLAlchemyUnitOfWork(session_factory)
        >>>
        >>> async with uow:
        ...     job = await uow.jobs.get_by_id("job-1", for_update=True)
        ...     job.start_processing()
        ...     await uow.jobs.save(job)
        ...     await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

        # Repository instances (lazy initialized)
        self._jobs: Optional[ExecutionJobRepository] = None
        self._risk_limits: Optional[RiskLimitsRepository] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self._session is not None:
            raise RuntimeError("Unit of Work already started")

        self._session = self._session_factory()
        logger.debug("unit_of_work.started")
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
                logger.warning(
                    "unit_of_work.rolled_back",
                    extra={"exception_type": exc_type.__name__},
                )
        finally:
            if self._session:
                await self._session.close()
                self._session = None
                self._jobs = None
                self._risk_limits = None

            logger.debug("unit_of_work.closed")

    async def commit(self) -> None:
        """Commit transaction.

        Raises:
            Exception: If commit failed (DB error, constraint violation, etc.).
        """
        session = self._require_session()

        try:
            await session.commit()
            logger.debug("unit_of_work.committed")
        except Exception as e:
            logger.error("unit_of_work.commit_failed", extra={"error": str(e)})
            await self.rollback()
            raise

    async def rollback(self) -> None:
        await self._require_session().rollback()

    @property
    def jobs(self) -> ExecutionJobRepository:
        session = self._require_session()
        if self._jobs is None:
            self._jobs = SQLAlchemyExecutionJobRepository(session)
        return self._jobs

    @property
    def risk_limits(self) -> RiskLimitsRepository:
        session = self._require_session()
        if self._risk_limits is None:
            self._risk_limits = SQLAlchemyRiskLimitsRepository(session)
        return self._risk_limits

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of Work not started (use async with)")
        return self._session


def create_unit_of_work(session_factory: async_sessionmaker[AsyncSession]) -> SQLAlchemyUnitOfWork:
    """Create Unit of Work instance (FastAPI dependency helper)."""
    return SQLAlchemyUnitOfWork(session_factory)
