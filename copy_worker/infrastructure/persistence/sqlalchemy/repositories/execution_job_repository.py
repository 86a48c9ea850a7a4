"""SQLAlchemy implementation of ExecutionJobRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from copy_worker.domain.executions.entities import ExecutionJob
from copy_worker.domain.executions.repositories import (
    ExecutionJobRepository as ExecutionJobRepositoryPort,
)
from copy_worker.domain.executions.value_objects import JobStatus
from copy_worker.infrastructure.persistence.sqlalchemy.mappers import ExecutionJobMapper, as_utc
from copy_worker.infrastructure.persistence.sqlalchemy.models import ExecutionJobModel

SUBMITTED_STATUSES = (JobStatus.EXECUTED.value, JobStatus.PROCESSING.value)


class SQLAlchemyExecutionJobRepository(ExecutionJobRepositoryPort):
    """SQLAlchemy implementation of ExecutionJobRepository port.

    Example:
        >>> async with session_factory() as session:
        ...     repo = SQLAlchemyExecutionJobRepository(session)
        ...     job = await repo.get_by_id("job-1", for_update=True)
        ...     job.start_processing()
        ...     await repo.save(job)
        ...     await session.commit()
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = ExecutionJobMapper()

    async def save(self, job: ExecutionJob) -> None:
        """Insert new job or update the existing row."""
        existing = await self._session.get(ExecutionJobModel, job.id)
        if existing is None:
            self._session.add(self._mapper.to_model(job))
        else:
            self._mapper.update_model_from_entity(existing, job)
        await self._session.flush()

    async def get_by_id(self, execution_id: str, for_update: bool = False) -> Optional[ExecutionJob]:
        stmt = select(ExecutionJobModel).where(ExecutionJobModel.id == execution_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_stale_processing(self, started_before: datetime) -> list[ExecutionJob]:
        stmt = (
            select(ExecutionJobModel)
            .where(ExecutionJobModel.status == JobStatus.PROCESSING.value)
            .where(ExecutionJobModel.started_at < started_before)
            .order_by(ExecutionJobModel.started_at.asc())  # Oldest first
            .with_for_update(skip_locked=True)
        )

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]

    async def count_submitted_since(
        self,
        account: str,
        since: datetime,
        exclude_id: Optional[str] = None,
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(ExecutionJobModel)
            .where(ExecutionJobModel.account == account)
            .where(ExecutionJobModel.status.in_(SUBMITTED_STATUSES))
            .where(ExecutionJobModel.started_at >= since)
        )
        if exclude_id is not None:
            stmt = stmt.where(ExecutionJobModel.id != exclude_id)

        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def last_submitted_at(
        self,
        account: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[datetime]:
        stmt = (
            select(func.max(ExecutionJobModel.started_at))
            .where(ExecutionJobModel.account == account)
            .where(ExecutionJobModel.status.in_(SUBMITTED_STATUSES))
        )
        if exclude_id is not None:
            stmt = stmt.where(ExecutionJobModel.id != exclude_id)

        result = await self._session.execute(stmt)
        return as_utc(result.scalar_one_or_none())
