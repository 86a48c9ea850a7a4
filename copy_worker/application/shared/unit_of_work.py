"""Unit of Work pattern - manages transactions.

UnitOfWork provides:
- Atomic operations (all or nothing)
- Transaction boundary
- Access to the repositories sharing that transaction
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Type

from copy_worker.domain.executions.repositories import (
    ExecutionJobRepository,
    RiskLimitsRepository,
)


class UnitOfWork(ABC):
    """Abstract Unit of Work interface.

    One instance may be entered several times; every ``async with`` block is
    a separate transaction. The execute use case relies on this for its
    two commits.

    Example:
        >>> async with uow:
        ...     job = await uow.jobs.get_by_id("job-1", for_update=True)
        ...     limits = await uow.risk_limits.get_for_account(job.account, for_update=True)
        ...     job.start_processing()
        ...     await uow.jobs.save(job)
        ...     await uow.commit()
    """

    @abstractmethod
    async def __aenter__(self) -> "UnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context manager.

        Note:
            If exc_type is not None, must call rollback().
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    @property
    @abstractmethod
    def jobs(self) -> ExecutionJobRepository:
        pass

    @property
    @abstractmethod
    def risk_limits(self) -> RiskLimitsRepository:
        pass
