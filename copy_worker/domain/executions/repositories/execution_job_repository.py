"""ExecutionJobRepository Port - interface for execution job persistence.

This is a PORT in Hexagonal Architecture: the domain defines the interface,
the infrastructure layer implements it.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..entities import ExecutionJob


class ExecutionJobRepository(ABC):
    """Abstract interface for execution job persistence.

    Example:
        >>> job = await uow.jobs.get_by_id("job-1", for_update=True)
        >>> job.start_processing()
        >>> await uow.jobs.save(job)
        >>> await uow.commit()
    """

    @abstractmethod
    async def save(self, job: ExecutionJob) -> None:
        """Insert or update job (keyed by job.id)."""
        pass

    @abstractmethod
    async def get_by_id(self, execution_id: str, for_update: bool = False) -> Optional[ExecutionJob]:
        """Get job by ID.

        Args:
            execution_id: Job ID.
            for_update: Lock the row until the transaction ends.

        Returns:
            ExecutionJob or None if not found.
        """
        pass

    @abstractmethod
    async def get_stale_processing(self, started_before: datetime) -> list[ExecutionJob]:
        """Get PROCESSING jobs claimed before the given time.

        Used by stale job recovery.
        """
        pass

    @abstractmethod
    async def count_submitted_since(
        self,
        account: str,
        since: datetime,
        exclude_id: Optional[str] = None,
    ) -> int:
        """Count account jobs that reached the exchange since a point in time.

        A job counts when it is EXECUTED or still PROCESSING and was claimed
        at or after since. In-flight jobs are included so concurrent jobs of
        one account see each other.
        """
        pass

    @abstractmethod
    async def last_submitted_at(
        self,
        account: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[datetime]:
        """Claim time of the account's latest EXECUTED or PROCESSING job."""
        pass
