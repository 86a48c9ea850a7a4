"""Base Handler classes for Commands and Queries."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .command import Command
from .query import Query

TCommand = TypeVar("TCommand", bound=Command)
TQuery = TypeVar("TQuery", bound=Query)
TResult = TypeVar("TResult")


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """Base class for command handlers.

    A command handler:
    - Loads aggregates through the Unit of Work
    - Runs domain logic (aggregate methods, domain services)
    - Commits changes
    - Publishes domain events after commit

    Example:
        >>> class CancelJobHandler(CommandHandler[CancelJobCommand, ExecutionJobDTO]):
        ...     async def handle(self, command: CancelJobCommand) -> ExecutionJobDTO:
        ...         async with self.uow:
        ...             job = await self.uow.jobs.get_by_id(command.execution_id)
        ...             job.cancel()
        ...             await self.uow.jobs.save(job)
        ...             await self.uow.commit()
        ...         return ExecutionJobDTO.from_entity(job)
    """

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """Handle command and return result.

        Raises:
            DomainException: If business rule violated.
        """
        pass


class QueryHandler(ABC, Generic[TQuery, TResult]):
    """Base class for query handlers (read-only, no side effects)."""

    @abstractmethod
    async def handle(self, query: TQuery) -> TResult:
        """Handle query and return result."""
        pass
