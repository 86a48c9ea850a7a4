"""GetExecution Handler - read one execution job."""

from copy_worker.application.executions.dtos import ExecutionJobDTO
from copy_worker.application.executions.queries import GetExecutionQuery
from copy_worker.application.shared import QueryHandler, UnitOfWork
from copy_worker.domain.executions.exceptions import ExecutionJobNotFoundError


class GetExecutionHandler(QueryHandler[GetExecutionQuery, ExecutionJobDTO]):
    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def handle(self, query: GetExecutionQuery) -> ExecutionJobDTO:
        """Get job by ID.

        Raises:
            ExecutionJobNotFoundError: Unknown execution ID.
        """
        async with self.uow:
            job = await self.uow.jobs.get_by_id(query.execution_id)

        if job is None:
            raise ExecutionJobNotFoundError(
                "Execution job not found", execution_id=query.execution_id
            )
        return ExecutionJobDTO.from_entity(job)
