"""CancelJob Handler - cancels a job no worker has claimed yet."""

import logging

from copy_worker.application.executions.commands import CancelJobCommand
from copy_worker.application.executions.dtos import ExecutionJobDTO
from copy_worker.application.shared import CommandHandler, UnitOfWork
from copy_worker.domain.executions.exceptions import ExecutionJobNotFoundError
from copy_worker.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


class CancelJobHandler(CommandHandler[CancelJobCommand, ExecutionJobDTO]):
    """Handler for CancelJob command.

    The job is marked FAILED with reason "cancelled". The queued message is
    left in the broker; the worker sees a final job and skips the exchange.

    Raises:
        ExecutionJobNotFoundError: Unknown execution ID.
        InvalidJobStateError: Job is not QUEUED.
    """

    def __init__(self, uow: UnitOfWork, event_bus: EventBus) -> None:
        self.uow = uow
        self.event_bus = event_bus

    async def handle(self, command: CancelJobCommand) -> ExecutionJobDTO:
        async with self.uow:
            job = await self.uow.jobs.get_by_id(command.execution_id, for_update=True)
            if job is None:
                raise ExecutionJobNotFoundError(
                    "Execution job not found", execution_id=command.execution_id
                )

            job.cancel()
            await self.uow.jobs.save(job)
            await self.uow.commit()

        logger.info("cancel_job.cancelled", extra={"execution_id": job.id})

        await self.event_bus.publish_all(job.get_domain_events())
        job.clear_domain_events()

        return ExecutionJobDTO.from_entity(job)
