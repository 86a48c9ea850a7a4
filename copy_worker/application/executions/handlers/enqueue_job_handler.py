"""EnqueueJob Handler - persists a QUEUED job before dispatch."""

import logging

from copy_worker.application.executions.commands import EnqueueJobCommand
from copy_worker.application.executions.dtos import ExecutionJobDTO
from copy_worker.application.shared import CommandHandler, UnitOfWork

from .execute_job_handler import build_job

logger = logging.getLogger(__name__)


class EnqueueJobHandler(CommandHandler[EnqueueJobCommand, ExecutionJobDTO]):
    """Handler for EnqueueJob command.

    Idempotent by execution ID: enqueueing an existing job returns it
    unchanged.

    Raises:
        JobValidationError: If job fields are invalid.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def handle(self, command: EnqueueJobCommand) -> ExecutionJobDTO:
        job = build_job(command)

        async with self.uow:
            existing = await self.uow.jobs.get_by_id(job.id)
            if existing is not None:
                logger.info(
                    "enqueue_job.already_exists",
                    extra={"execution_id": job.id, "status": existing.status.value},
                )
                return ExecutionJobDTO.from_entity(existing)

            await self.uow.jobs.save(job)
            await self.uow.commit()

        logger.info(
            "enqueue_job.queued",
            extra={"execution_id": job.id, "account": job.account, "symbol": job.symbol},
        )
        return ExecutionJobDTO.from_entity(job)
