"""RejectJob Handler - fails a delivery whose payload cannot become a job."""

import logging

from copy_worker.application.executions.commands import RejectJobCommand
from copy_worker.application.executions.dtos import ExecutionOutcomeDTO
from copy_worker.application.shared import CommandHandler, UnitOfWork
from copy_worker.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


class RejectJobHandler(CommandHandler[RejectJobCommand, ExecutionOutcomeDTO]):
    """Handler for RejectJob command.

    If a job row exists it is failed with the reason (a PROCESSING row is
    failed for reconciliation, its order state is unknown). Without a row
    only the failure outcome is returned.
    """

    def __init__(self, uow: UnitOfWork, event_bus: EventBus) -> None:
        self.uow = uow
        self.event_bus = event_bus

    async def handle(self, command: RejectJobCommand) -> ExecutionOutcomeDTO:
        logger.warning(
            "reject_job.invalid_payload",
            extra={"execution_id": command.execution_id, "reason": command.reason},
        )

        async with self.uow:
            job = await self.uow.jobs.get_by_id(command.execution_id, for_update=True)
            if job is None:
                return ExecutionOutcomeDTO(
                    executed=False,
                    execution_id=command.execution_id,
                    error=command.reason,
                )

            if job.is_terminal:
                return ExecutionOutcomeDTO.from_entity(job)

            if job.is_processing:
                job.mark_needs_reconciliation(command.reason)
            else:
                job.mark_failed(command.reason)

            await self.uow.jobs.save(job)
            await self.uow.commit()

        await self.event_bus.publish_all(job.get_domain_events())
        job.clear_domain_events()

        return ExecutionOutcomeDTO.from_entity(job)
