"""RecoverStaleJobs Handler - fails jobs stuck in PROCESSING.

A job stays PROCESSING when the worker died or the database failed between
the two commits. Its order may or may not exist on the exchange, so it is
failed for reconciliation and never re-submitted.
"""

import logging
from datetime import datetime, timedelta, timezone

from copy_worker.application.executions.commands import RecoverStaleJobsCommand
from copy_worker.application.shared import CommandHandler, UnitOfWork
from copy_worker.domain.shared import DomainEvent
from copy_worker.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


class RecoverStaleJobsHandler(CommandHandler[RecoverStaleJobsCommand, list[str]]):
    """Handler for RecoverStaleJobs command.

    Returns:
        IDs of the jobs failed for reconciliation.
    """

    def __init__(self, uow: UnitOfWork, event_bus: EventBus) -> None:
        self.uow = uow
        self.event_bus = event_bus

    async def handle(self, command: RecoverStaleJobsCommand) -> list[str]:
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=command.older_than_seconds)
        events: list[DomainEvent] = []

        async with self.uow:
            jobs = await self.uow.jobs.get_stale_processing(started_before=cutoff)

            for job in jobs:
                job.mark_needs_reconciliation(
                    f"no result after {command.older_than_seconds}s in processing"
                )
                await self.uow.jobs.save(job)
                events.extend(job.get_domain_events())
                job.clear_domain_events()

            await self.uow.commit()

        recovered = [job.id for job in jobs]
        if recovered:
            logger.warning(
                "recover_stale_jobs.recovered",
                extra={"count": len(recovered), "execution_ids": recovered},
            )

        await self.event_bus.publish_all(events)
        return recovered
