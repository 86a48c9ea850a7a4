"""Execution Celery Tasks.

Thin wrappers around the application layer handlers.

Architecture:
    Celery Task → ExecuteJobHandler → UnitOfWork (jobs, risk_limits)
                                    → ExchangeFactory → CCXT / paper adapter
                                    → EventBus → RedisEventPublisher

Each task run owns a fresh event loop, so it also owns a NullPool engine and
its own Redis connection; nothing is shared across loops.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import wraps
from typing import Any, AsyncIterator, Callable

from celery import shared_task
from pydantic import ValidationError

from copy_worker.application.executions.commands import (
    EnqueueJobCommand,
    RecoverStaleJobsCommand,
    RejectJobCommand,
)
from copy_worker.application.executions.dtos import ExecutionJobDTO
from copy_worker.application.executions.handlers import (
    EnqueueJobHandler,
    ExecuteJobHandler,
    RecoverStaleJobsHandler,
    RejectJobHandler,
)
from copy_worker.application.shared import UnitOfWork
from copy_worker.config import Settings, bind_job_context, clear_job_context, get_settings
from copy_worker.domain.executions.value_objects import JobStatus
from copy_worker.infrastructure.exchanges.factories import ExchangeFactory
from copy_worker.infrastructure.messaging import EventBus, RedisEventPublisher
from copy_worker.infrastructure.persistence.sqlalchemy import (
    SQLAlchemyUnitOfWork,
    create_engine,
    create_session_factory,
)
from copy_worker.presentation.schemas import extract_execution_id, parse_task_payload
from copy_worker.presentation.workers.celery_app import EXECUTE_TASK, RECOVER_TASK

logger = logging.getLogger(__name__)

Dispatcher = Callable[[dict[str, Any], str], None]


def async_task(f):
    """Decorator to run async function in Celery task."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(f(*args, **kwargs))
        finally:
            loop.close()
    return wrapper


@dataclass
class WorkerContext:
    """Per-run dependencies of a task."""

    uow: UnitOfWork
    event_bus: EventBus


@asynccontextmanager
async def worker_context(settings: Settings) -> AsyncIterator[WorkerContext]:
    """Open the engine and Redis publisher for one task run."""
    engine = create_engine(settings, pooled=False)
    publisher = RedisEventPublisher.from_url(settings.redis_url, settings.event_channel)

    event_bus = EventBus()
    publisher.subscribe_to(event_bus)

    try:
        yield WorkerContext(
            uow=SQLAlchemyUnitOfWork(create_session_factory(engine)),
            event_bus=event_bus,
        )
    finally:
        await publisher.close()
        await engine.dispose()


async def run_execution(
    payload: Any,
    context: WorkerContext,
    exchange_factory: ExchangeFactory,
) -> dict[str, Any]:
    """Validate the queue message and execute the job.

    Returns:
        Outcome dict: ``{"executed", "executionId"}`` plus ``"error"`` on failure.
    """
    try:
        execution = parse_task_payload(payload)
    except ValidationError as e:
        reason = f"Invalid payload: {_summarize(e)}"
        execution_id = extract_execution_id(payload)

        if execution_id is None:
            logger.error("execute_copy_trade.unidentified_payload", extra={"error": reason})
            return {"executed": False, "executionId": None, "error": reason}

        handler = RejectJobHandler(context.uow, context.event_bus)
        outcome = await handler.handle(RejectJobCommand(execution_id=execution_id, reason=reason))
        return outcome.to_dict()

    handler = ExecuteJobHandler(
        uow=context.uow,
        exchange_factory=exchange_factory,
        event_bus=context.event_bus,
    )
    outcome = await handler.handle(execution.to_command())
    return outcome.to_dict()


def dispatch_execution(message: dict[str, Any], execution_id: str) -> None:
    """Send the job to the execution queue.

    The Celery task ID is the execution ID, so the stored outcome can be
    looked up by job.
    """
    execute_copy_trade.apply_async(
        args=[message],
        task_id=execution_id,
        queue=get_settings().execution_queue,
    )


async def enqueue_execution(
    payload: Any,
    uow: UnitOfWork,
    dispatch: Dispatcher = dispatch_execution,
) -> ExecutionJobDTO:
    """Persist a QUEUED job and dispatch it to the worker.

    Enqueueing a job that already exists dispatches it again only while it
    is still queued.

    Raises:
        pydantic.ValidationError: If the payload is malformed.
        JobValidationError: If the job fields are invalid.
    """
    execution = parse_task_payload(payload)

    job = await EnqueueJobHandler(uow).handle(execution.to_command(EnqueueJobCommand))

    if job.status == JobStatus.QUEUED.value:
        dispatch(execution.to_message(), job.id)
        logger.info("enqueue_execution.dispatched", extra={"execution_id": job.id})

    return job


@shared_task(name=EXECUTE_TASK, bind=True, max_retries=0)
@async_task
async def execute_copy_trade(self, payload: dict[str, Any]) -> dict[str, Any]:
    """Execute one copy-trade job.

    Never retried by Celery: business failures return ``executed: False``
    and an infrastructure error leaves the job to stale job recovery.

    Example:
        >>> execute_copy_trade.apply_async(args=[{"execution": {...}}], queue="copy-execution")
    """
    settings = get_settings()
    execution = payload.get("execution") if isinstance(payload, dict) else None
    bind_job_context(
        execution_id=extract_execution_id(payload) or "unknown",
        account=execution.get("account") if isinstance(execution, dict) else None,
        task_id=self.request.id,
    )

    try:
        async with worker_context(settings) as context:
            return await run_execution(payload, context, ExchangeFactory(settings))
    finally:
        clear_job_context()


@shared_task(name=RECOVER_TASK, bind=True, max_retries=0)
@async_task
async def recover_stale_jobs(self) -> dict[str, Any]:
    """Fail jobs stuck in PROCESSING (Celery Beat)."""
    settings = get_settings()

    async with worker_context(settings) as context:
        handler = RecoverStaleJobsHandler(context.uow, context.event_bus)
        recovered = await handler.handle(
            RecoverStaleJobsCommand(older_than_seconds=settings.stale_job_timeout_seconds)
        )

    return {"status": "completed", "recovered": recovered}


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
