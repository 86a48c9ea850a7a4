"""Celery Application Configuration.

- Redis broker and result backend (outcomes are stored as task results)
- Late acks + reject on worker loss: at-least-once delivery
- Prefetch 1: one job in flight per pool slot
- Beat schedule for stale job recovery
- Structured logging and health checker wired through Celery signals
"""

import asyncio
import logging
from typing import Any, Optional

from celery import Celery
from celery.signals import (
    setup_logging as celery_setup_logging,
    task_failure,
    task_success,
    worker_ready,
    worker_shutdown,
)

from copy_worker.config import get_settings, setup_logging
from copy_worker.infrastructure.health import HealthChecker
from copy_worker.infrastructure.persistence.sqlalchemy import create_engine, create_tables

logger = logging.getLogger(__name__)

settings = get_settings()

EXECUTE_TASK = "copy_worker.execute_copy_trade"
RECOVER_TASK = "copy_worker.recover_stale_jobs"

celery_app = Celery(
    "copy_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "copy_worker.presentation.workers.tasks.execution_tasks",
    ],
)

celery_app.conf.update(
    # ==================== Task Settings ====================
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution
    task_acks_late=settings.celery_task_acks_late,
    task_reject_on_worker_lost=settings.celery_task_reject_on_worker_lost,
    task_time_limit=300,
    task_soft_time_limit=240,
    task_track_started=True,

    # Result backend
    result_expires=86400,  # Outcomes kept for a day

    # ==================== Worker Settings ====================
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.celery_worker_concurrency,
    worker_max_tasks_per_child=1000,

    # ==================== Broker Settings ====================
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
    broker_connection_max_retries=10,

    # ==================== Beat Scheduler ====================
    beat_schedule={
        "recover-stale-jobs": {
            "task": RECOVER_TASK,
            "schedule": settings.stale_job_check_interval,
        },
    },

    # ==================== Task Routes ====================
    task_routes={
        EXECUTE_TASK: {"queue": settings.execution_queue},
        RECOVER_TASK: {"queue": settings.execution_queue},
    },
    task_default_queue=settings.execution_queue,
)


# ============================================================================
# SIGNALS
# ============================================================================

_health_checker: Optional[HealthChecker] = None


@celery_setup_logging.connect
def configure_logging(**kwargs: Any) -> None:
    """Replace Celery's logging setup with structlog."""
    setup_logging()


@worker_ready.connect
def on_worker_ready(**kwargs: Any) -> None:
    global _health_checker

    asyncio.run(_prepare_database())

    _health_checker = HealthChecker(settings)
    _health_checker.start()
    logger.info(
        "worker.ready",
        extra={
            "queue": settings.execution_queue,
            "concurrency": settings.celery_worker_concurrency,
            "dry_run": settings.dry_run,
        },
    )


@worker_shutdown.connect
def on_worker_shutdown(**kwargs: Any) -> None:
    global _health_checker

    if _health_checker is not None:
        _health_checker.stop()
        _health_checker = None
    logger.info("worker.shutdown")


@task_success.connect
def on_task_success(sender: Any = None, result: Any = None, **kwargs: Any) -> None:
    if isinstance(result, dict) and "executed" in result:
        logger.info(
            "task.completed",
            extra={
                "task": sender.name if sender else None,
                "execution_id": result.get("executionId"),
                "executed": result["executed"],
            },
        )


@task_failure.connect
def on_task_failure(
    sender: Any = None,
    task_id: Optional[str] = None,
    exception: Optional[BaseException] = None,
    **kwargs: Any,
) -> None:
    logger.error(
        "task.failed",
        extra={
            "task": sender.name if sender else None,
            "task_id": task_id,
            "error": str(exception),
            "error_type": type(exception).__name__,
        },
    )


async def _prepare_database() -> None:
    engine = create_engine(settings, pooled=False)
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()
