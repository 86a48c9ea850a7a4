"""FastAPI application - Copy Trading Execution Worker API.

Small HTTP surface next to the Celery worker:
- Health check endpoints (liveness/readiness)
- Enqueue, inspect and cancel execution jobs

Run with:
    uvicorn copy_worker.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from copy_worker import __version__
from copy_worker.config import get_settings, setup_logging
from copy_worker.domain.executions.exceptions import JobValidationError
from copy_worker.domain.shared import AggregateNotFound, InvalidStateTransition
from copy_worker.infrastructure.health import HealthChecker
from copy_worker.infrastructure.messaging import RedisEventPublisher, get_event_bus
from copy_worker.infrastructure.persistence.sqlalchemy import (
    create_engine,
    create_session_factory,
    create_tables,
)
from copy_worker.presentation.api import dependencies
from copy_worker.presentation.api.dependencies import HealthCheckerDep
from copy_worker.presentation.api.v1.routes import executions_router

settings = get_settings()

setup_logging()
logger = logging.getLogger(__name__)


# ============================================================================
# LIFESPAN EVENTS (startup/shutdown)
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: engine, tables, health checker, event publisher.

    Shutdown: stop the checker, close Redis, dispose the engine.
    """
    logger.info("application.startup.started")

    engine = create_engine(settings)
    await create_tables(engine)

    health_checker = HealthChecker(settings)
    health_checker.start()

    publisher = RedisEventPublisher.from_url(settings.redis_url, settings.event_channel)
    publisher.subscribe_to(get_event_bus())

    dependencies.init_dependencies(
        session_factory=create_session_factory(engine),
        health_checker=health_checker,
    )

    logger.info("application.startup.completed")

    yield

    logger.info("application.shutdown.started")

    health_checker.stop()
    await publisher.close()
    await engine.dispose()

    logger.info("application.shutdown.completed")


app = FastAPI(
    title=settings.app_name,
    description="Enqueue and inspect copy-trade execution jobs.",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================


def _error(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {"error": error, "message": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(
        "api.validation_error",
        extra={"path": request.url.path, "errors": str(exc.errors())},
    )
    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationError",
        "Request validation failed",
        details=[{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()],
    )


@app.exception_handler(JobValidationError)
async def job_validation_handler(request: Request, exc: JobValidationError) -> JSONResponse:
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "JobValidationError", exc.message)


@app.exception_handler(AggregateNotFound)
async def not_found_handler(request: Request, exc: AggregateNotFound) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "NotFound", exc.message)


@app.exception_handler(InvalidStateTransition)
async def invalid_state_handler(request: Request, exc: InvalidStateTransition) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, "InvalidState", str(exc))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "api.unhandled_exception",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An unexpected error occurred. Please try again later.",
    )


# ============================================================================
# ROUTES
# ============================================================================


@app.get("/health", tags=["Health"], summary="Health check")
async def health_check(checker: HealthCheckerDep) -> dict:
    """Service status plus the health checker's last report."""
    report = checker.last_report
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "dry_run": settings.dry_run,
        "last_check": report.to_dict() if report else None,
    }


@app.get("/health/live", tags=["Health"], summary="Liveness probe")
async def liveness_check() -> dict:
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"], summary="Readiness probe")
async def readiness_check(checker: HealthCheckerDep) -> JSONResponse:
    """Check database and Redis now; 503 if any is unreachable."""
    report = await checker.check()
    return JSONResponse(
        status_code=status.HTTP_200_OK if report.healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=report.to_dict(),
    )


app.include_router(executions_router, prefix="/api/v1")
