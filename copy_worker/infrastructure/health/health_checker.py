"""Health Checker - periodic database and Redis reachability checks.

Runs in a background thread so it works inside the Celery worker's main
process (no running event loop) as well as next to the API.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import redis.asyncio as redis
from sqlalchemy import text

from copy_worker.config import Settings, get_settings
from copy_worker.infrastructure.persistence.sqlalchemy import create_engine

logger = logging.getLogger(__name__)

Check = Callable[[], Awaitable[None]]

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


@dataclass
class HealthReport:
    """Result of one round of checks."""

    checks: dict[str, str]
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def healthy(self) -> bool:
        return all(result == HEALTHY for result in self.checks.values())

    @property
    def status(self) -> str:
        return HEALTHY if self.healthy else UNHEALTHY

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.checked_at.isoformat(),
            "checks": dict(self.checks),
        }


class HealthChecker:
    """Periodic health checker with start/stop lifecycle.

    Example:
        >>> checker = HealthChecker()
        >>> checker.start()
        >>> ...
        >>> checker.last_report.healthy
        >>> checker.stop()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        interval: Optional[float] = None,
        checks: Optional[dict[str, Check]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.interval = interval if interval is not None else self.settings.health_check_interval
        self._checks = checks if checks is not None else {
            "database": self._check_database,
            "redis": self._check_redis,
        }
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.last_report: Optional[HealthReport] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="health-checker", daemon=True)
        self._thread.start()
        logger.info("health_checker.started", extra={"interval": self.interval})

    def stop(self, timeout: float = 5.0) -> None:
        if self._thread is None:
            return

        self._stop_event.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("health_checker.stopped")

    async def check(self) -> HealthReport:
        """Run all checks once and keep the report."""
        results: dict[str, str] = {}
        for name, check in self._checks.items():
            try:
                await check()
                results[name] = HEALTHY
            except Exception as e:
                results[name] = f"{UNHEALTHY}: {str(e)[:100]}"

        report = HealthReport(checks=results)
        self.last_report = report

        if not report.healthy:
            logger.warning("health_checker.unhealthy", extra={"checks": results})
        return report

    def _run(self) -> None:
        while not self._stop_event.is_set():
            asyncio.run(self.check())
            self._stop_event.wait(self.interval)

    async def _check_database(self) -> None:
        engine = create_engine(self.settings, pooled=False)
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        finally:
            await engine.dispose()

    async def _check_redis(self) -> None:
        client = redis.from_url(self.settings.redis_url)
        try:
            await client.ping()
        finally:
            await client.aclose()
