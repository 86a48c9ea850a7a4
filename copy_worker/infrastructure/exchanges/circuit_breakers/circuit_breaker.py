"""Circuit Breaker pattern protecting against cascade failures.

When an exchange is down:
- Without circuit breaker: every job tries → times out → fails (slow)
- With circuit breaker: after N failures → OPEN → fast fail

State Machine:
CLOSED (normal) → OPEN (failing) → HALF_OPEN (testing) → CLOSED/OPEN
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar

from copy_worker.config import get_settings
from copy_worker.domain.exchanges.exceptions import (
    AssetNotFoundError,
    InsufficientBalanceError,
    InvalidOrderError,
    OrderNotFilledError,
    OrderNotFoundError,
    OrderStateUnknownError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"  # Normal - requests pass through
    OPEN = "OPEN"  # Failing - reject requests (fast fail)
    HALF_OPEN = "HALF_OPEN"  # Testing - let requests probe the exchange


class CircuitBreakerOpenError(Exception):
    """Raised when the circuit breaker is OPEN (fast fail)."""

    pass


class CircuitBreaker:
    """Circuit Breaker implementation.

    State is only mutated between awaits, so a single event loop needs no
    lock. Instances may outlive an event loop (one per exchange per process).

    Args:
        name: Protected resource (exchange name), used in logs.
        failure_threshold: Consecutive failures that open the circuit.
        timeout_seconds: How long the circuit stays OPEN.
        success_threshold: Successes in HALF_OPEN needed to close.
        excluded_exceptions: Exceptions that do not count as failures
            (the exchange answered; the request itself was refused).

    Example:
        >>> circuit = CircuitBreaker("binance", failure_threshold=5, timeout_seconds=60)
        >>> await circuit.call(client.fetch_ticker, "BTC/USDT")
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        timeout_seconds: int = 60,
        success_threshold: int = 1,
        excluded_exceptions: tuple[Type[BaseException], ...] = (),
    ) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.timeout_seconds = timeout_seconds
        self.success_threshold = success_threshold
        self.excluded_exceptions = excluded_exceptions

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: Optional[datetime] = None

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Execute function through the circuit breaker.

        Raises:
            CircuitBreakerOpenError: If circuit is OPEN.
            Exception: Any exception raised by func.
        """
        self._before_call(getattr(func, "__name__", repr(func)))

        try:
            result = await func(*args, **kwargs)
        except self.excluded_exceptions:
            self._on_success()
            raise
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _before_call(self, function: str) -> None:
        if self._state != CircuitState.OPEN:
            return

        if self._should_attempt_reset():
            logger.info(
                "circuit_breaker.half_open",
                extra={
                    "circuit": self.name,
                    "function": function,
                    "previous_failures": self._failure_count,
                },
            )
            self._state = CircuitState.HALF_OPEN
            self._success_count = 0
            return

        logger.warning(
            "circuit_breaker.rejected",
            extra={
                "circuit": self.name,
                "function": function,
                "failure_count": self._failure_count,
            },
        )
        raise CircuitBreakerOpenError(f"Circuit breaker OPEN for {self.name}, retry later")

    def _on_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._success_count += 1

            if self._success_count >= self.success_threshold:
                logger.info(
                    "circuit_breaker.closed",
                    extra={
                        "circuit": self.name,
                        "success_count": self._success_count,
                        "previous_failures": self._failure_count,
                    },
                )
                self._state = CircuitState.CLOSED
                self._failure_count = 0
                self._success_count = 0

        elif self._state == CircuitState.CLOSED:
            self._failure_count = 0

    def _on_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = datetime.now(timezone.utc)

        if self._state == CircuitState.HALF_OPEN:
            logger.warning(
                "circuit_breaker.reopened",
                extra={"circuit": self.name, "failure_count": self._failure_count},
            )
            self._state = CircuitState.OPEN

        elif self._state == CircuitState.CLOSED and self._failure_count >= self.failure_threshold:
            logger.error(
                "circuit_breaker.opened",
                extra={
                    "circuit": self.name,
                    "failure_count": self._failure_count,
                    "threshold": self.failure_threshold,
                },
            )
            self._state = CircuitState.OPEN

    def _should_attempt_reset(self) -> bool:
        if self._last_failure_time is None:
            return True

        elapsed = datetime.now(timezone.utc) - self._last_failure_time
        return elapsed >= timedelta(seconds=self.timeout_seconds)

    def reset(self) -> None:
        """Manually reset circuit breaker (for testing/admin)."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time = None
        logger.info("circuit_breaker.manual_reset", extra={"circuit": self.name})


class CircuitBreakerRegistry:
    """One circuit breaker per exchange, shared by all connectors of a process.

    Example:
        >>> registry = CircuitBreakerRegistry(failure_threshold=5, timeout_seconds=60)
        >>> breaker = registry.get("binance")
        >>> registry.get("binance") is breaker  # True
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        timeout_seconds: int = 60,
        excluded_exceptions: tuple[Type[BaseException], ...] = (),
    ) -> None:
        self.failure_threshold = failure_threshold
        self.timeout_seconds = timeout_seconds
        self.excluded_exceptions = excluded_exceptions
        self._breakers: dict[str, CircuitBreaker] = {}

    def get(self, name: str) -> CircuitBreaker:
        key = name.lower()
        if key not in self._breakers:
            self._breakers[key] = CircuitBreaker(
                name=key,
                failure_threshold=self.failure_threshold,
                timeout_seconds=self.timeout_seconds,
                excluded_exceptions=self.excluded_exceptions,
            )
        return self._breakers[key]

    def states(self) -> dict[str, str]:
        """Current state per exchange (for health reporting)."""
        return {name: breaker.state.value for name, breaker in self._breakers.items()}

    def reset_all(self) -> None:
        for breaker in self._breakers.values():
            breaker.reset()


_registry_instance: Optional[CircuitBreakerRegistry] = None


def get_circuit_breaker_registry() -> CircuitBreakerRegistry:
    """Get the process-wide registry, configured from settings on first use."""
    global _registry_instance
    if _registry_instance is None:
        settings = get_settings()
        _registry_instance = CircuitBreakerRegistry(
            failure_threshold=settings.circuit_breaker_failure_threshold,
            timeout_seconds=settings.circuit_breaker_recovery_timeout,
            excluded_exceptions=(
                InsufficientBalanceError,
                InvalidOrderError,
                OrderNotFilledError,
                OrderNotFoundError,
                OrderStateUnknownError,
                AssetNotFoundError,
            ),
        )
    return _registry_instance
