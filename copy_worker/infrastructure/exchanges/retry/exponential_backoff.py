"""Exponential backoff retry logic for exchange API calls.

Exchange APIs fail transiently (rate limits, network hiccups). Retrying with
growing delays gets the call through without hammering the venue.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryableError(Exception):
    """Base exception for errors that can be retried.

    Example:
        >>> raise RetryableError("Rate limit exceeded, retry in 1s")
    """

    pass


@dataclass(frozen=True)
class RetryPolicy:
    """Retry parameters for one exchange connector.

    Example:
        >>> policy = RetryPolicy(max_retries=3, base_delay=1.0, max_delay=30.0)
        >>> ticker = await policy.run(client.fetch_ticker, "BTC/USDT")

        >>> # 1st attempt fails → wait 1s
        >>> # 2nd attempt fails → wait 2s
        >>> # 3rd attempt fails → wait 4s
        >>> # 4th attempt fails → raise last exception
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    retryable_exceptions: tuple[Type[Exception], ...] = (RetryableError,)

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry following a failed attempt (0-based)."""
        return min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Call func, retrying on retryable exceptions.

        Raises:
            The last retryable exception once retries are exhausted, or any
            non-retryable exception immediately.
        """
        name = getattr(func, "__name__", repr(func))

        for attempt in range(self.max_retries + 1):
            try:
                result = await func(*args, **kwargs)
                if attempt > 0:
                    logger.info(
                        "retry.success",
                        extra={
                            "function": name,
                            "attempt": attempt + 1,
                            "total_attempts": self.max_retries + 1,
                        },
                    )
                return result

            except self.retryable_exceptions as e:
                if attempt >= self.max_retries:
                    logger.error(
                        "retry.exhausted",
                        extra={
                            "function": name,
                            "total_attempts": self.max_retries + 1,
                            "error": str(e),
                        },
                    )
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    "retry.attempt",
                    extra={
                        "function": name,
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                        "delay_seconds": delay,
                        "error": str(e),
                    },
                )
                await asyncio.sleep(delay)

        # Unreachable, the loop either returns or raises
        raise RuntimeError("Retry logic error: no exception raised")


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    retryable_exceptions: tuple[Type[Exception], ...] = (RetryableError,),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator for retry with exponential backoff.

    Example:
        >>> @retry_with_backoff(max_retries=3, base_delay=1.0)
        ... async def ping_redis():
        ...     return await redis.ping()
    """
    policy = RetryPolicy(
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        retryable_exceptions=retryable_exceptions,
    )

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError("retry_with_backoff supports async functions only")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await policy.run(func, *args, **kwargs)

        return wrapper

    return decorator
