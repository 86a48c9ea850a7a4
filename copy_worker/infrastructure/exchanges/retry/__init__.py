"""Retry logic with exponential backoff."""

from .exponential_backoff import RetryableError, RetryPolicy, retry_with_backoff

__all__ = ["retry_with_backoff", "RetryPolicy", "RetryableError"]
