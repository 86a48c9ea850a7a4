"""Worker Configuration.

Uses pydantic-settings for type-safe configuration from environment variables.

Usage:
    from copy_worker.config import get_settings, setup_logging
    settings = get_settings()
    setup_logging()  # Call once at startup
"""

from .settings import Settings, get_settings
from .logging import bind_job_context, clear_job_context, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "bind_job_context",
    "clear_job_context",
]
