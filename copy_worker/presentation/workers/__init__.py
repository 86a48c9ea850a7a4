"""Celery worker for copy-trade execution jobs.

Usage:
    # Start worker
    celery -A copy_worker.presentation.workers worker -Q copy-execution --loglevel=info

    # Start beat scheduler (stale job recovery)
    celery -A copy_worker.presentation.workers beat --loglevel=info
"""

from .celery_app import celery_app

__all__ = ["celery_app"]
