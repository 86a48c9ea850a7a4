"""Presentation layer - Celery worker and HTTP API."""
