"""Dependency health checks."""

from .health_checker import HealthChecker, HealthReport

__all__ = ["HealthChecker", "HealthReport"]
