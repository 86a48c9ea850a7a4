"""API v1 routes."""

from .executions import router as executions_router

__all__ = ["executions_router"]
