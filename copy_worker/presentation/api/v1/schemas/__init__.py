"""Pydantic schemas for API responses."""

from .execution_schemas import ErrorResponse, ExecutionResponse

__all__ = ["ExecutionResponse", "ErrorResponse"]
