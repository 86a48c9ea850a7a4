"""Pydantic schemas shared by the worker and the API."""

from .execution_schemas import (
    ExecutionPayload,
    ExecutionTaskPayload,
    extract_execution_id,
    parse_task_payload,
)

__all__ = [
    "ExecutionPayload",
    "ExecutionTaskPayload",
    "extract_execution_id",
    "parse_task_payload",
]
