"""Pydantic schemas for API request/response validation."""

from taskrelay.api.schemas.tasks import (
    BatchProcessRequest,
    BatchProcessResponse,
    ErrorResponse,
    TaskListResponse,
    TaskResponse,
    TaskStatsResponse,
)

__all__ = [
    "BatchProcessRequest",
    "BatchProcessResponse",
    "ErrorResponse",
    "TaskListResponse",
    "TaskResponse",
    "TaskStatsResponse",
]
