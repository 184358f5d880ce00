"""Pydantic schemas for Tasks API endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from taskrelay.domain.task import BatchAction, TaskPriority, TaskStatus


class TaskResponse(BaseModel):
    """Response model for a single task.

    Attributes:
        id: Task ID (UUID)
        title: Short title
        description: Optional longer description
        payload: Optional pass-through JSON payload
        status: Current lifecycle status
        priority: Priority level
        owner_id: Owning user ID, if any
        due_date: Optional due date
        version: Optimistic concurrency counter
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    title: str
    description: str | None = None
    payload: dict[str, Any] | None = None
    status: TaskStatus
    priority: TaskPriority
    owner_id: str | None = None
    due_date: datetime | None = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskListResponse(BaseModel):
    """Response model for GET /tasks.

    ``total`` counts every task matching the filters, not just this page.
    """

    data: list[TaskResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    model_config = ConfigDict(extra="forbid")


class TaskStatsResponse(BaseModel):
    """Response model for GET /tasks/stats."""

    total: int
    completed: int
    pending: int
    high_priority: int

    model_config = ConfigDict(extra="forbid")


class BatchProcessRequest(BaseModel):
    """Request model for POST /tasks/batch.

    Attributes:
        tasks: Task IDs to process
        action: Transition to apply (complete or delete)
    """

    tasks: list[str]
    action: BatchAction

    model_config = ConfigDict(extra="forbid")


class BatchProcessResponse(BaseModel):
    """Response model for POST /tasks/batch."""

    message: str
    affected: int

    model_config = ConfigDict(extra="forbid")


class ErrorResponse(BaseModel):
    """Error body returned for every taskrelay error."""

    code: str
    detail: str
