"""Domain types for task lifecycle operations."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TaskStatus(StrEnum):
    """Status values for task lifecycle.

    Transitions are unconstrained unless a transition policy is configured
    on the lifecycle service.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TaskPriority(StrEnum):
    """Priority levels for tasks."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BatchAction(StrEnum):
    """Transitions supported by batch processing."""

    COMPLETE = "complete"
    DELETE = "delete"


DEFAULT_STATUS = TaskStatus.PENDING
MAX_PAGE_SIZE = 100


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to the naive UTC form stored in the task store.

    Naive values are assumed to already be UTC and are returned unchanged.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class TaskCreate(BaseModel):
    """Input for creating a task."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    payload: dict[str, Any] | None = None
    status: TaskStatus = DEFAULT_STATUS
    priority: TaskPriority = TaskPriority.MEDIUM
    owner_id: str | None = None
    due_date: datetime | None = None

    model_config = ConfigDict(extra="forbid")

    _normalize_due_date = field_validator("due_date")(to_naive_utc)


class TaskUpdate(BaseModel):
    """Partial update for a task.

    Only mutable fields are accepted; id, created_at and version are
    rejected as unknown fields. Unset fields are left untouched.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    payload: dict[str, Any] | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    owner_id: str | None = None
    due_date: datetime | None = None

    model_config = ConfigDict(extra="forbid")

    _normalize_due_date = field_validator("due_date")(to_naive_utc)

    @model_validator(mode="after")
    def _reject_null_required(self) -> "TaskUpdate":
        for name in ("title", "status", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Return only the fields explicitly set on this patch."""
        return self.model_dump(exclude_unset=True)


class TaskFilters(BaseModel):
    """Filters for task listing and aggregates."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    owner_id: str | None = None
    search: str | None = Field(default=None, min_length=1)
    created_from: datetime | None = None
    created_to: datetime | None = None

    model_config = ConfigDict(extra="forbid")

    _normalize_range = field_validator("created_from", "created_to")(to_naive_utc)


class TaskStats(BaseModel):
    """Aggregate task counts."""

    total: int
    completed: int
    pending: int
    high_priority: int
