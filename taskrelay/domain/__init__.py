"""Domain types for taskrelay."""

from taskrelay.domain.task import (
    DEFAULT_STATUS,
    MAX_PAGE_SIZE,
    BatchAction,
    TaskCreate,
    TaskFilters,
    TaskPriority,
    TaskStats,
    TaskStatus,
    TaskUpdate,
)

__all__ = [
    "DEFAULT_STATUS",
    "MAX_PAGE_SIZE",
    "BatchAction",
    "TaskCreate",
    "TaskFilters",
    "TaskPriority",
    "TaskStats",
    "TaskStatus",
    "TaskUpdate",
]
