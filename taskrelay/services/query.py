"""Read-only task listing and statistics."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from taskrelay.core.errors import TaskValidationError
from taskrelay.db.models import Task
from taskrelay.domain.task import MAX_PAGE_SIZE, TaskFilters, TaskStats, TaskStatus
from taskrelay.services.base import TaskServiceBase, validate_input


@dataclass
class TaskPage:
    """One page of tasks plus the size of the full filtered set."""

    items: list[Task]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


class TaskQueryService(TaskServiceBase):
    """Paginated listing and aggregate counts over the task store."""

    async def list_page(
        self,
        filters: TaskFilters | Mapping[str, Any] | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> TaskPage:
        """List tasks newest first.

        Args:
            filters: Optional status, priority, owner, search and date filters
            page: 1-based page number
            limit: Page size, 1 to MAX_PAGE_SIZE

        Returns:
            TaskPage whose ``total`` counts every task matching the filters
        """
        if page < 1:
            raise TaskValidationError(f"page must be >= 1, got {page}")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise TaskValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}")
        task_filters = validate_input(TaskFilters, filters) if filters is not None else None

        async with self._unit_of_work("list tasks") as repo:
            items, total = await repo.query_page(task_filters, page, limit)

        return TaskPage(items=items, total=total, page=page, limit=limit)

    async def get_stats(self) -> TaskStats:
        """Total, completed, pending and high-priority counts."""
        async with self._unit_of_work("compute task stats") as repo:
            return await repo.aggregate_counts()

    async def find_by_status(self, status: TaskStatus | str) -> list[Task]:
        try:
            task_status = TaskStatus(status)
        except ValueError as e:
            raise TaskValidationError(f"Invalid task status: {status!r}") from e

        async with self._unit_of_work("list tasks by status") as repo:
            return await repo.list_by_status(task_status)
