"""Repository for task store operations."""

from collections.abc import Iterator, Sequence
from typing import Any

from sqlalchemy import ColumnElement, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskrelay.db.models import Task, utcnow
from taskrelay.db.repositories.base import BaseRepository
from taskrelay.domain.task import TaskFilters, TaskPriority, TaskStats, TaskStatus

DEFAULT_CHUNK_SIZE = 500


def _chunks(ids: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


def _filter_conditions(filters: TaskFilters | None) -> list[ColumnElement[bool]]:
    if filters is None:
        return []

    conditions: list[ColumnElement[bool]] = []
    if filters.status is not None:
        conditions.append(Task.status == filters.status)
    if filters.priority is not None:
        conditions.append(Task.priority == filters.priority)
    if filters.owner_id is not None:
        conditions.append(Task.owner_id == filters.owner_id)
    if filters.search:
        conditions.append(
            or_(
                Task.title.icontains(filters.search, autoescape=True),
                Task.description.icontains(filters.search, autoescape=True),
            )
        )
    if filters.created_from is not None:
        conditions.append(Task.created_at >= filters.created_from)
    if filters.created_to is not None:
        conditions.append(Task.created_at <= filters.created_to)
    return conditions


class TaskRepository(BaseRepository[Task]):
    """Task store operations.

    All methods run inside the transaction owned by the session passed in;
    committing or rolling back is the caller's responsibility.
    """

    def __init__(self, session: AsyncSession, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(session, Task)
        self.chunk_size = chunk_size

    async def delete_by_id(self, task_id: str) -> int:
        """Delete a task in one statement.

        Returns:
            Number of rows deleted (0 when the task does not exist)
        """
        result: Any = await self.session.execute(delete(Task).where(Task.id == task_id))
        return int(result.rowcount or 0)

    async def list_by_status(self, status: TaskStatus) -> list[Task]:
        """List tasks with the given status, newest first."""
        stmt = (
            select(Task)
            .where(Task.status == status)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, filters: TaskFilters | None = None) -> int:
        """Count tasks matching the filters."""
        stmt = select(func.count(Task.id)).where(*_filter_conditions(filters))
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def query_page(
        self,
        filters: TaskFilters | None,
        page: int,
        limit: int,
    ) -> tuple[list[Task], int]:
        """Fetch one page of tasks and the total matching count.

        The total is computed by a window function in the same statement as
        the page, so both reflect one snapshot. Only a page past the end
        needs a separate count; that second read is not guaranteed to see the
        same snapshot as the page query.

        Args:
            filters: Optional filter predicate
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (tasks on the page, total matching tasks)
        """
        stmt = (
            select(Task, func.count().over().label("total"))
            .where(*_filter_conditions(filters))
            .order_by(Task.created_at.desc(), Task.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        rows = result.all()

        if rows:
            return [row[0] for row in rows], int(rows[0].total)
        if page == 1:
            return [], 0
        return [], await self.count(filters)

    async def bulk_set_status(self, ids: Sequence[str], status: TaskStatus) -> int:
        """Set the status of every task in ``ids``.

        Rows already in ``status`` are matched and counted too. Missing ids
        are ignored.

        Returns:
            Number of rows matched by the update
        """
        affected = 0
        now = utcnow()
        for chunk in _chunks(ids, self.chunk_size):
            stmt = (
                update(Task)
                .where(Task.id.in_(chunk))
                .values(status=status, updated_at=now, version=Task.version + 1)
                .execution_options(synchronize_session=False)
            )
            result: Any = await self.session.execute(stmt)
            affected += int(result.rowcount or 0)
        return affected

    async def bulk_delete(self, ids: Sequence[str]) -> int:
        """Delete every task in ``ids``. Missing ids are ignored.

        Returns:
            Number of rows deleted
        """
        affected = 0
        for chunk in _chunks(ids, self.chunk_size):
            stmt = (
                delete(Task)
                .where(Task.id.in_(chunk))
                .execution_options(synchronize_session=False)
            )
            result: Any = await self.session.execute(stmt)
            affected += int(result.rowcount or 0)
        return affected

    async def ids_not_in_status(self, ids: Sequence[str], status: TaskStatus) -> list[str]:
        """Return the ids from ``ids`` that exist and are not yet in ``status``."""
        found: list[str] = []
        for chunk in _chunks(ids, self.chunk_size):
            stmt = select(Task.id).where(Task.id.in_(chunk), Task.status != status)
            result = await self.session.execute(stmt)
            found.extend(result.scalars().all())
        return found

    async def aggregate_counts(self, filters: TaskFilters | None = None) -> TaskStats:
        """Compute total, completed, pending and high-priority counts in one read."""
        stmt = select(
            func.count(Task.id).label("total"),
            func.count(Task.id).filter(Task.status == TaskStatus.COMPLETED).label("completed"),
            func.count(Task.id).filter(Task.status == TaskStatus.PENDING).label("pending"),
            func.count(Task.id).filter(Task.priority == TaskPriority.HIGH).label("high_priority"),
        ).where(*_filter_conditions(filters))
        result = await self.session.execute(stmt)
        row = result.one()
        return TaskStats(
            total=row.total or 0,
            completed=row.completed or 0,
            pending=row.pending or 0,
            high_priority=row.high_priority or 0,
        )
