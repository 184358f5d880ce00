"""Tests for the task query service."""

import tempfile
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest

from taskrelay.core.errors import TaskValidationError
from taskrelay.db.database import DatabaseManager
from taskrelay.db.models import Task
from taskrelay.domain.task import TaskFilters, TaskPriority, TaskStatus
from taskrelay.services.query import TaskPage, TaskQueryService

BASE_TIME = datetime(2025, 8, 16, 12, 0, 0)


@pytest.fixture
async def db_manager():
    """Provide a temporary database manager."""
    with tempfile.TemporaryDirectory() as tmpdir:
        manager = DatabaseManager(Path(tmpdir) / "test.db")
        await manager.init_db()
        yield manager
        await manager.close()


@pytest.fixture
def service(db_manager):
    return TaskQueryService(db_manager)


async def seed(db_manager: DatabaseManager, count: int, **kwargs) -> None:
    async with db_manager.session() as session:
        session.add_all(
            Task(title=f"task-{i}", created_at=BASE_TIME + timedelta(minutes=i), **kwargs)
            for i in range(count)
        )


class TestListPage:
    """Test paginated listing."""

    @pytest.mark.parametrize(
        ("total", "page", "limit"),
        [(0, 1, 10), (5, 1, 10), (10, 1, 10), (11, 2, 10), (25, 3, 10), (7, 3, 3), (7, 4, 3)],
    )
    async def test_page_size_law(self, service, db_manager, total, page, limit):
        """Test a page holds min(limit, max(0, total - (page - 1) * limit)) items."""
        await seed(db_manager, total)

        result = await service.list_page(page=page, limit=limit)

        assert len(result.items) == min(limit, max(0, total - (page - 1) * limit))
        assert result.total == total
        assert result.page == page
        assert result.limit == limit

    async def test_pages_do_not_overlap(self, service, db_manager):
        """Test walking all pages visits every task once, newest first."""
        await seed(db_manager, 7)

        seen = []
        for page in (1, 2, 3):
            result = await service.list_page(page=page, limit=3)
            seen.extend(t.title for t in result.items)

        assert seen == [f"task-{i}" for i in range(6, -1, -1)]

    async def test_filters_apply_to_items_and_total(self, service, db_manager):
        """Test the filtered total, not the store size, is reported."""
        await seed(db_manager, 3, status=TaskStatus.COMPLETED)
        await seed(db_manager, 4, status=TaskStatus.PENDING)

        result = await service.list_page({"status": "completed"}, page=1, limit=2)

        assert result.total == 3
        assert len(result.items) == 2
        assert all(t.status == TaskStatus.COMPLETED for t in result.items)

    async def test_accepts_filter_model(self, service, db_manager):
        await seed(db_manager, 2, priority=TaskPriority.HIGH)
        await seed(db_manager, 1, priority=TaskPriority.LOW)

        result = await service.list_page(TaskFilters(priority=TaskPriority.LOW))

        assert result.total == 1

    async def test_created_range_with_utc_offset(self, service, db_manager):
        """Test offset bounds select the same instants as their UTC equivalents."""
        await seed(db_manager, 3)
        plus_five = timezone(timedelta(hours=5))
        created_from = (BASE_TIME + timedelta(minutes=1)).replace(tzinfo=UTC).astimezone(plus_five)

        result = await service.list_page({"created_from": created_from})

        assert result.total == 2
        assert [t.title for t in result.items] == ["task-2", "task-1"]

    @pytest.mark.parametrize(("page", "limit"), [(0, 10), (-1, 10), (1, 0), (1, 101)])
    async def test_invalid_page_or_limit(self, service, page, limit):
        """Test out-of-range page and limit values are rejected."""
        with pytest.raises(TaskValidationError):
            await service.list_page(page=page, limit=limit)

    async def test_invalid_filter(self, service):
        """Test unknown filter keys and values are rejected."""
        with pytest.raises(TaskValidationError):
            await service.list_page({"status": "archived"})
        with pytest.raises(TaskValidationError):
            await service.list_page({"colour": "blue"})


class TestTaskPage:
    """Test page metadata."""

    @pytest.mark.parametrize(("total", "limit", "pages"), [(0, 10, 0), (10, 10, 1), (11, 10, 2)])
    def test_total_pages(self, total, limit, pages):
        assert TaskPage(items=[], total=total, page=1, limit=limit).total_pages == pages


class TestStatsAndStatus:
    """Test aggregates and status listing."""

    async def test_get_stats(self, service, db_manager):
        """Test counts over the whole store."""
        await seed(db_manager, 2, status=TaskStatus.COMPLETED, priority=TaskPriority.HIGH)
        await seed(db_manager, 3, status=TaskStatus.PENDING)
        await seed(db_manager, 1, status=TaskStatus.FAILED)

        stats = await service.get_stats()

        assert stats.total == 6
        assert stats.completed == 2
        assert stats.pending == 3
        assert stats.high_priority == 2

    async def test_find_by_status(self, service, db_manager):
        await seed(db_manager, 2, status=TaskStatus.IN_PROGRESS)
        await seed(db_manager, 1)

        tasks = await service.find_by_status("in_progress")

        assert len(tasks) == 2
        assert all(t.status == TaskStatus.IN_PROGRESS for t in tasks)

    async def test_find_by_status_invalid(self, service):
        with pytest.raises(TaskValidationError):
            await service.find_by_status("archived")
