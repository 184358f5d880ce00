"""Tests for database manager."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import select, text

from taskrelay.core.config import DatabaseConfig
from taskrelay.db.database import DatabaseManager
from taskrelay.db.models import Task, User
from taskrelay.domain.task import TaskPriority, TaskStatus


@pytest.fixture
async def db_manager():
    """Provide a temporary database manager."""
    with tempfile.TemporaryDirectory() as tmpdir:
        manager = DatabaseManager(Path(tmpdir) / "test.db")
        await manager.init_db()
        yield manager
        await manager.close()


class TestDatabaseManager:
    """Test DatabaseManager functionality."""

    async def test_init_creates_database_file(self):
        """Test database file is created on init."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "test.db"
            manager = DatabaseManager(db_path)
            await manager.init_db()

            assert db_path.exists()

            await manager.close()

    async def test_init_db_creates_tables(self, db_manager):
        """Test init_db creates the task store tables."""
        async with db_manager.session() as session:
            result = await session.execute(
                text("SELECT name FROM sqlite_master WHERE type='table'")
            )
            tables = {row[0] for row in result.fetchall()}

        assert {"tasks", "users"}.issubset(tables)

    async def test_init_db_creates_filter_indexes(self, db_manager):
        """Test the status, priority, owner and creation time indexes exist."""
        async with db_manager.session() as session:
            result = await session.execute(
                text("SELECT name FROM sqlite_master WHERE type='index' AND tbl_name='tasks'")
            )
            indexes = {row[0] for row in result.fetchall()}

        assert "ix_tasks_status" in indexes
        assert "ix_tasks_priority" in indexes
        assert "ix_tasks_owner_id" in indexes
        assert "ix_tasks_created_at_id" in indexes

    async def test_session_context_manager_commits_on_success(self, db_manager):
        """Test session context manager commits changes on success."""
        async with db_manager.session() as session:
            session.add(Task(title="persisted"))

        async with db_manager.session() as session:
            result = await session.execute(select(Task).where(Task.title == "persisted"))
            saved = result.scalar_one_or_none()

        assert saved is not None
        assert saved.status == TaskStatus.PENDING
        assert saved.priority == TaskPriority.MEDIUM
        assert saved.version == 1

    async def test_session_context_manager_rolls_back_on_exception(self, db_manager):
        """Test session context manager rolls back changes on exception."""
        with pytest.raises(ValueError):
            async with db_manager.session() as session:
                session.add(Task(title="discarded"))
                await session.flush()
                raise ValueError("Simulated error")

        async with db_manager.session() as session:
            result = await session.execute(select(Task).where(Task.title == "discarded"))
            assert result.scalar_one_or_none() is None

    async def test_foreign_keys_enabled(self, db_manager):
        """Test that foreign key constraints are enabled."""
        async with db_manager.session() as session:
            result = await session.execute(text("PRAGMA foreign_keys"))
            assert result.scalar() == 1

    async def test_deleting_owner_clears_task_reference(self, db_manager):
        """Test tasks survive deletion of their owner."""
        async with db_manager.session() as session:
            user = User(name="Ada", email="ada@example.com")
            session.add(user)
            await session.flush()
            task = Task(title="owned", owner_id=user.id)
            session.add(task)
            await session.flush()
            task_id = task.id
            user_id = user.id

        async with db_manager.session() as session:
            await session.execute(text("DELETE FROM users WHERE id = :id"), {"id": user_id})

        async with db_manager.session() as session:
            task = await session.get(Task, task_id)
            assert task is not None
            assert task.owner_id is None

    async def test_from_config(self):
        """Test creating a manager from the database config section."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = DatabaseConfig(path=str(Path(tmpdir) / "cfg.db"), busy_timeout_seconds=1.5)
            manager = DatabaseManager.from_config(config)

            assert manager.db_path == Path(tmpdir) / "cfg.db"
            assert manager.db_url == f"sqlite+aiosqlite:///{Path(tmpdir) / 'cfg.db'}"

            await manager.close()
