"""Database connection manager for the task store."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskrelay.core.config import DatabaseConfig
from taskrelay.db.models import Base


def _enable_foreign_keys(dbapi_conn: Any, connection_record: Any) -> None:
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Manages async SQLite database connections.

    Instances are created by the caller and passed explicitly to the
    services that need them.
    """

    def __init__(
        self,
        db_path: Path | str = "taskrelay.db",
        busy_timeout_seconds: float = 5.0,
        echo: bool = False,
    ):
        self.db_path = Path(db_path)
        self.db_url = f"sqlite+aiosqlite:///{self.db_path}"

        self.engine = create_async_engine(
            self.db_url,
            echo=echo,
            connect_args={"timeout": busy_timeout_seconds},
        )

        event.listen(self.engine.sync_engine, "connect", _enable_foreign_keys)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "DatabaseManager":
        """Create a manager from the ``database`` config section."""
        return cls(
            config.path,
            busy_timeout_seconds=config.busy_timeout_seconds,
            echo=config.echo,
        )

    async def init_db(self) -> None:
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close database connections."""
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional session.

        Commits when the block exits normally and rolls back on any
        exception raised inside it.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
