"""SQLAlchemy ORM models for the task store."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from taskrelay.domain.task import DEFAULT_STATUS, TaskPriority, TaskStatus


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by SQLite DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


def _enum_values(enum_cls: type[TaskStatus] | type[TaskPriority]) -> list[str]:
    return [member.value for member in enum_cls]


# ============================================================================
# User Table
# ============================================================================


class User(Base):
    """Task owner.

    Tasks reference users weakly: deleting a user clears ``owner_id`` on
    their tasks instead of deleting them.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


# ============================================================================
# Task Table
# ============================================================================


class Task(Base):
    """A unit of work whose status changes are announced to the work queue.

    ``version`` is the optimistic concurrency counter: every ORM update is
    issued as ``UPDATE ... WHERE id = ? AND version = ?`` and fails with
    ``StaleDataError`` when another writer got there first.
    """

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, native_enum=False, length=20, values_callable=_enum_values),
        default=DEFAULT_STATUS,
        index=True,
    )
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority, native_enum=False, length=20, values_callable=_enum_values),
        default=TaskPriority.MEDIUM,
        index=True,
    )
    owner_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_tasks_created_at_id", "created_at", "id"),
        Index("ix_tasks_status_priority", "status", "priority"),
    )

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, status={self.status!r}, priority={self.priority!r})"
