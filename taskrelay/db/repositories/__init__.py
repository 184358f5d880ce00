"""Repository package for database operations."""

from taskrelay.db.repositories.base import BaseRepository
from taskrelay.db.repositories.task_repo import TaskRepository

__all__ = [
    "BaseRepository",
    "TaskRepository",
]
