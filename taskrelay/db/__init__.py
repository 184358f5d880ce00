"""Database package for the task store."""

from taskrelay.db.database import DatabaseManager

__all__ = ["DatabaseManager"]
