"""Shared plumbing for task services."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from taskrelay.core.errors import (
    ConcurrentUpdateError,
    OperationTimeoutError,
    PersistenceError,
    TaskValidationError,
)
from taskrelay.db.database import DatabaseManager
from taskrelay.db.repositories.task_repo import DEFAULT_CHUNK_SIZE, TaskRepository

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def validate_input(model: type[M], data: M | Mapping[str, Any]) -> M:
    """Coerce caller input into ``model`` before any store interaction.

    Raises:
        TaskValidationError: If the input does not validate
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise TaskValidationError(f"Invalid {model.__name__}: {e}") from e


def validate_ids(ids: Sequence[str]) -> list[str]:
    """Normalize a batch id list, preserving first-seen order.

    Raises:
        TaskValidationError: If ids is not a list of non-empty strings
    """
    if isinstance(ids, str):
        raise TaskValidationError("Task ids must be a list, not a single string")
    normalized: list[str] = []
    for task_id in ids:
        if not isinstance(task_id, str) or not task_id.strip():
            raise TaskValidationError(f"Invalid task id: {task_id!r}")
        normalized.append(task_id)
    return list(dict.fromkeys(normalized))


class TaskServiceBase:
    """Base for services that run units of work against the task store."""

    def __init__(
        self,
        db: DatabaseManager,
        operation_timeout: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.db = db
        self.operation_timeout = operation_timeout
        self.chunk_size = chunk_size

    @asynccontextmanager
    async def _unit_of_work(
        self,
        operation: str,
        task_id: str | None = None,
    ) -> AsyncGenerator[TaskRepository, None]:
        """Run one operation inside a single store transaction.

        Constraint violations (such as an unknown owner) become
        ``TaskValidationError``, other store failures become
        ``PersistenceError``, optimistic lock
        conflicts become ``ConcurrentUpdateError`` and an exceeded deadline
        becomes ``OperationTimeoutError``. In every failure case the
        transaction is rolled back.
        """
        try:
            async with asyncio.timeout(self.operation_timeout):
                async with self.db.session() as session:
                    yield TaskRepository(session, chunk_size=self.chunk_size)
        except TimeoutError as e:
            logger.error(f"Timed out during {operation} (deadline {self.operation_timeout}s)")
            raise OperationTimeoutError(
                f"{operation} exceeded deadline of {self.operation_timeout}s"
            ) from e
        except StaleDataError as e:
            logger.warning(f"Concurrent modification during {operation} for task {task_id}")
            raise ConcurrentUpdateError(task_id or "<unknown>") from e
        except IntegrityError as e:
            logger.warning(f"Constraint violation during {operation}: {e.orig}")
            raise TaskValidationError(f"Failed to {operation}: {e.orig}") from e
        except SQLAlchemyError as e:
            logger.error(f"Store failure during {operation}: {e}")
            raise PersistenceError(f"Failed to {operation}: {e}") from e
