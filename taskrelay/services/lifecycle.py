"""Task lifecycle engine.

Creates, updates and removes tasks and announces status changes to the work
queue. Announcements are published inside the store transaction, before
commit: if the publish fails the mutation is rolled back and the caller gets
a ``PropagationError``. A single-task mutation is never reported as
successful without a successful announcement attempt.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from taskrelay.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    OperationTimeoutError,
    PropagationError,
)
from taskrelay.db.database import DatabaseManager
from taskrelay.db.models import Task
from taskrelay.domain.task import TaskCreate, TaskStatus, TaskUpdate
from taskrelay.notifier.base import StatusNotifier
from taskrelay.services.base import TaskServiceBase, validate_input

logger = logging.getLogger(__name__)

TransitionPolicy = Callable[[TaskStatus, TaskStatus], bool]


class TransitionTable:
    """Transition policy backed by an explicit table of allowed moves.

    Statuses missing from the table may move anywhere.

    Example:
        >>> policy = TransitionTable({TaskStatus.COMPLETED: []})
        >>> policy(TaskStatus.COMPLETED, TaskStatus.PENDING)
        False
    """

    def __init__(self, allowed: Mapping[TaskStatus, Iterable[TaskStatus]]):
        self.allowed = {status: frozenset(targets) for status, targets in allowed.items()}

    def __call__(self, old: TaskStatus, new: TaskStatus) -> bool:
        if old not in self.allowed:
            return True
        return new in self.allowed[old]


class TaskLifecycleService(TaskServiceBase):
    """Single-task lifecycle operations with fail-fast status propagation."""

    def __init__(
        self,
        db: DatabaseManager,
        notifier: StatusNotifier,
        operation_timeout: float | None = None,
        transition_policy: TransitionPolicy | None = None,
    ):
        """Initialize the lifecycle service.

        Args:
            db: Task store database manager
            notifier: Status notifier used for announcements
            operation_timeout: Deadline in seconds for each operation, or None
            transition_policy: Optional ``(old, new) -> bool`` check applied
                to status changes; all transitions are allowed when None
        """
        super().__init__(db, operation_timeout=operation_timeout)
        self.notifier = notifier
        self.transition_policy = transition_policy

    async def create(self, data: TaskCreate | Mapping[str, Any]) -> Task:
        """Create a task and announce its initial status.

        Returns:
            The persisted task

        Raises:
            TaskValidationError: If the input is malformed or names an unknown owner
            PersistenceError: If the store write fails
            PropagationError: If the announcement fails (insert rolled back)
            OperationTimeoutError: If a deadline is exceeded
        """
        task_input = validate_input(TaskCreate, data)

        async with self._unit_of_work("create task") as repo:
            task = await repo.create(Task(**task_input.model_dump()))
            await self._announce(task)

        logger.info(f"Created task {task.id} with status {task.status}")
        return task

    async def find_one(self, task_id: str) -> Task:
        """Get a task by id.

        Raises:
            NotFoundError: If the task does not exist
        """
        async with self._unit_of_work("load task", task_id) as repo:
            task = await repo.get_by_id(task_id)

        if task is None:
            raise NotFoundError(task_id)
        return task

    async def update(self, task_id: str, patch: TaskUpdate | Mapping[str, Any]) -> Task:
        """Apply a partial update and announce the status if it changed.

        A patch that leaves the status value unchanged is saved without an
        announcement.

        Raises:
            TaskValidationError: If the patch is malformed or names an unknown owner
            InvalidTransitionError: If the transition policy rejects the change
            NotFoundError: If the task does not exist
            ConcurrentUpdateError: If another writer saved the task first
            PersistenceError: If the store write fails
            PropagationError: If the announcement fails (update rolled back)
            OperationTimeoutError: If a deadline is exceeded
        """
        changes = validate_input(TaskUpdate, patch).changes()

        async with self._unit_of_work("update task", task_id) as repo:
            task = await repo.get_by_id(task_id)
            if task is None:
                raise NotFoundError(task_id)

            previous_status = task.status
            new_status = changes.get("status", previous_status)
            if new_status != previous_status:
                self._check_transition(task_id, previous_status, new_status)

            for field, value in changes.items():
                setattr(task, field, value)
            task = await repo.save(task)

            if task.status != previous_status:
                await self._announce(task)

        logger.info(f"Updated task {task_id} (status {previous_status} -> {task.status})")
        return task

    async def set_status(self, task_id: str, status: TaskStatus | str) -> Task:
        """Change only the status of a task, with the same guarantees as update."""
        return await self.update(task_id, {"status": status})

    async def remove(self, task_id: str) -> None:
        """Delete a task.

        Existence check and delete are one statement: zero deleted rows is
        the only signal of absence. Deletion is not announced.

        Raises:
            NotFoundError: If the task does not exist
        """
        async with self._unit_of_work("delete task", task_id) as repo:
            affected = await repo.delete_by_id(task_id)
            if affected == 0:
                raise NotFoundError(task_id)

        logger.info(f"Deleted task {task_id}")

    def _check_transition(self, task_id: str, old: TaskStatus, new: TaskStatus) -> None:
        if self.transition_policy is not None and not self.transition_policy(old, new):
            raise InvalidTransitionError(task_id, old, new)

    async def _announce(self, task: Task) -> None:
        """Publish the task's current status, converting failures.

        Must be called inside the unit of work so a failure rolls it back.
        """
        try:
            await self.notifier.publish_status_changed(task.id, task.status)
        except TimeoutError as e:
            logger.error(f"Timed out queueing status update for Task ID {task.id}")
            raise OperationTimeoutError(
                f"Queueing status update for task {task.id} timed out; change rolled back"
            ) from e
        except Exception as e:
            logger.error(f"Failed to queue status update for Task ID {task.id}: {e}")
            raise PropagationError(task.id, task.status, rolled_back=True) from e
