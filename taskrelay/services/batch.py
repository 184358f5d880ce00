"""Batch operator for bulk task transitions.

Batch transitions trade the per-task announcement guarantee for throughput:
matched rows are durably updated in one transaction, and status
announcements are either skipped or published best effort after commit.
"""

import logging
from collections.abc import Sequence

from taskrelay.core.errors import EmptyInputError, TaskValidationError
from taskrelay.db.database import DatabaseManager
from taskrelay.db.repositories.task_repo import DEFAULT_CHUNK_SIZE
from taskrelay.domain.task import BatchAction, TaskStatus
from taskrelay.notifier.base import StatusNotifier
from taskrelay.services.base import TaskServiceBase, validate_ids

logger = logging.getLogger(__name__)


class BatchTaskService(TaskServiceBase):
    """Applies one lifecycle transition to many tasks at once."""

    def __init__(
        self,
        db: DatabaseManager,
        notifier: StatusNotifier | None = None,
        announce: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        operation_timeout: float | None = None,
    ):
        """Initialize the batch operator.

        Args:
            db: Task store database manager
            notifier: Status notifier, required when ``announce`` is True
            announce: Publish each actually-changed task after commit
            chunk_size: Ids per bulk statement
            operation_timeout: Deadline in seconds for the store transaction
        """
        if announce and notifier is None:
            raise ValueError("A notifier is required when batch announce is enabled")
        super().__init__(db, operation_timeout=operation_timeout, chunk_size=chunk_size)
        self.notifier = notifier
        self.announce = announce

    async def batch_update_status(self, ids: Sequence[str], status: TaskStatus | str) -> int:
        """Set ``status`` on every task in ``ids``.

        Ids that do not exist are ignored. The count is status-agnostic: a
        task already in ``status`` is matched and counted.

        Returns:
            Number of tasks matched

        Raises:
            EmptyInputError: If ``ids`` is empty
            TaskValidationError: If an id or the status is malformed
            PersistenceError: If the bulk update fails
        """
        task_ids = self._require_ids(ids)
        target = _validate_status(status)

        changed: list[str] = []
        async with self._unit_of_work("batch update status") as repo:
            if self.announce:
                changed = await repo.ids_not_in_status(task_ids, target)
            affected = await repo.bulk_set_status(task_ids, target)

        logger.info(
            f"Batch status update to {target}: {affected} of {len(task_ids)} tasks matched"
        )

        if changed:
            await self._announce_changed(changed, target)
        return affected

    async def batch_delete(self, ids: Sequence[str]) -> int:
        """Delete every task in ``ids``. Ids that do not exist are ignored.

        Returns:
            Number of tasks deleted

        Raises:
            EmptyInputError: If ``ids`` is empty
            TaskValidationError: If an id is malformed
            PersistenceError: If the bulk delete fails
        """
        task_ids = self._require_ids(ids)

        async with self._unit_of_work("batch delete") as repo:
            affected = await repo.bulk_delete(task_ids)

        logger.info(f"Batch delete: {affected} of {len(task_ids)} tasks deleted")
        return affected

    async def process(self, ids: Sequence[str], action: BatchAction | str) -> int:
        """Dispatch a batch action by name."""
        batch_action = _validate_action(action)
        if batch_action is BatchAction.COMPLETE:
            return await self.batch_update_status(ids, TaskStatus.COMPLETED)
        return await self.batch_delete(ids)

    def _require_ids(self, ids: Sequence[str]) -> list[str]:
        if not ids:
            raise EmptyInputError("At least one task id is required")
        return validate_ids(ids)

    async def _announce_changed(self, task_ids: list[str], status: TaskStatus) -> None:
        assert self.notifier is not None
        failed: list[str] = []
        for task_id in task_ids:
            try:
                await self.notifier.publish_status_changed(task_id, status)
            except Exception as e:
                logger.warning(f"Failed to queue status update for Task ID {task_id}: {e}")
                failed.append(task_id)

        if failed:
            logger.error(
                f"Batch announce incomplete: {len(failed)} of {len(task_ids)} "
                f"status updates not queued"
            )


def _validate_status(status: TaskStatus | str) -> TaskStatus:
    try:
        return TaskStatus(status)
    except ValueError as e:
        raise TaskValidationError(f"Invalid task status: {status!r}") from e


def _validate_action(action: BatchAction | str) -> BatchAction:
    try:
        return BatchAction(action)
    except ValueError as e:
        raise TaskValidationError(f"Invalid task batch process action: {action!r}") from e
