"""Task lifecycle, batch and query services."""

from taskrelay.services.batch import BatchTaskService
from taskrelay.services.lifecycle import TaskLifecycleService, TransitionPolicy, TransitionTable
from taskrelay.services.query import TaskPage, TaskQueryService

__all__ = [
    "BatchTaskService",
    "TaskLifecycleService",
    "TaskPage",
    "TaskQueryService",
    "TransitionPolicy",
    "TransitionTable",
]
