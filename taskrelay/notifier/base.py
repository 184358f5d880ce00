"""Status notifier contracts."""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from taskrelay.domain.task import TaskStatus


class StatusUpdateMessage(BaseModel):
    """Payload announced to the work queue when a task's status changes.

    Carries the task's current status, not a delta, so consumers can treat
    redelivered messages idempotently.
    """

    task_id: str
    status: TaskStatus

    model_config = ConfigDict(extra="forbid")


@runtime_checkable
class MessageQueue(Protocol):
    """At-least-once enqueue primitive exposed by the queue client."""

    async def enqueue(self, job_name: str, payload: dict[str, str]) -> None:
        """Enqueue one job. Raises on failure."""
        ...


@runtime_checkable
class StatusNotifier(Protocol):
    """Publishes task status changes."""

    async def publish_status_changed(self, task_id: str, status: TaskStatus) -> None:
        """Announce the current status of a task. Raises on failure."""
        ...
