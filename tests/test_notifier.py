"""Tests for the queue-backed status notifier."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from taskrelay.core.config import NotifierConfig
from taskrelay.domain.task import TaskStatus
from taskrelay.notifier import (
    STATUS_UPDATE_JOB,
    InMemoryMessageQueue,
    MessageQueue,
    QueueStatusNotifier,
    StatusNotifier,
    StatusUpdateMessage,
)


class SlowQueue:
    """Queue whose enqueue never finishes in time."""

    async def enqueue(self, job_name: str, payload: dict[str, str]) -> None:
        await asyncio.sleep(5)


class TestQueueStatusNotifier:
    """Test publishing through a MessageQueue."""

    async def test_publish_enqueues_status_message(self):
        """Test the job name and payload sent to the queue."""
        queue = InMemoryMessageQueue()
        notifier = QueueStatusNotifier(queue)

        await notifier.publish_status_changed("task-1", TaskStatus.COMPLETED)

        jobs = queue.peek()
        assert len(jobs) == 1
        assert jobs[0].name == STATUS_UPDATE_JOB
        assert jobs[0].payload == {"task_id": "task-1", "status": "completed"}

    async def test_each_publish_is_independent(self):
        """Test repeated publishes are all enqueued, in call order."""
        queue = InMemoryMessageQueue()
        notifier = QueueStatusNotifier(queue)

        await notifier.publish_status_changed("task-1", TaskStatus.IN_PROGRESS)
        await notifier.publish_status_changed("task-1", TaskStatus.IN_PROGRESS)

        assert [j.payload["status"] for j in queue.peek()] == ["in_progress", "in_progress"]

    async def test_queue_failure_propagates(self):
        """Test enqueue errors are not swallowed."""
        queue = AsyncMock()
        queue.enqueue.side_effect = ConnectionError("broker unavailable")
        notifier = QueueStatusNotifier(queue)

        with pytest.raises(ConnectionError):
            await notifier.publish_status_changed("task-1", TaskStatus.PENDING)

    async def test_publish_deadline(self):
        """Test a slow enqueue raises TimeoutError."""
        notifier = QueueStatusNotifier(SlowQueue(), timeout_seconds=0.05)

        with pytest.raises(TimeoutError):
            await notifier.publish_status_changed("task-1", TaskStatus.PENDING)

    async def test_from_config(self):
        """Test job name and deadline come from the notifier config."""
        queue = InMemoryMessageQueue()
        config = NotifierConfig(job_name="custom-job", publish_timeout_seconds=2.5)

        notifier = QueueStatusNotifier.from_config(queue, config)

        assert notifier.job_name == "custom-job"
        assert notifier.timeout_seconds == 2.5

    def test_satisfies_protocols(self):
        """Test the concrete classes match the notifier contracts."""
        queue = InMemoryMessageQueue()
        assert isinstance(queue, MessageQueue)
        assert isinstance(QueueStatusNotifier(queue), StatusNotifier)


class TestInMemoryMessageQueue:
    """Test the in-process queue."""

    async def test_drain_returns_and_clears_jobs(self):
        """Test drain empties the queue in FIFO order."""
        queue = InMemoryMessageQueue()
        await queue.enqueue("job", {"task_id": "a", "status": "pending"})
        await queue.enqueue("job", {"task_id": "b", "status": "pending"})

        jobs = await queue.drain()

        assert [j.payload["task_id"] for j in jobs] == ["a", "b"]
        assert queue.qsize() == 0

    async def test_full_queue_rejects_jobs(self):
        """Test a bounded queue raises once full."""
        queue = InMemoryMessageQueue(maxsize=1)
        await queue.enqueue("job", {"task_id": "a", "status": "pending"})

        with pytest.raises(RuntimeError, match="full"):
            await queue.enqueue("job", {"task_id": "b", "status": "pending"})

        assert queue.qsize() == 1


class TestStatusUpdateMessage:
    """Test the status message schema."""

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            StatusUpdateMessage(task_id="task-1", status="archived")
