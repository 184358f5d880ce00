"""Status notifier backed by a work queue client."""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass

from taskrelay.core.config import NotifierConfig
from taskrelay.domain.task import TaskStatus
from taskrelay.notifier.base import MessageQueue, StatusUpdateMessage

logger = logging.getLogger(__name__)

STATUS_UPDATE_JOB = "task-status-update"


class QueueStatusNotifier:
    """Publishes ``{task_id, status}`` messages through a MessageQueue.

    Each publish is independent; no ordering is guaranteed across calls.
    Failures and deadline overruns propagate to the caller unchanged.
    """

    def __init__(
        self,
        queue: MessageQueue,
        job_name: str = STATUS_UPDATE_JOB,
        timeout_seconds: float | None = None,
    ):
        """Initialize the notifier.

        Args:
            queue: Queue client providing ``enqueue``
            job_name: Job name used for status messages
            timeout_seconds: Deadline for a single enqueue call, or None
        """
        self.queue = queue
        self.job_name = job_name
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_config(cls, queue: MessageQueue, config: NotifierConfig) -> "QueueStatusNotifier":
        return cls(queue, job_name=config.job_name, timeout_seconds=config.publish_timeout_seconds)

    async def publish_status_changed(self, task_id: str, status: TaskStatus) -> None:
        """Enqueue a status update message.

        Raises:
            TimeoutError: If the enqueue call exceeds the configured deadline
            Exception: Whatever the queue client raises on failure
        """
        message = StatusUpdateMessage(task_id=task_id, status=status)
        payload = message.model_dump(mode="json")

        async with asyncio.timeout(self.timeout_seconds):
            await self.queue.enqueue(self.job_name, payload)

        logger.debug(f"Queued {self.job_name} for task {task_id}: {status}")


@dataclass
class QueuedJob:
    """A job held by the in-memory queue."""

    name: str
    payload: dict[str, str]


class InMemoryMessageQueue:
    """Process-local MessageQueue for development and tests.

    Jobs are kept in FIFO order until drained.
    """

    def __init__(self, name: str = "task-processing", maxsize: int = 0):
        self.name = name
        self.maxsize = maxsize
        self._jobs: deque[QueuedJob] = deque()
        self._lock = asyncio.Lock()

    async def enqueue(self, job_name: str, payload: dict[str, str]) -> None:
        async with self._lock:
            if self.maxsize and len(self._jobs) >= self.maxsize:
                raise RuntimeError(f"Queue '{self.name}' is full ({self.maxsize} jobs)")
            self._jobs.append(QueuedJob(name=job_name, payload=dict(payload)))

    def qsize(self) -> int:
        return len(self._jobs)

    def peek(self) -> list[QueuedJob]:
        """Return queued jobs without removing them."""
        return list(self._jobs)

    async def drain(self) -> list[QueuedJob]:
        """Remove and return all queued jobs."""
        async with self._lock:
            jobs = list(self._jobs)
            self._jobs.clear()
        return jobs
