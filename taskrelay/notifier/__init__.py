"""Status notifier package."""

from taskrelay.notifier.base import MessageQueue, StatusNotifier, StatusUpdateMessage
from taskrelay.notifier.queue import (
    STATUS_UPDATE_JOB,
    InMemoryMessageQueue,
    QueuedJob,
    QueueStatusNotifier,
)

__all__ = [
    "STATUS_UPDATE_JOB",
    "InMemoryMessageQueue",
    "MessageQueue",
    "QueueStatusNotifier",
    "QueuedJob",
    "StatusNotifier",
    "StatusUpdateMessage",
]
