"""Error taxonomy for task lifecycle operations.

Every failure a caller can observe maps to one of these classes, each with a
stable ``code``. Expected conditions (``NotFoundError``, ``EmptyInputError``)
are returned immediately. Faults (``PersistenceError``,
``PropagationError``, ``OperationTimeoutError``) carry enough detail to tell
"nothing happened" apart from "data changed but was not announced".
"""


class TaskRelayError(Exception):
    """Base class for all taskrelay errors."""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TaskRelayError):
    """Referenced task does not exist."""

    code = "not_found"

    def __init__(self, task_id: str):
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class EmptyInputError(TaskRelayError):
    """Batch operation was given no task ids."""

    code = "empty_input"


class TaskValidationError(TaskRelayError):
    """Malformed patch, status or priority value."""

    code = "validation_error"


class InvalidTransitionError(TaskValidationError):
    """Status transition rejected by the configured transition policy."""

    code = "invalid_transition"

    def __init__(self, task_id: str, old_status: str, new_status: str):
        super().__init__(
            f"Transition {old_status} -> {new_status} is not allowed for task {task_id}"
        )
        self.task_id = task_id
        self.old_status = old_status
        self.new_status = new_status


class PersistenceError(TaskRelayError):
    """Store read or write failed."""

    code = "persistence_error"


class ConcurrentUpdateError(PersistenceError):
    """Task was modified by another writer between load and save."""

    code = "concurrent_update"

    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} was modified concurrently")
        self.task_id = task_id


class PropagationError(TaskRelayError):
    """Status announcement to the work queue failed.

    Attributes:
        task_id: Task whose status could not be announced
        status: Status value that was being announced
        rolled_back: True if the store mutation was rolled back, False if it
            was committed and only the announcement is missing
    """

    code = "propagation_error"

    def __init__(self, task_id: str, status: str, rolled_back: bool = True):
        state = "rolled back" if rolled_back else "committed"
        super().__init__(
            f"Failed to queue status update '{status}' for task {task_id} (change {state})"
        )
        self.task_id = task_id
        self.status = status
        self.rolled_back = rolled_back


class OperationTimeoutError(TaskRelayError):
    """Deadline exceeded on a store or queue call."""

    code = "timeout"
