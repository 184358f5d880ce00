"""Core utilities for taskrelay."""

from taskrelay.core.config import Config, load_config
from taskrelay.core.errors import (
    ConcurrentUpdateError,
    EmptyInputError,
    InvalidTransitionError,
    NotFoundError,
    OperationTimeoutError,
    PersistenceError,
    PropagationError,
    TaskRelayError,
    TaskValidationError,
)

__all__ = [
    "ConcurrentUpdateError",
    "Config",
    "EmptyInputError",
    "InvalidTransitionError",
    "NotFoundError",
    "OperationTimeoutError",
    "PersistenceError",
    "PropagationError",
    "TaskRelayError",
    "TaskValidationError",
    "load_config",
]
