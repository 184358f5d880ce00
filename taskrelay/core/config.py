"""Configuration management for taskrelay.

Configuration lives in a YAML file. String values may reference environment
variables with ``${VAR}``; unresolved references are rejected at load time.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """Task store connection settings."""

    path: str = Field(default="taskrelay.db", description="Path to SQLite database file")
    busy_timeout_seconds: float = Field(
        default=5.0, gt=0, description="How long SQLite waits on a locked database"
    )
    echo: bool = Field(default=False, description="Log emitted SQL statements")


class NotifierConfig(BaseModel):
    """Status notifier settings."""

    job_name: str = Field(default="task-status-update", description="Job name for status messages")
    queue_name: str = Field(default="task-processing", description="Target work queue name")
    publish_timeout_seconds: float | None = Field(
        default=5.0, gt=0, description="Deadline for a single publish call (None disables)"
    )


class EngineConfig(BaseModel):
    """Lifecycle engine and batch operator settings."""

    operation_timeout_seconds: float | None = Field(
        default=None, gt=0, description="Deadline for a whole lifecycle operation (None disables)"
    )
    batch_chunk_size: int = Field(
        default=500, ge=1, le=10000, description="Ids per bulk statement in batch operations"
    )
    batch_announce: bool = Field(
        default=False, description="Publish per-row status updates after a batch status change"
    )


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(default="INFO", description="Root log level")
    directory: str | None = Field(
        default="logs", description="Directory for log files (None logs to console only)"
    )
    max_size_mb: int = Field(default=10, ge=1, description="Maximum log file size before rotation")
    backup_count: int = Field(default=5, ge=0, description="Rotated log files to keep")


class ApiConfig(BaseModel):
    """HTTP adapter settings."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class Config(BaseModel):
    """Root configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)


def expand_env_vars(value: str) -> str:
    """Expand ${VAR} patterns in a string with environment variable values.

    Args:
        value: String potentially containing ${VAR_NAME} patterns.

    Returns:
        String with ${VAR_NAME} patterns replaced by their values from os.environ.
        If a variable is not found, the pattern is left unchanged.

    Examples:
        >>> os.environ['DB_PATH'] = '/var/lib/tasks.db'
        >>> expand_env_vars('${DB_PATH}')
        '/var/lib/tasks.db'
    """
    pattern = r'\$\{([^}]+)\}'

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replacer, value)


def expand_env_vars_recursive(obj: Any) -> Any:
    """Recursively expand environment variables in nested dicts and lists."""
    if isinstance(obj, dict):
        return {key: expand_env_vars_recursive(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [expand_env_vars_recursive(item) for item in obj]
    elif isinstance(obj, str):
        return expand_env_vars(obj)
    else:
        return obj


def check_unexpanded_vars(data: Any, source: str) -> None:
    """Recursively check for unresolved ${VAR} patterns after expansion.

    Args:
        data: Expanded configuration data.
        source: Human-readable label for error messages (e.g., file path).

    Raises:
        ValueError: If any ${VAR} patterns remain unresolved.
    """
    unresolved: list[str] = []
    _collect_unexpanded_vars(data, unresolved)
    if unresolved:
        unique = sorted(set(unresolved))
        raise ValueError(
            f"Unresolved environment variable(s) in {source}: {', '.join(unique)}. "
            f"Set these variables or remove the ${{VAR}} references."
        )


def _collect_unexpanded_vars(obj: Any, found: list[str]) -> None:
    if isinstance(obj, dict):
        for value in obj.values():
            _collect_unexpanded_vars(value, found)
    elif isinstance(obj, list):
        for item in obj:
            _collect_unexpanded_vars(item, found)
    elif isinstance(obj, str):
        for match in re.finditer(r'\$\{([^}]+)\}', obj):
            found.append(f"${{{match.group(1)}}}")


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from a YAML file with environment variable expansion.

    Args:
        path: Path to the YAML configuration file. ``None`` returns defaults.

    Returns:
        Parsed Config object with all ${VAR} patterns expanded.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is malformed.
        ValueError: If a ${VAR} reference cannot be resolved.
    """
    if path is None:
        return Config()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open() as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    data = expand_env_vars_recursive(data)
    check_unexpanded_vars(data, source=str(config_path))

    return Config(**data)
