"""Tests for logging setup."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from taskrelay.core.config import LoggingConfig
from taskrelay.core.logging import setup_logging, setup_logging_from_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Keep root logger changes from leaking into other tests."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_writes_rotating_file(tmp_path):
    setup_logging(level="DEBUG", directory=tmp_path / "logs", max_size_mb=1, backup_count=2)

    root = logging.getLogger()
    file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
    assert root.level == logging.DEBUG
    assert len(file_handlers) == 1
    assert file_handlers[0].maxBytes == 1024 * 1024
    assert file_handlers[0].backupCount == 2
    assert (tmp_path / "logs" / "taskrelay.log").exists()


def test_console_only_when_no_directory():
    setup_logging_from_config(LoggingConfig(level="warning", directory=None))

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert not any(isinstance(h, RotatingFileHandler) for h in root.handlers)
