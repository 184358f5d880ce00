"""taskrelay - task lifecycle engine with queue status propagation."""

__version__ = "0.1.0"
