"""HTTP adapter for taskrelay."""

from taskrelay.api.app import create_app

__all__ = ["create_app"]
