"""Tests for the taskrelay CLI."""

import argparse

import pytest

from taskrelay.cli import build_parser, run_migrate
from taskrelay.core.config import Config, DatabaseConfig


class TestParser:
    """Test argument parsing."""

    def test_migrate_init(self):
        args = build_parser().parse_args(["--db-path", "x.db", "migrate", "--init"])

        assert args.command == "migrate"
        assert args.init is True
        assert args.db_path == "x.db"

    def test_serve_overrides(self):
        args = build_parser().parse_args(["-v", "serve", "--api-port", "9001"])

        assert args.command == "serve"
        assert args.api_port == 9001
        assert args.api_host is None
        assert args.verbose is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMigrate:
    """Test the migrate command."""

    async def test_init_creates_database(self, tmp_path):
        """Test migrate --init creates the database file."""
        db_path = tmp_path / "tasks.db"
        config = Config(database=DatabaseConfig(path=str(db_path)))

        await run_migrate(argparse.Namespace(init=True), config)

        assert db_path.exists()

    async def test_no_action_exits(self, tmp_path):
        config = Config(database=DatabaseConfig(path=str(tmp_path / "tasks.db")))

        with pytest.raises(SystemExit):
            await run_migrate(argparse.Namespace(init=False), config)
