"""CLI interface for taskrelay."""

import argparse
import asyncio
import logging
import sys

import uvicorn

from taskrelay.api.app import create_app
from taskrelay.core.config import Config, load_config
from taskrelay.core.logging import setup_logging_from_config
from taskrelay.db.database import DatabaseManager

logger = logging.getLogger(__name__)


async def run_migrate(args: argparse.Namespace, config: Config) -> None:
    """Handle database migration commands."""
    if not args.init:
        logger.error("No migration action specified. Use --init")
        sys.exit(1)

    logger.info("Initializing database...")
    db_manager = DatabaseManager.from_config(config.database)
    try:
        await db_manager.init_db()
        logger.info(f"Database initialized successfully at {config.database.path}")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        sys.exit(1)
    finally:
        await db_manager.close()


async def run_api_server(args: argparse.Namespace, config: Config) -> None:
    """Start the FastAPI server."""
    app = create_app(config)

    uvicorn_config = uvicorn.Config(
        app,
        host=args.api_host or config.api.host,
        port=args.api_port or config.api.port,
        log_level="debug" if args.verbose else "info",
    )
    server = uvicorn.Server(uvicorn_config)
    await server.serve()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskrelay",
        description="taskrelay - task lifecycle engine with queued status propagation",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--db-path",
        type=str,
        default=None,
        help="Path to SQLite database (overrides config)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate = subparsers.add_parser("migrate", help="Database management")
    migrate.add_argument(
        "--init",
        action="store_true",
        help="Create database tables",
    )

    serve = subparsers.add_parser("serve", help="Start the HTTP API server")
    serve.add_argument(
        "--api-host",
        type=str,
        default=None,
        help="API server host (default from config: 127.0.0.1)",
    )
    serve.add_argument(
        "--api-port",
        type=int,
        default=None,
        help="API server port (default from config: 8000)",
    )

    return parser


async def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.db_path:
        config.database.path = args.db_path
    if args.verbose:
        config.logging.level = "DEBUG"
    setup_logging_from_config(config.logging)

    if args.command == "migrate":
        await run_migrate(args, config)
    elif args.command == "serve":
        await run_api_server(args, config)


def run() -> None:
    """Entry point for console scripts."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
