"""FastAPI application factory for the taskrelay API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskrelay import __version__
from taskrelay.api.routes.tasks import router as tasks_router
from taskrelay.api.schemas.tasks import ErrorResponse
from taskrelay.core.config import Config
from taskrelay.core.errors import (
    ConcurrentUpdateError,
    EmptyInputError,
    NotFoundError,
    OperationTimeoutError,
    PersistenceError,
    PropagationError,
    TaskRelayError,
    TaskValidationError,
)
from taskrelay.db.database import DatabaseManager
from taskrelay.notifier.base import MessageQueue
from taskrelay.notifier.queue import InMemoryMessageQueue, QueueStatusNotifier
from taskrelay.services.batch import BatchTaskService
from taskrelay.services.lifecycle import TaskLifecycleService
from taskrelay.services.query import TaskQueryService

logger = logging.getLogger(__name__)

# Most specific classes first
ERROR_STATUS_CODES: list[tuple[type[TaskRelayError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (EmptyInputError, status.HTTP_400_BAD_REQUEST),
    (TaskValidationError, 422),  # constant name differs across Starlette versions
    (ConcurrentUpdateError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (PropagationError, status.HTTP_502_BAD_GATEWAY),
    (OperationTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
]


def status_code_for(error: TaskRelayError) -> int:
    for error_class, code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def taskrelay_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a TaskRelayError as a stable ``{code, detail}`` body."""
    assert isinstance(exc, TaskRelayError)
    code = status_code_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    body = ErrorResponse(code=exc.code, detail=exc.message)
    return JSONResponse(status_code=code, content=body.model_dump())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the store, notifier and services; dispose the store on shutdown."""
    config: Config = app.state.config
    queue: MessageQueue = app.state.queue

    db_manager = DatabaseManager.from_config(config.database)
    await db_manager.init_db()

    notifier = QueueStatusNotifier.from_config(queue, config.notifier)
    engine = config.engine

    app.state.db_manager = db_manager
    app.state.lifecycle_service = TaskLifecycleService(
        db_manager,
        notifier,
        operation_timeout=engine.operation_timeout_seconds,
    )
    app.state.batch_service = BatchTaskService(
        db_manager,
        notifier,
        announce=engine.batch_announce,
        chunk_size=engine.batch_chunk_size,
        operation_timeout=engine.operation_timeout_seconds,
    )
    app.state.query_service = TaskQueryService(
        db_manager,
        operation_timeout=engine.operation_timeout_seconds,
    )

    yield

    await db_manager.close()


def create_app(config: Config | None = None, queue: MessageQueue | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration (defaults when None)
        queue: Work queue client for status updates. An in-memory queue is
            used when None.

    Returns:
        Configured FastAPI application instance
    """
    app_config = config or Config()

    app = FastAPI(
        title="taskrelay API",
        description="Task lifecycle management with queued status propagation",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = app_config
    app.state.queue = queue or InMemoryMessageQueue(app_config.notifier.queue_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TaskRelayError, taskrelay_error_handler)

    app.include_router(tasks_router, prefix="/api/v1")

    return app
