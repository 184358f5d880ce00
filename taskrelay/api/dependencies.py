"""FastAPI dependency injection providers.

Services are built once at startup and kept on ``app.state``; these
providers only hand them out.
"""

from typing import Annotated

from fastapi import Depends, Request

from taskrelay.services.batch import BatchTaskService
from taskrelay.services.lifecycle import TaskLifecycleService
from taskrelay.services.query import TaskQueryService


def get_lifecycle_service(request: Request) -> TaskLifecycleService:
    service: TaskLifecycleService = request.app.state.lifecycle_service
    return service


def get_batch_service(request: Request) -> BatchTaskService:
    service: BatchTaskService = request.app.state.batch_service
    return service


def get_query_service(request: Request) -> TaskQueryService:
    service: TaskQueryService = request.app.state.query_service
    return service


# Type aliases for annotating dependencies
LifecycleService = Annotated[TaskLifecycleService, Depends(get_lifecycle_service)]
BatchService = Annotated[BatchTaskService, Depends(get_batch_service)]
QueryService = Annotated[TaskQueryService, Depends(get_query_service)]
