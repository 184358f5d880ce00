"""Tasks API routes."""

from datetime import datetime

from fastapi import APIRouter, Query, Response, status

from taskrelay.api.dependencies import BatchService, LifecycleService, QueryService
from taskrelay.api.schemas.tasks import (
    BatchProcessRequest,
    BatchProcessResponse,
    TaskListResponse,
    TaskResponse,
    TaskStatsResponse,
)
from taskrelay.domain.task import (
    MAX_PAGE_SIZE,
    TaskCreate,
    TaskFilters,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])


# =============================================================================
# Create / List
# =============================================================================


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(data: TaskCreate, service: LifecycleService) -> TaskResponse:
    """Create a new task and queue its initial status.

    Raises:
        HTTPException: 502 if the status update could not be queued (task not created)
    """
    task = await service.create(data)
    return TaskResponse.model_validate(task)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    service: QueryService,
    task_status: TaskStatus | None = Query(None, alias="status", description="Filter by status"),
    priority: TaskPriority | None = Query(None, description="Filter by priority"),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    search: str | None = Query(None, min_length=1, description="Title/description substring"),
    start_date: datetime | None = Query(None, description="Created at or after"),
    end_date: datetime | None = Query(None, description="Created at or before"),
    user_id: str | None = Query(None, description="Filter by owner ID"),
) -> TaskListResponse:
    """List tasks newest first with optional filtering and pagination."""
    filters = TaskFilters(
        status=task_status,
        priority=priority,
        owner_id=user_id,
        search=search,
        created_from=start_date,
        created_to=end_date,
    )
    result = await service.list_page(filters, page=page, limit=limit)
    return TaskListResponse(
        data=[TaskResponse.model_validate(t) for t in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


# =============================================================================
# Stats and Batch (MUST come before /{task_id} routes)
# =============================================================================


@router.get("/stats", response_model=TaskStatsResponse)
async def get_task_stats(service: QueryService) -> TaskStatsResponse:
    """Get task statistics."""
    stats = await service.get_stats()
    return TaskStatsResponse(**stats.model_dump())


@router.post("/batch", response_model=BatchProcessResponse)
async def batch_process(data: BatchProcessRequest, service: BatchService) -> BatchProcessResponse:
    """Apply one action (complete or delete) to many tasks.

    Unknown task IDs are ignored; ``affected`` counts the tasks matched.
    """
    affected = await service.process(data.tasks, data.action)
    return BatchProcessResponse(
        message=f"{data.action} operation completed",
        affected=affected,
    )


# =============================================================================
# Single Task
# =============================================================================


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, service: LifecycleService) -> TaskResponse:
    """Get a task by ID."""
    task = await service.find_one(task_id)
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, data: TaskUpdate, service: LifecycleService) -> TaskResponse:
    """Update a task. A status change is queued before the update commits."""
    task = await service.update(task_id, data)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, service: LifecycleService) -> Response:
    """Delete a task."""
    await service.remove(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
