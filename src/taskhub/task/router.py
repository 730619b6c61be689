"""Tasks router."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Request, Response, status
from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.config.config import settings
from taskhub.config.db import get_session

from .coordinator import create_task, delete_task, process_batch, update_task
from .publisher import TaskEventPublisher, get_publisher
from .schemas import (
    BatchRequest,
    BatchResponse,
    DeleteResponse,
    TaskCreate,
    TaskFilters,
    TaskListResponse,
    TaskPublic,
    TaskStats,
    TaskUpdate,
)
from .service import get_task_stats_svc, get_task_svc, list_tasks_svc
from .task_priority import TaskPriority
from .task_status import TaskStatus

__all__ = ["router"]


router = APIRouter(tags=["Tasks"])

OwnerId = Annotated[
    UUID,
    Header(alias="X-User-Id", description="ID of the authenticated user"),
]
Session = Annotated[AsyncSession, Depends(get_session)]
Publisher = Annotated[TaskEventPublisher, Depends(get_publisher)]


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a task")
async def create_task_endpoint(
    data: TaskCreate,
    owner_user_id: OwnerId,
    request: Request,
    response: Response,
    db: Session,
    publisher: Publisher,
) -> TaskPublic:
    """Create a task owned by the requesting user.

    The task is only stored if its status notification could be queued.

    Args:
        data: Fields of the new task.
        owner_user_id: The requesting user, taken from the X-User-Id header.
        request: The HTTP request object.
        response: FastAPI response object for setting headers.
        db: Database session for persistence operations.
        publisher: Publisher for the status notification.

    Returns:
        The created task, with a Location header pointing at it.

    Raises:
        TaskTransactionError: If storing or announcing the task failed.
    """
    task = await create_task(db, publisher, owner_user_id, data)
    response.headers["Location"] = f"{request.url.path}/{task.id}"
    logger.debug("Task created", task_id=task.id)
    return task


@router.get("", summary="Get filterable tasks")
async def list_tasks(  # noqa: PLR0913, PLR0917
    owner_user_id: OwnerId,
    db: Session,
    task_status: Annotated[TaskStatus | None, Query(alias="status")] = None,
    priority: Annotated[TaskPriority | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=255)] = None,
    from_date: Annotated[datetime | None, Query(alias="fromDate")] = None,
    to_date: Annotated[datetime | None, Query(alias="toDate")] = None,
    page: Annotated[int, Query(ge=1, description="Page number, starts at 1")] = 1,
    limit: Annotated[
        int, Query(ge=1, le=settings.max_page_size, description="Items per page")
    ] = settings.default_page_size,
) -> TaskListResponse:
    """Get the requesting user's tasks with filtering and pagination.

    Args:
        owner_user_id: The requesting user, taken from the X-User-Id header.
        db: Database session for queries.
        task_status: Only tasks with this status.
        priority: Only tasks with this priority.
        search: Case-insensitive term matched against title and description.
        from_date: Only tasks created at or after this time.
        to_date: Only tasks created at or before this time.
        page: Page number, starts at 1.
        limit: Maximum number of tasks per page.

    Returns:
        The page of tasks together with count, page and limit.
    """
    filters = TaskFilters(
        status=task_status,
        priority=priority,
        search=search,
        from_date=from_date,
        to_date=to_date,
    )
    result = await list_tasks_svc(db, owner_user_id, filters, page, limit)
    logger.debug("Tasks retrieved", page=page, limit=limit, count=result.count)
    return result


@router.get("/stats", summary="Get task statistics")
async def get_stats(owner_user_id: OwnerId, db: Session) -> TaskStats:
    """Count the requesting user's tasks by status and high priority.

    Args:
        owner_user_id: The requesting user, taken from the X-User-Id header.
        db: Database session for queries.

    Returns:
        Total, completed, in progress, pending and high priority counts.
    """
    return await get_task_stats_svc(db, owner_user_id)


@router.post("/batch", summary="Batch process multiple tasks")
async def batch_process(
    batch: BatchRequest, db: Session, publisher: Publisher
) -> BatchResponse:
    """Complete or delete several tasks in one transaction.

    Args:
        batch: Task IDs and the action (complete or delete).
        db: Database session for persistence operations.
        publisher: Publisher for status notifications.

    Returns:
        Whether the batch succeeded, how many tasks were affected and the IDs.

    Raises:
        UnknownBatchActionError: If the action is not supported.
        TaskTransactionError: If the batch was rolled back.
    """
    result = await process_batch(db, publisher, batch)
    logger.debug("Batch processed", action=batch.action, affected=result.affected)
    return result


@router.get("/{task_id}", summary="Get task by ID")
async def get_task(task_id: UUID, db: Session) -> TaskPublic:
    """Retrieve a single task by its ID.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    task = await get_task_svc(db, task_id)
    logger.debug("Task retrieved", task_id=task_id)
    return task


@router.patch("/{task_id}", summary="Update task by ID")
async def patch_task(
    task_id: UUID, update: TaskUpdate, db: Session, publisher: Publisher
) -> TaskPublic:
    """Update the fields sent in the body; others stay unchanged.

    A status change is only stored if its notification could be queued.

    Args:
        task_id: The ID of the task to update.
        update: The fields to change.
        db: Database session for persistence operations.
        publisher: Publisher for the status notification.

    Returns:
        The updated task.

    Raises:
        TaskNotFoundError: If the task does not exist.
        TaskTransactionError: If the update was rolled back.
    """
    return await update_task(db, publisher, task_id, update)


@router.delete("/{task_id}", summary="Delete task by ID")
async def remove_task(task_id: UUID, db: Session) -> DeleteResponse:
    """Delete a task by its ID.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    await delete_task(db, task_id)
    return DeleteResponse(
        status_code=status.HTTP_200_OK, message="Task successfully deleted"
    )
