"""Task query service."""

from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from .repository import aggregate_stats_db, get_task_db, get_tasks_db
from .schemas import TaskFilters, TaskListResponse, TaskPublic, TaskStats

__all__ = ["get_task_stats_svc", "get_task_svc", "list_tasks_svc"]


async def list_tasks_svc(
    db: AsyncSession,
    owner_user_id: UUID,
    filters: TaskFilters,
    page: int,
    limit: int,
) -> TaskListResponse:
    """Return one page of the user's tasks.

    Args:
        db: Database session.
        owner_user_id: Owner whose tasks are listed.
        filters: Optional predicates.
        page: Page number, starts at 1.
        limit: Page size.

    Returns:
        The page together with its item count, page number and page size.
    """
    tasks = await get_tasks_db(db, owner_user_id, filters, page=page, page_size=limit)
    data = [TaskPublic.model_validate(task) for task in tasks]
    return TaskListResponse(data=data, count=len(data), page=page, limit=limit)


async def get_task_svc(db: AsyncSession, task_id: UUID) -> TaskPublic:
    """Read a single task.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    return TaskPublic.model_validate(await get_task_db(db, task_id))


async def get_task_stats_svc(db: AsyncSession, owner_user_id: UUID) -> TaskStats:
    """Aggregate counts over the tasks owned by ``owner_user_id``."""
    return await aggregate_stats_db(db, owner_user_id)
