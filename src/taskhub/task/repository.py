"""Task repository.

All functions work inside the caller's transaction: writes are flushed so that
constraint errors surface immediately, but committing or rolling back is left
to the write coordinator.
"""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from loguru import logger
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from .exceptions import TaskNotFoundError
from .models import Task
from .query_builder import build_list_query, build_stats_query
from .schemas import TaskFilters, TaskStats
from .task_status import TaskStatus

__all__ = [
    "aggregate_stats_db",
    "bulk_delete_tasks_db",
    "bulk_update_status_db",
    "create_task_db",
    "delete_task_db",
    "get_task_db",
    "get_tasks_db",
    "update_task_fields_db",
]


async def create_task_db(
    db: AsyncSession, owner_user_id: UUID, fields: dict[str, Any]
) -> Task:
    """Insert a new task; ``id`` and ``created_at`` are assigned here.

    Args:
        db: Database session instance.
        owner_user_id: The user owning the new task.
        fields: Validated task fields (title, description, status, ...).

    Returns:
        Task: The persisted task.
    """
    task = Task(**fields, owner_user_id=owner_user_id)
    db.add(task)
    await db.flush()
    await db.refresh(task)

    logger.debug("Task inserted", task_id=task.id, status=task.status)
    return task


async def get_task_db(db: AsyncSession, task_id: UUID) -> Task:
    """Retrieve a task by its ID.

    Args:
        db: Database session instance.
        task_id: The ID of the task to retrieve.

    Returns:
        Task: The task with the given ID.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    task = await db.get(Task, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


async def get_tasks_db(
    db: AsyncSession,
    owner_user_id: UUID,
    filters: TaskFilters,
    page: int = 1,
    page_size: int = 10,
) -> Sequence[Task]:
    """Fetch one page of a user's tasks matching ``filters``.

    Args:
        db: Database session instance.
        owner_user_id: Owner whose tasks are listed.
        filters: Optional status, priority, date range and search predicates.
        page: Page number, starts at 1.
        page_size: Number of tasks per page.

    Returns:
        Tasks ordered by creation time, oldest first.
    """
    stmt = build_list_query(owner_user_id, filters, page=page, page_size=page_size)
    result = await db.exec(stmt)
    tasks = result.all()

    logger.debug(
        "Tasks fetched from DB",
        count=len(tasks),
        page=page,
        page_size=page_size,
        filters=filters.model_dump(exclude_none=True),
    )
    return tasks


async def update_task_fields_db(
    db: AsyncSession, task_id: UUID, changes: dict[str, Any]
) -> Task:
    """Apply a partial update; fields missing from ``changes`` stay as they are.

    Args:
        db: Database session instance.
        task_id: The ID of the task to update.
        changes: Field names mapped to their new values.

    Returns:
        Task: The updated task.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    task = await get_task_db(db, task_id)

    for field, value in changes.items():
        setattr(task, field, value)

    await db.flush()
    await db.refresh(task)

    logger.debug("Task updated", task_id=task_id, fields=sorted(changes))
    return task


async def delete_task_db(db: AsyncSession, task_id: UUID) -> None:
    """Delete a task by its ID.

    Args:
        db: Database session instance.
        task_id: The ID of the task to delete.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    task = await get_task_db(db, task_id)
    await db.delete(task)
    await db.flush()

    logger.debug("Task deleted", task_id=task_id)


async def bulk_update_status_db(
    db: AsyncSession, task_ids: Sequence[UUID], status: TaskStatus
) -> Sequence[Task]:
    """Set ``status`` on every existing task in ``task_ids``.

    IDs without a backing row are skipped.

    Args:
        db: Database session instance.
        task_ids: IDs of the tasks to update.
        status: The status to apply.

    Returns:
        The tasks that existed, with their new status.
    """
    if not task_ids:
        return []

    result = await db.exec(select(Task).where(col(Task.id).in_(set(task_ids))))
    tasks = result.all()

    for task in tasks:
        task.status = status
    await db.flush()

    logger.debug(
        "Task status bulk updated",
        requested=len(task_ids),
        updated=len(tasks),
        status=status,
    )
    return tasks


async def bulk_delete_tasks_db(db: AsyncSession, task_ids: Sequence[UUID]) -> int:
    """Delete every existing task in ``task_ids``; unknown IDs are skipped.

    Args:
        db: Database session instance.
        task_ids: IDs of the tasks to delete.

    Returns:
        Number of deleted tasks.
    """
    if not task_ids:
        return 0

    result = await db.exec(select(Task).where(col(Task.id).in_(set(task_ids))))
    tasks = result.all()

    for task in tasks:
        await db.delete(task)
    await db.flush()

    logger.debug("Tasks bulk deleted", requested=len(task_ids), deleted=len(tasks))
    return len(tasks)


async def aggregate_stats_db(
    db: AsyncSession, owner_user_id: UUID | None = None
) -> TaskStats:
    """Count tasks by status and priority in one query.

    Args:
        db: Database session instance.
        owner_user_id: Restrict the snapshot to one user; ``None`` covers all tasks.

    Returns:
        TaskStats: Totals for the snapshot.
    """
    result = await db.exec(build_stats_query(owner_user_id))  # type: ignore[call-overload]
    row = result.one()

    return TaskStats(
        total=row.total,
        completed=row.completed,
        in_progress=row.in_progress,
        pending=row.pending,
        high_priority=row.high_priority,
    )
