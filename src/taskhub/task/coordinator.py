"""Task write coordinator.

Every mutating operation runs inside one transaction that covers the store
write and the status notifications it requires. The transaction commits only
after every notification was accepted by the publisher; any store or publish
failure rolls the whole unit back.

Notifications are queued before the commit, so a message may describe a
write that was rolled back afterwards. Delivery is at-least-once: consumers
must re-read the task when a message arrives instead of trusting its status.
"""

import asyncio
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from uuid import UUID

from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.common.exceptions import NotFoundError

from .exceptions import TaskTransactionError, UnknownBatchActionError
from .publisher import TaskEventPublisher, TaskStatusEvent
from .repository import (
    bulk_delete_tasks_db,
    bulk_update_status_db,
    create_task_db,
    delete_task_db,
    get_task_db,
    update_task_fields_db,
)
from .schemas import (
    BatchAction,
    BatchRequest,
    BatchResponse,
    TaskCreate,
    TaskPublic,
    TaskUpdate,
)
from .task_status import TaskStatus

__all__ = [
    "bulk_delete_tasks",
    "bulk_update_status",
    "create_task",
    "delete_task",
    "process_batch",
    "update_task",
]


@asynccontextmanager
async def _transaction(db: AsyncSession, operation: str) -> AsyncGenerator[None]:
    """Commit on success, roll back on any failure.

    Args:
        db: Session whose transaction is controlled.
        operation: Name of the coordinated operation, used for logging.

    Raises:
        NotFoundError: Re-raised unchanged after rollback.
        TaskTransactionError: For any other store or publisher failure.
    """
    try:
        yield
        await db.commit()
    except NotFoundError:
        await db.rollback()
        raise
    except asyncio.CancelledError:
        await asyncio.shield(db.rollback())
        logger.warning("Task transaction cancelled and rolled back", operation=operation)
        raise
    except Exception as e:
        await db.rollback()
        logger.opt(exception=e).error(
            "Task transaction rolled back", operation=operation, error=str(e)
        )
        raise TaskTransactionError() from e


async def create_task(
    db: AsyncSession,
    publisher: TaskEventPublisher,
    owner_user_id: UUID,
    data: TaskCreate,
) -> TaskPublic:
    """Persist a new task and announce its initial status.

    Args:
        db: Database session.
        publisher: Publisher for the creation notification.
        owner_user_id: User owning the task.
        data: Validated task fields.

    Returns:
        The created task.
    """
    async with _transaction(db, "create"):
        task = await create_task_db(db, owner_user_id, data.model_dump())
        created = TaskPublic.model_validate(task)
        await publisher.publish(
            TaskStatusEvent(task_id=created.id, status=created.status)
        )

    logger.info("Task created", task_id=created.id, status=created.status)
    return created


async def update_task(
    db: AsyncSession,
    publisher: TaskEventPublisher,
    task_id: UUID,
    update: TaskUpdate,
) -> TaskPublic:
    """Apply a partial update and announce a status change, if there is one.

    Args:
        db: Database session.
        publisher: Publisher for the status notification.
        task_id: ID of the task to update.
        update: Fields sent by the client.

    Returns:
        The task after the update.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    async with _transaction(db, "update"):
        original = TaskPublic.model_validate(await get_task_db(db, task_id))
        target = original.apply(update)

        changes = {
            field: getattr(target, field)
            for field in update.changes()
            if getattr(target, field) != getattr(original, field)
        }
        if not changes:
            updated = original
        else:
            task = await update_task_fields_db(db, task_id, changes)
            updated = TaskPublic.model_validate(task)

        if updated.status != original.status:
            await publisher.publish(
                TaskStatusEvent(task_id=updated.id, status=updated.status)
            )

    logger.info("Task updated", task_id=task_id, fields=sorted(changes))
    return updated


async def bulk_update_status(
    db: AsyncSession,
    publisher: TaskEventPublisher,
    task_ids: Sequence[UUID],
    status: TaskStatus,
) -> list[TaskPublic]:
    """Set one status on many tasks and announce it for each existing task.

    Unknown IDs are skipped. A notification is sent for every existing task,
    even when it already had ``status``; if any of them fails, no task keeps
    the new status.

    Args:
        db: Database session.
        publisher: Publisher for the status notifications.
        task_ids: IDs of the tasks to update.
        status: Status to apply.

    Returns:
        The updated tasks.
    """
    async with _transaction(db, "bulk_update_status"):
        tasks = [
            TaskPublic.model_validate(task)
            for task in await bulk_update_status_db(db, task_ids, status)
        ]
        for task in tasks:
            await publisher.publish(TaskStatusEvent(task_id=task.id, status=status))

    logger.info(
        "Task status bulk updated",
        status=status,
        requested=len(task_ids),
        updated=len(tasks),
    )
    return tasks


async def delete_task(db: AsyncSession, task_id: UUID) -> None:
    """Delete a task; deletions are not announced.

    Args:
        db: Database session.
        task_id: ID of the task to delete.

    Raises:
        TaskNotFoundError: If the task does not exist.
    """
    async with _transaction(db, "delete"):
        await delete_task_db(db, task_id)

    logger.info("Task deleted", task_id=task_id)


async def bulk_delete_tasks(db: AsyncSession, task_ids: Sequence[UUID]) -> int:
    """Delete many tasks at once, skipping unknown IDs.

    Args:
        db: Database session.
        task_ids: IDs of the tasks to delete.

    Returns:
        Number of deleted tasks.
    """
    async with _transaction(db, "bulk_delete"):
        deleted = await bulk_delete_tasks_db(db, task_ids)

    logger.info("Tasks bulk deleted", requested=len(task_ids), deleted=deleted)
    return deleted


async def process_batch(
    db: AsyncSession, publisher: TaskEventPublisher, request: BatchRequest
) -> BatchResponse:
    """Run a batch action over the requested tasks.

    Args:
        db: Database session.
        publisher: Publisher for status notifications.
        request: Task IDs and the action name.

    Returns:
        Number of affected tasks together with the requested IDs.

    Raises:
        UnknownBatchActionError: If the action is not supported.
    """
    try:
        action = BatchAction(request.action)
    except ValueError as e:
        raise UnknownBatchActionError(request.action) from e

    match action:
        case BatchAction.COMPLETE:
            completed = await bulk_update_status(
                db, publisher, request.tasks, TaskStatus.COMPLETED
            )
            affected = len(completed)
        case BatchAction.DELETE:
            affected = await bulk_delete_tasks(db, request.tasks)

    return BatchResponse(success=True, affected=affected, task_ids=request.tasks)
