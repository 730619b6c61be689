"""Seed the database with initial data."""

from datetime import UTC, datetime, timedelta
from uuid import UUID

from loguru import logger
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.config.config import settings
from taskhub.task.models import Task
from taskhub.task.task_priority import TaskPriority
from taskhub.task.task_status import TaskStatus

__all__ = ["DEMO_USER_ID", "seed_db"]


DEMO_USER_ID = UUID("8b8c7f3e-4d2a-4b5c-9f1e-0a6f3e4d2a5b")

TASK_READ_ID = UUID("5d2f3e4b-8c7f-4d2a-9f1e-0a6f3e4d2a5b")
TASK_PROGRESS_ID = UUID("6d2f3e4b-8c7f-4d2a-9f1e-0a6f3e4d2a5b")
TASK_DONE_ID = UUID("7d2f3e4b-8c7f-4d2a-9f1e-0a6f3e4d2a5b")


async def seed_db(session: AsyncSession) -> None:
    """Seed the database with example tasks.

    Nothing is inserted when the database already holds tasks and is not
    cleared on restart.

    Args:
        session: The SQLModel async database session.
    """
    if not settings.clear_db_on_restart:
        result = await session.exec(select(Task).limit(1))
        if result.first() is not None:
            return

    now = datetime.now(tz=UTC)

    session.add(
        Task(
            id=TASK_READ_ID,
            title="Write onboarding guide",
            description="Document local setup for new developers.",
            status=TaskStatus.PENDING,
            priority=TaskPriority.MEDIUM,
            owner_user_id=DEMO_USER_ID,
            created_at=now - timedelta(days=3),
            due_date=now + timedelta(days=4),
        ),
    )
    session.add(
        Task(
            id=TASK_PROGRESS_ID,
            title="Migrate task queue to Redis 7",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.HIGH,
            owner_user_id=DEMO_USER_ID,
            created_at=now - timedelta(days=2),
        ),
    )
    session.add(
        Task(
            id=TASK_DONE_ID,
            title="Review pull requests",
            description="Go through the open reviews before the release.",
            status=TaskStatus.COMPLETED,
            priority=TaskPriority.LOW,
            owner_user_id=DEMO_USER_ID,
            created_at=now - timedelta(days=1),
        ),
    )
    await session.commit()
    logger.info("Database seeded with initial data")
