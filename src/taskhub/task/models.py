"""Task table model."""

import threading
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from .task_priority import TaskPriority
from .task_status import TaskStatus

__all__ = ["Task", "creation_clock"]


class _CreationClock:
    """UTC timestamps that strictly increase within the process.

    Two tasks created in the same clock tick get timestamps one microsecond
    apart, so ordering by ``created_at`` follows insertion order.
    """

    def __init__(self) -> None:
        self._last = datetime.min.replace(tzinfo=UTC)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = datetime.now(tz=UTC)
            if current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current


creation_clock = _CreationClock()


class Task(SQLModel, table=True):
    """Task model."""

    __tablename__ = "task"

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        description="Unique identifier for the task.",
    )

    title: str = Field(max_length=255, description="Short title of the task.")

    description: str | None = Field(
        default=None, description="Optional free-text description."
    )

    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        index=True,
        description="Lifecycle stage of the task.",
    )

    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        index=True,
        description="Importance tier of the task.",
    )

    due_date: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
        description="Optional deadline of the task.",
    )

    owner_user_id: UUID = Field(
        index=True, description="Identifier of the user owning the task."
    )

    created_at: datetime = Field(
        default_factory=creation_clock.now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Timestamp when the task was created.",
    )
