"""Request, response and filter schemas for tasks."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any, Self
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .task_priority import TaskPriority
from .task_status import TaskStatus

__all__ = [
    "BatchAction",
    "BatchRequest",
    "BatchResponse",
    "DeleteResponse",
    "TaskCreate",
    "TaskFilters",
    "TaskListResponse",
    "TaskPublic",
    "TaskStats",
    "TaskUpdate",
]


def _as_utc(value: datetime | None) -> datetime | None:
    """Normalize timestamps to UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class _ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(_ApiModel):
    """Fields accepted when creating a task."""

    title: str = Field(min_length=1, max_length=255, description="Task title")
    description: str | None = Field(None, description="Optional description")
    status: TaskStatus = Field(TaskStatus.PENDING, description="Initial status")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Priority tier")
    due_date: UtcDatetime | None = Field(None, description="Optional deadline")


class TaskUpdate(_ApiModel):
    """Partial update of a task; only fields sent by the client are applied."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: UtcDatetime | None = None

    @field_validator("title", "status", "priority")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:  # noqa: ANN401
        if value is None:
            raise ValueError("field may be omitted but not set to null")
        return value

    def changes(self) -> dict[str, Any]:
        """Return the fields explicitly present in the request."""
        return self.model_dump(exclude_unset=True)


class TaskPublic(_ApiModel):
    """Immutable view of a stored task."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: UtcDatetime | None = None
    owner_user_id: UUID
    created_at: UtcDatetime

    def apply(self, update: TaskUpdate) -> Self:
        """Return the state this task has after applying ``update``."""
        return self.model_copy(update=update.changes())


class TaskFilters(BaseModel):
    """Optional predicates for listing tasks; unset fields do not constrain."""

    status: TaskStatus | None = Field(None, description="Status equals")
    priority: TaskPriority | None = Field(None, description="Priority equals")
    search: str | None = Field(
        None,
        max_length=255,
        description="Case-insensitive match on title or description",
    )
    from_date: UtcDatetime | None = Field(
        None, description="Only tasks created at or after this time"
    )
    to_date: UtcDatetime | None = Field(
        None, description="Only tasks created at or before this time"
    )


class TaskListResponse(_ApiModel):
    """One page of tasks."""

    data: list[TaskPublic]
    count: int
    page: int
    limit: int


class TaskStats(_ApiModel):
    """Aggregate counts over tasks."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    high_priority: int = 0


class BatchAction(StrEnum):
    """Actions supported by the batch endpoint."""

    COMPLETE = "complete"
    DELETE = "delete"


class BatchRequest(_ApiModel):
    """Batch operation over several tasks."""

    tasks: list[UUID] = Field(max_length=1000, description="Task IDs to process")
    action: str = Field(description="One of: complete, delete")


class BatchResponse(_ApiModel):
    """Outcome of a batch operation."""

    success: bool
    affected: int
    task_ids: list[UUID]


class DeleteResponse(_ApiModel):
    """Confirmation of a single delete."""

    status_code: int
    message: str
