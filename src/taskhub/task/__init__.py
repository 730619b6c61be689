"""Task module: storage, queries and coordinated writes for tasks.

Key Components:
- Task Store (repository): SQLModel persistence with filtered, paged listing
  and aggregate statistics; never commits on its own
- Event Publisher (publisher): queues task status notifications through
  dramatiq behind the TaskEventPublisher protocol
- Write Coordinator (coordinator): runs each mutation and its notifications
  in one transaction, rolling back when either side fails
- Query Service (service): read-only access used by the router
"""

from .exceptions import (
    EventPublishError,
    TaskNotFoundError,
    TaskTransactionError,
    UnknownBatchActionError,
)
from .models import Task
from .publisher import (
    DramatiqTaskEventPublisher,
    TaskEventPublisher,
    TaskStatusEvent,
    get_publisher,
)
from .schemas import TaskCreate, TaskFilters, TaskPublic, TaskStats, TaskUpdate
from .task_priority import TaskPriority
from .task_status import TaskStatus

__all__ = [
    "DramatiqTaskEventPublisher",
    "EventPublishError",
    "Task",
    "TaskCreate",
    "TaskEventPublisher",
    "TaskFilters",
    "TaskNotFoundError",
    "TaskPriority",
    "TaskPublic",
    "TaskStats",
    "TaskStatus",
    "TaskStatusEvent",
    "TaskTransactionError",
    "TaskUpdate",
    "UnknownBatchActionError",
    "get_publisher",
]
