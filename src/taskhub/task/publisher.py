"""Publishing of task status notifications onto the work queue."""

import asyncio
from typing import Protocol
from uuid import UUID

import dramatiq
from loguru import logger
from pydantic import BaseModel, ConfigDict

from taskhub.config.config import settings

from .exceptions import EventPublishError
from .task_status import TaskStatus
from .tasks import task_status_update_bg

__all__ = [
    "DramatiqTaskEventPublisher",
    "TaskEventPublisher",
    "TaskStatusEvent",
    "get_publisher",
]


class TaskStatusEvent(BaseModel):
    """Notification that a task now has ``status``."""

    model_config = ConfigDict(frozen=True)

    task_id: UUID
    status: TaskStatus


class TaskEventPublisher(Protocol):
    """Anything that can durably queue a task status notification."""

    async def publish(self, event: TaskStatusEvent) -> None:
        """Queue ``event`` or raise ``EventPublishError``."""
        ...


class DramatiqTaskEventPublisher:
    """Publisher sending notifications through a dramatiq actor.

    The broker call is blocking, so it runs in a worker thread bounded by
    ``timeout``. Once ``publish`` returns, the message is stored by the broker.
    """

    def __init__(
        self,
        actor: dramatiq.Actor = task_status_update_bg,
        timeout: float = settings.publish_timeout,
    ) -> None:
        """Initialize with the target actor and the enqueue timeout in seconds."""
        self._actor = actor
        self._timeout = timeout

    async def publish(self, event: TaskStatusEvent) -> None:
        """Enqueue ``event`` for the status update actor.

        Args:
            event: The notification to queue.

        Raises:
            EventPublishError: If the broker rejects the message or times out.
        """
        try:
            message = await asyncio.wait_for(
                asyncio.to_thread(
                    self._actor.send,
                    task_id=str(event.task_id),
                    status=event.status.value,
                ),
                timeout=self._timeout,
            )
        except TimeoutError as e:
            logger.warning(
                "Timed out queuing task status event",
                task_id=event.task_id,
                timeout=self._timeout,
            )
            raise EventPublishError("Timed out queuing task status notification") from e
        except Exception as e:
            logger.warning(
                "Failed to queue task status event",
                task_id=event.task_id,
                error=str(e),
            )
            raise EventPublishError() from e

        logger.debug(
            "Task status event queued",
            task_id=event.task_id,
            status=event.status,
            message_id=message.message_id,
        )


_publisher = DramatiqTaskEventPublisher()


def get_publisher() -> TaskEventPublisher:
    """Get the publisher used for task status notifications."""
    return _publisher
