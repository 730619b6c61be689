"""Background actors for task status notifications.

Downstream processing of the notifications is owned by other services; the
actor defined here is the queue contract they consume and only acknowledges
what it receives.
"""

import dramatiq
from loguru import logger

from taskhub.config.broker import broker
from taskhub.config.config import settings

__all__ = ["task_status_update_bg"]


@dramatiq.actor(
    broker=broker,
    actor_name="task_status_update",
    queue_name=settings.queue_name,
    max_retries=3,
)
async def task_status_update_bg(task_id: str, status: str) -> None:
    """Receive a task status notification.

    Args:
        task_id: ID of the task whose status changed.
        status: The new status value.
    """
    logger.info("[BG] Task status update received", taskId=task_id, status=status)
