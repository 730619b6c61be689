"""Worker entry point for dramatiq.

Run with: dramatiq taskhub.tasks
"""

from taskhub.config.broker import broker
from taskhub.config.logger import config_logger
from taskhub.task.tasks import task_status_update_bg

config_logger()

__all__ = ["broker", "task_status_update_bg"]
