"""Exceptions for task operations."""

from uuid import UUID

from fastapi import status

from taskhub.common.app_error import AppError
from taskhub.common.exceptions import InternalServerError, NotFoundError
from taskhub.config.errors import ErrorCode, ErrorNames

__all__ = [
    "EventPublishError",
    "TaskNotFoundError",
    "TaskTransactionError",
    "UnknownBatchActionError",
]


class TaskNotFoundError(NotFoundError):
    """Exception raised when the task is not found."""

    def __init__(self, task_id: UUID | str) -> None:
        """Initialize with the task ID."""
        super().__init__(f"Task with ID {task_id} not found")


class UnknownBatchActionError(AppError):
    """Exception raised when a batch request names an unsupported action."""

    error_code = ErrorCode.UNKNOWN_ACTION
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, action: str) -> None:
        """Initialize with the rejected action."""
        super().__init__(f"Unknown action: {action}")


class EventPublishError(AppError):
    """Exception raised when a status notification could not be queued."""

    error_code = ErrorCode.PUBLISH_FAILED
    message = ErrorNames.PUBLISH_FAILED_ERROR


class TaskTransactionError(InternalServerError):
    """Exception raised when a coordinated task write was rolled back.

    The message is generic; the underlying store or queue error is only
    logged and kept as ``__cause__``.
    """

    error_code = ErrorCode.TRANSACTION_FAILED
    message = ErrorNames.TRANSACTION_FAILED_ERROR
