"""Text constants for consistent error handling."""

from enum import StrEnum

__all__ = ["ErrorCode", "ErrorNames"]


class ErrorCode(StrEnum):
    """Error codes for standardized error handling."""

    # General errors
    SERVER_ERROR = "SERVER_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Task errors
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    PUBLISH_FAILED = "PUBLISH_FAILED"


class ErrorNames(StrEnum):
    """Error names for standardized error handling."""

    INTERNAL_SERVER_ERROR = "Internal server error"
    TRANSACTION_FAILED_ERROR = "The task operation could not be completed"
    PUBLISH_FAILED_ERROR = "Task status notification could not be queued"
