"""Common exceptions."""

from fastapi import status

from taskhub.common.app_error import AppError
from taskhub.config.errors import ErrorCode, ErrorNames

__all__ = ["InternalServerError", "NotFoundError"]


class NotFoundError(AppError):
    """Exception raised when something is not found."""

    error_code = ErrorCode.NOT_FOUND
    message = "Resource not found"
    status_code = status.HTTP_404_NOT_FOUND


class InternalServerError(AppError):
    """Exception raised for internal server errors."""

    error_code = ErrorCode.SERVER_ERROR
    message = ErrorNames.INTERNAL_SERVER_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
