"""Shared error types and the health router.

Every domain error derives from AppError, which carries an error code, a
human-readable message and the HTTP status the global exception handler
responds with.
"""

from .app_error import AppError
from .exceptions import InternalServerError, NotFoundError

__all__ = [
    "AppError",
    "InternalServerError",
    "NotFoundError",
]
