"""Security headers."""

from collections.abc import Awaitable, Callable
from typing import Any, Final

from fastapi import FastAPI, Request, Response

from .config import settings

__all__ = ["add_security_headers"]


def add_security_headers(app: FastAPI) -> None:
    """Configure the FastAPI application to include security headers in all responses.

    Args:
        app: The FastAPI application instance where the middleware will be added.
    """

    @app.middleware("http")
    async def _security_headers_middleware(
        request: Request,
        call_next: Callable[[Any], Awaitable[Response]],
    ) -> Response:
        response: Final[Response] = await call_next(request)
        _set_security_headers(response, request.url.path)
        return response


def _set_security_headers(response: Response, path: str = "") -> None:
    """Harden API responses; the docs pages keep a relaxed CSP.

    Args:
        response: The HTTP response to secure
        path: The request path to determine if it's a documentation page
    """
    response.headers["X-Frame-Options"] = "DENY"

    is_docs = path.startswith(("/docs", "/redoc"))
    if settings.app_env == "production" and not is_docs:
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )
    else:
        response.headers["Content-Security-Policy"] = (
            "default-src * 'unsafe-inline' 'unsafe-eval'; img-src * data:"
        )

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "no-referrer"
    response.headers["Cache-Control"] = "no-store"
