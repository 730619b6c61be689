"""Prometheus metrics for tracking custom metrics."""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from prometheus_client import Gauge

__all__ = ["add_prometheus_metrics"]


REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress_total",
    "Active HTTP requests",
    ["method"],
)


def add_prometheus_metrics(app: FastAPI) -> None:
    """Configure the FastAPI application to track in-flight HTTP requests.

    Args:
        app: The FastAPI application instance where the middleware will be added.
    """

    @app.middleware("http")
    async def track_in_flight(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Count requests currently being handled, per method."""
        REQUESTS_IN_PROGRESS.labels(request.method).inc()
        try:
            return await call_next(request)
        finally:
            REQUESTS_IN_PROGRESS.labels(request.method).dec()
