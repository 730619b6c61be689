"""Broker configuration for Dramatiq with Redis."""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker
from dramatiq.middleware.asyncio import AsyncIO

from .config import settings

__all__ = ["broker"]


def _make_broker() -> dramatiq.Broker:
    broker: dramatiq.Broker
    if settings.app_env == "testing":
        broker = StubBroker()
    else:
        broker = RedisBroker(url=settings.redis_url)
    broker.add_middleware(AsyncIO())
    return broker


broker = _make_broker()
dramatiq.set_broker(broker)
