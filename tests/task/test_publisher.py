# ruff: noqa: S101

"""Tests for the dramatiq-backed status publisher."""

import time
from collections.abc import Generator
from uuid import UUID

import dramatiq
import pytest

from taskhub.config.broker import broker
from taskhub.config.config import settings
from taskhub.task.exceptions import EventPublishError
from taskhub.task.publisher import DramatiqTaskEventPublisher, TaskStatusEvent
from taskhub.task.task_status import TaskStatus

_TASK_ID = UUID("44444444-4444-4444-8444-444444444444")


class _UnreachableActor:
    """Actor stand-in whose broker connection is down."""

    def send(self, *_args: object, **_kwargs: object) -> dramatiq.Message:
        raise ConnectionError("Connection refused")


class _SlowActor:
    """Actor stand-in whose broker never answers in time."""

    def send(self, *_args: object, **_kwargs: object) -> dramatiq.Message:
        time.sleep(0.5)
        raise ConnectionError("too late")


@pytest.fixture(autouse=True)
def flush_broker() -> Generator[None]:
    """Start every test with empty stub queues."""
    broker.flush_all()
    yield
    broker.flush_all()


@pytest.mark.publisher
class TestDramatiqPublisher:
    """Tests for DramatiqTaskEventPublisher."""

    async def test_publish_enqueues_message(self) -> None:
        """Test that an event becomes one message on the notification queue."""
        publisher = DramatiqTaskEventPublisher()

        await publisher.publish(
            TaskStatusEvent(task_id=_TASK_ID, status=TaskStatus.COMPLETED)
        )

        queue = broker.queues[settings.queue_name]
        assert queue.qsize() == 1
        message = dramatiq.Message.decode(queue.get())
        assert message.actor_name == "task_status_update"
        assert message.kwargs == {"task_id": str(_TASK_ID), "status": "COMPLETED"}

    async def test_broker_error_is_publish_error(self) -> None:
        """Test that broker failures surface as EventPublishError."""
        publisher = DramatiqTaskEventPublisher(actor=_UnreachableActor())  # type: ignore[arg-type]

        with pytest.raises(EventPublishError) as exc_info:
            await publisher.publish(
                TaskStatusEvent(task_id=_TASK_ID, status=TaskStatus.PENDING)
            )

        assert isinstance(exc_info.value.__cause__, ConnectionError)

    async def test_timeout_is_publish_error(self) -> None:
        """Test that a broker that does not answer in time is a publish failure."""
        publisher = DramatiqTaskEventPublisher(actor=_SlowActor(), timeout=0.05)  # type: ignore[arg-type]

        with pytest.raises(EventPublishError):
            await publisher.publish(
                TaskStatusEvent(task_id=_TASK_ID, status=TaskStatus.PENDING)
            )
