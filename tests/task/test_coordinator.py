# ruff: noqa: S101

"""Tests for the transactional write coordinator."""

import asyncio
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from fakes import RecordingPublisher
from taskhub.task import coordinator
from taskhub.task.coordinator import (
    bulk_delete_tasks,
    bulk_update_status,
    create_task,
    delete_task,
    process_batch,
    update_task,
)
from taskhub.task.exceptions import (
    TaskNotFoundError,
    TaskTransactionError,
    UnknownBatchActionError,
)
from taskhub.task.models import Task
from taskhub.task.publisher import TaskStatusEvent
from taskhub.task.schemas import BatchRequest, TaskCreate, TaskUpdate
from taskhub.task.task_priority import TaskPriority
from taskhub.task.task_status import TaskStatus

_OWNER = UUID("33333333-3333-4333-8333-333333333333")


async def _load(engine: AsyncEngine, task_id: UUID) -> Task | None:
    """Read a task through a fresh session, bypassing any identity map."""
    async with AsyncSession(engine) as db:
        return await db.get(Task, task_id)


async def _count(engine: AsyncEngine) -> int:
    async with AsyncSession(engine) as db:
        result = await db.exec(select(func.count()).select_from(Task))
        return result.one()


async def _create(
    db: AsyncSession, publisher: RecordingPublisher, title: str, **fields: object
) -> UUID:
    task = await create_task(db, publisher, _OWNER, TaskCreate(title=title, **fields))
    return task.id


@pytest.mark.coordinator
class TestCreate:
    """Tests for coordinated task creation."""

    async def test_create_stores_and_publishes(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that one record and one matching event result from a create."""
        task = await create_task(
            session, publisher, _OWNER, TaskCreate(title="Write release notes")
        )

        assert await _count(engine) == 1
        assert publisher.events == [
            TaskStatusEvent(task_id=task.id, status=TaskStatus.PENDING)
        ]
        stored = await _load(engine, task.id)
        assert stored is not None
        assert stored.title == "Write release notes"

    async def test_create_announces_initial_status(
        self, session: AsyncSession, publisher: RecordingPublisher
    ) -> None:
        """Test that a non-default initial status is the one announced."""
        task = await create_task(
            session,
            publisher,
            _OWNER,
            TaskCreate(title="Already started", status=TaskStatus.IN_PROGRESS),
        )

        assert publisher.events[0].status == TaskStatus.IN_PROGRESS
        assert task.status == TaskStatus.IN_PROGRESS

    async def test_publish_failure_leaves_no_record(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that the store write is rolled back when publishing fails."""
        publisher.fail_after(0)

        with pytest.raises(TaskTransactionError):
            await create_task(session, publisher, _OWNER, TaskCreate(title="Lost"))

        assert await _count(engine) == 0
        assert publisher.events == []

    async def test_store_failure_publishes_nothing(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that no event is sent for a task that failed to persist."""

        async def _broken_store(*_args: object, **_kwargs: object) -> Task:
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(coordinator, "create_task_db", _broken_store)

        with pytest.raises(TaskTransactionError) as exc_info:
            await create_task(session, publisher, _OWNER, TaskCreate(title="Nope"))

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert publisher.events == []
        assert await _count(engine) == 0


@pytest.mark.coordinator
class TestUpdate:
    """Tests for coordinated partial updates."""

    async def test_unchanged_status_publishes_nothing(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that updating other fields sends no notification."""
        task_id = await _create(session, publisher, "Draft")
        publisher.events.clear()

        updated = await update_task(
            session, publisher, task_id, TaskUpdate(title="Final", status="PENDING")
        )

        assert updated.title == "Final"
        assert publisher.events == []
        stored = await _load(engine, task_id)
        assert stored is not None
        assert stored.title == "Final"

    async def test_status_change_publishes_once(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that a status change results in exactly one event."""
        task_id = await _create(session, publisher, "Implement feature")
        publisher.events.clear()

        updated = await update_task(
            session, publisher, task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS)
        )

        assert updated.status == TaskStatus.IN_PROGRESS
        assert publisher.events == [
            TaskStatusEvent(task_id=task_id, status=TaskStatus.IN_PROGRESS)
        ]
        stored = await _load(engine, task_id)
        assert stored is not None
        assert stored.status == TaskStatus.IN_PROGRESS

    async def test_absent_fields_are_kept(
        self, session: AsyncSession, publisher: RecordingPublisher
    ) -> None:
        """Test partial-replace semantics of update."""
        task_id = await _create(
            session,
            publisher,
            "Keep",
            description="unchanged",
            priority=TaskPriority.HIGH,
        )

        updated = await update_task(
            session, publisher, task_id, TaskUpdate(priority=TaskPriority.LOW)
        )

        assert updated.title == "Keep"
        assert updated.description == "unchanged"
        assert updated.priority == TaskPriority.LOW
        assert updated.owner_user_id == _OWNER

    async def test_publish_failure_rolls_back_status(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that the stored status never diverges from what was announced."""
        task_id = await _create(session, publisher, "Fragile")
        publisher.fail_after(0)

        with pytest.raises(TaskTransactionError):
            await update_task(
                session,
                publisher,
                task_id,
                TaskUpdate(title="Changed", status=TaskStatus.COMPLETED),
            )

        stored = await _load(engine, task_id)
        assert stored is not None
        assert stored.status == TaskStatus.PENDING
        assert stored.title == "Fragile"

    async def test_update_missing_task(
        self, session: AsyncSession, publisher: RecordingPublisher
    ) -> None:
        """Test that updating an unknown task raises NotFound without events."""
        with pytest.raises(TaskNotFoundError):
            await update_task(
                session, publisher, uuid4(), TaskUpdate(status=TaskStatus.COMPLETED)
            )

        assert publisher.events == []


@pytest.mark.coordinator
class TestDelete:
    """Tests for coordinated deletes."""

    async def test_delete_twice(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that deleting twice yields NotFound the second time."""
        task_id = await _create(session, publisher, "Temporary")
        publisher.events.clear()

        await delete_task(session, task_id)
        with pytest.raises(TaskNotFoundError):
            await delete_task(session, task_id)

        assert await _load(engine, task_id) is None
        assert publisher.events == []

    async def test_bulk_delete_skips_missing(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that bulk delete ignores unknown ids."""
        first = await _create(session, publisher, "One")
        second = await _create(session, publisher, "Two")

        deleted = await bulk_delete_tasks(session, [first, uuid4(), second])

        assert deleted == 2
        assert await _count(engine) == 0


@pytest.mark.coordinator
class TestBulkUpdate:
    """Tests for the coordinated bulk status update."""

    async def test_missing_ids_are_skipped(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that [a, missing, c] updates a and c with one event each."""
        a = await _create(session, publisher, "a")
        c = await _create(session, publisher, "c")
        missing = uuid4()
        publisher.events.clear()

        updated = await bulk_update_status(
            session, publisher, [a, missing, c], TaskStatus.COMPLETED
        )

        assert {task.id for task in updated} == {a, c}
        assert sorted(publisher.events, key=lambda e: str(e.task_id)) == sorted(
            [
                TaskStatusEvent(task_id=a, status=TaskStatus.COMPLETED),
                TaskStatusEvent(task_id=c, status=TaskStatus.COMPLETED),
            ],
            key=lambda e: str(e.task_id),
        )
        for task_id in (a, c):
            stored = await _load(engine, task_id)
            assert stored is not None
            assert stored.status == TaskStatus.COMPLETED

    async def test_unchanged_tasks_are_announced(
        self, session: AsyncSession, publisher: RecordingPublisher
    ) -> None:
        """Test that bulk updates publish even when the status was already set."""
        done = await _create(session, publisher, "done", status=TaskStatus.COMPLETED)
        publisher.events.clear()

        await bulk_update_status(session, publisher, [done], TaskStatus.COMPLETED)

        assert publisher.events == [
            TaskStatusEvent(task_id=done, status=TaskStatus.COMPLETED)
        ]

    async def test_single_failure_rolls_back_batch(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that one failed publish leaves every task in the batch untouched."""
        ids = [await _create(session, publisher, f"t{i}") for i in range(3)]
        publisher.fail_after(1)

        with pytest.raises(TaskTransactionError):
            await bulk_update_status(session, publisher, ids, TaskStatus.COMPLETED)

        for task_id in ids:
            stored = await _load(engine, task_id)
            assert stored is not None
            assert stored.status == TaskStatus.PENDING


@pytest.mark.coordinator
class TestBatch:
    """Tests for batch action dispatch."""

    async def test_complete_action(
        self, session: AsyncSession, publisher: RecordingPublisher
    ) -> None:
        """Test that the complete action reports the number of updated tasks."""
        ids = [await _create(session, publisher, f"t{i}") for i in range(2)]
        requested = [*ids, uuid4()]

        result = await process_batch(
            session, publisher, BatchRequest(tasks=requested, action="complete")
        )

        assert result.success is True
        assert result.affected == 2
        assert result.task_ids == requested

    async def test_delete_action(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that the delete action removes the tasks without events."""
        ids = [await _create(session, publisher, f"t{i}") for i in range(2)]
        publisher.events.clear()

        result = await process_batch(
            session, publisher, BatchRequest(tasks=ids, action="delete")
        )

        assert result.affected == 2
        assert publisher.events == []
        assert await _count(engine) == 0

    async def test_unknown_action(
        self, session: AsyncSession, publisher: RecordingPublisher
    ) -> None:
        """Test that unsupported actions are rejected before touching the store."""
        with pytest.raises(UnknownBatchActionError):
            await process_batch(
                session, publisher, BatchRequest(tasks=[uuid4()], action="archive")
            )


@pytest.mark.coordinator
class TestCancellation:
    """Tests for writes cancelled while the notification is in flight."""

    async def test_cancelled_create_leaves_no_record(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that cancelling a create during publish rolls the insert back."""
        publisher.hang()
        pending = asyncio.create_task(
            create_task(session, publisher, _OWNER, TaskCreate(title="Abandoned"))
        )
        await publisher.publish_started.wait()

        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

        assert await _count(engine) == 0
        assert publisher.events == []

    async def test_cancelled_update_keeps_status(
        self,
        session: AsyncSession,
        engine: AsyncEngine,
        publisher: RecordingPublisher,
    ) -> None:
        """Test that cancelling a status change during publish keeps the old one."""
        task_id = await _create(session, publisher, "Interrupted")
        publisher.events.clear()
        publisher.hang()
        pending = asyncio.create_task(
            update_task(
                session, publisher, task_id, TaskUpdate(status=TaskStatus.COMPLETED)
            )
        )
        await publisher.publish_started.wait()

        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

        stored = await _load(engine, task_id)
        assert stored is not None
        assert stored.status == TaskStatus.PENDING
        assert publisher.events == []
