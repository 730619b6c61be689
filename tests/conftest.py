"""Common test fixtures for the application."""

import os

os.environ.setdefault("ENV", "testing")

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from fakes import RecordingPublisher
from taskhub.app import app
from taskhub.config.db import get_session
from taskhub.task.publisher import get_publisher


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine backed by a fresh SQLite file.

    Returns:
        AsyncEngine: Engine with all tables created.
    """
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        connect_args={"check_same_thread": False},
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session for driving the repository and coordinator directly."""
    async with AsyncSession(engine, expire_on_commit=False) as db:
        yield db


@pytest.fixture
def publisher() -> RecordingPublisher:
    """In-memory publisher recording every accepted event."""
    return RecordingPublisher()


@pytest.fixture(name="client")
def client_fixture(
    engine: AsyncEngine, publisher: RecordingPublisher
) -> Generator[TestClient]:
    """Create a test client for the FastAPI app.

    Every request gets its own session on the test engine, and status
    notifications go to the recording publisher.

    Returns:
        TestClient: Configured FastAPI test client.
    """

    async def get_session_override() -> AsyncGenerator[AsyncSession]:
        async with AsyncSession(engine, expire_on_commit=False) as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_publisher] = lambda: publisher
    client = TestClient(app, base_url="http://testserver")  # NOSONAR
    yield client

    app.dependency_overrides.clear()
