# ruff: noqa: S101

"""Valid tests for the mutating tasks endpoints."""

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from fakes import RecordingPublisher
from taskhub.task.publisher import TaskStatusEvent
from taskhub.task.task_status import TaskStatus

_HEADERS = {"X-User-Id": "77777777-7777-4777-8777-777777777777"}


def _create(client: TestClient, title: str = "Task") -> str:
    response = client.post("/tasks", json={"title": title}, headers=_HEADERS)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["id"]


@pytest.mark.tasks_write
class TestTasksWrite:
    """Tests for create, update, delete and batch via HTTP."""

    def test_create_publishes_once(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        """Test that creating a task queues one PENDING notification."""
        task_id = _create(client)

        assert [(str(e.task_id), e.status) for e in publisher.events] == [
            (task_id, TaskStatus.PENDING)
        ]

    def test_patch_status_publishes(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        """Test that a status change via PATCH is stored and announced."""
        task_id = _create(client)
        publisher.events.clear()

        response = client.patch(f"/tasks/{task_id}", json={"status": "IN_PROGRESS"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "IN_PROGRESS"
        assert len(publisher.events) == 1
        assert publisher.events[0].status == TaskStatus.IN_PROGRESS
        assert client.get(f"/tasks/{task_id}").json()["status"] == "IN_PROGRESS"

    def test_patch_without_status_change(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        """Test that other fields are updated without a notification."""
        task_id = _create(client, "Old title")
        publisher.events.clear()

        response = client.patch(
            f"/tasks/{task_id}",
            json={"title": "New title", "description": None, "priority": "LOW"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["title"] == "New title"
        assert body["priority"] == "LOW"
        assert body["description"] is None
        assert body["status"] == "PENDING"
        assert publisher.events == []

    def test_delete(self, client: TestClient) -> None:
        """Test that a deleted task is gone afterwards."""
        task_id = _create(client)

        response = client.delete(f"/tasks/{task_id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "statusCode": 200,
            "message": "Task successfully deleted",
        }
        assert client.get(f"/tasks/{task_id}").status_code == status.HTTP_404_NOT_FOUND
        assert client.delete(f"/tasks/{task_id}").status_code == (
            status.HTTP_404_NOT_FOUND
        )

    def test_batch_complete(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        """Test completing several tasks at once."""
        ids = [_create(client, f"Task {i}") for i in range(3)]
        publisher.events.clear()

        response = client.post(
            "/tasks/batch", json={"tasks": ids, "action": "complete"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "affected": 3, "taskIds": ids}
        assert {str(e.task_id) for e in publisher.events} == set(ids)
        stats = client.get("/tasks/stats", headers=_HEADERS).json()
        assert stats["completed"] == 3
        assert stats["pending"] == 0

    def test_batch_delete(self, client: TestClient) -> None:
        """Test deleting several tasks at once."""
        ids = [_create(client, f"Task {i}") for i in range(2)]

        response = client.post("/tasks/batch", json={"tasks": ids, "action": "delete"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["affected"] == 2
        assert client.get("/tasks", headers=_HEADERS).json()["count"] == 0

    def test_batch_events_match_stored_status(
        self, client: TestClient, publisher: RecordingPublisher
    ) -> None:
        """Test that each announced task really has the announced status."""
        ids = [_create(client, f"Task {i}") for i in range(2)]
        publisher.events.clear()

        client.post("/tasks/batch", json={"tasks": ids, "action": "complete"})

        for event in publisher.events:
            assert event == TaskStatusEvent(
                task_id=event.task_id, status=TaskStatus.COMPLETED
            )
            stored = client.get(f"/tasks/{event.task_id}").json()
            assert stored["status"] == "COMPLETED"
