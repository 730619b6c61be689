"""Load testing with Locust.

Run with: uvx locust -f scripts/locust.py
Run headless with: uvx locust -f scripts/locust.py --host=http://localhost:8000 --headless -u 10 -r 2
"""  # noqa: E501

import random
from uuid import uuid4

import urllib3
from locust import HttpUser, constant_throughput, task

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


_TASK_PATH = "/tasks"
_STATUSES = ["PENDING", "IN_PROGRESS", "COMPLETED"]
_PRIORITIES = ["LOW", "MEDIUM", "HIGH"]


class AppLoadTests(HttpUser):
    """Load tests for the tasks API; every simulated user owns its own tasks."""

    host = "http://localhost:8000"
    wait_time = constant_throughput(1)

    def on_start(self) -> None:
        """Pick a user ID and ignore SSL certificate validation."""
        self.client.verify = False
        self.client.headers["X-User-Id"] = str(uuid4())
        self.task_ids: list[str] = []

    @task(3)
    def create_task(self) -> None:
        """Create a task with random priority."""
        response = self.client.post(
            _TASK_PATH,
            json={"title": "Load test task", "priority": random.choice(_PRIORITIES)},  # noqa: S311
        )
        if response.ok:
            self.task_ids.append(response.json()["id"])

    @task(5)
    def list_tasks(self) -> None:
        """List the first page of tasks, sometimes filtered by status."""
        params: dict[str, int | str] = {"limit": 20}
        if random.random() < 0.5:  # noqa: S311, PLR2004
            params["status"] = random.choice(_STATUSES)  # noqa: S311
        self.client.get(_TASK_PATH, params=params, name="/tasks?filters")

    @task(2)
    def get_stats(self) -> None:
        """Get task statistics."""
        self.client.get(f"{_TASK_PATH}/stats")

    @task(2)
    def update_status(self) -> None:
        """Move one of the user's tasks to a random status."""
        if not self.task_ids:
            return
        task_id = random.choice(self.task_ids)  # noqa: S311
        self.client.patch(
            f"{_TASK_PATH}/{task_id}",
            json={"status": random.choice(_STATUSES)},  # noqa: S311
            name="/tasks/[id]",
        )

    @task
    def complete_batch(self) -> None:
        """Complete up to ten tasks in one batch."""
        if not self.task_ids:
            return
        self.client.post(
            f"{_TASK_PATH}/batch",
            json={"tasks": self.task_ids[-10:], "action": "complete"},
        )

    @task
    def delete_task(self) -> None:
        """Delete the oldest task of the user."""
        if not self.task_ids:
            return
        task_id = self.task_ids.pop(0)
        self.client.delete(f"{_TASK_PATH}/{task_id}", name="/tasks/[id]")

    @task
    def get_health(self) -> None:
        """Check the health of the server."""
        self.client.get("/health")
