"""Tests for the task HTTP routes."""

import time
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from task_tracker.main import create_app


def future(days: int = 1) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def create(client, headers, **data) -> dict:
    response = client.post("/tasks/", json=data, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestTaskRoutes:
    """Test task API routes."""

    def test_create_task_success(self, client, alice_headers):
        """Test successful task creation via API."""
        response = client.post(
            "/tasks/",
            json={"title": "Write report", "description": "<script>x()</script>Quarterly"},
            headers=alice_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Write report"
        assert data["description"] == "Quarterly"
        assert data["status"] == "PENDING"
        assert data["priority"] == "MEDIUM"
        assert data["owner_id"] == "u1"
        assert data["id"]

    def test_create_task_validation_error(self, client, alice_headers):
        """Test task creation with a blank title."""
        response = client.post("/tasks/", json={"title": "  "}, headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "title required"
        assert response.json()["error_code"] == "validation_error"

    def test_create_task_past_due_date(self, client, alice_headers):
        """Test task creation with a due date in the past."""
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()

        response = client.post("/tasks/", json={"title": "Late", "due_date": past}, headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "due date in past"

    def test_create_task_whitespace_padded_title(self, client, alice_headers):
        """Test a heavily padded title is trimmed and accepted promptly."""
        start = time.perf_counter()
        response = client.post(
            "/tasks/",
            json={"title": " " * 50_000 + "Task" + "\t" * 50_000},
            headers=alice_headers,
        )
        elapsed = time.perf_counter() - start

        assert response.status_code == 201
        assert response.json()["title"] == "Task"
        assert elapsed < 2.0

    def test_create_task_unknown_status(self, client, alice_headers):
        """Test request schema errors are reported as 422."""
        response = client.post("/tasks/", json={"title": "Task", "status": "DONE"}, headers=alice_headers)

        assert response.status_code == 422
        assert "validation error" in response.json()["error"].lower()

    def test_missing_identity(self, client):
        """Test requests without a caller identity are rejected."""
        response = client.get("/tasks/")

        assert response.status_code == 401
        assert "error_code" not in response.json()

    def test_list_tasks(self, client, alice_headers, bob_headers):
        """Test listing returns only the caller's tasks, newest first."""
        create(client, alice_headers, title="Task 1")
        create(client, alice_headers, title="Task 2")
        create(client, bob_headers, title="Bob's task")

        response = client.get("/tasks/", headers=alice_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [t["title"] for t in data["tasks"]] == ["Task 2", "Task 1"]

    def test_list_tasks_with_status_filter(self, client, alice_headers):
        """Test listing filtered by status."""
        create(client, alice_headers, title="Waiting")
        create(client, alice_headers, title="Working", status="IN_PROGRESS")

        response = client.get("/tasks/?status=IN_PROGRESS", headers=alice_headers)

        assert response.status_code == 200
        assert [t["title"] for t in response.json()["tasks"]] == ["Working"]

    def test_list_tasks_by_due_date(self, client, alice_headers):
        """Test listing ordered by due date."""
        create(client, alice_headers, title="Undated")
        create(client, alice_headers, title="Later", due_date=future(5))
        create(client, alice_headers, title="Sooner", due_date=future(1))

        response = client.get("/tasks/by-due-date", headers=alice_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert [t["title"] for t in data["tasks"]] == ["Sooner", "Later", "Undated"]

    def test_get_task_success(self, client, alice_headers):
        """Test successful task retrieval via API."""
        task = create(client, alice_headers, title="Test Task")

        response = client.get(f"/tasks/{task['id']}", headers=alice_headers)

        assert response.status_code == 200
        assert response.json()["title"] == "Test Task"

    def test_get_task_not_found(self, client, alice_headers):
        """Test task retrieval with non-existent ID."""
        response = client.get(f"/tasks/{uuid4()}", headers=alice_headers)

        assert response.status_code == 404
        assert "not found" in response.json()["error"]
        assert response.json()["error_code"] == "not_found"

    def test_get_foreign_task_hidden(self, client, alice_headers, bob_headers):
        """Test another user's task looks like a missing one."""
        task = create(client, alice_headers, title="Private")

        response = client.get(f"/tasks/{task['id']}", headers=bob_headers)

        assert response.status_code == 404
        assert "not found" in response.json()["error"]
        assert response.json()["error_code"] == "not_found"

    def test_get_foreign_task_forbidden_when_not_hidden(self, test_settings, alice_headers, bob_headers):
        """Test foreign tasks report 403 when hiding is disabled."""
        settings = test_settings.model_copy(update={"hide_foreign_tasks": False})

        with TestClient(create_app(settings)) as client:
            task = create(client, alice_headers, title="Private")

            response = client.get(f"/tasks/{task['id']}", headers=bob_headers)

        assert response.status_code == 403
        assert response.json()["error_code"] == "access_denied"

    def test_update_task_success(self, client, alice_headers):
        """Test full update keeps omitted status and priority."""
        task = create(client, alice_headers, title="Original", priority="HIGH", status="IN_PROGRESS")

        response = client.put(
            f"/tasks/{task['id']}",
            json={"title": "Updated", "description": "New notes"},
            headers=alice_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Updated"
        assert data["description"] == "New notes"
        assert data["priority"] == "HIGH"
        assert data["status"] == "IN_PROGRESS"

    def test_update_foreign_task(self, client, alice_headers, bob_headers):
        """Test updating another user's task is refused and changes nothing."""
        task = create(client, alice_headers, title="Mine")

        response = client.put(f"/tasks/{task['id']}", json={"title": "Hijacked"}, headers=bob_headers)

        assert response.status_code == 404
        assert client.get(f"/tasks/{task['id']}", headers=alice_headers).json()["title"] == "Mine"

    def test_update_invalid_title(self, client, alice_headers):
        """Test update validation errors map to 400."""
        task = create(client, alice_headers, title="Mine")

        response = client.put(f"/tasks/{task['id']}", json={"title": "x" * 101}, headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "title too long"

    @pytest.mark.parametrize("steps,expected_status", [
        (["IN_PROGRESS"], 200),
        (["IN_PROGRESS", "COMPLETED"], 200),
        (["PENDING"], 200),
        (["COMPLETED"], 409),
        (["IN_PROGRESS", "PENDING"], 409),
    ])
    def test_change_status(self, client, alice_headers, steps, expected_status):
        """Test status changes follow the state machine."""
        task = create(client, alice_headers, title="Task")

        for step in steps:
            response = client.patch(f"/tasks/{task['id']}/status", json={"status": step}, headers=alice_headers)

        assert response.status_code == expected_status

    def test_change_status_conflict_detail(self, client, alice_headers):
        """Test an illegal transition names both states."""
        task = create(client, alice_headers, title="Task")
        client.patch(f"/tasks/{task['id']}/status", json={"status": "IN_PROGRESS"}, headers=alice_headers)

        response = client.patch(f"/tasks/{task['id']}/status", json={"status": "PENDING"}, headers=alice_headers)

        assert response.status_code == 409
        assert "IN_PROGRESS → PENDING" in response.json()["error"]
        assert response.json()["error_code"] == "invalid_transition"

    def test_delete_task_success(self, client, alice_headers):
        """Test successful task deletion via API."""
        task = create(client, alice_headers, title="Doomed")

        response = client.delete(f"/tasks/{task['id']}", headers=alice_headers)

        assert response.status_code == 204
        assert client.get(f"/tasks/{task['id']}", headers=alice_headers).status_code == 404

    def test_delete_task_not_found(self, client, alice_headers):
        """Test task deletion with non-existent ID."""
        response = client.delete(f"/tasks/{uuid4()}", headers=alice_headers)

        assert response.status_code == 404

    def test_delete_foreign_task(self, client, alice_headers, bob_headers):
        """Test deleting another user's task is refused."""
        task = create(client, alice_headers, title="Mine")

        response = client.delete(f"/tasks/{task['id']}", headers=bob_headers)

        assert response.status_code == 404
        assert client.get(f"/tasks/{task['id']}", headers=alice_headers).status_code == 200


class TestAppEndpoints:
    """Test health and root endpoints."""

    def test_health_check(self, client):
        """Test the health check reports the initialized task service."""
        response = client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["task_service"] == "initialized"

    def test_root(self, client):
        """Test the root endpoint lists the API entry points."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["tasks"] == "/tasks"
