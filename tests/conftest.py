"""Shared test fixtures and configuration for the test suite."""

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from task_tracker.config import Settings
from task_tracker.main import create_app
from task_tracker.models.task import UserIdentity
from task_tracker.services.task_service import TaskService
from task_tracker.services.task_store import InMemoryTaskStore

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable replacement for the service clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Create test settings that log to the console only."""
    return Settings(
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        log_to_file=False,
        environment="test",
    )


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at NOW until advanced."""
    return FakeClock(NOW)


@pytest.fixture
def store() -> InMemoryTaskStore:
    """Create an empty in-memory task store."""
    return InMemoryTaskStore()


@pytest.fixture
def task_service(store, test_settings, clock) -> TaskService:
    """Create a task service over the in-memory store with a fixed clock."""
    return TaskService(store, settings=test_settings, clock=clock)


@pytest.fixture
def alice() -> UserIdentity:
    return UserIdentity(id="u1", username="alice")


@pytest.fixture
def bob() -> UserIdentity:
    return UserIdentity(id="u2", username="bob")


@pytest.fixture
def client(test_settings) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def alice_headers() -> dict:
    return {"X-User-Id": "u1", "X-Username": "alice"}


@pytest.fixture
def bob_headers() -> dict:
    return {"X-User-Id": "u2", "X-Username": "bob"}
