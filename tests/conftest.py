from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from src.task_api.db import SQLiteTaskStore  # noqa: E402
from src.task_api.main import app  # noqa: E402
from src.task_api.repositories import InMemoryTaskStore, TaskStore, get_task_store  # noqa: E402
from src.task_api.service import TaskService  # noqa: E402


class FakeClock:
    """
    Deterministic clock: every call returns a time one second after the previous one.
    """

    def __init__(self, start: datetime = datetime(2025, 1, 1, 9, 0, 0)) -> None:
        self.current = start
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        self.calls += 1
        return value


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, clock: FakeClock, tmp_path: Path) -> TaskStore:
    """Each store contract test runs against both backends."""
    if request.param == "sqlite":
        return SQLiteTaskStore(str(tmp_path / "tasks.db"), clock=clock)
    return InMemoryTaskStore(clock=clock)


@pytest.fixture()
def memory_store(clock: FakeClock) -> InMemoryTaskStore:
    return InMemoryTaskStore(clock=clock)


@pytest.fixture()
def service(memory_store: InMemoryTaskStore) -> TaskService:
    return TaskService(memory_store)


@pytest.fixture()
def client(memory_store: InMemoryTaskStore):
    """TestClient whose requests all hit a fresh in-memory store."""
    app.dependency_overrides[get_task_store] = lambda: memory_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_task_store, None)
