"""
Pytest configuration for the todo backend.

Provides fixtures for:
- A fixed clock so analyzer-backed endpoints are deterministic
- A fresh in-memory repository wired into the app per test
- A SQLite repository in a temporary directory
- Record factories for analyzer tests
"""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Callable, Generator, Optional

import pytest

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from fastapi.testclient import TestClient  # noqa: E402

from src.todo_api.db import SQLiteRepository  # noqa: E402
from src.todo_api.main import app  # noqa: E402
from src.todo_api.models import Priority, TodoEntity  # noqa: E402
from src.todo_api.repositories import InMemoryRepository, get_repository  # noqa: E402
from src.todo_api.services import get_clock  # noqa: E402

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def memory_repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def sqlite_repo(tmp_path) -> SQLiteRepository:
    return SQLiteRepository(str(tmp_path / "data" / "todos.db"))


@pytest.fixture
def client(memory_repo: InMemoryRepository) -> Generator[TestClient, None, None]:
    """TestClient over a fresh in-memory store with the clock pinned to NOW."""
    app.dependency_overrides[get_repository] = lambda: memory_repo
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_todo() -> Callable[..., TodoEntity]:
    """Build TodoEntity records for analyzer tests; ids count up from 1."""
    ids = count(1)

    def _make(
        id: Optional[int] = None,
        completed: bool = False,
        priority: Priority = Priority.LOW,
        deadline: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        title: str = "Task",
    ) -> TodoEntity:
        return {
            "id": next(ids) if id is None else id,
            "title": title,
            "description": None,
            "completed": completed,
            "priority": priority,
            "deadline": deadline,
            "created_at": created_at or NOW - timedelta(days=7),
            "updated_at": None,
        }

    return _make
