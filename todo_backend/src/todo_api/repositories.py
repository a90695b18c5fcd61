from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from threading import RLock
from typing import List, Optional

from .logging_setup import get_logger
from .models import TodoEntity
from .schemas import TodoCreate, TodoPatch
from .settings import get_settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListQuery:
    """
    Filters for listing todos. Ordering is not the store's concern; callers
    apply the canonical order to the returned snapshot.
    """
    completed: Optional[bool] = None
    search: Optional[str] = None


def apply_patch(entity: TodoEntity, changes: TodoPatch, updated_at: datetime) -> TodoEntity:
    """
    Return a copy of `entity` with the fields present in `changes` applied.

    Only fields that were explicitly set on the patch are considered; an
    explicit null clears `description` or `deadline` and is ignored for the
    non-nullable fields.
    """
    updated = entity.copy()
    fields_set = changes.model_fields_set
    if changes.title is not None:
        updated["title"] = changes.title
    if "description" in fields_set:
        updated["description"] = changes.description
    if changes.completed is not None:
        updated["completed"] = changes.completed
    if changes.priority is not None:
        updated["priority"] = changes.priority
    if "deadline" in fields_set:
        updated["deadline"] = changes.deadline
    updated["updated_at"] = updated_at
    return updated


def matches_query(entity: TodoEntity, query: ListQuery) -> bool:
    if query.completed is not None and entity["completed"] != query.completed:
        return False
    if query.search:
        s = query.search.lower()
        title_ok = s in entity["title"].lower()
        desc_ok = s in entity["description"].lower() if entity["description"] else False
        return title_ok or desc_ok
    return True


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    name: str = "abstract"

    @abstractmethod
    def create(self, data: TodoCreate, created_at: datetime) -> TodoEntity:
        """Create and return a new, incomplete TodoEntity."""

    @abstractmethod
    def get(self, todo_id: int) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def update(self, todo_id: int, changes: TodoPatch, updated_at: datetime) -> Optional[TodoEntity]:
        """Apply a partial update. Return the updated entity or None if not found."""

    @abstractmethod
    def delete(self, todo_id: int) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self, query: Optional[ListQuery] = None) -> List[TodoEntity]:
        """
        Return every TodoEntity matching the filters, in no particular order.
        - Filter by completed
        - Substring search across title and description (case-insensitive)
        """


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def create(self, data: TodoCreate, created_at: datetime) -> TodoEntity:
        entity: TodoEntity = {
            "id": self._allocate_id(),
            "title": data.title,
            "description": data.description,
            "completed": False,
            "priority": data.priority,
            "deadline": data.deadline,
            "created_at": created_at,
            "updated_at": None,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def update(self, todo_id: int, changes: TodoPatch, updated_at: datetime) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None
            updated = apply_patch(existing, changes, updated_at)
            self._items[todo_id] = updated
            return updated.copy()

    def delete(self, todo_id: int) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None

    def list(self, query: Optional[ListQuery] = None) -> List[TodoEntity]:
        q = query or ListQuery()
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for t in self._items.values() if matches_query(t, q)]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured in settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository backed by SQLITE_DB_PATH
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Using SQLite todo store at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path)
    logger.info("Using in-memory todo store")
    return InMemoryRepository()
