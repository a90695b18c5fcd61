from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional

from fastapi import Depends

from . import analyzer
from .logging_setup import get_logger
from .models import Priority, TodoEntity
from .repositories import ListQuery, Repository, get_repository
from .schemas import TodoCreate, TodoPatch, TodoReplace, TodoStats

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TodoNotFoundError(LookupError):
    """Raised when an operation targets a todo id the store does not hold."""

    def __init__(self, todo_id: int) -> None:
        super().__init__(f"Todo {todo_id} not found")
        self.todo_id = todo_id


# PUBLIC_INTERFACE
class TodoService:
    """
    Application service over a todo repository.

    Owns the clock: timestamps and the `now` handed to the task analyzer come
    from `clock`, so tests can pin time.
    """

    def __init__(self, repository: Repository, clock: Clock = utcnow) -> None:
        self._repo = repository
        self._clock = clock

    @property
    def backend(self) -> str:
        return self._repo.name

    def _not_found(self, todo_id: int) -> TodoNotFoundError:
        logger.warning("Todo %s not found", todo_id, extra={"todo_id": todo_id})
        return TodoNotFoundError(todo_id)

    def _require(self, todo: Optional[TodoEntity], todo_id: int) -> TodoEntity:
        if todo is None:
            raise self._not_found(todo_id)
        return todo

    def _update(self, todo_id: int, changes: TodoPatch) -> TodoEntity:
        updated = self._require(self._repo.update(todo_id, changes, self._clock()), todo_id)
        logger.info(
            "Updated todo %s (%s)",
            todo_id,
            ", ".join(sorted(changes.model_fields_set)) or "no fields",
            extra={"todo_id": todo_id},
        )
        return updated

    def list_todos(self, completed: Optional[bool] = None, search: Optional[str] = None) -> List[TodoEntity]:
        """Return matching todos in canonical listing order."""
        query = ListQuery(completed=completed, search=search or None)
        return analyzer.canonical_order(self._repo.list(query))

    def get_todo(self, todo_id: int) -> TodoEntity:
        return self._require(self._repo.get(todo_id), todo_id)

    def create_todo(self, data: TodoCreate) -> TodoEntity:
        created = self._repo.create(data, self._clock())
        logger.info("Created todo %s", created["id"], extra={"todo_id": created["id"]})
        return created

    def replace_todo(self, todo_id: int, data: TodoReplace) -> TodoEntity:
        """Full update: every mutable field takes the value from `data`."""
        changes = TodoPatch(
            title=data.title,
            description=data.description,
            completed=data.completed,
            priority=data.priority,
            deadline=data.deadline,
        )
        return self._update(todo_id, changes)

    def patch_todo(self, todo_id: int, changes: TodoPatch) -> TodoEntity:
        return self._update(todo_id, changes)

    def update_title(self, todo_id: int, title: str) -> TodoEntity:
        return self._update(todo_id, TodoPatch(title=title))

    def update_priority(self, todo_id: int, priority: Priority) -> TodoEntity:
        return self._update(todo_id, TodoPatch(priority=priority))

    def update_deadline(self, todo_id: int, deadline: Optional[datetime]) -> TodoEntity:
        return self._update(todo_id, TodoPatch(deadline=deadline))

    def delete_todo(self, todo_id: int) -> None:
        if not self._repo.delete(todo_id):
            raise self._not_found(todo_id)
        logger.info("Deleted todo %s", todo_id, extra={"todo_id": todo_id})

    def overdue(self, include_completed: bool = False) -> List[TodoEntity]:
        return analyzer.overdue_tasks(self._repo.list(), self._clock(), include_completed)

    def urgent(self) -> List[TodoEntity]:
        return analyzer.urgent_tasks(self._repo.list(), self._clock())

    def statistics(self) -> TodoStats:
        snapshot = self._repo.list()
        now = self._clock()
        return TodoStats(
            total=len(snapshot),
            completed=sum(1 for t in snapshot if t["completed"]),
            completion_rate=analyzer.completion_rate(snapshot),
            priority_distribution=analyzer.priority_distribution(snapshot),
            overdue=len(analyzer.overdue_tasks(snapshot, now)),
            urgent=len(analyzer.urgent_tasks(snapshot, now)),
        )


# PUBLIC_INTERFACE
def get_clock() -> Clock:
    """Dependency returning the wall clock; overridden in tests."""
    return utcnow


# PUBLIC_INTERFACE
def get_todo_service(
    repo: Repository = Depends(get_repository),
    clock: Clock = Depends(get_clock),
) -> TodoService:
    """FastAPI dependency building a TodoService over the configured store."""
    return TodoService(repo, clock)
