"""
Task analyzer: pure reporting and ranking views over a snapshot of todos.

Every function takes the snapshot (any iterable of TodoEntity records) and,
where time matters, an explicit `now`. Nothing here reads the clock, touches
storage, logs, or mutates the records it is given.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Priority, TodoEntity

# Incomplete todos due within this window from `now` are urgent.
URGENT_WINDOW = timedelta(days=2)


def _snapshot(todos: Optional[Iterable[TodoEntity]]) -> List[TodoEntity]:
    if todos is None:
        raise ValueError("todos must be an iterable of todo records, not None")
    return list(todos)


def _priority_deadline_key(todo: TodoEntity) -> Tuple[int, bool, Optional[datetime]]:
    # Higher rank first; missing deadlines sort after any real one.
    deadline = todo["deadline"]
    return (-todo["priority"].rank, deadline is None, deadline)


# PUBLIC_INTERFACE
def overdue_tasks(
    todos: Iterable[TodoEntity],
    now: datetime,
    include_completed: bool = False,
) -> List[TodoEntity]:
    """
    Return todos whose deadline is strictly before `now`.

    Incomplete overdue todos are always returned; completed ones only when
    `include_completed` is set. Todos without a deadline are never overdue.
    Input order is preserved.
    """
    result = []
    for todo in _snapshot(todos):
        deadline = todo["deadline"]
        if deadline is None or deadline >= now:
            continue
        if todo["completed"] and not include_completed:
            continue
        result.append(todo)
    return result


# PUBLIC_INTERFACE
def priority_distribution(todos: Iterable[TodoEntity]) -> Dict[Priority, int]:
    """Count todos per priority; every priority is present, zero if unused."""
    distribution = {priority: 0 for priority in Priority}
    for todo in _snapshot(todos):
        distribution[todo["priority"]] += 1
    return distribution


# PUBLIC_INTERFACE
def completion_rate(todos: Iterable[TodoEntity]) -> float:
    """Percentage (0..100) of completed todos; 0.0 for an empty snapshot."""
    items = _snapshot(todos)
    if not items:
        return 0.0
    completed = sum(1 for t in items if t["completed"])
    return completed / len(items) * 100


# PUBLIC_INTERFACE
def urgent_tasks(todos: Iterable[TodoEntity], now: datetime) -> List[TodoEntity]:
    """
    Return incomplete todos that need immediate attention.

    A todo is urgent when its priority is High or Critical, or when it has a
    deadline no later than `now + URGENT_WINDOW`. Results are ordered by
    priority (Critical first), then deadline (earliest first, none last).
    """
    cutoff = now + URGENT_WINDOW
    urgent = [
        t
        for t in _snapshot(todos)
        if not t["completed"]
        and (
            t["priority"].rank >= Priority.HIGH.rank
            or (t["deadline"] is not None and t["deadline"] <= cutoff)
        )
    ]
    return sorted(urgent, key=_priority_deadline_key)


# PUBLIC_INTERFACE
def canonical_order(todos: Iterable[TodoEntity]) -> List[TodoEntity]:
    """
    Order todos for listing: priority descending, deadline ascending (none
    last), then newest `created_at` first.
    """
    # Two stable passes: the tertiary key first, then the primary pair.
    by_created = sorted(_snapshot(todos), key=lambda t: t["created_at"], reverse=True)
    return sorted(by_created, key=_priority_deadline_key)
