from datetime import timedelta

import pytest

from src.todo_api.analyzer import (
    URGENT_WINDOW,
    canonical_order,
    completion_rate,
    overdue_tasks,
    priority_distribution,
    urgent_tasks,
)
from src.todo_api.models import Priority

DAY = timedelta(days=1)


def ids(todos):
    return [t["id"] for t in todos]


class TestOverdueTasks:
    def test_only_incomplete_past_deadline(self, make_todo, now):
        todos = [
            make_todo(id=1, deadline=now - DAY, completed=False),
            make_todo(id=2, deadline=now + DAY, completed=False),
            make_todo(id=3, deadline=now - 2 * DAY, completed=True),
            make_todo(id=4, deadline=None, completed=False),
        ]
        assert ids(overdue_tasks(todos, now)) == [1]

    def test_include_completed_adds_completed_overdue(self, make_todo, now):
        todos = [
            make_todo(id=1, deadline=None),
            make_todo(id=2, deadline=now + DAY),
            make_todo(id=3, deadline=now - DAY, completed=False),
            make_todo(id=4, deadline=now - DAY, completed=True),
        ]
        assert ids(overdue_tasks(todos, now, include_completed=False)) == [3]
        assert ids(overdue_tasks(todos, now, include_completed=True)) == [3, 4]

    def test_deadline_equal_to_now_is_not_overdue(self, make_todo, now):
        assert overdue_tasks([make_todo(deadline=now)], now) == []

    def test_never_includes_missing_deadline(self, make_todo, now):
        todos = [make_todo(deadline=None, completed=c) for c in (True, False)]
        assert overdue_tasks(todos, now, include_completed=True) == []

    def test_without_completed_is_subset_of_with_completed(self, make_todo, now):
        todos = [
            make_todo(deadline=now + offset * DAY, completed=completed)
            for offset in (-3, -1, 1, 3)
            for completed in (True, False)
        ]
        strict = ids(overdue_tasks(todos, now, include_completed=False))
        loose = ids(overdue_tasks(todos, now, include_completed=True))
        assert set(strict) <= set(loose)
        assert len(loose) == 4
        assert len(strict) == 2

    def test_accepts_generators_and_does_not_mutate(self, make_todo, now):
        todos = [make_todo(id=1, deadline=now - DAY), make_todo(id=2)]
        before = [t.copy() for t in todos]
        assert ids(overdue_tasks((t for t in todos), now)) == [1]
        assert todos == before


class TestPriorityDistribution:
    def test_counts_each_priority(self, make_todo):
        todos = [
            make_todo(priority=p)
            for p in (Priority.LOW, Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL)
        ]
        assert priority_distribution(todos) == {
            Priority.LOW: 2,
            Priority.MEDIUM: 1,
            Priority.HIGH: 1,
            Priority.CRITICAL: 1,
        }

    def test_empty_has_all_four_keys(self):
        distribution = priority_distribution([])
        assert set(distribution) == set(Priority)
        assert sum(distribution.values()) == 0

    def test_sums_to_total(self, make_todo):
        todos = [make_todo(priority=Priority.HIGH) for _ in range(5)] + [make_todo()]
        distribution = priority_distribution(todos)
        assert len(distribution) == 4
        assert sum(distribution.values()) == len(todos)
        assert distribution[Priority.MEDIUM] == 0


class TestCompletionRate:
    @pytest.mark.parametrize(
        "completed_count, total, expected",
        [(0, 0, 0.0), (2, 4, 50.0), (4, 4, 100.0), (0, 3, 0.0), (1, 3, 1 / 3 * 100)],
    )
    def test_rate(self, make_todo, completed_count, total, expected):
        todos = [make_todo(completed=i < completed_count) for i in range(total)]
        assert completion_rate(todos) == expected

    def test_empty_is_float_zero(self):
        rate = completion_rate([])
        assert rate == 0.0
        assert isinstance(rate, float)


class TestUrgentTasks:
    def test_orders_by_priority_then_deadline(self, make_todo, now):
        todos = [
            make_todo(id=1, priority=Priority.LOW, deadline=now + DAY),
            make_todo(id=2, priority=Priority.CRITICAL, deadline=now + 3 * DAY),
            make_todo(id=3, priority=Priority.MEDIUM, deadline=now + DAY),
        ]
        assert ids(urgent_tasks(todos, now)) == [2, 3, 1]

    def test_selection_rules(self, make_todo, now):
        todos = [
            make_todo(id=1, priority=Priority.HIGH),  # high priority, no deadline
            make_todo(id=2, priority=Priority.LOW, deadline=now + URGENT_WINDOW),  # boundary
            make_todo(id=3, priority=Priority.LOW, deadline=now + URGENT_WINDOW + timedelta(seconds=1)),
            make_todo(id=4, priority=Priority.CRITICAL, completed=True),
            make_todo(id=5, priority=Priority.MEDIUM, deadline=now - DAY),  # already overdue
            make_todo(id=6, priority=Priority.MEDIUM),
        ]
        assert ids(urgent_tasks(todos, now)) == [1, 5, 2]

    def test_missing_deadline_sorts_last_within_priority(self, make_todo, now):
        todos = [
            make_todo(id=1, priority=Priority.HIGH),
            make_todo(id=2, priority=Priority.HIGH, deadline=now + 5 * DAY),
            make_todo(id=3, priority=Priority.HIGH, deadline=now + DAY),
        ]
        assert ids(urgent_tasks(todos, now)) == [3, 2, 1]

    def test_full_ties_keep_input_order(self, make_todo, now):
        todos = [make_todo(id=i, priority=Priority.CRITICAL) for i in (7, 3, 5)]
        assert ids(urgent_tasks(todos, now)) == [7, 3, 5]

    def test_output_is_sorted(self, make_todo, now):
        todos = [
            make_todo(priority=p, deadline=d)
            for p in Priority
            for d in (None, now - DAY, now + DAY, now + 10 * DAY)
        ]
        result = urgent_tasks(todos, now)
        for a, b in zip(result, result[1:]):
            assert a["priority"].rank >= b["priority"].rank
            if a["priority"] == b["priority"]:
                a_deadline, b_deadline = a["deadline"], b["deadline"]
                assert b_deadline is None or (a_deadline is not None and a_deadline <= b_deadline)


class TestCanonicalOrder:
    def test_three_key_ordering(self, make_todo, now):
        todos = [
            make_todo(id=1, priority=Priority.LOW, deadline=now + DAY, created_at=now - 3 * DAY),
            make_todo(id=2, priority=Priority.HIGH, deadline=None, created_at=now - 3 * DAY),
            make_todo(id=3, priority=Priority.HIGH, deadline=now + 2 * DAY, created_at=now - 3 * DAY),
            make_todo(id=4, priority=Priority.HIGH, deadline=now + 2 * DAY, created_at=now - DAY),
            make_todo(id=5, priority=Priority.CRITICAL, deadline=now + 9 * DAY, created_at=now - 5 * DAY),
            make_todo(id=6, priority=Priority.HIGH, deadline=None, created_at=now - 2 * DAY),
        ]
        assert ids(canonical_order(todos)) == [5, 4, 3, 6, 2, 1]

    def test_includes_completed_and_preserves_length(self, make_todo, now):
        todos = [make_todo(completed=True), make_todo(), make_todo(priority=Priority.MEDIUM)]
        assert len(canonical_order(todos)) == 3

    def test_empty(self):
        assert canonical_order([]) == []


@pytest.mark.parametrize(
    "call",
    [
        lambda now: overdue_tasks(None, now),
        lambda now: urgent_tasks(None, now),
        lambda now: priority_distribution(None),
        lambda now: completion_rate(None),
        lambda now: canonical_order(None),
    ],
)
def test_none_collection_is_rejected(call, now):
    with pytest.raises(ValueError):
        call(now)


def test_empty_input_yields_empty_results(now):
    assert overdue_tasks([], now) == []
    assert urgent_tasks([], now) == []
    assert completion_rate([]) == 0.0
    assert list(priority_distribution([]).values()) == [0, 0, 0, 0]
