from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class Priority(str, Enum):
    """
    Closed set of todo priorities, serialized by name.

    Ordering always goes through `rank` (Low=0 .. Critical=3); the string value
    is only the wire representation.
    """

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @classmethod
    def from_rank(cls, rank: int) -> "Priority":
        for member, member_rank in _RANKS.items():
            if member_rank == rank:
                return member
        raise ValueError(f"Unknown priority rank: {rank}")


_RANKS = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain record representing a Todo item as held by the
    storage backends and handed to the task analyzer.

    Fields:
    - id: Unique integer identifier assigned by the store
    - title: Short title (1..25 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    - priority: Priority level
    - deadline: Optional aware UTC datetime; None means "no deadline"
    - created_at: Aware UTC creation timestamp, never changed after insert
    - updated_at: Aware UTC timestamp of the last mutation, None until then
    """

    id: int
    title: str
    description: Optional[str]
    completed: bool
    priority: Priority
    deadline: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]
