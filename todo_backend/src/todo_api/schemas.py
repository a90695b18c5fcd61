from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import Priority

TITLE_MAX_LENGTH = 25

# Shared type for incoming deadlines which can be a date, datetime, or ISO8601 string
DeadlineInput = Union[date, datetime, str]


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_deadline(value: Optional[DeadlineInput]) -> Optional[datetime]:
    """
    Normalize deadline input into an aware UTC datetime.
    - Strings are parsed as ISO8601 datetimes (a trailing 'Z' is accepted), or
      as plain dates at 00:00.
    - Dates are promoted to datetimes at 00:00.
    - Naive datetimes are taken to be UTC; aware ones are converted to UTC.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return _to_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str):
        s = value.strip()
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return _to_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError(
                    "Invalid deadline format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)

    raise ValueError("Invalid type for deadline; expected date, datetime, or ISO8601 string.")


def _parse_priority(value: Any) -> Any:
    """
    Accept priority names case-insensitively ('high', 'High') and integer
    ranks (0..3); anything else is left for enum validation to reject.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return Priority.from_rank(value)
    if isinstance(value, str):
        for member in Priority:
            if member.value.lower() == value.strip().lower():
                return member
    return value


def _strip_title(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


_BASE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item. New todos always start incomplete.
    """

    model_config = ConfigDict(
        **_BASE_CONFIG,
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "priority": "High",
                "deadline": "2025-02-01T18:00:00Z",
            }
        },
    )

    title: str = Field(
        ...,
        description="Short title for the todo item",
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
    )
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    priority: Priority = Field(default=Priority.LOW, description="Priority level, Low by default")
    deadline: Optional[datetime] = Field(
        default=None,
        description="Optional deadline. Accepts ISO8601 date or datetime; dates are set to 00:00 UTC",
    )

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        """Strip surrounding whitespace before the length constraints apply."""
        return _strip_title(v)

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: Any) -> Any:
        return _parse_priority(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DeadlineInput]) -> Optional[datetime]:
        return _parse_deadline(v)


# PUBLIC_INTERFACE
class TodoReplace(BaseModel):
    """
    Schema for a full update (PUT). Omitted optional fields are reset to their
    defaults. When `id` is sent it must match the id in the path.
    """

    model_config = ConfigDict(
        **_BASE_CONFIG,
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy groceries",
                "description": None,
                "completed": True,
                "priority": "Medium",
                "deadline": None,
            }
        },
    )

    id: Optional[int] = Field(default=None, description="Optional id; must match the path id")
    title: str = Field(
        ...,
        description="Short title for the todo item",
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
    )
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")
    priority: Priority = Field(default=Priority.LOW, description="Priority level")
    deadline: Optional[datetime] = Field(default=None, description="Optional deadline")

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        return _strip_title(v)

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: Any) -> Any:
        return _parse_priority(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DeadlineInput]) -> Optional[datetime]:
        return _parse_deadline(v)


# PUBLIC_INTERFACE
class TodoPatch(BaseModel):
    """
    Schema for a partial update.
    All fields are optional; only provided fields will be updated. An explicit
    null clears `description` or `deadline`.
    """

    model_config = ConfigDict(
        **_BASE_CONFIG,
        json_schema_extra={
            "example": {
                "completed": True,
                "deadline": None,
            }
        },
    )

    title: Optional[str] = Field(
        default=None,
        description="Short title for the todo item",
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
    )
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    priority: Optional[Priority] = Field(default=None, description="Priority level")
    deadline: Optional[datetime] = Field(default=None, description="Optional deadline")

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        return _strip_title(v)

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: Any) -> Any:
        return None if v is None else _parse_priority(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DeadlineInput]) -> Optional[datetime]:
        return _parse_deadline(v)


# PUBLIC_INTERFACE
class TitleUpdate(BaseModel):
    """Body of PUT /api/todos/{id}/title."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        return _strip_title(v)


# PUBLIC_INTERFACE
class PriorityUpdate(BaseModel):
    """Body of PUT /api/todos/{id}/priority."""

    priority: Priority

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: Any) -> Any:
        return _parse_priority(v)


# PUBLIC_INTERFACE
class DeadlineUpdate(BaseModel):
    """Body of PUT /api/todos/{id}/deadline. A null deadline removes it."""

    deadline: Optional[datetime] = None

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DeadlineInput]) -> Optional[datetime]:
        return _parse_deadline(v)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item (camelCase on the wire).
    """

    model_config = ConfigDict(
        **_BASE_CONFIG,
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "priority": "High",
                "deadline": "2025-02-01T00:00:00Z",
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": None,
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")
    priority: Priority = Field(..., description="Priority level")
    deadline: Optional[datetime] = Field(default=None, description="Deadline as an ISO8601 datetime")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


# PUBLIC_INTERFACE
class TodoStats(BaseModel):
    """Summary of a todo snapshot as computed by the task analyzer."""

    model_config = _BASE_CONFIG

    total: int = Field(..., description="Number of todos")
    completed: int = Field(..., description="Number of completed todos")
    completion_rate: float = Field(..., description="Completed share in percent (0..100)")
    priority_distribution: Dict[Priority, int] = Field(
        ..., description="Number of todos per priority; all priorities are present"
    )
    overdue: int = Field(..., description="Number of incomplete todos past their deadline")
    urgent: int = Field(..., description="Number of todos requiring immediate attention")
