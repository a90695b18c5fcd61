from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..schemas import (
    DeadlineUpdate,
    PriorityUpdate,
    TitleUpdate,
    TodoCreate,
    TodoOut,
    TodoPatch,
    TodoReplace,
    TodoStats,
)
from ..services import TodoService, get_todo_service

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
)

_NOT_FOUND = {404: {"description": "Todo not found"}}


def _out(items) -> List[TodoOut]:
    return [TodoOut(**it) for it in items]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description=(
        "List todos ordered by priority (Critical first), then deadline (earliest first, "
        "todos without a deadline last), then creation time (newest first).\n\n"
        "Query parameters:\n"
        "- completed: filter by completion status\n"
        "- q: search query for title/description (substring match)"
    ),
)
def list_todos(
    completed: Optional[bool] = Query(None, description="Filter by completion status"),
    q: Optional[str] = Query(None, description="Search text for title/description"),
    service: TodoService = Depends(get_todo_service),
) -> List[TodoOut]:
    """
    List todos in canonical order.
    """
    return _out(service.list_todos(completed=completed, search=q.strip() if q else None))


# PUBLIC_INTERFACE
@router.get(
    "/overdue",
    response_model=List[TodoOut],
    summary="Overdue Todos",
    description="Todos whose deadline has passed. Completed ones are only listed with includeCompleted=true.",
)
def list_overdue(
    include_completed: bool = Query(
        False, alias="includeCompleted", description="Also list completed todos past their deadline"
    ),
    service: TodoService = Depends(get_todo_service),
) -> List[TodoOut]:
    return _out(service.overdue(include_completed))


# PUBLIC_INTERFACE
@router.get(
    "/urgent",
    response_model=List[TodoOut],
    summary="Urgent Todos",
    description=(
        "Incomplete todos that are High/Critical or due within two days, ordered by priority "
        "then deadline."
    ),
)
def list_urgent(service: TodoService = Depends(get_todo_service)) -> List[TodoOut]:
    return _out(service.urgent())


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=TodoStats,
    summary="Todo Statistics",
    description="Completion rate, priority distribution, and overdue/urgent counts.",
)
def get_stats(service: TodoService = Depends(get_todo_service)) -> TodoStats:
    return service.statistics()


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={200: {"description": "Todo found"}, **_NOT_FOUND},
)
def get_todo(todo_id: int, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Retrieve a single Todo item by its ID.
    """
    return TodoOut(**service.get_todo(todo_id))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new, incomplete Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Validation error"},
    },
)
def create_todo(payload: TodoCreate, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Create a new Todo.
    """
    return TodoOut(**service.create_todo(payload))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Replace Todo",
    description=(
        "Replace an existing Todo item. Any fields omitted will be set to their default/null "
        "equivalent as per the schema. An id in the body must match the path."
    ),
    responses={
        200: {"description": "Todo updated"},
        400: {"description": "Validation error or id mismatch"},
        **_NOT_FOUND,
    },
)
def put_todo(todo_id: int, payload: TodoReplace, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Full update of a Todo item.
    """
    if payload.id is not None and payload.id != todo_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Id mismatch")
    return TodoOut(**service.replace_todo(todo_id, payload))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Partially update fields of a Todo item.",
    responses={200: {"description": "Todo updated"}, **_NOT_FOUND},
)
def patch_todo(todo_id: int, payload: TodoPatch, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Partial update of a Todo item.
    """
    return TodoOut(**service.patch_todo(todo_id, payload))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}/title",
    response_model=TodoOut,
    summary="Update Todo Title",
    responses={200: {"description": "Title updated"}, **_NOT_FOUND},
)
def put_title(todo_id: int, payload: TitleUpdate, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    return TodoOut(**service.update_title(todo_id, payload.title))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}/priority",
    response_model=TodoOut,
    summary="Update Todo Priority",
    responses={200: {"description": "Priority updated"}, **_NOT_FOUND},
)
def put_priority(
    todo_id: int, payload: PriorityUpdate, service: TodoService = Depends(get_todo_service)
) -> TodoOut:
    return TodoOut(**service.update_priority(todo_id, payload.priority))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}/deadline",
    response_model=TodoOut,
    summary="Update Todo Deadline",
    description="Set or clear (null) the deadline of a Todo item.",
    responses={200: {"description": "Deadline updated"}, **_NOT_FOUND},
)
def put_deadline(
    todo_id: int, payload: DeadlineUpdate, service: TodoService = Depends(get_todo_service)
) -> TodoOut:
    return TodoOut(**service.update_deadline(todo_id, payload.deadline))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={204: {"description": "Todo deleted"}, **_NOT_FOUND},
)
def delete_todo(todo_id: int, service: TodoService = Depends(get_todo_service)) -> None:
    """
    Delete a Todo. Returns 204 on success, 404 if not found.
    """
    service.delete_todo(todo_id)
    return None
