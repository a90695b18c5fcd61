from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .models import Priority, TodoEntity
from .repositories import ListQuery, Repository, apply_patch
from .schemas import TodoCreate, TodoPatch


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    priority: str = "priority"
    deadline: str = "deadline"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


def _dt_to_text(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _text_to_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value is not None else None


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository. Priorities are stored as their rank and
    timestamps as ISO8601 text with a UTC offset.
    """

    name = "sqlite"

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.priority} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.deadline} TEXT NULL,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_completed ON {_COLS.table}({_COLS.completed})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_priority ON {_COLS.table}({_COLS.priority})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "description": row[_COLS.description],
            "completed": bool(row[_COLS.completed]),
            "priority": Priority.from_rank(int(row[_COLS.priority])),
            "deadline": _text_to_dt(row[_COLS.deadline]),
            "created_at": _text_to_dt(row[_COLS.created_at]),  # type: ignore[typeddict-item]
            "updated_at": _text_to_dt(row[_COLS.updated_at]),
        }

    def _fetch(self, conn: sqlite3.Connection, todo_id: int) -> Optional[TodoEntity]:
        row = conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,)).fetchone()
        return self._row_to_entity(row) if row else None

    def create(self, data: TodoCreate, created_at: datetime) -> TodoEntity:
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.description}, {_COLS.completed},
                    {_COLS.priority}, {_COLS.deadline}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, 0, ?, ?, ?, NULL)
                """,
                (
                    data.title,
                    data.description,
                    data.priority.rank,
                    _dt_to_text(data.deadline),
                    _dt_to_text(created_at),
                ),
            )
            entity = self._fetch(conn, int(cur.lastrowid))
            assert entity is not None
            return entity

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        with self._conn() as conn:
            return self._fetch(conn, todo_id)

    def update(self, todo_id: int, changes: TodoPatch, updated_at: datetime) -> Optional[TodoEntity]:
        with self._conn() as conn:
            current = self._fetch(conn, todo_id)
            if current is None:
                return None
            updated = apply_patch(current, changes, updated_at)
            conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.title} = ?, {_COLS.description} = ?, {_COLS.completed} = ?,
                    {_COLS.priority} = ?, {_COLS.deadline} = ?, {_COLS.updated_at} = ?
                WHERE {_COLS.id} = ?
                """,
                (
                    updated["title"],
                    updated["description"],
                    1 if updated["completed"] else 0,
                    updated["priority"].rank,
                    _dt_to_text(updated["deadline"]),
                    _dt_to_text(updated["updated_at"]),
                    todo_id,
                ),
            )
            return self._fetch(conn, todo_id)

    def delete(self, todo_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,))
            return cur.rowcount > 0

    def list(self, query: Optional[ListQuery] = None) -> List[TodoEntity]:
        q = query or ListQuery()
        clauses = []
        params: list = []

        if q.completed is not None:
            clauses.append(f"{_COLS.completed} = ?")
            params.append(1 if q.completed else 0)

        if q.search:
            # Substring search on title and description
            clauses.append(f"({_COLS.title} LIKE ? OR {_COLS.description} LIKE ?)")
            like = f"%{q.search}%"
            params.extend([like, like])

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_COLS.table} {where_sql}", params).fetchall()
            return [self._row_to_entity(r) for r in rows]
