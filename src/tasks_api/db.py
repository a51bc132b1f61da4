from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generator, List, Optional

from .models import TaskEntity
from .repositories import Repository, StoreError, new_task_id, utc_now
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    seq: str = "seq"
    id: str = "id"
    text: str = "text"
    completed: str = "completed"
    created_at: str = "created_at"


_COLS = _Cols()


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Every sqlite3 failure is re-raised as StoreError.
    """

    backend_name = "sqlite"

    def __init__(self, db_path: str) -> None:
        try:
            os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        except OSError as exc:
            raise StoreError(str(exc)) from exc
        self._db_path = db_path
        self._init_db()
        logger.info("Opened SQLite task store at %s", db_path)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("SQLite task store failure: %s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.seq} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.id} TEXT NOT NULL UNIQUE,
                    {_COLS.text} TEXT NOT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row[_COLS.id]),
            "text": str(row[_COLS.text]),
            "completed": bool(row[_COLS.completed]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
        }

    def _select(self, conn: sqlite3.Connection, task_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)
        ).fetchone()

    def create(self, data: TaskCreate) -> TaskEntity:
        now = utc_now()
        task_id = new_task_id()
        with self._conn() as conn:
            # Hold the write lock from the clamp read through the insert.
            conn.execute("BEGIN IMMEDIATE")
            last = conn.execute(f"SELECT MAX({_COLS.created_at}) AS last FROM {_COLS.table}").fetchone()
            if last is not None and last["last"] is not None:
                now = max(now, datetime.fromisoformat(last["last"]))
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.text}, {_COLS.completed}, {_COLS.created_at})
                VALUES (?, ?, ?, ?)
                """,
                (task_id, data.text, 1 if data.completed else 0, now.isoformat(timespec="microseconds")),
            )
            row = self._select(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select(conn, task_id)
            return self._row_to_entity(row) if row else None

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        changes = data.changes()
        assignments: List[str] = []
        params: List[Any] = []
        if "text" in changes:
            assignments.append(f"{_COLS.text} = ?")
            params.append(changes["text"])
        if "completed" in changes:
            assignments.append(f"{_COLS.completed} = ?")
            params.append(1 if changes["completed"] else 0)

        with self._conn() as conn:
            if assignments:
                cur = conn.execute(
                    f"UPDATE {_COLS.table} SET {', '.join(assignments)} WHERE {_COLS.id} = ?",
                    [*params, task_id],
                )
                if cur.rowcount == 0:
                    return None
            row = self._select(conn, task_id)
            return self._row_to_entity(row) if row else None

    def delete(self, task_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount > 0

    def list(self) -> List[TaskEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.created_at} DESC, {_COLS.seq} DESC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]
