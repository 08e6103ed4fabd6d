from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional, Sequence

from .errors import StorageUnavailableError, TaskNotFoundError, TaskValidationError
from .models import TaskEntity
from .repositories import Clock, Page, PageRequest, TaskStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    status: str = "status"
    priority: str = "priority"
    due_date: str = "due_date"
    created_by: str = "created_by"
    created_on: str = "created_on"
    modified_by: str = "modified_by"
    modified_on: str = "modified_on"


_COLS = _Cols()

# Every column the UPDATE path may overwrite; created_on is fixed at insert.
_MUTABLE = (
    _COLS.title,
    _COLS.description,
    _COLS.status,
    _COLS.priority,
    _COLS.due_date,
    _COLS.created_by,
    _COLS.modified_by,
    _COLS.modified_on,
)


def _dt_to_text(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="microseconds") if value else None


def _text_to_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SQLiteTaskStore(TaskStore):
    """
    SQLite-backed task store. Each operation runs on its own connection and
    commits (or rolls back) as a single transaction.
    """

    def __init__(self, db_path: str, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise StorageUnavailableError(f"Cannot open task database: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise TaskValidationError(str(e)) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageUnavailableError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
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
                    {_COLS.status} TEXT NOT NULL,
                    {_COLS.priority} TEXT NULL,
                    {_COLS.due_date} TEXT NULL,
                    {_COLS.created_by} TEXT NULL,
                    {_COLS.created_on} TEXT NOT NULL,
                    {_COLS.modified_by} TEXT NULL,
                    {_COLS.modified_on} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_status ON {_COLS.table}({_COLS.status})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_modified_on ON {_COLS.table}({_COLS.modified_on})"
            )
        logger.debug("Task schema ready in %s", self._db_path)

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": row[_COLS.title],
            "description": row[_COLS.description],
            "status": row[_COLS.status],
            "priority": row[_COLS.priority],
            "due_date": _text_to_dt(row[_COLS.due_date]),
            "created_by": row[_COLS.created_by],
            "created_on": _text_to_dt(row[_COLS.created_on]),
            "modified_by": row[_COLS.modified_by],
            "modified_on": _text_to_dt(row[_COLS.modified_on]),
        }

    def _select_one(self, conn: sqlite3.Connection, task_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)
        ).fetchone()

    def save(self, task: TaskEntity) -> TaskEntity:
        now = _dt_to_text(self._now())
        values = {
            _COLS.title: task["title"],
            _COLS.description: task["description"],
            _COLS.status: task["status"],
            _COLS.priority: task["priority"],
            _COLS.due_date: _dt_to_text(task["due_date"]),
            _COLS.created_by: task["created_by"],
            _COLS.modified_by: task["modified_by"],
            _COLS.modified_on: now,
        }
        with self._conn() as conn:
            task_id = task["id"]
            if task_id is not None:
                assignments = ", ".join(f"{col} = ?" for col in _MUTABLE)
                cur = conn.execute(
                    f"UPDATE {_COLS.table} SET {assignments} WHERE {_COLS.id} = ?",
                    [*(values[col] for col in _MUTABLE), task_id],
                )
                if cur.rowcount == 0:
                    raise TaskNotFoundError(task_id)
            else:
                values[_COLS.created_on] = now
                columns = ", ".join(values)
                placeholders = ", ".join("?" for _ in values)
                cur = conn.execute(
                    f"INSERT INTO {_COLS.table} ({columns}) VALUES ({placeholders})",
                    list(values.values()),
                )
                task_id = cur.lastrowid
            row = self._select_one(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def find_by_id(self, task_id: int) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select_one(conn, task_id)
            return self._row_to_entity(row) if row else None

    def delete_by_id(self, task_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount > 0

    def find_all(self, request: PageRequest) -> Page:
        return self._page("", [], request)

    def find_by_status(self, status: str, request: PageRequest) -> Page:
        return self._page(f"WHERE {_COLS.status} = ?", [status], request)

    def _page(self, where_sql: str, params: Sequence[object], request: PageRequest) -> Page:
        with self._conn() as conn:
            count_row = conn.execute(
                f"SELECT COUNT(*) as cnt FROM {_COLS.table} {where_sql}", list(params)
            ).fetchone()
            total = int(count_row["cnt"]) if count_row else 0

            rows: List[sqlite3.Row] = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                {where_sql}
                ORDER BY {_COLS.modified_on} DESC, {_COLS.id} DESC
                LIMIT ? OFFSET ?
                """,
                [*params, request.size, request.offset],
            ).fetchall()
        return Page(
            items=[self._row_to_entity(r) for r in rows],
            page=request.page,
            size=request.size,
            total_elements=total,
        )
