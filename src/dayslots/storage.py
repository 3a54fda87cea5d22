from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, Protocol

from .models import Task

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY,
    date TEXT NOT NULL,
    time_slot INTEGER NOT NULL,
    title TEXT NOT NULL,
    duration INTEGER NOT NULL,
    done BOOLEAN NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_tasks_date ON tasks(date);
"""


class StoreError(RuntimeError):
    """Raised when the task database cannot complete an operation."""


class TaskGateway(Protocol):
    def save(self, day: date, slot: int, title: str, duration: int) -> int: ...

    def list_for_date(self, day: date) -> list[Task]: ...

    def set_done(self, task_id: int, done: bool) -> None: ...

    def delete(self, task_id: int) -> None: ...


def _parse_created_at(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:  # pragma: no cover - defensive parsing
            return None
    return None


class TaskStore:
    """Persists tasks in a single-connection SQLite database."""

    def __init__(self, db_file: Path) -> None:
        self._db_file = Path(db_file).expanduser()
        try:
            self._db_file.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._db_file, timeout=30)
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"failed to open database {self._db_file}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        try:
            with self._transaction() as conn:
                conn.executescript(SCHEMA)
        except StoreError:
            self._conn.close()
            raise
        log.info("Opened task database at %s", self._db_file)

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            with self._conn:
                yield self._conn
        except sqlite3.Error as exc:
            log.error("Task database error: %s", exc)
            raise StoreError(str(exc)) from exc

    def close(self) -> None:
        self._conn.close()

    def save(self, day: date, slot: int, title: str, duration: int) -> int:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO tasks (date, time_slot, title, duration, done)
                VALUES (?, ?, ?, ?, ?)
                """,
                (day.isoformat(), slot, title, duration, False),
            )
        task_id = int(cursor.lastrowid)
        log.debug("Saved task %s at %s slot %s", task_id, day.isoformat(), slot)
        return task_id

    def list_for_date(self, day: date) -> list[Task]:
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT id, time_slot, title, duration, done, created_at
                FROM tasks
                WHERE date = ?
                ORDER BY time_slot, id
                """,
                (day.isoformat(),),
            ).fetchall()
        return [
            Task(
                task_id=int(row["id"]),
                day=day,
                slot=int(row["time_slot"]),
                title=str(row["title"]),
                duration=int(row["duration"]),
                done=bool(row["done"]),
                created_at=_parse_created_at(row["created_at"]),
            )
            for row in rows
        ]

    def set_done(self, task_id: int, done: bool) -> None:
        with self._transaction() as conn:
            conn.execute("UPDATE tasks SET done = ? WHERE id = ?", (done, task_id))

    def delete(self, task_id: int) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        log.debug("Deleted task %s", task_id)
