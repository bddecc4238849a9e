# src/taskboard/store/task_store.py

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

from ..db.connection import DEFAULT_BUSY_TIMEOUT, transaction
from ..db.migrate import apply_migrations
from ..errors import InvalidUserError, TaskNotFoundError, ValidationError
from ..models.task import Task, TaskPriority, TaskStatus, normalize_due_date

logger = logging.getLogger(__name__)

_UNSET: Any = object()

DueDate = date | datetime | str | None


class TaskStore:
    """
    SQLite task store over the `tasks` table.

    The schema accepts any text for status/priority, so every write parses
    them through TaskStatus/TaskPriority first; an invalid value raises
    InvalidEnumError and nothing is written.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path, settings: Any = None) -> None:
        self._db_path = Path(db_path)
        self._busy_timeout = float(
            getattr(settings, "busy_timeout_seconds", DEFAULT_BUSY_TIMEOUT)
        )
        self._max_title = int(getattr(settings, "max_title_length", 200))
        self._max_description = int(getattr(settings, "max_description_length", 2000))
        apply_migrations(self._db_path, busy_timeout=self._busy_timeout)
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    # ---- low-level helpers ----

    def _tx(self):
        return transaction(self._db_path, busy_timeout=self._busy_timeout)

    def _clean_title(self, title: str) -> str:
        t = (title or "").strip()
        if not t:
            raise ValidationError("title is required")
        if len(t) > self._max_title:
            raise ValidationError(f"title longer than {self._max_title} characters")
        return t

    def _clean_description(self, description: str | None) -> str:
        d = description or ""
        if len(d) > self._max_description:
            raise ValidationError(
                f"description longer than {self._max_description} characters"
            )
        return d

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"]),
            description=str(row["description"] or ""),
            status=TaskStatus.from_db(row["status"]),
            priority=TaskPriority.from_db(row["priority"]),
            due_date=row["due_date"],
            user_id=int(row["user_id"]),
            created_at=str(row["created_at"]),
            updated_at=str(row["updated_at"]),
        )

    @staticmethod
    def _fetch_by_id(conn: sqlite3.Connection, task_id: int) -> Task:
        row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
        if row is None:
            raise TaskNotFoundError(int(task_id))
        return TaskStore._row_to_task(row)

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._tx() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def create_task(
        self,
        user_id: int,
        title: str,
        *,
        description: str | None = "",
        priority: TaskPriority | str | None = None,
        due_date: DueDate = None,
        status: TaskStatus | str | None = None,
    ) -> Task:
        clean_title = self._clean_title(title)
        clean_description = self._clean_description(description)
        prio = TaskPriority.parse(priority) if priority is not None else TaskPriority.default()
        st = TaskStatus.parse(status) if status is not None else TaskStatus.default()
        due = normalize_due_date(due_date)

        try:
            with self._tx() as conn:
                cur = conn.execute(
                    """
                    INSERT INTO tasks(title, description, status, priority, due_date, user_id)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (clean_title, clean_description, st.value, prio.value, due, int(user_id)),
                )
                rowid = cur.lastrowid
                if rowid is None:
                    raise RuntimeError("SQLite did not return lastrowid for tasks insert")
                task = self._fetch_by_id(conn, int(rowid))
        except sqlite3.IntegrityError as e:
            if "FOREIGN KEY constraint failed" in str(e):
                raise InvalidUserError(int(user_id)) from e
            raise

        logger.debug(
            "Task added id=%s user_id=%s status=%s priority=%s due_date=%s",
            task.id,
            task.user_id,
            task.status.value,
            task.priority.value,
            task.due_date,
        )
        return task

    def get_task(self, task_id: int) -> Task:
        with self._tx() as conn:
            return self._fetch_by_id(conn, task_id)

    def list_tasks_for_user(
        self,
        user_id: int,
        status: TaskStatus | str | None = None,
        *,
        priority: TaskPriority | str | None = None,
    ) -> list[Task]:
        """
        Tasks owned by user_id, newest first.

        Optional status/priority filters are validated like writes.
        """
        where = ["user_id = ?"]
        params: list[Any] = [int(user_id)]

        if status is not None:
            where.append("status = ?")
            params.append(TaskStatus.parse(status).value)

        if priority is not None:
            where.append("priority = ?")
            params.append(TaskPriority.parse(priority).value)

        with self._tx() as conn:
            rows = conn.execute(
                f"""
                SELECT *
                FROM tasks
                WHERE {' AND '.join(where)}
                ORDER BY created_at DESC, id DESC
                """,
                params,
            ).fetchall()
        return [self._row_to_task(r) for r in rows]

    def list_due_tasks(
        self,
        *,
        user_id: int | None = None,
        due_before: DueDate = None,
    ) -> list[Task]:
        """
        Tasks that have a due date, soonest first.

        Reads through the partial idx_tasks_due_date index, so rows without a
        due date never appear. A date-only due_before includes every deadline
        on that day; a datetime bound is inclusive to the second.
        """
        where = ["due_date IS NOT NULL"]
        params: list[Any] = []

        if user_id is not None:
            where.append("user_id = ?")
            params.append(int(user_id))

        limit = normalize_due_date(due_before)
        if limit is not None and len(limit) == 10:
            # a bare date covers the whole day, including timed deadlines on it
            where.append("due_date < ?")
            params.append((date.fromisoformat(limit) + timedelta(days=1)).isoformat())
        elif limit is not None:
            where.append("due_date <= ?")
            params.append(limit)

        with self._tx() as conn:
            rows = conn.execute(
                f"""
                SELECT *
                FROM tasks INDEXED BY idx_tasks_due_date
                WHERE {' AND '.join(where)}
                ORDER BY due_date ASC, id ASC
                """,
                params,
            ).fetchall()
        return [self._row_to_task(r) for r in rows]

    def update_status(self, task_id: int, new_status: TaskStatus | str) -> Task:
        st = TaskStatus.parse(new_status)
        with self._tx() as conn:
            cur = conn.execute(
                "UPDATE tasks SET status = ?, updated_at = datetime('now') WHERE id = ?",
                (st.value, int(task_id)),
            )
            if cur.rowcount == 0:
                raise TaskNotFoundError(int(task_id))
            task = self._fetch_by_id(conn, task_id)

        logger.debug("Task status id=%s -> %s", task_id, st.value)
        return task

    def update_task(
        self,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | str | None = None,
        priority: TaskPriority | str | None = None,
        due_date: DueDate = _UNSET,
    ) -> Task:
        """
        Partial update: only the given fields change. Pass due_date=None to
        clear the deadline.
        """
        fields: list[str] = []
        params: list[Any] = []

        if title is not None:
            fields.append("title = ?")
            params.append(self._clean_title(title))

        if description is not None:
            fields.append("description = ?")
            params.append(self._clean_description(description))

        if status is not None:
            fields.append("status = ?")
            params.append(TaskStatus.parse(status).value)

        if priority is not None:
            fields.append("priority = ?")
            params.append(TaskPriority.parse(priority).value)

        if due_date is not _UNSET:
            fields.append("due_date = ?")
            params.append(normalize_due_date(due_date))

        with self._tx() as conn:
            if not fields:
                return self._fetch_by_id(conn, task_id)

            fields.append("updated_at = datetime('now')")
            params.append(int(task_id))
            cur = conn.execute(f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?", params)
            if cur.rowcount == 0:
                raise TaskNotFoundError(int(task_id))
            return self._fetch_by_id(conn, task_id)

    def delete_task(self, task_id: int) -> None:
        with self._tx() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            if cur.rowcount == 0:
                raise TaskNotFoundError(int(task_id))
        logger.debug("Task deleted id=%s", task_id)

    def count_tasks_for_user(self, user_id: int) -> int:
        with self._tx() as conn:
            (n,) = conn.execute(
                "SELECT COUNT(*) FROM tasks WHERE user_id = ?", (int(user_id),)
            ).fetchone()
            return int(n)

    def belongs_to_user(self, task_id: int, user_id: int) -> bool:
        """True if task_id exists and is owned by user_id."""
        with self._tx() as conn:
            row = conn.execute(
                "SELECT 1 FROM tasks WHERE id = ? AND user_id = ?",
                (int(task_id), int(user_id)),
            ).fetchone()
            return row is not None
