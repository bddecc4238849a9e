# src/taskboard/store/user_store.py

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, NoReturn

from ..db.connection import DEFAULT_BUSY_TIMEOUT, transaction
from ..db.migrate import apply_migrations
from ..errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidUsernameError,
    UserNotFoundError,
)
from ..models.user import User

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class UserStore:
    """
    SQLite user store over the `users` table.

    Constraint failures are translated into typed errors:
    - UNIQUE(username)        -> DuplicateUsernameError
    - UNIQUE(email)           -> DuplicateEmailError
    - CHECK(length(username)) -> InvalidUsernameError
    - NOT NULL(username)      -> InvalidUsernameError

    A blank email is stored as NULL.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path, settings: Any = None) -> None:
        self._db_path = Path(db_path)
        self._busy_timeout = float(
            getattr(settings, "busy_timeout_seconds", DEFAULT_BUSY_TIMEOUT)
        )
        apply_migrations(self._db_path, busy_timeout=self._busy_timeout)
        logger.info("UserStore ready db=%s total=%s", self._db_path, self.count_users())

    # ---- low-level helpers ----

    def _tx(self):
        return transaction(self._db_path, busy_timeout=self._busy_timeout)

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            username=str(row["username"]),
            password_hash=str(row["password_hash"]),
            email=row["email"],
            created_at=str(row["created_at"]),
            updated_at=str(row["updated_at"]),
        )

    @staticmethod
    def _clean_email(email: str | None) -> str | None:
        """Blank email means no email, so UNIQUE only applies when one is present."""
        if email is None:
            return None
        e = email.strip()
        return e or None

    @staticmethod
    def _raise_integrity(
        e: sqlite3.IntegrityError, *, username: str | None, email: str | None
    ) -> NoReturn:
        msg = str(e)
        if "UNIQUE constraint failed: users.username" in msg:
            raise DuplicateUsernameError(username or "") from e
        if "UNIQUE constraint failed: users.email" in msg:
            raise DuplicateEmailError(email or "") from e
        if (
            "NOT NULL constraint failed: users.username" in msg
            or "CHECK constraint failed" in msg
        ):
            raise InvalidUsernameError(username or "") from e
        raise e

    @staticmethod
    def _fetch_by_id(conn: sqlite3.Connection, user_id: int) -> User:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (int(user_id),)).fetchone()
        if row is None:
            raise UserNotFoundError(int(user_id))
        return UserStore._row_to_user(row)

    # ---- public API ----

    def count_users(self) -> int:
        with self._tx() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM users").fetchone()
            return int(n)

    def create_user(
        self, username: str, password_hash: str, email: str | None = None
    ) -> User:
        """
        Insert a new account.

        The hash is stored as given; hashing is the caller's job.
        """
        email = self._clean_email(email)
        try:
            with self._tx() as conn:
                cur = conn.execute(
                    "INSERT INTO users(username, password_hash, email) VALUES (?, ?, ?)",
                    (username, password_hash, email),
                )
                rowid = cur.lastrowid
                if rowid is None:
                    raise RuntimeError("SQLite did not return lastrowid for users insert")
                user = self._fetch_by_id(conn, int(rowid))
        except sqlite3.IntegrityError as e:
            self._raise_integrity(e, username=username, email=email)

        logger.debug("User created id=%s username=%s", user.id, user.username)
        return user

    def get_user(self, user_id: int) -> User:
        with self._tx() as conn:
            return self._fetch_by_id(conn, user_id)

    def find_by_username(self, username: str) -> User:
        with self._tx() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ?", (username,)
            ).fetchone()
        if row is None:
            raise UserNotFoundError(username)
        return self._row_to_user(row)

    def list_users(self) -> list[User]:
        with self._tx() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id ASC").fetchall()
        return [self._row_to_user(r) for r in rows]

    def update_user(
        self,
        user_id: int,
        *,
        username: str | None = None,
        email: str | None = _UNSET,
    ) -> User:
        """
        Change username and/or email. Pass email=None to clear it.

        Returns the updated user.
        """
        fields: list[str] = []
        params: list[Any] = []

        if username is not None:
            fields.append("username = ?")
            params.append(username)

        if email is not _UNSET:
            email = self._clean_email(email)
            fields.append("email = ?")
            params.append(email)

        try:
            with self._tx() as conn:
                if not fields:
                    return self._fetch_by_id(conn, user_id)
                fields.append("updated_at = datetime('now')")
                params.append(int(user_id))
                cur = conn.execute(
                    f"UPDATE users SET {', '.join(fields)} WHERE id = ?", params
                )
                if cur.rowcount == 0:
                    raise UserNotFoundError(int(user_id))
                user = self._fetch_by_id(conn, user_id)
        except sqlite3.IntegrityError as e:
            self._raise_integrity(
                e, username=username, email=None if email is _UNSET else email
            )

        logger.debug("User updated id=%s", user_id)
        return user

    def update_password_hash(self, user_id: int, password_hash: str) -> User:
        with self._tx() as conn:
            cur = conn.execute(
                "UPDATE users SET password_hash = ?, updated_at = datetime('now') WHERE id = ?",
                (password_hash, int(user_id)),
            )
            if cur.rowcount == 0:
                raise UserNotFoundError(int(user_id))
            return self._fetch_by_id(conn, user_id)

    def delete_user(self, user_id: int) -> int:
        """
        Delete a user and, through ON DELETE CASCADE, all of their tasks.

        Both happen in one transaction. Returns the number of tasks removed.
        """
        with self._tx() as conn:
            (n_tasks,) = conn.execute(
                "SELECT COUNT(*) FROM tasks WHERE user_id = ?", (int(user_id),)
            ).fetchone()
            cur = conn.execute("DELETE FROM users WHERE id = ?", (int(user_id),))
            if cur.rowcount == 0:
                raise UserNotFoundError(int(user_id))

        logger.info("User deleted id=%s tasks_removed=%s", user_id, n_tasks)
        return int(n_tasks)
