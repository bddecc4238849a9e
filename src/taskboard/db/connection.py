# src/taskboard/db/connection.py

"""
SQLite connection helpers.

Stores open one short-lived connection per operation; every connection gets
the same configuration:
- rows as sqlite3.Row
- foreign keys enforced (SQLite leaves them off by default)
- WAL journal
- busy timeout so a concurrent writer waits instead of failing
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT = 5.0


def open_connection(
    db_path: str | Path, *, busy_timeout: float = DEFAULT_BUSY_TIMEOUT
) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), timeout=busy_timeout)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    with contextlib.suppress(sqlite3.DatabaseError):
        conn.execute("PRAGMA journal_mode=WAL")
    return conn


@contextlib.contextmanager
def transaction(
    db_path: str | Path, *, busy_timeout: float = DEFAULT_BUSY_TIMEOUT
) -> Iterator[sqlite3.Connection]:
    """
    Yield a connection; commit on success, roll back on any exception.

    The connection is always closed on exit.
    """
    conn = open_connection(db_path, busy_timeout=busy_timeout)
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def check_health(db_path: str | Path, *, busy_timeout: float = DEFAULT_BUSY_TIMEOUT) -> bool:
    """Return True if the database file opens and its schema can be read."""
    try:
        conn = open_connection(db_path, busy_timeout=busy_timeout)
    except sqlite3.Error:
        logger.warning("Health check: cannot open db=%s", db_path, exc_info=True)
        return False
    try:
        # sqlite_master forces a read of the file header; "SELECT 1" alone would not.
        row = conn.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
        return row is not None
    except sqlite3.Error:
        logger.warning("Health check failed db=%s", db_path, exc_info=True)
        return False
    finally:
        conn.close()
