# src/taskboard/db/migrate.py

"""
Ordered SQL migrations.

Migration files live next to this module in migrations/ and are named
NNN_description.sql. They are applied in ascending NNN order, each inside
its own transaction, and recorded in schema_migrations so a second run
is a no-op. The scripts themselves only use IF NOT EXISTS statements, so a
database created before schema_migrations existed migrates cleanly too.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from ..errors import MigrationError
from .connection import DEFAULT_BUSY_TIMEOUT, open_connection

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).with_name("migrations")

_FILE_RE = re.compile(r"^(\d+)_([A-Za-z0-9_]+)\.sql$")


@dataclass(frozen=True, slots=True)
class Migration:
    version: int
    name: str
    path: Path

    def read_sql(self) -> str:
        try:
            return self.path.read_text("utf-8")
        except OSError as e:
            raise MigrationError(f"Cannot read migration {self.path}: {e}") from e


def discover_migrations(directory: str | Path | None = None) -> list[Migration]:
    """Return migrations found in directory, sorted by version."""
    root = Path(directory) if directory is not None else MIGRATIONS_DIR
    if not root.is_dir():
        raise MigrationError(f"Migrations directory not found: {root}")

    found: dict[int, Migration] = {}
    for path in sorted(root.iterdir()):
        m = _FILE_RE.match(path.name)
        if not m:
            if path.suffix == ".sql":
                logger.warning("Ignoring badly named migration file %s", path.name)
            continue
        version = int(m.group(1))
        if version in found:
            raise MigrationError(
                f"Duplicate migration version {version}: "
                f"{found[version].path.name} and {path.name}"
            )
        found[version] = Migration(version=version, name=m.group(2), path=path)

    return [found[v] for v in sorted(found)]


def _ensure_tracking_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY NOT NULL,
            name TEXT NOT NULL,
            applied_at TEXT NOT NULL DEFAULT (datetime('now'))
        )
        """
    )
    conn.commit()


def applied_versions(conn: sqlite3.Connection) -> set[int]:
    cur = conn.execute("SELECT version FROM schema_migrations")
    return {int(row["version"]) for row in cur.fetchall()}


def schema_status(
    db_path: str | Path,
    *,
    directory: str | Path | None = None,
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
) -> list[tuple[Migration, str | None]]:
    """Each known migration paired with its applied_at timestamp (None if pending)."""
    migrations = discover_migrations(directory)
    conn = open_connection(db_path, busy_timeout=busy_timeout)
    try:
        _ensure_tracking_table(conn)
        rows = conn.execute("SELECT version, applied_at FROM schema_migrations").fetchall()
    finally:
        conn.close()
    applied_at = {int(r["version"]): str(r["applied_at"]) for r in rows}
    return [(m, applied_at.get(m.version)) for m in migrations]


def apply_migrations(
    db_path: str | Path,
    *,
    directory: str | Path | None = None,
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
) -> list[int]:
    """
    Apply every pending migration to db_path.

    Returns the versions applied by this call (empty when up to date).
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    migrations = discover_migrations(directory)

    conn = open_connection(db_path, busy_timeout=busy_timeout)
    try:
        _ensure_tracking_table(conn)
        done = applied_versions(conn)
        applied: list[int] = []

        for mig in migrations:
            if mig.version in done:
                continue
            sql = mig.read_sql()
            try:
                # executescript commits anything pending, then runs the script
                # inside our explicit BEGIN; the bookkeeping row joins the same
                # transaction.
                conn.executescript(f"BEGIN;\n{sql}\n")
                conn.execute(
                    "INSERT INTO schema_migrations(version, name) VALUES (?, ?)",
                    (mig.version, mig.name),
                )
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise MigrationError(
                    f"Migration {mig.version:03d}_{mig.name} failed: {e}"
                ) from e

            applied.append(mig.version)
            logger.info("Applied migration %03d_%s db=%s", mig.version, mig.name, db_path)

        if not applied:
            logger.debug("Schema up to date db=%s", db_path)
        return applied
    finally:
        conn.close()
