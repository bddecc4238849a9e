# tests/test_migrations.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from taskboard.db.connection import check_health, open_connection, transaction
from taskboard.db.migrate import apply_migrations, discover_migrations, schema_status
from taskboard.errors import MigrationError


def _names(db: Path, kind: str) -> set[str]:
    conn = open_connection(db)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = ?", (kind,)).fetchall()
        return {r["name"] for r in rows}
    finally:
        conn.close()


def test_migrations_apply_in_order_and_are_idempotent(tmp_path: Path) -> None:
    db = tmp_path / "tasks.db"

    assert apply_migrations(db) == [1, 2]
    assert apply_migrations(db) == []

    assert {"users", "tasks", "schema_migrations"} <= _names(db, "table")
    assert {
        "idx_users_username",
        "idx_users_email",
        "idx_tasks_user_id",
        "idx_tasks_status",
        "idx_tasks_due_date",
        "idx_tasks_user_status",
    } <= _names(db, "index")

    status = schema_status(db)
    assert [(m.version, m.name) for m, _ in status] == [
        (1, "create_users_table"),
        (2, "create_tasks_table"),
    ]
    assert all(applied_at is not None for _, applied_at in status)


def test_packaged_migrations_are_sorted() -> None:
    versions = [m.version for m in discover_migrations()]
    assert versions == sorted(versions)
    assert versions[:2] == [1, 2]


def test_duplicate_migration_version_rejected(tmp_path: Path) -> None:
    mig_dir = tmp_path / "migrations"
    mig_dir.mkdir()
    (mig_dir / "001_a.sql").write_text("CREATE TABLE IF NOT EXISTS a (id INTEGER);", "utf-8")
    (mig_dir / "001_b.sql").write_text("CREATE TABLE IF NOT EXISTS b (id INTEGER);", "utf-8")

    with pytest.raises(MigrationError):
        discover_migrations(mig_dir)


def test_failed_migration_is_not_recorded(tmp_path: Path) -> None:
    mig_dir = tmp_path / "migrations"
    mig_dir.mkdir()
    (mig_dir / "001_ok.sql").write_text("CREATE TABLE IF NOT EXISTS ok (id INTEGER);", "utf-8")
    (mig_dir / "002_broken.sql").write_text("CREATE TABLE broken (;", "utf-8")
    db = tmp_path / "x.db"

    with pytest.raises(MigrationError):
        apply_migrations(db, directory=mig_dir)

    pending = {m.version: applied_at for m, applied_at in schema_status(db, directory=mig_dir)}
    assert pending[1] is not None
    assert pending[2] is None


def test_health_check(tmp_path: Path) -> None:
    db = tmp_path / "tasks.db"
    apply_migrations(db)
    assert check_health(db) is True
    # a directory cannot be opened as a database
    assert check_health(tmp_path) is False


def test_raw_insert_defaults_status_and_priority(tmp_path: Path) -> None:
    db = tmp_path / "tasks.db"
    apply_migrations(db)

    with transaction(db) as conn:
        conn.execute("INSERT INTO users(username, password_hash) VALUES ('bob', 'h')")
        conn.execute("INSERT INTO tasks(title, user_id) VALUES ('write report', 1)")
        row = conn.execute("SELECT * FROM tasks WHERE id = 1").fetchone()

    assert row["status"] == "todo"
    assert row["priority"] == "medium"
    assert row["description"] == ""
    assert row["due_date"] is None
    assert row["created_at"]
    assert row["updated_at"]


def test_foreign_keys_enforced_on_every_connection(tmp_path: Path) -> None:
    db = tmp_path / "tasks.db"
    apply_migrations(db)

    with pytest.raises(sqlite3.IntegrityError):
        with transaction(db) as conn:
            conn.execute("INSERT INTO tasks(title, user_id) VALUES ('orphan', 999)")


def test_due_date_index_only_returns_set_rows(tmp_path: Path) -> None:
    db = tmp_path / "tasks.db"
    apply_migrations(db)

    with transaction(db) as conn:
        conn.execute("INSERT INTO users(username, password_hash) VALUES ('bob', 'h')")
        conn.execute("INSERT INTO tasks(title, user_id, due_date) VALUES ('a', 1, '2026-03-01')")
        conn.execute("INSERT INTO tasks(title, user_id) VALUES ('b', 1)")
        conn.execute("INSERT INTO tasks(title, user_id, due_date) VALUES ('c', 1, '2026-01-15')")

    with transaction(db) as conn:
        rows = conn.execute(
            "SELECT title FROM tasks INDEXED BY idx_tasks_due_date "
            "WHERE due_date IS NOT NULL ORDER BY due_date"
        ).fetchall()

    assert [r["title"] for r in rows] == ["c", "a"]
