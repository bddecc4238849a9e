# tests/conftest.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.core.state import AppState
from taskboard.models.user import User
from taskboard.store.task_store import TaskStore
from taskboard.store.user_store import UserStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the stores and AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        db_path=tmp_path / "tasks.db",
        log_dir=tmp_path,
        busy_timeout_seconds=1.0,
        max_title_length=200,
        max_description_length=2000,
    )


@pytest.fixture()
def users(settings: SimpleNamespace) -> UserStore:
    return UserStore(settings.db_path, settings)


@pytest.fixture()
def tasks(settings: SimpleNamespace, users: UserStore) -> TaskStore:
    return TaskStore(settings.db_path, settings)


@pytest.fixture()
def alice(users: UserStore) -> User:
    return users.create_user("alice", "argon2$hash-a", "alice@example.com")


@pytest.fixture()
def state(settings: SimpleNamespace, users: UserStore, tasks: TaskStore) -> AppState:
    """
    AppState wired with real SQLite stores: their correctness is part of
    what we want to test.
    """
    return AppState(settings=settings, users=users, tasks=tasks)


@pytest.fixture()
def restore_root_logging() -> Iterator[None]:
    """Drop and close the handlers setup_logging() installed on the root logger."""
    root = logging.getLogger()
    saved_level = root.level
    yield
    for h in list(root.handlers):
        # pytest's own capture handlers are subclasses; leave those alone
        if type(h) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(h)
            h.close()
    root.setLevel(saved_level)
    logging.captureWarnings(False)
