# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- applies migrations and wires the SQLite stores into AppState (unless the
  command works on the schema itself).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..store.task_store import TaskStore
from ..store.user_store import UserStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, open_stores: bool = True) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings(). With open_stores=False
    the stores are not built, so the database is left exactly as found.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if not open_stores:
        return AppState(settings=settings)

    # UserStore applies migrations in order, so 002 (tasks) finds users in place.
    users = UserStore(settings.db_path, settings)
    tasks = TaskStore(settings.db_path, settings)

    logger.debug("State ready db=%s", settings.db_path)
    return AppState(settings=settings, users=users, tasks=tasks)
