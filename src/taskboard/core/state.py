# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import TaskRepo, UserRepo


@dataclass
class AppState:
    # Settings object (real Settings or a test double with the same attributes).
    settings: object

    # None when the command only touches the schema (migrate, health, help).
    users: UserRepo | None = None
    tasks: TaskRepo | None = None
