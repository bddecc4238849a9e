# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) for the stores.

Callers depend on these Protocols instead of the SQLite classes, which keeps
storage swappable and lets tests pass in-memory fakes.
"""

from typing import Any, Protocol

from ..models.task import Task, TaskPriority, TaskStatus
from ..models.user import User


class UserRepo(Protocol):
    def create_user(
            self, username: str, password_hash: str, email: str | None = None
    ) -> User: ...

    def get_user(self, user_id: int) -> User: ...
    def find_by_username(self, username: str) -> User: ...
    def list_users(self) -> list[User]: ...
    def delete_user(self, user_id: int) -> int: ...
    def count_users(self) -> int: ...


class TaskRepo(Protocol):
    def create_task(
            self,
            user_id: int,
            title: str,
            *,
            description: str | None = "",
            priority: TaskPriority | str | None = None,
            due_date: Any = None,
            status: TaskStatus | str | None = None,
    ) -> Task: ...

    def get_task(self, task_id: int) -> Task: ...

    def list_tasks_for_user(
            self,
            user_id: int,
            status: TaskStatus | str | None = None,
            *,
            priority: TaskPriority | str | None = None,
    ) -> list[Task]: ...

    def list_due_tasks(self, *, user_id: int | None = None, due_before: Any = None) -> list[Task]: ...
    def update_status(self, task_id: int, new_status: TaskStatus | str) -> Task: ...
    def delete_task(self, task_id: int) -> None: ...
    def count_tasks(self) -> int: ...
