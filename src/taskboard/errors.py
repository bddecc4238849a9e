# src/taskboard/errors.py

"""
Error kinds raised by the stores.

Every constraint the database (or the application layer) enforces maps to a
distinct, recoverable exception so callers never have to inspect raw
sqlite3.IntegrityError messages.
"""

from __future__ import annotations

from collections.abc import Iterable


class TaskboardError(Exception):
    """Base class for all taskboard errors."""


# ---- not found ----


class NotFoundError(TaskboardError):
    pass


class UserNotFoundError(NotFoundError):
    def __init__(self, key: int | str) -> None:
        self.key = key
        super().__init__(f"User not found: {key}")


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found with id: {task_id}")


# ---- uniqueness conflicts ----


class ConflictError(TaskboardError):
    pass


class DuplicateUsernameError(ConflictError):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Username already exists: {username}")


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email already in use: {email}")


# ---- validation ----


class ValidationError(TaskboardError):
    pass


class InvalidUsernameError(ValidationError):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Invalid username: {username!r}")


class InvalidEnumError(ValidationError):
    """A value outside one of the closed enumerations (status, priority)."""

    def __init__(self, field: str, value: object, allowed: Iterable[str]) -> None:
        self.field = field
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f"Invalid {field}: {value!r} (expected one of: {', '.join(self.allowed)})"
        )


class InvalidUserError(ValidationError):
    """Task refers to a user_id that does not exist."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"No such user for task: {user_id}")


class InvalidDueDateError(ValidationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid due date (expected ISO-8601): {value!r}")


# ---- schema ----


class MigrationError(TaskboardError):
    pass
