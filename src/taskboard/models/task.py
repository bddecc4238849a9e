# src/taskboard/models/task.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum

from ..errors import InvalidDueDateError, InvalidEnumError

logger = logging.getLogger(__name__)


class _ClosedEnum(StrEnum):
    """
    StrEnum with strict parsing for writes and lenient decoding for reads.

    The database column is free text, so every write goes through parse();
    rows are decoded with from_db() which falls back to the default.
    """

    @classmethod
    def field_name(cls) -> str:
        raise NotImplementedError

    @classmethod
    def default(cls):
        raise NotImplementedError

    @classmethod
    def parse(cls, raw: object):
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            key = raw.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        raise InvalidEnumError(cls.field_name(), raw, [m.value for m in cls])

    @classmethod
    def from_db(cls, raw: str | None):
        if not raw:
            return cls.default()
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown %s in db: %r, using %s", cls.field_name(), raw, cls.default())
            return cls.default()


class TaskStatus(_ClosedEnum):
    """Task progress: todo -> in_progress -> done."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def field_name(cls) -> str:
        return "status"

    @classmethod
    def default(cls) -> TaskStatus:
        return cls.TODO


class TaskPriority(_ClosedEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def field_name(cls) -> str:
        return "priority"

    @classmethod
    def default(cls) -> TaskPriority:
        return cls.MEDIUM

    @property
    def rank(self) -> int:
        """0 for low up to 3 for urgent."""
        return list(TaskPriority).index(self)


def normalize_due_date(value: date | datetime | str | None) -> str | None:
    """
    Return the ISO-8601 text stored in tasks.due_date.

    Accepts date/datetime objects or ISO-8601 strings (date or datetime).
    None means "no deadline".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise InvalidDueDateError(value)
        try:
            if len(s) == 10:
                return date.fromisoformat(s).isoformat()
            return datetime.fromisoformat(s).isoformat()
        except ValueError as e:
            raise InvalidDueDateError(value) from e
    raise InvalidDueDateError(value)


@dataclass(slots=True)
class Task:
    id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: str | None
    user_id: int
    created_at: str
    updated_at: str
