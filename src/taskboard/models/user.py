# src/taskboard/models/user.py

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class UserPublic:
    """User data safe to show: no password hash."""

    id: int
    username: str
    email: str | None
    created_at: str


@dataclass(frozen=True, slots=True)
class User:
    id: int
    username: str
    password_hash: str = field(repr=False)
    email: str | None
    created_at: str
    updated_at: str

    def to_public(self) -> UserPublic:
        return UserPublic(
            id=self.id,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
        )
