# tests/test_commands.py

from __future__ import annotations

import pytest

from taskboard.cli.commands import CommandRegistry, UsageError, registry
from taskboard.core.state import AppState
from taskboard.errors import DuplicateUsernameError, InvalidEnumError


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def h(state, args):
        seen.append(args)
        return "ok"

    reg.register("a", h, "a", aliases=["alpha"])

    assert reg.handle(state, ["a", "x"]) == "ok"
    assert reg.handle(state, ["ALPHA"]) == "ok"
    assert seen == [["x"], []]
    assert "a - a" in reg.build_help()


def test_command_registry_unknown_and_empty(state: AppState) -> None:
    reg = CommandRegistry()
    with pytest.raises(UsageError):
        reg.handle(state, [])
    with pytest.raises(UsageError, match="Unknown command"):
        reg.handle(state, ["nope"])


def test_user_and_task_commands_end_to_end(state: AppState) -> None:
    out = registry.handle(state, ["user", "add", "alice", "hash", "alice@example.com"])
    assert "alice" in out
    user_id = state.users.find_by_username("alice").id

    out = registry.handle(
        state, ["task", "add", str(user_id), "Buy", "milk", "priority=high", "due=2026-11-02"]
    )
    assert "Buy milk" in out
    assert "(high)" in out

    out = registry.handle(state, ["task", "list", str(user_id)])
    assert "[todo]" in out

    task_id = state.tasks.list_tasks_for_user(user_id)[0].id
    out = registry.handle(state, ["task", "status", str(task_id), "done"])
    assert "[done]" in out

    assert "due 2026-11-02" in registry.handle(state, ["task", "due"])
    assert registry.handle(state, ["task", "list", str(user_id), "todo"]) == "No tasks."

    out = registry.handle(state, ["user", "delete", str(user_id)])
    assert "1 task(s)" in out
    assert state.tasks.count_tasks() == 0


def test_commands_surface_domain_errors(state: AppState) -> None:
    registry.handle(state, ["user", "add", "alice", "hash"])
    with pytest.raises(DuplicateUsernameError):
        registry.handle(state, ["user", "add", "alice", "other"])

    user_id = state.users.find_by_username("alice").id
    with pytest.raises(InvalidEnumError):
        registry.handle(state, ["task", "add", str(user_id), "x", "priority=whenever"])
    with pytest.raises(UsageError):
        registry.handle(state, ["task", "status", "abc", "done"])
    with pytest.raises(UsageError):
        registry.handle(state, ["user"])


def test_migrate_and_health_commands(state: AppState) -> None:
    out = registry.handle(state, ["migrate"])
    assert "Schema up to date." in out
    assert "001_create_users_table" in out
    assert "002_create_tasks_table" in out
    assert registry.handle(state, ["health"]).startswith("ok")


def test_migrate_reports_newly_applied_on_fresh_database(settings) -> None:
    bare = AppState(settings=settings)

    out = registry.handle(bare, ["migrate"])
    assert out.startswith("Newly applied: 001, 002")
    assert "pending" not in out

    assert registry.handle(bare, ["migrate"]).startswith("Schema up to date.")


def test_schema_commands_do_not_need_stores() -> None:
    assert registry.needs_stores("migrate") is False
    assert registry.needs_stores("HEALTH") is False
    assert registry.needs_stores("--help") is False
    assert registry.needs_stores("user") is True
    assert registry.needs_stores("task") is True
