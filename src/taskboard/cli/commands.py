# src/taskboard/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..db.connection import DEFAULT_BUSY_TIMEOUT, check_health
from ..db.migrate import apply_migrations, schema_status
from ..errors import TaskboardError
from ..models.task import Task
from ..models.user import User

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class UsageError(ValueError):
    """Bad command line: unknown command, missing or malformed argument."""


class CommandRegistry:
    """Simple subcommand registry used by the CLI (help, user, task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._schema_only: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        needs_stores: bool = True,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        names = [key, *(a.lower() for a in aliases)]
        for alias in names[1:]:
            self._handlers[alias] = handler
        if not needs_stores:
            self._schema_only.update(names)

    def needs_stores(self, name: str) -> bool:
        """False for commands that must run before (or without) the stores opening."""
        return name.lower() not in self._schema_only

    def handle(self, state: AppState, argv: list[str]) -> str:
        """
        Dispatch ["command", "arg", ...] to its handler and return the reply.
        """
        if not argv:
            raise UsageError("Empty command. Use `taskboard help` to list available commands.")

        name = argv[0].lower()
        handler = self._handlers.get(name)
        if not handler:
            raise UsageError(
                f"Unknown command: {name}. Use `taskboard help` to list available commands."
            )
        logger.debug("Dispatch command=%s nargs=%d", name, len(argv) - 1)
        return handler(state, argv[1:])

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _int_arg(raw: str, what: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise UsageError(f"{what} must be an integer, got {raw!r}") from None


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate key=value options from positional words."""
    positional: list[str] = []
    options: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key.isidentifier():
            options[key.lower()] = value
        else:
            positional.append(a)
    return positional, options


def _format_user(u: User) -> str:
    email = u.email or "-"
    return f"#{u.id} {u.username} <{email}> created {u.created_at}"


def _format_task(t: Task) -> str:
    due = f" due {t.due_date}" if t.due_date else ""
    return f"#{t.id} [{t.status.value}] ({t.priority.value}) {t.title}{due}"


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_migrate(state: AppState, args: list[str]) -> str:
    db_path = state.settings.db_path
    timeout = float(getattr(state.settings, "busy_timeout_seconds", DEFAULT_BUSY_TIMEOUT))
    applied = apply_migrations(db_path, busy_timeout=timeout)
    if applied:
        lines = [f"Newly applied: {', '.join(f'{v:03d}' for v in applied)}"]
    else:
        lines = ["Schema up to date."]
    for mig, applied_at in schema_status(db_path, busy_timeout=timeout):
        when = applied_at or "pending"
        lines.append(f"  {mig.version:03d}_{mig.name}: {when}")
    return "\n".join(lines)


def cmd_health(state: AppState, args: list[str]) -> str:
    db_path = state.settings.db_path
    if not check_health(db_path):
        raise TaskboardError(f"Database unhealthy: {db_path}")
    return f"ok ({db_path})"


def cmd_user(state: AppState, args: list[str]) -> str:
    """
    user add <username> <password_hash> [email]
    user show <username>
    user list
    user delete <id>
    """
    usage = (
        "Usage:\n"
        "  user add <username> <password_hash> [email]\n"
        "  user show <username>\n"
        "  user list\n"
        "  user delete <id>"
    )
    if not args:
        raise UsageError(usage)

    sub, rest = args[0].lower(), args[1:]

    if sub == "add":
        if len(rest) not in (2, 3):
            raise UsageError(usage)
        email = rest[2] if len(rest) == 3 else None
        user = state.users.create_user(rest[0], rest[1], email)
        return f"Created user {_format_user(user)}"

    if sub == "show":
        if len(rest) != 1:
            raise UsageError(usage)
        return _format_user(state.users.find_by_username(rest[0]))

    if sub == "list":
        users = state.users.list_users()
        if not users:
            return "No users."
        return "\n".join(_format_user(u) for u in users)

    if sub == "delete":
        if len(rest) != 1:
            raise UsageError(usage)
        n = state.users.delete_user(_int_arg(rest[0], "user id"))
        return f"Deleted user {rest[0]} and {n} task(s)."

    raise UsageError(usage)


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    task add <user_id> <title...> [priority=..] [due=..] [description=..]
    task list <user_id> [status]
    task due [user_id]
    task status <task_id> <status>
    task delete <task_id>
    """
    usage = (
        "Usage:\n"
        "  task add <user_id> <title...> [priority=..] [due=..] [description=..]\n"
        "  task list <user_id> [status]\n"
        "  task due [user_id]\n"
        "  task status <task_id> <status>\n"
        "  task delete <task_id>"
    )
    if not args:
        raise UsageError(usage)

    sub, rest = args[0].lower(), args[1:]

    if sub == "add":
        positional, options = _split_options(rest)
        if len(positional) < 2:
            raise UsageError(usage)
        task = state.tasks.create_task(
            _int_arg(positional[0], "user id"),
            " ".join(positional[1:]),
            description=options.get("description", ""),
            priority=options.get("priority"),
            due_date=options.get("due"),
        )
        return f"Created task {_format_task(task)}"

    if sub == "list":
        if len(rest) not in (1, 2):
            raise UsageError(usage)
        status = rest[1] if len(rest) == 2 else None
        tasks = state.tasks.list_tasks_for_user(_int_arg(rest[0], "user id"), status)
        if not tasks:
            return "No tasks."
        return "\n".join(_format_task(t) for t in tasks)

    if sub == "due":
        if len(rest) > 1:
            raise UsageError(usage)
        user_id = _int_arg(rest[0], "user id") if rest else None
        tasks = state.tasks.list_due_tasks(user_id=user_id)
        if not tasks:
            return "No tasks with a due date."
        return "\n".join(_format_task(t) for t in tasks)

    if sub == "status":
        if len(rest) != 2:
            raise UsageError(usage)
        task = state.tasks.update_status(_int_arg(rest[0], "task id"), rest[1])
        return f"Updated task {_format_task(task)}"

    if sub == "delete":
        if len(rest) != 1:
            raise UsageError(usage)
        state.tasks.delete_task(_int_arg(rest[0], "task id"))
        return f"Deleted task {rest[0]}."

    raise UsageError(usage)


registry.register(
    "help",
    cmd_help,
    help_text="Show available commands.",
    aliases=["-h", "--help"],
    needs_stores=False,
)
registry.register(
    "migrate",
    cmd_migrate,
    help_text="Apply pending migrations and show schema status.",
    needs_stores=False,
)
registry.register(
    "health",
    cmd_health,
    help_text="Check that the database answers queries.",
    needs_stores=False,
)
registry.register("user", cmd_user, help_text="Manage users: add | show | list | delete.")
registry.register(
    "task", cmd_task, help_text="Manage tasks: add | list | due | status | delete."
)
