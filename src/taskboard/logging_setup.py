# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskboard.log"

# Per-query and per-row detail; useful in the file, noise next to command output.
_FILE_ONLY_LOGGERS = ("taskboard.db", "taskboard.store")


def _under(name: str, prefix: str) -> bool:
    return name == prefix or name.startswith(prefix + ".")


class _ConsoleFilter(logging.Filter):
    """
    Decide what reaches stderr while a command runs:
    - taskboard.db / taskboard.store only at WARNING+ (the file keeps the rest)
    - other taskboard loggers pass at the configured level
    - py.warnings and third-party loggers only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if any(_under(name, p) for p in _FILE_ONLY_LOGGERS):
            return record.levelno >= logging.WARNING

        if _under(name, "taskboard"):
            return True

        return record.levelno >= logging.ERROR


def resolve_level(level: str | int | None) -> int:
    """Map a level name like "debug" or "WARNING" to its number; INFO if unknown."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level or "").strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(*, log_dir: str | Path = ".local/taskboard", level: str | int = "INFO") -> Path:
    """
    Configure root logging for one CLI run and return the log file path.

    Both handlers use `level` (normally TASKBOARD_LOG_LEVEL). The file gets
    every record at that level; the console is narrowed by _ConsoleFilter.

    Call this once, before the stores are built.
    """
    lvl = resolve_level(level)

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(lvl)

    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(lvl)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(lvl)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
