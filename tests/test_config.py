# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskboard.config import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TASKBOARD_DATA_DIR",
        "TASKBOARD_DB_PATH",
        "TASKBOARD_LOG_DIR",
        "TASKBOARD_BUSY_TIMEOUT_SECONDS",
        "TASKBOARD_MAX_TITLE_LENGTH",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.data_dir == Path(".local/taskboard")
    assert s.db_path == Path(".local/taskboard") / "tasks.db"
    assert s.busy_timeout_seconds == 5.0
    assert s.max_title_length == 200


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKBOARD_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKBOARD_DB_PATH", raising=False)
    monkeypatch.setenv("TASKBOARD_BUSY_TIMEOUT_SECONDS", "0.5")
    monkeypatch.setenv("TASKBOARD_MAX_TITLE_LENGTH", "not-a-number")

    s = Settings.from_env()
    assert s.db_path == tmp_path / "tasks.db"
    assert s.busy_timeout_seconds == 0.5
    assert s.max_title_length == 200
