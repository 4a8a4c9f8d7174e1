# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from todo_sync.config import Settings


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for suffix in (
        "APP_NAME",
        "LOG_LEVEL",
        "DATA_DIR",
        "WEBHOOK_URL",
        "CONNECT_TIMEOUT_SECONDS",
        "READ_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(f"TODO_SYNC_{suffix}", raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()
    assert s.app_name == "todo-sync"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/todo_sync")
    assert s.webhook_url == ""
    assert s.offline
    assert s.connect_timeout_seconds == 5.0
    assert s.read_timeout_seconds == 15.0


def test_env_overrides(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TODO_SYNC_WEBHOOK_URL", " https://hooks.example.test/todos ")
    clean_env.setenv("TODO_SYNC_LOG_LEVEL", "debug")
    clean_env.setenv("TODO_SYNC_DATA_DIR", str(tmp_path))
    clean_env.setenv("TODO_SYNC_READ_TIMEOUT_SECONDS", "2.5")

    s = Settings.from_env()

    assert s.webhook_url == "https://hooks.example.test/todos"
    assert not s.offline
    assert s.log_level == "DEBUG"
    assert s.data_dir == tmp_path
    assert s.read_timeout_seconds == 2.5


@pytest.mark.parametrize("raw", ["soon", "-1", "0", ""])
def test_bad_timeouts_fall_back(clean_env, raw: str) -> None:
    clean_env.setenv("TODO_SYNC_CONNECT_TIMEOUT_SECONDS", raw)
    assert Settings.from_env().connect_timeout_seconds == 5.0
