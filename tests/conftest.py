# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_sync.cli.bootstrap import create_initial_state
from todo_sync.core.state import AppState
from todo_sync.tasks import task_models
from todo_sync.tasks.task_collection import TaskCollection

from .fakes import FakeRemote, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="todo-sync-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        webhook_url="",
        offline=True,
        connect_timeout_seconds=1.0,
        read_timeout_seconds=1.0,
    )


@pytest.fixture()
def clock(monkeypatch: pytest.MonkeyPatch) -> list[datetime]:
    """
    Deterministic clock: every utcnow() call advances one second.

    Returns the list of issued timestamps.
    """
    issued: list[datetime] = []
    start = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    def fake_utcnow() -> datetime:
        ts = start + timedelta(seconds=len(issued))
        issued.append(ts)
        return ts

    monkeypatch.setattr(task_models, "utcnow", fake_utcnow)
    return issued


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def collection(remote: FakeRemote, notifier: RecordingNotifier) -> TaskCollection:
    return TaskCollection(remote, notifier)


@pytest.fixture()
def state(settings: SimpleNamespace, remote: FakeRemote, notifier: RecordingNotifier) -> AppState:
    """AppState wired with the fake remote and a recording notifier."""
    return create_initial_state(settings=settings, notifier=notifier, remote=remote)
