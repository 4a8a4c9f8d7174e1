# src/todo_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the remote store, notifier and task collection into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Notifier, TaskRemote
from ..core.state import AppState
from ..remote.client import WebhookTaskStore
from ..remote.offline import OfflineTaskStore
from ..tasks.task_collection import TaskCollection

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def build_remote(settings) -> TaskRemote:
    """Webhook store if a URL is configured, offline in-memory store otherwise."""
    if settings.offline:
        logger.warning(
            "No webhook URL configured (TODO_SYNC_WEBHOOK_URL); using the offline store. "
            "Nothing will be persisted."
        )
        return OfflineTaskStore()
    logger.info("Using webhook store at %s", settings.webhook_url)
    return WebhookTaskStore.from_settings(settings)


def create_initial_state(*, notifier: Notifier, settings=None, remote: TaskRemote | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the remote) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to
    get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if remote is None:
        remote = build_remote(settings)

    return AppState(
        settings=settings,
        remote=remote,
        notifier=notifier,
        tasks=TaskCollection(remote, notifier),
    )
