# src/todo_sync/core/state.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_collection import TaskCollection
from ..tasks.task_models import FilterMode, Task
from .ports import Notifier, TaskRemote

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    remote: TaskRemote
    notifier: Notifier
    tasks: TaskCollection

    filter_mode: FilterMode = FilterMode.ALL
    background: set[asyncio.Task[Any]] = field(default_factory=set)

    def visible_tasks(self) -> list[Task]:
        return self.tasks.filtered(self.filter_mode)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """
        Run a mutation in the background so the view can render the optimistic
        state right away. The task is kept referenced until it finishes.
        """
        task = asyncio.get_running_loop().create_task(coro)
        self.background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self.background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background mutation crashed.", exc_info=exc)

    async def drain(self) -> None:
        """Wait for in-flight mutations (used on shutdown)."""
        if self.background:
            await asyncio.gather(*list(self.background), return_exceptions=True)
