# src/todo_sync/remote/offline.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from ..tasks.task_models import Task, TaskPatch, utcnow

logger = logging.getLogger(__name__)


class OfflineTaskStore:
    """
    In-process task store used for demos when no webhook URL is configured.

    Behaves like the webhook store from the caller's side (same methods,
    list() returns newest first) but keeps everything in memory, so nothing
    survives a restart and calls never fail.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    async def list(self) -> list[Task]:
        return sorted(
            (replace(t) for t in self._tasks.values()),
            key=lambda t: t.created_at,
            reverse=True,
        )

    async def create(self, title: str) -> Task:
        return await self.send_create(Task.new(title))

    async def send_create(self, task: Task) -> Task:
        self._tasks[task.id] = replace(task)
        logger.debug("Offline create id=%s", task.id)
        return task

    async def update(
            self,
            task_id: str,
            *,
            title: str | None = None,
            completed: bool | None = None,
            updated_at: datetime | None = None,
    ) -> TaskPatch:
        patch = TaskPatch(
            id=task_id,
            updated_at=updated_at or utcnow(),
            title=title,
            completed=completed,
        )
        current = self._tasks.get(task_id)
        if current is not None:
            self._tasks[task_id] = replace(
                current,
                title=current.title if title is None else title,
                completed=current.completed if completed is None else completed,
                updated_at=max(patch.updated_at, current.created_at),
            )
        return patch

    async def delete(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)

    async def aclose(self) -> None:
        return
