# src/todo_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task collection depends on Protocols instead of concrete implementations.
This keeps the remote store and the view swappable and makes testing easier.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Protocol

from ..tasks.task_models import Task, TaskPatch


class NotificationKind(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Notification:
    """User-visible outcome of an operation (a toast in a graphical view)."""

    kind: NotificationKind
    title: str
    description: str

    @property
    def ok(self) -> bool:
        return self.kind is NotificationKind.SUCCESS


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class TaskRemote(Protocol):
    """
    Remote store of record for tasks.

    Every call is one request; failures raise StoreError and are never retried.
    """

    async def list(self) -> list[Task]: ...

    async def create(self, title: str) -> Task: ...

    async def send_create(self, task: Task) -> Task: ...

    async def update(
            self,
            task_id: str,
            *,
            title: str | None = None,
            completed: bool | None = None,
            updated_at: datetime | None = None,
    ) -> TaskPatch: ...

    async def delete(self, task_id: str) -> None: ...

    async def aclose(self) -> None: ...
