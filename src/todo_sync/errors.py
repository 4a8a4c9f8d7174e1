# src/todo_sync/errors.py

from __future__ import annotations


class TodoSyncError(Exception):
    """Base class for errors raised by todo_sync."""


class StoreError(TodoSyncError):
    """
    A remote store call failed.

    status_code is the HTTP status for non-2xx responses and None for
    transport failures (connect error, timeout, broken response).
    """

    def __init__(self, action: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.action = action
        self.status_code = status_code


class TaskNotFoundError(TodoSyncError, LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Unknown task id: {task_id}")
        self.task_id = task_id
