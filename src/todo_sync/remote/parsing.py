# src/todo_sync/remote/parsing.py

"""
Read-response parsing.

The webhook doesn't return a single stable shape for "read". Known shapes:
- {"todos": [...], ...}
- [{"todos": [...], ...}, ...]   (workflow engines wrap items in an array)

Everything else is an UnrecognizedShape. Callers map it to an empty result;
it is never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_models import Task


@dataclass(slots=True, frozen=True)
class TodosFound:
    tasks: list[Task]
    skipped: int = 0


@dataclass(slots=True, frozen=True)
class UnrecognizedShape:
    reason: str


ReadResult = TodosFound | UnrecognizedShape


def _todos_field(obj: Any) -> list[Any] | None:
    if not isinstance(obj, dict) or "todos" not in obj:
        return None
    todos = obj["todos"]
    return todos if isinstance(todos, list) else None


def parse_read_response(data: Any) -> ReadResult:
    if isinstance(data, dict):
        if "todos" not in data:
            return UnrecognizedShape("object without 'todos'")
        raw_items = _todos_field(data)
        if raw_items is None:
            return UnrecognizedShape("'todos' is not a list")
    elif isinstance(data, list):
        if not data:
            return UnrecognizedShape("empty array")
        raw_items = _todos_field(data[0])
        if raw_items is None:
            return UnrecognizedShape("array whose first element has no 'todos' list")
    else:
        return UnrecognizedShape(f"unexpected {type(data).__name__}")

    tasks: list[Task] = []
    skipped = 0
    for raw in raw_items:
        task = Task.from_wire(raw)
        if task is None:
            skipped += 1
            continue
        tasks.append(task)
    return TodosFound(tasks=tasks, skipped=skipped)
