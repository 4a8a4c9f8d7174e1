# src/todo_sync/tasks/task_models.py

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "y", "on"}


class FilterMode(StrEnum):
    """Derived view selector over the task collection."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> FilterMode:
        if not raw:
            return cls.ALL
        return cls(raw.strip().lower())


def utcnow() -> datetime:
    return datetime.now(UTC)


def format_timestamp(dt: datetime) -> str:
    """ISO 8601 UTC with milliseconds and a 'Z' suffix (JS Date.toJSON shape)."""
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: Any) -> datetime | None:
    """
    Parse a wire timestamp.

    Accepts ISO 8601 strings ('Z' or offset; naive values are taken as UTC)
    and epoch milliseconds. Returns None when the value can't be parsed.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(float(raw) / 1000.0, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    s = str(raw).strip()
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def coerce_completed(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUE_STRINGS
    return False


def normalize_title(title: str) -> str:
    """Strip a user-supplied title; empty titles are rejected."""
    clean = (title or "").strip()
    if not clean:
        raise ValueError("title is required")
    return clean


@dataclass(slots=True)
class Task:
    """
    A single todo item.

    id is client-generated and never changes. updated_at is refreshed on
    every mutation and is never earlier than created_at.
    """

    id: str
    title: str
    completed: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def new(cls, title: str, *, now: datetime | None = None) -> Task:
        ts = now or utcnow()
        return cls(
            id=str(uuid.uuid4()),
            title=normalize_title(title),
            completed=False,
            created_at=ts,
            updated_at=ts,
        )

    def touched(self, now: datetime | None = None) -> datetime:
        """Next updated_at value for a mutation of this task."""
        return max(now or utcnow(), self.created_at)

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_wire(cls, raw: Any) -> Task | None:
        """
        Decode one task from a read response.

        Returns None (and logs) for items that can't be turned into a Task:
        non-objects, missing id, no parseable timestamp.
        """
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object todo item: %r", raw)
            return None

        raw_id = raw.get("id")
        if raw_id is None or str(raw_id).strip() == "":
            logger.warning("Skipping todo item without id: %r", raw)
            return None

        created_at = parse_timestamp(raw.get("createdAt"))
        updated_at = parse_timestamp(raw.get("updatedAt"))
        if created_at is None and updated_at is None:
            logger.warning("Skipping todo id=%s: no parseable timestamps", raw_id)
            return None
        created_at = created_at or updated_at
        updated_at = updated_at or created_at
        assert created_at is not None and updated_at is not None

        title = raw.get("title")

        return cls(
            id=str(raw_id),
            title="" if title is None else str(title),
            completed=coerce_completed(raw.get("completed")),
            created_at=created_at,
            updated_at=max(updated_at, created_at),
        )


@dataclass(slots=True, frozen=True)
class TaskPatch:
    """Partial update sent to the remote store: only the fields that changed."""

    id: str
    updated_at: datetime
    title: str | None = None
    completed: bool | None = None

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "updatedAt": format_timestamp(self.updated_at)}
        if self.title is not None:
            out["title"] = self.title
        if self.completed is not None:
            out["completed"] = self.completed
        return out
