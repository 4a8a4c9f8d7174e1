# src/todo_sync/tasks/task_collection.py

from __future__ import annotations

"""
Task collection state.

The single owner of the in-memory task list. Every mutation follows the same
protocol:

1. apply locally (synchronously, before the first await),
2. await the remote store,
3. on success: nothing more to do,
4. on failure: roll back,
5. notify the view either way.

Rollbacks are guarded by a per-task revision counter: each optimistic
mutation records the pre-mutation values of the fields it touched, and a
failed mutation only restores fields that no newer pending mutation of the
same task has touched since. That keeps a late failure from clobbering a
newer edit while still converging on what the remote store holds.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from ..core.ports import Notification, NotificationKind, Notifier, TaskRemote
from ..errors import StoreError, TaskNotFoundError
from .task_models import FilterMode, Task, normalize_title

logger = logging.getLogger(__name__)

_FAILURE_DESCRIPTION = "Failed to {verb} todo. Please try again."


def filter_tasks(tasks: Iterable[Task], mode: FilterMode) -> list[Task]:
    """Pure derived view; never mutates the input."""
    if mode is FilterMode.ACTIVE:
        return [t for t in tasks if not t.completed]
    if mode is FilterMode.COMPLETED:
        return [t for t in tasks if t.completed]
    return list(tasks)


@dataclass(slots=True, frozen=True)
class MutationOutcome:
    ok: bool
    task: Task | None = None
    error: Exception | None = None


@dataclass(slots=True)
class _PendingEdit:
    revision: int
    before: dict[str, Any]  # field name -> value before this edit (always has updated_at)


@dataclass(slots=True)
class _PendingRemoval:
    revision: int
    index: int
    task: Task
    abandoned: bool = False  # set when the create of this task failed


@dataclass(slots=True)
class _TaskLedger:
    """Per-task bookkeeping for in-flight optimistic mutations."""

    revision: int = 0
    edits: list[_PendingEdit] = field(default_factory=list)
    removal: _PendingRemoval | None = None
    creating: bool = False

    def next_revision(self) -> int:
        self.revision += 1
        return self.revision

    @property
    def idle(self) -> bool:
        return not self.edits and self.removal is None and not self.creating


class TaskCollection:
    """
    Ordered in-memory task collection with optimistic mutations.

    New tasks are prepended; updates keep position; deletes remove in place.
    At most one Task object per id is held at any time.
    """

    def __init__(self, remote: TaskRemote, notifier: Notifier) -> None:
        self._remote = remote
        self._notifier = notifier
        self._tasks: list[Task] = []
        self._ledgers: dict[str, _TaskLedger] = {}

    # ---- derived views ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def filtered(self, mode: FilterMode) -> list[Task]:
        return filter_tasks(self._tasks, mode)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self._tasks if t.completed)

    @property
    def active_count(self) -> int:
        return len(self._tasks) - self.completed_count

    def has_pending(self, task_id: str) -> bool:
        ledger = self._ledgers.get(task_id)
        return ledger is not None and not ledger.idle

    # ---- helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _ledger(self, task_id: str) -> _TaskLedger:
        ledger = self._ledgers.get(task_id)
        if ledger is None:
            ledger = self._ledgers[task_id] = _TaskLedger()
        return ledger

    def _release(self, task_id: str) -> None:
        # Keep the counter while anything is in flight; drop it otherwise.
        ledger = self._ledgers.get(task_id)
        if ledger is not None and ledger.idle:
            del self._ledgers[task_id]

    def _notify_ok(self, title: str, description: str) -> None:
        self._notifier.notify(Notification(NotificationKind.SUCCESS, title, description))

    def _notify_failed(self, verb: str) -> None:
        self._notifier.notify(
            Notification(NotificationKind.ERROR, "Error", _FAILURE_DESCRIPTION.format(verb=verb))
        )

    # ---- load ----

    async def load(self) -> MutationOutcome:
        """Replace the collection with the remote store's contents."""
        try:
            remote_tasks = await self._remote.list()
        except StoreError as e:
            logger.error("Loading todos failed: %s", e)
            self._notify_failed("load")
            return MutationOutcome(ok=False, error=e)

        seen: set[str] = set()
        fresh: list[Task] = []
        for task in remote_tasks:
            if task.id in seen:
                logger.warning("Duplicate todo id=%s in read response; keeping first.", task.id)
                continue
            seen.add(task.id)
            fresh.append(task)

        self._tasks = fresh
        self._ledgers.clear()
        logger.info("Loaded %d todo(s).", len(fresh))
        return MutationOutcome(ok=True)

    # ---- create ----

    async def create(self, title: str) -> MutationOutcome:
        task = Task.new(title)
        ledger = self._ledger(task.id)
        ledger.next_revision()
        ledger.creating = True
        self._tasks.insert(0, task)

        try:
            await self._remote.send_create(task)
        except StoreError as e:
            idx = self._index_of(task.id)
            if idx is not None:
                del self._tasks[idx]
            if ledger.removal is not None:
                ledger.removal.abandoned = True
            self._ledgers.pop(task.id, None)
            logger.error("Create failed id=%s: %s", task.id, e)
            self._notify_failed("create")
            return MutationOutcome(ok=False, task=task, error=e)

        ledger.creating = False
        self._release(task.id)
        self._notify_ok("Todo created", "Your todo has been added successfully!")
        return MutationOutcome(ok=True, task=self.get(task.id) or task)

    # ---- update ----

    async def toggle(self, task_id: str) -> MutationOutcome:
        task = self.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return await self.update(task_id, completed=not task.completed)

    async def update(
            self,
            task_id: str,
            *,
            title: str | None = None,
            completed: bool | None = None,
    ) -> MutationOutcome:
        idx = self._index_of(task_id)
        if idx is None:
            raise TaskNotFoundError(task_id)
        current = self._tasks[idx]

        changes: dict[str, Any] = {}
        if title is not None:
            clean = normalize_title(title)
            if clean != current.title:
                changes["title"] = clean
        if completed is not None and bool(completed) != current.completed:
            changes["completed"] = bool(completed)

        if not changes:
            logger.debug("Update id=%s is a no-op.", task_id)
            return MutationOutcome(ok=True, task=current)

        before = {name: getattr(current, name) for name in changes}
        before["updated_at"] = current.updated_at
        updated_at = current.touched()

        ledger = self._ledger(task_id)
        edit = _PendingEdit(revision=ledger.next_revision(), before=before)
        ledger.edits.append(edit)
        self._tasks[idx] = replace(current, updated_at=updated_at, **changes)

        try:
            await self._remote.update(
                task_id,
                title=changes.get("title"),
                completed=changes.get("completed"),
                updated_at=updated_at,
            )
        except StoreError as e:
            self._rollback_edit(task_id, edit)
            logger.error("Update failed id=%s revision=%s: %s", task_id, edit.revision, e)
            self._notify_failed("update")
            return MutationOutcome(ok=False, task=self.get(task_id), error=e)
        else:
            self._notify_ok("Todo updated", "Your changes have been saved!")
            return MutationOutcome(ok=True, task=self.get(task_id))
        finally:
            ledger.edits = [p for p in ledger.edits if p is not edit]
            self._release(task_id)

    def _rollback_edit(self, task_id: str, edit: _PendingEdit) -> None:
        ledger = self._ledgers.get(task_id)
        newer = [] if ledger is None else [p for p in ledger.edits if p.revision > edit.revision]

        restore: dict[str, Any] = {}
        for name, value in edit.before.items():
            if name == "updated_at":
                if newer:
                    newer[0].before["updated_at"] = value
                else:
                    restore[name] = value
                continue
            # The oldest newer edit touching this field inherits our pre-value.
            heir = next((p for p in newer if name in p.before), None)
            if heir is not None:
                heir.before[name] = value
            else:
                restore[name] = value

        if not restore:
            logger.info("Rollback id=%s revision=%s superseded by newer edits.", task_id, edit.revision)
            return

        idx = self._index_of(task_id)
        if idx is not None:
            self._tasks[idx] = replace(self._tasks[idx], **restore)
        removal = None if ledger is None else ledger.removal
        if removal is not None:
            removal.task = replace(removal.task, **restore)
        logger.info("Rolled back id=%s revision=%s fields=%s", task_id, edit.revision, sorted(restore))

    # ---- delete ----

    async def delete(self, task_id: str) -> MutationOutcome:
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("Delete id=%s: not in collection, nothing to do.", task_id)
            return MutationOutcome(ok=True)

        task = self._tasks.pop(idx)
        ledger = self._ledger(task_id)
        removal = _PendingRemoval(revision=ledger.next_revision(), index=idx, task=task)
        ledger.removal = removal

        try:
            await self._remote.delete(task_id)
        except StoreError as e:
            restored = removal.task
            if not removal.abandoned and self._index_of(task_id) is None:
                self._tasks.insert(min(removal.index, len(self._tasks)), restored)
            logger.error("Delete failed id=%s: %s", task_id, e)
            self._notify_failed("delete")
            return MutationOutcome(ok=False, task=restored, error=e)
        else:
            self._notify_ok("Todo deleted", "Your todo has been removed successfully!")
            return MutationOutcome(ok=True, task=task)
        finally:
            if ledger.removal is removal:
                ledger.removal = None
            self._release(task_id)

