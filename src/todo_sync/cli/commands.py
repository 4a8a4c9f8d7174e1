# src/todo_sync/cli/commands.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..core.state import AppState
from ..tasks.task_models import FilterMode, Task, normalize_title

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]

logger = logging.getLogger(__name__)

EMPTY_MESSAGES = {
    FilterMode.ALL: "No todos yet. Add your first task above!",
    FilterMode.ACTIVE: "No active todos. Great job!",
    FilterMode.COMPLETED: "No completed todos yet. Get started!",
}


class CommandRegistry:
    """Simple slash-command registry used by the console view (/help, /done, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("Anything that isn't a command is added as a new todo.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----

def _row(index: int, task: Task, pending: bool) -> str:
    box = "[x]" if task.completed else "[ ]"
    mark = " *" if pending else ""
    return f"{index:>3}. {box} {task.title}{mark}"


def render_list(state: AppState) -> str:
    """Current view: counts, filter, numbered rows (or the empty-state line)."""
    tasks = state.tasks
    header = (
        f"{tasks.active_count} active, {tasks.completed_count} completed"
        f"  | filter: {state.filter_mode.value}"
    )
    visible = state.visible_tasks()
    if not visible:
        return f"{header}\n  {EMPTY_MESSAGES[state.filter_mode]}"
    rows = [_row(i, t, tasks.has_pending(t.id)) for i, t in enumerate(visible, start=1)]
    return "\n".join([header, *rows])


def _resolve(state: AppState, args: list[str]) -> Task | str:
    """Map a 1-based row number of the current view to a task, or an error line."""
    if not args:
        return "Missing row number. Use /list to see numbers."
    try:
        n = int(args[0])
    except ValueError:
        return f"Not a row number: {args[0]}"
    visible = state.visible_tasks()
    if n < 1 or n > len(visible):
        return f"No row {n} in the current view."
    return visible[n - 1]


async def _run_mutation(state: AppState, coro) -> None:
    state.spawn(coro)
    # Let the spawned mutation apply its optimistic change before we render.
    await asyncio.sleep(0)


# ---- commands ----

async def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return render_list(state)


async def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /filter                      -> show current mode
    /filter all|active|completed -> switch mode
    """
    if not args:
        return f"Filter is '{state.filter_mode.value}'. Use /filter all | active | completed."
    try:
        state.filter_mode = FilterMode.parse(args[0])
    except ValueError:
        return "Usage: /filter all | active | completed."
    return render_list(state)


async def add_todo(state: AppState, text: str) -> str | None:
    """Create a todo from free text; None if the text is blank."""
    try:
        title = normalize_title(text)
    except ValueError:
        return None
    await _run_mutation(state, state.tasks.create(title))
    return render_list(state)


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    reply = await add_todo(state, " ".join(args))
    return "Usage: /add <title>." if reply is None else reply


async def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    task = _resolve(state, args)
    if isinstance(task, str):
        return task
    await _run_mutation(state, state.tasks.toggle(task.id))
    return render_list(state)


async def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    task = _resolve(state, args)
    if isinstance(task, str):
        return task
    try:
        title = normalize_title(" ".join(args[1:]))
    except ValueError:
        return "Usage: /edit <row> <new title>."
    if title == task.title:
        return "Nothing to change."
    await _run_mutation(state, state.tasks.update(task.id, title=title))
    return render_list(state)


async def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    task = _resolve(state, args)
    if isinstance(task, str):
        return task
    await _run_mutation(state, state.tasks.delete(task.id))
    return render_list(state)


async def cmd_reload(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.background:
        return "Changes are still being saved; try /reload again in a moment."
    if emit:
        emit("Loading todos...")
    await state.tasks.load()
    return render_list(state)


async def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.settings.offline:
        store = "offline (in-memory, not persisted)"
    else:
        store = state.settings.webhook_url
    return (
        "Status:\n"
        f"  Store: {store}\n"
        f"  Todos: {len(state.tasks)} ({state.tasks.active_count} active, "
        f"{state.tasks.completed_count} completed)\n"
        f"  Filter: {state.filter_mode.value}\n"
        f"  Saving in background: {len(state.background)}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show todos in the current filter.", aliases=["ls"])
registry.register("filter", cmd_filter, help_text="Switch view: /filter all | active | completed.")
registry.register("add", cmd_add, help_text="Add a todo: /add <title>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <row>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Rename a todo: /edit <row> <new title>.")
registry.register("rm", cmd_rm, help_text="Delete a todo: /rm <row>.", aliases=["delete", "del"])
registry.register("reload", cmd_reload, help_text="Reload todos from the store.")
registry.register("status", cmd_status, help_text="Show store, counts and filter.")
