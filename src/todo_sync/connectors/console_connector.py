# src/todo_sync/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import add_todo, render_list
from ..core.ports import Notification
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = ">>> todo: "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Prints operation outcomes the way a GUI would show toasts."""

    def notify(self, notification: Notification) -> None:
        tag = "OK" if notification.ok else "ERROR"
        _print_ts(f"[{tag}] {notification.title}: {notification.description}")


async def _read_line() -> str:
    # input() blocks; keep the event loop free for in-flight mutations.
    return await asyncio.to_thread(input, PROMPT)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type a todo to add it. Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (e.g., reload)
        _print_ts(text)

    await state.tasks.load()
    print(render_list(state), flush=True)

    while True:
        try:
            user_input = (await _read_line()).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await command_registry.handle(state, user_input, emit=emit)
            if reply is None:
                reply = await add_todo(state, user_input) or ""
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        print(reply, flush=True)

    if state.background:
        _print_ts(f"Waiting for {len(state.background)} change(s) to finish saving...")
        await state.drain()

    logger.info("Console connector finished.")

