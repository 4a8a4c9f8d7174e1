# src/todo_sync/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console view until
/exit, EOF or Ctrl+C. In-flight mutations are awaited before the remote
client is closed.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown: finish saving, then close the HTTP client."""
    try:
        await state.drain()
    except Exception:
        logger.exception("Failed while waiting for pending changes.")

    try:
        await state.remote.aclose()
    except Exception:
        logger.debug("Remote close failed.", exc_info=True)


async def _run() -> None:
    settings = get_settings()
    state = create_initial_state(settings=settings, notifier=ConsoleNotifier())
    try:
        await run_console_loop(state)
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("Interrupted.")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
