# src/todo_sync/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "todo_sync.log"

# Minimum level a record needs to reach the console, by logger-name prefix.
# Our own loggers are bounded by the handler level only.
_CONSOLE_THRESHOLDS: tuple[tuple[str, int], ...] = (
    ("todo_sync", logging.NOTSET),
    # Deprecations from our dependencies are worth seeing once.
    ("py.warnings", logging.WARNING),
)


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the REPL readable: todo_sync logs, warnings, and third-party errors only."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        for prefix, threshold in _CONSOLE_THRESHOLDS:
            if name == prefix or name.startswith(prefix + "."):
                return record.levelno >= threshold
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/todo_sync",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route logs to stderr (filtered) and to `<log_dir>/todo_sync.log` (everything).

    Call once at startup, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)

    root.addHandler(console)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
