# src/dice_todo/logging_setup.py

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

# Console floors by logger-name prefix, first match wins. Anything unmatched
# (third-party libraries, py.warnings) only reaches the console at ERROR.
# The writer logs every persisted snapshot, so storage stays quiet below WARNING.
_CONSOLE_FLOORS: tuple[tuple[str, int], ...] = (
    ("dice_todo.storage.", logging.WARNING),
    ("dice_todo.", logging.NOTSET),
)


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the REPL readable while the log file gets everything."""

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, floor in _CONSOLE_FLOORS:
            if record.name.startswith(prefix):
                return record.levelno >= floor
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/dice_todo",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logs to `<log_dir>/dice_todo.log` and a filtered stderr handler.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_file = Path(log_dir) / "dice_todo.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"console_noise": {"()": _ConsoleNoiseFilter}},
            "formatters": {
                "console": {"format": "%(levelname)s %(name)s: %(message)s"},
                "file": {
                    "format": "%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "level": console_level,
                    "formatter": "console",
                    "filters": ["console_noise"],
                },
                "file": {
                    "class": "logging.FileHandler",
                    "filename": str(log_file),
                    "encoding": "utf-8",
                    "level": file_level,
                    "formatter": "file",
                },
            },
            "loggers": {"asyncio": {"level": "WARNING"}},
            "root": {"level": "DEBUG", "handlers": ["console", "file"]},
        }
    )
    logging.captureWarnings(True)
    return log_file
