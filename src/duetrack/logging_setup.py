# src/duetrack/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "duetrack.log"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Libraries whose per-request INFO lines are not worth keeping.
_QUIET_LOGGERS = ("httpx", "httpcore")


def _is_own(name: str) -> bool:
    return name == "duetrack" or name.startswith("duetrack.")


class _ConsoleNoiseFilter(logging.Filter):
    """Only duetrack records reach the terminal below ERROR."""

    def filter(self, record: logging.LogRecord) -> bool:
        return _is_own(record.name) or record.levelno >= logging.ERROR


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/duetrack",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the stderr and file handlers on the root logger.

    The console stays quiet while the prompt is in use: third-party records and
    captured warnings only show at ERROR. The file under `log_dir` keeps
    everything from `file_level` up. Calling again replaces the handlers.

    Returns the log file path.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for existing in list(root.handlers):
        root.removeHandler(existing)

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = _handler(logging.StreamHandler(sys.stderr), console_level, formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    root.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), file_level, formatter))

    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
