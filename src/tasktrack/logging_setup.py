# src/tasktrack/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

APP_LOGGER = "tasktrack"
LOG_FILE_NAME = "tasktrack.log"
LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(name: str | int | None, default: int = logging.WARNING) -> int:
    """"info" / "INFO" / 20 -> 20; anything unknown -> default."""
    if isinstance(name, int):
        return name
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


class _ConsoleFilter(logging.Filter):
    """
    Console output shares the terminal with the task list, so:
    - tasktrack.* records pass (the handler level still applies)
    - everything else, captured warnings included, only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == APP_LOGGER or record.name.startswith(APP_LOGGER + "."):
            return True
        return record.levelno >= logging.ERROR


def _is_ours(handler: logging.Handler) -> bool:
    return getattr(handler, "_tasktrack", False)


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasktrack",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the console (stderr) and rotating file handlers on the root logger.

    Calling it again replaces the handlers from the previous call; handlers
    installed by someone else (pytest's caplog, for one) are left alone.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))

    for h in [h for h in root.handlers if _is_ours(h)]:
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleFilter())

    file = RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    file.setLevel(file_level)

    for h in (console, file):
        h.setFormatter(fmt)
        h._tasktrack = True  # type: ignore[attr-defined]
        root.addHandler(h)

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)

    return log_file
