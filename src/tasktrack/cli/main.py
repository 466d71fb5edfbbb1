# src/tasktrack/cli/main.py

"""
CLI entrypoint: logging, then AppState, then the console loop.

Exit codes: 0 on a normal exit, 1 when the data directory or the task
storage cannot be opened.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import resolve_level, setup_logging
from ..tasks.errors import PersistenceError

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    try:
        log_file = setup_logging(
            log_dir=settings.data_dir,
            console_level=resolve_level(settings.log_level),
        )
    except OSError as e:
        # No file handler yet; stderr is all there is.
        print(f"tasktrack: cannot use data directory {settings.data_dir}: {e}", file=sys.stderr)
        return 1
    logger.info("Starting %s (log file: %s)", settings.app_name, log_file)

    try:
        state = create_initial_state(settings=settings)
    except PersistenceError as e:
        logger.error("Cannot open task storage at %s: %s", settings.storage_path, e)
        return 1

    if not settings.console_enabled:
        logger.info("Console disabled, nothing to run.")
        return 0

    run_console_loop(state)
    logger.info("Bye. %d tasks stored.", state.task_store.count())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
