# src/tasktrack/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_console_loop(
    state: AppState,
    read_line: Callable[[str], str] = input,
) -> None:
    """
    Interactive task console.

    Lines starting with "/" are commands; any other non-empty line is a
    quick add (same syntax as /add without the command name).
    """
    logger.info("Console connector started (tasks=%s).", state.task_store.count())
    _print_ts("[CONSOLE] Type a task title to add it. Use /help for commands. Use /exit to quit.\n")

    load_error = state.task_store.last_load_error
    if load_error is not None:
        _print_ts(f"[WARN] Stored tasks could not be read, starting with an empty list: {load_error}")

    while True:
        try:
            user_input = read_line(">>> ").strip()
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

        line = user_input if user_input.startswith("/") else f"/add {user_input}"

        try:
            response = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")
