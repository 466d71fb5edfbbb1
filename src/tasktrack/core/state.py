# src/tasktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..tasks.task_query import TaskQuery

if TYPE_CHECKING:
    from ..tasks.task_api import PendingActions
    from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Everything a presentation layer needs, built once at startup
    (cli.bootstrap.create_initial_state) and passed by reference.
    """

    # Store Settings on the state for easy access in other modules later.
    settings: object

    task_store: TaskStore
    pending: PendingActions
    locale: str = "en"

    # Current list view options (status/category/search/sort).
    view: TaskQuery = field(default_factory=TaskQuery)
