# src/tasktrack/cli/commands.py

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import replace

from ..core.state import AppState
from ..tasks.errors import NotFoundError, PersistenceError, TaskError, ValidationError
from ..tasks.task_api import add_task, list_task_views, toggle_task
from ..tasks.task_models import Category, Priority
from ..tasks.task_query import ALL, parse_sort, parse_status
from ..tasks.task_view import TaskView, category_label

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8
DESCRIPTION_SEP = "--"
# Terminal escape sequences and other control characters in user text.
_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b-\x1f\x7f]")


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

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

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Expected task errors become user-facing replies; anything else
        propagates to the connector.
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

        try:
            return handler(state, args)
        except PersistenceError as e:
            logger.warning("/%s: persistence failure: %s", name, e)
            return f"Could not save tasks: {e}. The change may not survive a restart."
        except TaskError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----

def _clean(text: str) -> str:
    return _CONTROL_RE.sub("", text)


def _short(task_id: str) -> str:
    # Legacy timestamp ids share long prefixes; only shorten generated hex ids.
    return task_id[:SHORT_ID_LEN] if len(task_id) == 32 else task_id


def resolve_task_id(state: AppState, raw: str) -> str:
    """Accept a full id or a unique id prefix (as printed by /list)."""
    tasks = state.task_store.get_all()
    if any(t.id == raw for t in tasks):
        return raw
    matches = [t.id for t in tasks if t.id.startswith(raw)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ValidationError(f"id prefix {raw!r} is ambiguous ({len(matches)} tasks)")
    raise NotFoundError(raw)


def _split_description(args: list[str]) -> tuple[list[str], str | None]:
    if DESCRIPTION_SEP in args:
        i = args.index(DESCRIPTION_SEP)
        return args[:i], " ".join(args[i + 1 :])
    return args, None


def parse_add_args(args: list[str]) -> dict[str, str]:
    """
    /add <title words> [#category] [!priority] [@deadline] [-- description]
    """
    head, description = _split_description(args)
    fields: dict[str, str] = {}
    title_words: list[str] = []

    for word in head:
        if word.startswith("#") and len(word) > 1:
            fields["category"] = word[1:]
        elif word.startswith("!") and len(word) > 1:
            fields["priority"] = word[1:].lower()
        elif word.startswith("@") and len(word) > 1:
            fields["deadline"] = word[1:]
        else:
            title_words.append(word)

    fields["title"] = " ".join(title_words)
    if description is not None:
        fields["description"] = description
    return fields


def render_task(view: TaskView) -> str:
    mark = "x" if view.completed else " "
    parts = [f"[{mark}] {_short(view.id)}  {_clean(view.title)}"]
    parts.append(f"({view.category_label}, {view.priority_label})")
    if view.deadline_label:
        parts.append(f"<{view.deadline_label}>")
    line = "  ".join(parts)
    line += f"\n      created {view.created_at_display}"
    if view.description:
        line += f"\n      {_clean(view.description)}"
    return line


def render_task_list(state: AppState, views: list[TaskView]) -> str:
    if views:
        return "\n".join(render_task(v) for v in views)
    if state.view.search:
        return "No tasks match the search."
    return "No tasks yet. Add one with /add <title>."


# ---- handlers ----

def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    backend = getattr(settings, "storage_backend", "?")
    path = getattr(settings, "storage_path", "")
    view = state.view
    done = sum(1 for t in state.task_store.get_all() if t.completed)
    return (
        "Status:\n"
        f"  Tasks: {state.task_store.count()} ({done} completed)\n"
        f"  Storage: {backend} {path}\n"
        f"  View: status={view.status.value} category={view.category} "
        f"search={view.search!r} sort={view.sort.value}\n"
        f"  Pending confirmations: {len(state.pending.list_pending())}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_task_list(state, list_task_views(state))


def cmd_add(state: AppState, args: list[str]) -> str:
    task = add_task(state, parse_add_args(args))
    return f"Added {_short(task.id)}: {_clean(task.title)}"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    task = toggle_task(state, resolve_task_id(state, args[0]))
    status = "completed" if task.completed else "pending"
    return f"{_short(task.id)} is now {status}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    """
    /delete <id>  -> asks for confirmation (/confirm <token> or /cancel <token>)
    """
    if not args:
        return "Usage: /delete <id>"
    task_id = resolve_task_id(state, args[0])
    action = state.pending.request_delete(task_id)
    task = state.task_store.get(task_id)
    title = _clean(task.title) if task else task_id
    return (
        f"Delete {_short(task_id)} ({title})? "
        f"Confirm with /confirm {action.token} or /cancel {action.token}."
    )


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> <new title> [-- new description]
    /edit <id> -- <new description>
    """
    if not args:
        return "Usage: /edit <id> <new title> [-- new description]"
    task_id = resolve_task_id(state, args[0])
    head, description = _split_description(args[1:])

    fields: dict[str, str] = {}
    if head:
        fields["title"] = " ".join(head)
    if description is not None:
        fields["description"] = description
    if not fields:
        return "Nothing to change. Usage: /edit <id> <new title> [-- new description]"

    action = state.pending.request_edit(task_id, fields)
    return f"Edit {_short(task_id)}? Confirm with /confirm {action.token} or /cancel {action.token}."


def cmd_confirm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /confirm <token>"
    result = state.pending.confirm(args[0])
    # delete -> bool, edit -> the updated Task
    if isinstance(result, bool):
        return "Task deleted." if result else "Task was already gone."
    return "Task updated."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /cancel <token>"
    state.pending.cancel(args[0])
    return "Cancelled."


def cmd_filter(state: AppState, args: list[str]) -> str:
    status = parse_status(args[0] if args else None)
    state.view = replace(state.view, status=status)
    return f"Status filter: {status.value}"


def cmd_category(state: AppState, args: list[str]) -> str:
    category = args[0] if args else ALL
    state.view = replace(state.view, category=category)
    if category == ALL:
        return "Category filter: all"
    if category not in {c.value for c in Category}:
        return f"Category filter: {category} (not a standard category)"
    return f"Category filter: {category_label(category, state.locale)}"


def cmd_search(state: AppState, args: list[str]) -> str:
    term = " ".join(args)
    state.view = replace(state.view, search=term)
    return f"Search: {term!r}" if term else "Search cleared."


def cmd_sort(state: AppState, args: list[str]) -> str:
    key = parse_sort(args[0] if args else None)
    state.view = replace(state.view, sort=key)
    return f"Sort: {key.value}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage and current view settings.")
registry.register("list", cmd_list, help_text="List tasks using the current view.", aliases=["ls"])
registry.register(
    "add",
    cmd_add,
    help_text=(
        "Add a task: /add <title> [#work|#study|#life] "
        f"[!{'|!'.join(p.value for p in Priority)}] [@YYYY-MM-DD] [-- description]."
    ),
)
registry.register("done", cmd_done, help_text="Toggle completed: /done <id>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Edit title/description: /edit <id> <title> [-- description].")
registry.register("delete", cmd_delete, help_text="Delete a task (asks for confirmation).", aliases=["rm"])
registry.register("confirm", cmd_confirm, help_text="Confirm a pending delete/edit: /confirm <token>.")
registry.register("cancel", cmd_cancel, help_text="Cancel a pending delete/edit: /cancel <token>.")
registry.register("filter", cmd_filter, help_text="Status filter: /filter all | pending | completed.")
registry.register("category", cmd_category, help_text="Category filter: /category all | work | study | life.")
registry.register("search", cmd_search, help_text="Search title/description: /search <text> (empty clears).")
registry.register("sort", cmd_sort, help_text="Sort: /sort created | deadline | priority.")
