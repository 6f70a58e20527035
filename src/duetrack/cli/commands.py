# src/duetrack/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime

from ..core.state import AppState
from ..tasks.due_dates import (
    ENTRY_FORMAT_HINT,
    is_known_zone,
    relative_description,
    to_display_string,
    utc_now,
)
from ..tasks.task_models import EditMode, Task

CommandHandler = Callable[[AppState, str], Awaitable[str] | str]

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

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

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string (possibly empty) or None if not a command.
        """
        if not line.startswith("/"):
            return None

        name, _, rest = line[1:].strip().partition(" ")
        if not name:
            return "Empty command. Use /help to list available commands."

        name = name.lower()
        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        result = handler(state, rest.strip())
        if inspect.isawaitable(result):
            result = await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def display_zone(task: Task, session_zone: str) -> str:
    """The zone the task was authored in, or the session zone if unknown."""
    return task.timezone if is_known_zone(task.timezone) else session_zone


def format_task(
    index: int,
    task: Task,
    session_zone: str,
    *,
    now: datetime | None = None,
    with_relative: bool = False,
) -> str:
    zone = display_zone(task, session_zone)
    line = (
        f"{index}. {task.title} - {task.description}\n"
        f"   Due: {to_display_string(task.due_date, zone)} ({zone}) | {task.email}"
    )
    if with_relative:
        line += f"\n   Time left: {relative_description(task.due_date, now)}"
    return line


def format_tasks(
    tasks: Sequence[Task],
    session_zone: str,
    *,
    numbered_by: Sequence[Task] | None = None,
    with_relative: bool = False,
) -> list[str]:
    """Numbers follow `numbered_by` (the full collection) when given, so /edit N works from any view."""
    # One "now" per rendering pass.
    now = utc_now()
    order = {t.id: i for i, t in enumerate(numbered_by or tasks, start=1)}
    return [
        format_task(order.get(t.id, i), t, session_zone, now=now, with_relative=with_relative)
        for i, t in enumerate(tasks, start=1)
    ]


def split_fields(text: str) -> dict[str, str]:
    """'title | description | 2024-01-01 10:00 | a@b.co' -> draft fields (missing ones empty)."""
    parts = [p.strip() for p in text.split(FIELD_SEPARATOR)]
    parts += [""] * (4 - len(parts))
    title, description, due_date = parts[0], parts[1], parts[2]
    email = " ".join(parts[3:]).strip()
    return {"title": title, "description": description, "due_date": due_date, "email": email}


def _task_at(state: AppState, arg: str) -> Task | None:
    tasks = state.controller.tasks
    try:
        idx = int(arg.split()[0])
    except (IndexError, ValueError):
        return None
    if 1 <= idx <= len(tasks):
        return tasks[idx - 1]
    return None


def cmd_help(state: AppState, args: str) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: str) -> str:
    c = state.controller
    configured = "yes" if state.store.configured else "NO (set DUETRACK_API_URL)"
    editing = "no"
    if c.edit_mode is EditMode.EDITING and c.draft.target is not None:
        editing = f"yes ({c.draft.target.title})"
    lines = [
        "Status:",
        f"  Timezone: {c.zone}",
        f"  Store configured: {configured}",
        f"  Collection: {c.freshness.value} ({len(c.tasks)} tasks, {len(c.reminders)} due soon)",
        f"  Editing: {editing}",
    ]
    if c.last_error:
        lines.append(f"  Last error: {c.last_error}")
    return "\n".join(lines)


def cmd_list(state: AppState, args: str) -> str:
    c = state.controller
    if not c.tasks:
        return "No tasks."
    return "Tasks:\n" + "\n".join(format_tasks(c.tasks, c.zone))


def cmd_due(state: AppState, args: str) -> str:
    c = state.controller
    reminders = c.recompute_reminders()
    if not reminders:
        return "Nothing due in the next 24 hours."
    return "Due soon:\n" + "\n".join(format_tasks(reminders, c.zone, numbered_by=c.tasks, with_relative=True))


async def cmd_refresh(state: AppState, args: str) -> str:
    ok = await state.controller.refresh()
    return f"Loaded {len(state.controller.tasks)} tasks." if ok else ""


async def cmd_save(state: AppState, args: str) -> str:
    """
    /add title | description | YYYY-MM-DD HH:mm | email
    While editing, the same command updates the task; without arguments the
    current draft is submitted as is.
    """
    c = state.controller
    if args:
        c.update_draft(**split_fields(args))
    await c.submit()
    return ""


def cmd_edit(state: AppState, args: str) -> str:
    task = _task_at(state, args)
    if task is None:
        return "Usage: /edit N (see /list for numbers)."
    d = state.controller.start_edit(task)
    return (
        f"Editing '{task.title}'. Times are in {state.controller.zone}.\n"
        f"  {d.title} {FIELD_SEPARATOR} {d.description} {FIELD_SEPARATOR} {d.due_date} {FIELD_SEPARATOR} {d.email}\n"
        "Send /save with the new values, or /cancel."
    )


def cmd_cancel(state: AppState, args: str) -> str:
    c = state.controller
    was_editing = c.edit_mode is EditMode.EDITING
    c.cancel_edit()
    return "Edit cancelled." if was_editing else "Draft cleared."


async def cmd_delete(state: AppState, args: str) -> str:
    task = _task_at(state, args)
    if task is None:
        return "Usage: /delete N (see /list for numbers)."
    await state.controller.remove(task.id)
    return ""


async def cmd_done(state: AppState, args: str) -> str:
    task = _task_at(state, args)
    if task is None:
        return "Usage: /done N (see /list for numbers)."
    await state.controller.complete(task.id)
    return ""


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show timezone, store and edit state.")
registry.register("list", cmd_list, help_text="List all tasks.", aliases=["ls"])
registry.register("due", cmd_due, help_text="Tasks due within the next 24 hours.")
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the store.")
registry.register(
    "add",
    cmd_save,
    help_text=f"Create (or, while editing, update): /add title | description | {ENTRY_FORMAT_HINT} | email",
    aliases=["save"],
)
registry.register("edit", cmd_edit, help_text="Start editing task N.")
registry.register("cancel", cmd_cancel, help_text="Cancel editing and clear the draft.")
registry.register("delete", cmd_delete, help_text="Delete task N (asks for confirmation).", aliases=["rm"])
registry.register("done", cmd_done, help_text="Mark task N as done (removes it).")
