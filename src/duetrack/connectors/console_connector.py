# src/duetrack/connectors/console_connector.py

"""
Console presentation layer.

Renders what the lifecycle controller exposes and turns typed commands into
intents. Notifications and confirmation prompts are the console side of the
Notifier/Confirmer ports.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from datetime import datetime

from ..cli.commands import format_task, registry as command_registry
from ..core.state import AppState
from ..tasks.reminders import ReminderTracker, run_reminder_ticker
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    def success(self, message: str) -> None:
        _print_ts(f"[OK] {message}")

    def error(self, message: str) -> None:
        _print_ts(f"[ERROR] {message}")


class ConsoleConfirmer:
    async def confirm(self, prompt: str) -> bool:
        try:
            answer = await asyncio.to_thread(input, f"{prompt} [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in {"y", "yes"}


class ReminderAnnouncer:
    """Ticker callback: print each task once when it enters the 24h window."""

    def __init__(self, state: AppState) -> None:
        self._state = state
        self._tracker = ReminderTracker()

    def __call__(self, reminders: Sequence[Task]) -> None:
        fresh = self._tracker.newly_due(reminders)
        if not fresh:
            return
        c = self._state.controller
        numbers = {t.id: i for i, t in enumerate(c.tasks, start=1)}
        lines = [format_task(numbers.get(t.id, 0), t, c.zone, with_relative=True) for t in fresh]
        _print_ts("[REMINDER] Due soon:\n" + "\n".join(lines))


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (zone=%s).", state.session.zone)
    _print_ts(f"[CONSOLE] Your timezone: {state.session.zone}")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    await state.controller.refresh()

    ticker = asyncio.create_task(
        run_reminder_ticker(
            state.controller,
            interval_seconds=state.settings.reminder_tick_seconds,
            on_tick=ReminderAnnouncer(state),
        )
    )

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                reply = await command_registry.handle(state, user_input)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply is None:
                _print_ts("Commands start with '/'. Use /help to list them.")
            elif reply:
                _print_ts(reply)
    finally:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker

    logger.info("Console connector finished.")
