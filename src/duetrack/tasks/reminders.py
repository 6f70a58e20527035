# src/duetrack/tasks/reminders.py

from __future__ import annotations

"""
Reminder engine.

The reminder view is never stored on its own: it is re-derived from the task
collection and the current instant. A task can enter or leave the window just
because time passed, so the controller recomputes after every collection
change and the ticker below recomputes on a fixed interval.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from .task_models import Task

if TYPE_CHECKING:
    from .lifecycle import TaskLifecycleController

logger = logging.getLogger(__name__)

REMINDER_WINDOW = timedelta(hours=24)

ReminderCallback = Callable[[Sequence[Task]], None]


def due_soon(tasks: Iterable[Task], now: datetime) -> list[Task]:
    """Tasks with now <= due_date <= now + 24h, in collection order."""
    horizon = now + REMINDER_WINDOW
    return [t for t in tasks if now <= t.due_date <= horizon]


class ReminderTracker:
    """
    Remembers which reminders were already announced.

    There is no "dismissed" state: a task that leaves the window is forgotten,
    and announced again if it ever re-enters.
    """

    def __init__(self) -> None:
        self._announced: set[str] = set()

    def newly_due(self, reminders: Sequence[Task]) -> list[Task]:
        current = {t.id for t in reminders}
        fresh = [t for t in reminders if t.id not in self._announced]
        self._announced = current
        return fresh


async def run_reminder_ticker(
    controller: TaskLifecycleController,
    *,
    interval_seconds: float = 60.0,
    on_tick: ReminderCallback | None = None,
) -> None:
    """
    Keep the reminder view time-accurate without data changes.

    Every interval_seconds:
    - recompute the view against a fresh "now"
    - hand it to on_tick (callback failures are logged, the loop keeps going)

    To stop the ticker, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        reminders = controller.recompute_reminders()

        if on_tick is not None:
            try:
                on_tick(reminders)
            except Exception:
                logger.exception("Reminder tick callback failed")

        await asyncio.sleep(sleep_s)
