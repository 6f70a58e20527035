# tests/test_reminders.py

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from duetrack.tasks.reminders import ReminderTracker, due_soon, run_reminder_ticker

from .fakes import FakeTaskStore, make_task

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def test_window_boundaries_are_closed() -> None:
    tasks = [
        make_task("at-now", due=NOW),
        make_task("at-horizon", due=NOW + timedelta(hours=24)),
        make_task("just-after", due=NOW + timedelta(hours=24, seconds=1)),
        make_task("just-before", due=NOW - timedelta(seconds=1)),
    ]
    assert [t.id for t in due_soon(tasks, NOW)] == ["at-now", "at-horizon"]


def test_output_keeps_collection_order() -> None:
    tasks = [
        make_task("c", due=NOW + timedelta(hours=20)),
        make_task("a", due=NOW + timedelta(hours=1)),
        make_task("b", due=NOW + timedelta(hours=5)),
    ]
    assert [t.id for t in due_soon(tasks, NOW)] == ["c", "a", "b"]


def test_membership_changes_with_time_alone() -> None:
    tasks = [make_task("t", due=NOW + timedelta(hours=30))]
    assert due_soon(tasks, NOW) == []
    assert [t.id for t in due_soon(tasks, NOW + timedelta(hours=6))] == ["t"]
    assert due_soon(tasks, NOW + timedelta(hours=31)) == []


def test_tracker_announces_each_entry_once() -> None:
    tracker = ReminderTracker()
    a = make_task("a", due=NOW)
    b = make_task("b", due=NOW)

    assert tracker.newly_due([a]) == [a]
    assert tracker.newly_due([a, b]) == [b]
    assert tracker.newly_due([a, b]) == []
    # Left the window, then came back.
    assert tracker.newly_due([b]) == []
    assert tracker.newly_due([a, b]) == [a]


@pytest.mark.asyncio
async def test_ticker_recomputes_and_survives_callback_errors(controller, store: FakeTaskStore) -> None:
    now = datetime.now(UTC)
    store.tasks = [make_task("soon", due=now + timedelta(hours=1))]
    await controller.refresh()

    seen: list[list[str]] = []

    def on_tick(reminders) -> None:
        seen.append([t.id for t in reminders])
        if len(seen) == 1:
            raise RuntimeError("render failed")

    runner = asyncio.create_task(run_reminder_ticker(controller, interval_seconds=0.01, on_tick=on_tick))

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert len(seen) >= 2, "Ticker should keep running after a failing callback"
    assert seen[0] == ["soon"]
