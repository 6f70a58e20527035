# tests/test_commands.py

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from duetrack.cli.bootstrap import create_initial_state
from duetrack.cli.commands import CommandRegistry, registry, split_fields
from duetrack.core.state import AppState
from duetrack.tasks.due_dates import to_iso_utc

from .fakes import FakeConfirmer, FakeNotifier


class InMemoryStoreServer:
    """MockTransport handler behaving like the remote CRUD endpoint."""

    def __init__(self) -> None:
        self.records: list[dict] = []
        self.methods: list[str] = []
        self._next = 1

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.methods.append(request.method)
        parts = request.url.path.rstrip("/").split("/")
        task_id = parts[-1] if len(parts) > 3 else None

        if request.method == "GET":
            return httpx.Response(200, json=self.records)
        if request.method == "POST":
            record = {"_id": f"id{self._next}", **json.loads(request.content)}
            self._next += 1
            self.records.append(record)
            return httpx.Response(201, json=record)
        if request.method == "PUT":
            record = {"_id": task_id, **json.loads(request.content)}
            self.records = [record if r["_id"] == task_id else r for r in self.records]
            return httpx.Response(200, json=record)
        if request.method == "DELETE":
            self.records = [r for r in self.records if r["_id"] != task_id]
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture()
def server() -> InMemoryStoreServer:
    return InMemoryStoreServer()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def app(settings, server, notifier) -> AppState:
    return create_initial_state(
        settings=settings,
        notifier=notifier,
        confirmer=FakeConfirmer(answer=False),
        transport=httpx.MockTransport(server),
    )


@pytest.mark.asyncio
async def test_command_registry_routes_sync_and_async_handlers(app) -> None:
    reg = CommandRegistry()
    called = {"sync": 0, "async": 0}

    def h_sync(state, args):
        called["sync"] += 1
        return f"sync:{args}"

    async def h_async(state, args):
        called["async"] += 1
        return f"async:{args}"

    reg.register("a", h_sync, "a")
    reg.register("b", h_async, "b", aliases=["bee"])

    assert await reg.handle(app, "/a x y") == "sync:x y"
    assert await reg.handle(app, "/BEE z") == "async:z"
    assert called == {"sync": 1, "async": 1}


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(app) -> None:
    assert await registry.handle(app, "hello") is None
    assert "Unknown command" in (await registry.handle(app, "/nope") or "")
    assert "/add" in (await registry.handle(app, "/help") or "")


def test_split_fields_pads_missing_parts() -> None:
    assert split_fields("Title | Desc") == {
        "title": "Title",
        "description": "Desc",
        "due_date": "",
        "email": "",
    }


@pytest.mark.asyncio
async def test_add_edit_cancel_flow(app, server, notifier) -> None:
    await registry.handle(app, "/add Write report | Quarterly numbers | 2024-01-01 10:00 | a@b.co")

    assert server.methods == ["POST", "GET"]
    assert server.records[0]["dueDate"] == "2024-01-01T03:00:00.000Z"
    assert server.records[0]["timezone"] == "Asia/Ho_Chi_Minh"
    assert notifier.successes == ["Task created"]

    listing = await registry.handle(app, "/list")
    assert "Write report" in (listing or "")
    assert "2024-01-01 10:00:00 (Asia/Ho_Chi_Minh)" in (listing or "")

    reply = await registry.handle(app, "/edit 1")
    assert "2024-01-01 10:00" in (reply or "")
    assert "editing" in app.controller.edit_mode.value

    await registry.handle(app, "/save Write report v2 | Quarterly numbers | 2024-01-01 11:00 | a@b.co")
    assert server.methods[-2:] == ["PUT", "GET"]
    assert server.records[0]["title"] == "Write report v2"
    assert app.controller.draft.target is None

    await registry.handle(app, "/edit 1")
    assert await registry.handle(app, "/cancel") == "Edit cancelled."
    assert app.controller.draft.target is None


@pytest.mark.asyncio
async def test_add_with_missing_fields_reports_locally(app, server, notifier) -> None:
    await registry.handle(app, "/add Only a title")
    assert server.methods == []
    assert notifier.errors and "missing" in notifier.errors[0]


@pytest.mark.asyncio
async def test_delete_declined_keeps_task(app, server) -> None:
    server.records.append(
        {
            "_id": "x1",
            "title": "Keep me",
            "description": "d",
            "dueDate": "2030-01-01T00:00:00.000Z",
            "email": "a@b.co",
            "timezone": "Europe/Berlin",
        }
    )
    await registry.handle(app, "/refresh")
    await registry.handle(app, "/delete 1")

    assert "DELETE" not in server.methods
    assert len(server.records) == 1


@pytest.mark.asyncio
async def test_due_lists_only_the_next_24_hours(app, server) -> None:
    now = datetime.now(UTC)
    for i, due in enumerate([now + timedelta(days=5), now + timedelta(hours=2)]):
        server.records.append(
            {
                "_id": f"r{i}",
                "title": f"Task {i}",
                "description": "d",
                "dueDate": to_iso_utc(due),
                "email": "a@b.co",
                "timezone": "Asia/Ho_Chi_Minh",
            }
        )
    await app.controller.refresh()

    reply = await registry.handle(app, "/due") or ""
    assert "Task 1" in reply
    assert "Task 0" not in reply
    # Numbered by position in the full list.
    assert "2. Task 1" in reply
    assert "in 2 hours" in reply or "in an hour" in reply


@pytest.mark.asyncio
async def test_status_reports_zone_and_freshness(app) -> None:
    reply = await registry.handle(app, "/status") or ""
    assert "Asia/Ho_Chi_Minh" in reply
    assert "idle" in reply


@pytest.mark.asyncio
async def test_cancel_without_edit_clears_draft(app) -> None:
    app.controller.update_draft(title="Half-written")
    assert await registry.handle(app, "/cancel") == "Draft cleared."
    assert app.controller.draft.title == ""
    assert app.controller.draft.target is None
