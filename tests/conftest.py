# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from duetrack.config import Settings
from duetrack.core.state import Session
from duetrack.tasks.lifecycle import TaskLifecycleController

from .fakes import FakeConfirmer, FakeNotifier, FakeTaskStore

ZONE = "Asia/Ho_Chi_Minh"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Explicit Settings rather than Settings.from_env(), so the developer's
    environment and .env never leak into unit tests.
    """
    return Settings(
        app_name="duetrack-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        api_url="http://store.test/api/tasks",
        http_timeout_seconds=5.0,
        timezone=ZONE,
        default_timezone=ZONE,
        reminder_tick_seconds=60.0,
    )


@pytest.fixture()
def session() -> Session:
    return Session(zone=ZONE)


@pytest.fixture()
def store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def confirmer() -> FakeConfirmer:
    return FakeConfirmer(answer=True)


@pytest.fixture()
def controller(
    session: Session,
    store: FakeTaskStore,
    notifier: FakeNotifier,
    confirmer: FakeConfirmer,
) -> TaskLifecycleController:
    return TaskLifecycleController(session, store, notifier, confirmer)
