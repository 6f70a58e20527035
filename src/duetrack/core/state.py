# src/duetrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..tasks.task_models import Draft, Freshness, Task

if TYPE_CHECKING:
    from ..config import Settings
    from ..tasks.lifecycle import TaskLifecycleController
    from ..tasks.store_client import TaskStoreClient


@dataclass
class Session:
    """
    Session-scoped state, owned and mutated only by the lifecycle controller.

    zone is resolved once at startup. tasks is replaced wholesale on every
    successful refresh; reminders is the derived view for the last evaluation.
    """

    zone: str

    tasks: tuple[Task, ...] = ()
    freshness: Freshness = Freshness.IDLE
    last_error: str | None = None

    draft: Draft = field(default_factory=Draft)
    reminders: tuple[Task, ...] = ()


@dataclass
class AppState:
    # Store Settings on the state for easy access in commands/connectors.
    settings: Settings

    session: Session
    store: TaskStoreClient
    controller: TaskLifecycleController
