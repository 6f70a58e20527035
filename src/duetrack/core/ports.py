# src/duetrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The lifecycle controller depends on Protocols instead of concrete
implementations, so the HTTP store, the console and test fakes are swappable.
"""

from typing import Protocol

from ..tasks.task_models import Task, TaskFields


class TaskStore(Protocol):
    """Remote CRUD endpoint. Every call may raise NetworkError or ConfigurationError."""

    async def list_tasks(self) -> list[Task]: ...
    async def create_task(self, fields: TaskFields) -> Task: ...
    async def update_task(self, task_id: str, fields: TaskFields) -> Task: ...
    async def delete_task(self, task_id: str) -> None: ...


class Notifier(Protocol):
    """Presentation-side sink for short user-facing messages."""

    def success(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class Confirmer(Protocol):
    """Presentation-side yes/no gate for destructive actions."""

    async def confirm(self, prompt: str) -> bool: ...
