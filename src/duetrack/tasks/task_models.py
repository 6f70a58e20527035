# src/duetrack/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from .due_dates import parse_iso, to_iso_utc


class Freshness(StrEnum):
    """How the in-memory collection relates to the remote store."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


class EditMode(StrEnum):
    CREATING = "creating"
    EDITING = "editing"


@dataclass(slots=True, frozen=True)
class Task:
    """
    A task as owned by the remote store.

    due_date is always a timezone-aware UTC instant; timezone is the zone the
    due date was authored in and is only used for display.
    """

    id: str
    title: str
    description: str
    due_date: datetime
    email: str
    timezone: str | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Task:
        """
        Build a Task from a store record.

        Raises ValueError/KeyError/TypeError for records without an id or a
        parseable dueDate.
        """
        task_id = record["_id"]
        if task_id is None or str(task_id).strip() == "":
            raise ValueError("record has an empty _id")
        raw_tz = record.get("timezone")
        return cls(
            id=str(task_id),
            title=str(record.get("title") or ""),
            description=str(record.get("description") or ""),
            due_date=parse_iso(str(record["dueDate"])),
            email=str(record.get("email") or ""),
            timezone=str(raw_tz) if raw_tz else None,
        )


@dataclass(slots=True, frozen=True)
class TaskFields:
    """Outbound create/update payload."""

    title: str
    description: str
    due_date: datetime
    email: str
    timezone: str

    def to_payload(self) -> dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "dueDate": to_iso_utc(self.due_date),
            "email": self.email,
            "timezone": self.timezone,
        }


@dataclass(slots=True, frozen=True)
class Draft:
    """
    Edit buffer behind the create/update form.

    due_date is the local-zone string exactly as typed (YYYY-MM-DD HH:mm).
    target is the task being edited; None means a new task is being created.
    """

    title: str = ""
    description: str = ""
    due_date: str = ""
    email: str = ""
    target: Task | None = None

    @property
    def edit_mode(self) -> EditMode:
        return EditMode.CREATING if self.target is None else EditMode.EDITING
