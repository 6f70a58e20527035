# src/duetrack/tasks/lifecycle.py

"""
Task lifecycle controller.

Owns the session (collection, draft, edit target, reminder view) and turns
user intents into store calls. Two state axes:

- freshness: IDLE -> LOADING -> LOADED | ERRORED
- edit mode: CREATING <-> EDITING(task), via the draft's target

Every failure is caught at the operation boundary and reported through the
Notifier; operations return True/False instead of raising. Nothing is patched
locally: every successful mutation is followed by a full refresh.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from datetime import datetime

from ..core.ports import Confirmer, Notifier, TaskStore
from ..core.state import Session
from ..errors import ConfigurationError, DuetrackError, NetworkError, ValidationError
from .due_dates import ENTRY_FORMAT_HINT, to_absolute, to_local_string, utc_now
from .reminders import due_soon
from .task_models import Draft, EditMode, Freshness, Task, TaskFields

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_DRAFT_FIELDS = ("title", "description", "due_date", "email")


def validate_draft(draft: Draft, zone: str) -> TaskFields:
    """
    Local checks before anything goes over the wire.

    Raises ValidationError naming the first failing cause.
    """
    missing = [name for name in _DRAFT_FIELDS if not getattr(draft, name).strip()]
    if missing:
        raise ValidationError(
            f"Please fill in all fields (missing: {', '.join(missing)})",
            field=missing[0],
        )

    email = draft.email.strip()
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email address", field="email")

    instant = to_absolute(draft.due_date.strip(), zone)
    if instant is None:
        raise ValidationError(f"Invalid date format. Use {ENTRY_FORMAT_HINT}", field="due_date")

    return TaskFields(
        title=draft.title.strip(),
        description=draft.description.strip(),
        due_date=instant,
        email=email,
        timezone=zone,
    )


class TaskLifecycleController:
    def __init__(
        self,
        session: Session,
        store: TaskStore,
        notifier: Notifier,
        confirmer: Confirmer,
    ) -> None:
        self._session = session
        self._store = store
        self._notifier = notifier
        self._confirmer = confirmer

    # ---- read-only views for the presentation layer ----

    @property
    def zone(self) -> str:
        return self._session.zone

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._session.tasks

    @property
    def reminders(self) -> tuple[Task, ...]:
        return self._session.reminders

    @property
    def draft(self) -> Draft:
        return self._session.draft

    @property
    def edit_mode(self) -> EditMode:
        return self._session.draft.edit_mode

    @property
    def freshness(self) -> Freshness:
        return self._session.freshness

    @property
    def last_error(self) -> str | None:
        return self._session.last_error

    def find_task(self, task_id: str) -> Task | None:
        for task in self._session.tasks:
            if task.id == task_id:
                return task
        return None

    # ---- derived view ----

    def recompute_reminders(self, now: datetime | None = None) -> tuple[Task, ...]:
        """Re-derive the reminder view against `now` (read fresh when omitted)."""
        if now is None:
            now = utc_now()
        self._session.reminders = tuple(due_soon(self._session.tasks, now))
        return self._session.reminders

    # ---- operations ----

    async def refresh(self) -> bool:
        """Replace the collection from the store; keep the old one on failure."""
        session = self._session
        session.freshness = Freshness.LOADING
        try:
            tasks = await self._store.list_tasks()
        except DuetrackError as e:
            session.freshness = Freshness.ERRORED
            session.last_error = str(e)
            logger.warning("Refresh failed: %s", e)
            self._notifier.error(f"Could not load tasks: {e}")
            return False

        session.tasks = tuple(tasks)
        session.freshness = Freshness.LOADED
        session.last_error = None
        self.recompute_reminders()
        logger.debug("Refreshed: %d tasks, %d due soon", len(session.tasks), len(session.reminders))
        return True

    def update_draft(self, **fields: str) -> Draft:
        """Change draft fields (title, description, due_date, email); keeps the edit target."""
        unknown = set(fields) - set(_DRAFT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        self._session.draft = dataclasses.replace(self._session.draft, **fields)
        return self._session.draft

    def start_edit(self, task: Task) -> Draft:
        """Seed the draft from `task`; the due date is shown in the session zone."""
        self._session.draft = Draft(
            title=task.title,
            description=task.description,
            due_date=to_local_string(task.due_date, self._session.zone),
            email=task.email,
            target=task,
        )
        logger.debug("Editing task id=%s", task.id)
        return self._session.draft

    def cancel_edit(self) -> None:
        self._session.draft = Draft()

    async def submit(self, draft: Draft | None = None) -> bool:
        """
        Validate locally, then create or update depending on the draft's target.

        On failure the draft is kept so the user can fix it and resubmit.
        """
        if draft is not None:
            self._session.draft = draft
        draft = self._session.draft
        editing = draft.target is not None

        try:
            fields = validate_draft(draft, self._session.zone)
        except ValidationError as e:
            logger.info("Draft rejected (%s): %s", e.field, e)
            self._notifier.error(str(e))
            return False

        verb = "update" if editing else "create"
        try:
            if draft.target is not None:
                await self._store.update_task(draft.target.id, fields)
            else:
                await self._store.create_task(fields)
        except (ConfigurationError, NetworkError) as e:
            logger.warning("Could not %s task: %s", verb, e)
            self._notifier.error(f"Could not {verb} task: {e}")
            return False

        self._session.draft = Draft()
        self._notifier.success("Task updated" if editing else "Task created")
        await self.refresh()
        return True

    async def remove(self, task_id: str) -> bool:
        """Delete after explicit confirmation; a declined prompt makes no call."""
        return await self._delete(
            task_id,
            prompt="Are you sure you want to delete this task?",
            done_message="Task deleted",
        )

    async def complete(self, task_id: str) -> bool:
        """Mark a task as done; completed tasks are removed from the store."""
        return await self._delete(
            task_id,
            prompt="Mark this task as done? It will be removed.",
            done_message="Task marked as done",
        )

    async def _delete(self, task_id: str, *, prompt: str, done_message: str) -> bool:
        try:
            confirmed = await self._confirmer.confirm(prompt)
        except Exception:
            logger.exception("Confirmation prompt failed; treating as declined")
            confirmed = False

        if not confirmed:
            logger.debug("Delete of task id=%s not confirmed", task_id)
            return False

        try:
            await self._store.delete_task(task_id)
        except (ConfigurationError, NetworkError) as e:
            logger.warning("Could not delete task id=%s: %s", task_id, e)
            self._notifier.error(f"Could not delete task: {e}")
            return False

        target = self._session.draft.target
        if target is not None and target.id == task_id:
            self._session.draft = Draft()

        self._notifier.success(done_message)
        await self.refresh()
        return True
