# src/duetrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- resolves the session timezone once,
- wires the HTTP store client and the lifecycle controller into AppState.
"""

from __future__ import annotations

import logging

import httpx

from ..config import Settings, get_settings
from ..core.ports import Confirmer, Notifier
from ..core.state import AppState, Session
from ..tasks.lifecycle import TaskLifecycleController
from ..tasks.store_client import TaskStoreClient
from ..tasks.timezones import resolve_timezone

logger = logging.getLogger(__name__)


def create_initial_state(
    *,
    notifier: Notifier,
    confirmer: Confirmer,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    zone = resolve_timezone(settings.timezone, default=settings.default_timezone)
    logger.info("Session timezone: %s", zone)

    if not settings.api_url:
        # Not fatal here: every store call reports it to the user instead.
        logger.warning("DUETRACK_API_URL is not set; store operations will fail.")

    session = Session(zone=zone)
    store = TaskStoreClient(
        settings.api_url,
        timeout_seconds=settings.http_timeout_seconds,
        transport=transport,
    )
    controller = TaskLifecycleController(session, store, notifier, confirmer)

    return AppState(settings=settings, session=session, store=store, controller=controller)
