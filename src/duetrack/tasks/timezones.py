# src/duetrack/tasks/timezones.py

"""
Session timezone resolution.

Two explicit steps:
- detect_timezone(): best guess from the environment (may return None)
- resolve_timezone(): detection with a fixed fallback zone

Resolve once per session and keep the result on the Session; all date math in
a session uses the same zone.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from ..config import DEFAULT_TIMEZONE
from .due_dates import is_known_zone

logger = logging.getLogger(__name__)

LOCALTIME_PATH = Path("/etc/localtime")

# Names that load as zones but say nothing about where the user is.
_NON_REGIONAL = {"UTC", "Etc/UTC", "GMT", "Etc/GMT", "localtime", "Factory"}


def _zone_from_localtime(path: Path) -> str | None:
    """/etc/localtime -> /usr/share/zoneinfo/Europe/Berlin gives Europe/Berlin."""
    try:
        target = path.resolve(strict=True)
    except (OSError, RuntimeError):
        return None

    parts = target.parts
    if "zoneinfo" not in parts:
        return None
    idx = len(parts) - 1 - parts[::-1].index("zoneinfo")
    name = "/".join(parts[idx + 1 :])
    # posix/ and right/ mirror the main tree
    for prefix in ("posix/", "right/"):
        if name.startswith(prefix):
            name = name[len(prefix) :]
    return name or None


def _candidates(configured: str | None, localtime: Path) -> Iterator[tuple[str, str | None]]:
    yield "configured", configured
    raw_tz = os.getenv("TZ")
    yield "TZ", raw_tz.lstrip(":") if raw_tz else None
    yield "localtime", _zone_from_localtime(localtime)


def _is_usable(name: str) -> bool:
    # Abbreviations such as EST or CET load but are ambiguous for the user.
    if name in _NON_REGIONAL or "/" not in name:
        return False
    return is_known_zone(name)


def detect_timezone(configured: str | None = None, *, localtime: Path = LOCALTIME_PATH) -> str | None:
    """
    Best-guess IANA zone for this environment, or None when detection is
    unavailable or ambiguous.

    An explicitly configured zone wins as long as it is a loadable IANA name.
    """
    for source, name in _candidates(configured, localtime):
        if not name:
            continue
        name = name.strip()
        if source == "configured" and is_known_zone(name):
            return name
        if _is_usable(name):
            logger.debug("Timezone detected from %s: %s", source, name)
            return name
        logger.debug("Ignoring timezone candidate from %s: %r", source, name)
    return None


def resolve_timezone(
    configured: str | None = None,
    *,
    default: str = DEFAULT_TIMEZONE,
    localtime: Path = LOCALTIME_PATH,
) -> str:
    """Detected zone, or `default` when nothing usable is found."""
    detected = detect_timezone(configured, localtime=localtime)
    if detected is not None:
        return detected
    logger.info("Could not detect a timezone, falling back to %s", default)
    return default
