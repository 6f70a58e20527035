# src/duetrack/tasks/due_dates.py

"""
Due-date normalization.

Entry format is the fixed literal `YYYY-MM-DD HH:mm` (24-hour, no zone suffix);
the zone always comes from the session. Parsing is strict: anything that does
not match exactly, or that names a wall time the zone skips, is rejected.

Instants are timezone-aware datetimes in UTC.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

ENTRY_FORMAT = "%Y-%m-%d %H:%M"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"
ENTRY_FORMAT_HINT = "YYYY-MM-DD HH:mm"

_ENTRY_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2})", re.ASCII)


def load_zone(name: str | None) -> ZoneInfo | None:
    """Return the ZoneInfo for an IANA name, or None if it cannot be loaded."""
    if not name or not name.strip():
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return None


def is_known_zone(name: str | None) -> bool:
    return load_zone(name) is not None


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_absolute(local_string: str, zone: str) -> datetime | None:
    """
    Parse `YYYY-MM-DD HH:mm` interpreted in `zone` into a UTC instant.

    Returns None for a malformed string, an impossible calendar value, an
    unknown zone, or a local time inside a DST gap. Wall times that occur
    twice (DST fall-back) resolve to the earlier occurrence.
    """
    tz = load_zone(zone)
    if tz is None or not isinstance(local_string, str):
        return None

    m = _ENTRY_RE.fullmatch(local_string)
    if m is None:
        return None

    year, month, day, hour, minute = (int(g) for g in m.groups())
    try:
        local = datetime(year, month, day, hour, minute, tzinfo=tz)
        instant = local.astimezone(UTC)
        # A skipped wall time does not survive the round trip through UTC.
        if instant.astimezone(tz).replace(tzinfo=None) != local.replace(tzinfo=None):
            return None
    except (ValueError, OverflowError):
        # Out of range once shifted to UTC (year 1 or 9999 edges).
        return None

    return instant


def to_local_string(instant: datetime, zone: str) -> str:
    """Format an instant as `YYYY-MM-DD HH:mm` in `zone`."""
    return instant.astimezone(ZoneInfo(zone)).strftime(ENTRY_FORMAT)


def to_display_string(instant: datetime, zone: str) -> str:
    """Like to_local_string, with seconds; for read-only list/reminder display."""
    return instant.astimezone(ZoneInfo(zone)).strftime(DISPLAY_FORMAT)


def to_iso_utc(instant: datetime) -> str:
    """Wire format: `2024-01-01T03:00:00.000Z`."""
    utc = instant.astimezone(UTC)
    return f"{utc.strftime('%Y-%m-%dT%H:%M:%S')}.{utc.microsecond // 1000:03d}Z"


def parse_iso(text: str) -> datetime:
    """
    Parse an ISO-8601 timestamp from the store into a UTC instant.

    Naive timestamps are taken as UTC. Raises ValueError when unparseable.
    """
    raw = text.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


# (upper bound in seconds, singular phrase, plural unit, seconds per unit)
_RELATIVE_STEPS: tuple[tuple[float, str, str, float], ...] = (
    (45, "a few seconds", "", 1),
    (90, "a minute", "", 60),
    (45 * 60, "", "minutes", 60),
    (90 * 60, "an hour", "", 3600),
    (22 * 3600, "", "hours", 3600),
    (36 * 3600, "a day", "", 86400),
    (26 * 86400, "", "days", 86400),
    (45 * 86400, "a month", "", 30 * 86400),
    (320 * 86400, "", "months", 30 * 86400),
    (548 * 86400, "a year", "", 365 * 86400),
)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def relative_description(instant: datetime, now: datetime | None = None) -> str:
    """
    Human phrase for the distance between `instant` and now: "in 3 hours",
    "5 minutes ago", "in a few seconds".

    `now` is read fresh when omitted, so the phrase is only valid for the
    moment it is produced.
    """
    if now is None:
        now = utc_now()

    delta = (instant - now).total_seconds()
    seconds = abs(delta)

    phrase = ""
    for upper, singular, plural, unit in _RELATIVE_STEPS:
        if seconds < upper:
            phrase = singular or f"{max(2, _round_half_up(seconds / unit))} {plural}"
            break
    else:
        years = max(2, _round_half_up(seconds / (365 * 86400)))
        phrase = f"{years} years"

    return f"in {phrase}" if delta >= 0 else f"{phrase} ago"
