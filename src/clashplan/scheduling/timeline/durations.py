"""Duration and timestamp helpers (millisecond durations, local wall-clock timestamps)."""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

_BUILD_TIME_RE = {
    "days": re.compile(r"(\d+)\s*d"),
    "hours": re.compile(r"(\d+)\s*h"),
    "minutes": re.compile(r"(\d+)\s*m"),
}
_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def to_millis(days: int = 0, hours: int = 0, minutes: int = 0) -> int:
    """Convert a day/hour/minute triple into milliseconds.

    Negative components are clamped to zero rather than rejected.
    """

    days = max(int(days), 0)
    hours = max(int(hours), 0)
    minutes = max(int(minutes), 0)
    return days * DAY_MS + hours * HOUR_MS + minutes * MINUTE_MS


def split_millis(ms: int) -> tuple[int, int, int]:
    """Return the floor ``(days, hours, minutes)`` decomposition of ``ms``."""

    ms = max(int(ms), 0)
    days, rest = divmod(ms, DAY_MS)
    hours, rest = divmod(rest, HOUR_MS)
    minutes = rest // MINUTE_MS
    return days, hours, minutes


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def format_duration(ms: int) -> str:
    """Render ``ms`` as ``"1 day 2 hours 5 minutes"``, omitting zero components."""

    days, hours, minutes = split_millis(ms)
    parts = []
    if days:
        parts.append(_plural(days, "day"))
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes:
        parts.append(_plural(minutes, "minute"))
    return " ".join(parts) if parts else "0 minutes"


def format_duration_short(days: int, hours: int, minutes: int) -> str:
    """Compact ``"1d 2h 30m"`` form used for task duration labels."""

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    return " ".join(parts) if parts else "0m"


def format_absolute_time(timestamp: datetime) -> str:
    """Render ``DD/MM, HH:MM`` on a 24-hour clock, without timezone conversion."""

    return timestamp.strftime("%d/%m, %H:%M")


def parse_build_time(text: str) -> int:
    """Parse strings such as ``"1d 4h 30m"`` into milliseconds.

    Missing components count as zero; an unparseable string yields ``0``.
    """

    values = {}
    for unit, pattern in _BUILD_TIME_RE.items():
        match = pattern.search(text or "")
        values[unit] = int(match.group(1)) if match else 0
    return to_millis(values["days"], values["hours"], values["minutes"])


def parse_clock(text: str) -> time:
    """Parse ``"HH:MM"`` into a :class:`datetime.time`."""

    match = _CLOCK_RE.match(text or "")
    if not match:
        raise ValueError(f"Expected a HH:MM time of day (got '{text}')")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time of day out of range: '{text}'")
    return time(hour, minute)


def add_millis(timestamp: datetime, ms: int) -> datetime:
    return timestamp + timedelta(milliseconds=ms)


def millis_between(start: datetime, end: datetime) -> int:
    """Signed milliseconds from ``start`` to ``end``."""

    return int((end - start) / timedelta(milliseconds=1))


__all__ = [
    "MINUTE_MS",
    "HOUR_MS",
    "DAY_MS",
    "to_millis",
    "split_millis",
    "format_duration",
    "format_duration_short",
    "format_absolute_time",
    "parse_build_time",
    "parse_clock",
    "add_millis",
    "millis_between",
]
