"""Conversions between instants and the organization's civil timezone."""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Los_Angeles"

ONE_DAY = timedelta(days=1)


def _zone(tz: str | ZoneInfo) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


def to_civil(instant: datetime, tz: str | ZoneInfo = DEFAULT_TIMEZONE) -> datetime:
    """Convert an aware instant to civil time. Naive values are treated as UTC."""

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=ZoneInfo("UTC"))
    return instant.astimezone(_zone(tz))


def civil_weekday(instant: datetime, tz: str | ZoneInfo = DEFAULT_TIMEZONE) -> str:
    return to_civil(instant, tz).strftime("%A")


def civil_date_key(instant: datetime, tz: str | ZoneInfo = DEFAULT_TIMEZONE) -> str:
    """Return the civil date as ``YYYY-MM-DD``, the format Notion date filters expect."""

    return to_civil(instant, tz).date().isoformat()


def civil_date_display(instant: datetime, tz: str | ZoneInfo = DEFAULT_TIMEZONE) -> str:
    """Return the civil date as ``M/D/YY`` for report titles."""

    local = to_civil(instant, tz)
    return f"{local.month}/{local.day}/{local.year % 100:02d}"


def civil_time(instant: datetime, tz: str | ZoneInfo = DEFAULT_TIMEZONE) -> str:
    return to_civil(instant, tz).strftime("%H:%M")


def minutes_since_midnight(value: str) -> int:
    """Parse a 24-hour ``HH:MM`` string into minutes since midnight."""

    try:
        hours_str, minutes_str = value.strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid time {value!r}. Use HH:MM") from exc
    if not (0 <= hours <= 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time {value!r}. Use HH:MM")
    return hours * 60 + minutes


def date_from_civil_date_key(key: str, tz: str | ZoneInfo = DEFAULT_TIMEZONE) -> datetime:
    """Return the aware instant at civil midnight of a ``YYYY-MM-DD`` key."""

    try:
        day = datetime.strptime(key, "%Y-%m-%d")
    except ValueError as exc:
        raise ValueError(f"Invalid date {key!r}. Use YYYY-MM-DD") from exc
    return day.replace(tzinfo=_zone(tz))


__all__ = [
    "DEFAULT_TIMEZONE",
    "ONE_DAY",
    "civil_date_display",
    "civil_date_key",
    "civil_time",
    "civil_weekday",
    "date_from_civil_date_key",
    "minutes_since_midnight",
    "to_civil",
]
