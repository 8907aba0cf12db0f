"""Weekly schedule of valid meeting windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from .timeutils import DEFAULT_TIMEZONE, civil_time, civil_weekday, minutes_since_midnight


@dataclass(frozen=True, slots=True)
class MeetingWindow:
    """A weekday plus a start/end time, both in minutes since civil midnight."""

    weekday: str
    start: int
    end: int

    @classmethod
    def from_times(cls, weekday: str, start: str, end: str) -> "MeetingWindow":
        return cls(weekday, minutes_since_midnight(start), minutes_since_midnight(end))

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start) / 60

    def contains(self, minutes: int, epsilon: int = 0) -> bool:
        return self.start - epsilon <= minutes <= self.end + epsilon


DEFAULT_WINDOWS: tuple[MeetingWindow, ...] = (
    MeetingWindow.from_times("Tuesday", "16:00", "19:00"),
    MeetingWindow.from_times("Wednesday", "16:00", "19:00"),
    MeetingWindow.from_times("Thursday", "16:00", "19:00"),
    MeetingWindow.from_times("Saturday", "10:00", "16:00"),
)

# meetings held on a day without a window are counted as 16:00-19:00
DEFAULT_MEETING_HOURS = 3.0

DEFAULT_EPSILON = 30


class MeetingSchedule:
    """Decides whether an instant falls inside a scheduled meeting window.

    Windows are matched by weekday in list order; when the same weekday
    appears more than once only the first entry is ever used. A weekday with
    no window at all is unscheduled, and logging against it is unrestricted.
    """

    def __init__(
        self,
        windows: Sequence[MeetingWindow] = DEFAULT_WINDOWS,
        epsilon: int = DEFAULT_EPSILON,
        tz: str | ZoneInfo = DEFAULT_TIMEZONE,
        default_hours: float = DEFAULT_MEETING_HOURS,
    ) -> None:
        self.windows = tuple(windows)
        self.epsilon = epsilon
        self.tz = tz
        self.default_hours = default_hours

    def window_for(self, weekday: str) -> Optional[MeetingWindow]:
        return next((window for window in self.windows if window.weekday == weekday), None)

    def window_at(self, instant: datetime) -> Optional[MeetingWindow]:
        return self.window_for(civil_weekday(instant, self.tz))

    def is_scheduled_day(self, instant: datetime) -> bool:
        return self.window_at(instant) is not None

    def is_within_window(self, instant: datetime) -> bool:
        """True only when the weekday has a window and the time is inside it (± epsilon)."""

        window = self.window_at(instant)
        if window is None:
            return False
        minutes = minutes_since_midnight(civil_time(instant, self.tz))
        return window.contains(minutes, self.epsilon)

    def is_within_schedule(self, instant: datetime) -> bool:
        if not self.is_scheduled_day(instant):
            return True
        return self.is_within_window(instant)

    def meeting_hours(self, meeting_date: datetime) -> float:
        window = self.window_at(meeting_date)
        return window.duration_hours if window else self.default_hours


__all__ = [
    "DEFAULT_EPSILON",
    "DEFAULT_MEETING_HOURS",
    "DEFAULT_WINDOWS",
    "MeetingSchedule",
    "MeetingWindow",
]
