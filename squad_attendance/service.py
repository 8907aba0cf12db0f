"""Attendance logging: validate a submission and record it in Notion."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .errors import AlreadyExists, AttendanceError, DeadlineExceeded, Internal, InvalidArgument
from .repositories import AttendanceRepository, MeetingRepository, UserRepository
from .schedule import MeetingSchedule

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_email(value: Any) -> str:
    """Return the trimmed email or raise :class:`InvalidArgument`."""

    if not value or not isinstance(value, str):
        raise InvalidArgument("No email")
    email = value.strip()
    if not EMAIL_PATTERN.match(email):
        raise InvalidArgument("Invalid email")
    return email


class AttendanceService:
    """Records one attendance entry per person per meeting."""

    def __init__(
        self,
        users: UserRepository,
        meetings: MeetingRepository,
        attendances: AttendanceRepository,
        schedule: MeetingSchedule,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.users = users
        self.meetings = meetings
        self.attendances = attendances
        self.schedule = schedule
        self.clock = clock

    async def log_attendance(self, email: Any, description: Optional[Any] = None) -> Dict[str, str]:
        logger.debug("Attendance log requested for email %s: %s", email, description)
        trimmed_email = validate_email(email)
        parsed_description = description.strip() if isinstance(description, str) else ""

        try:
            await self._record(trimmed_email, parsed_description)
        except AttendanceError:
            raise
        except Exception as exc:
            logger.exception("Error logging attendance for %s", trimmed_email)
            raise Internal("Error logging attendance") from exc

        logger.debug("Attendance logged successfully for %s", trimmed_email)
        return {"message": "Attendance logged successfully"}

    async def _record(self, email: str, description: str) -> None:
        user = await self.users.find_by_email(email)
        if user is None:
            raise InvalidArgument("Found no user with that email")

        now = self.clock()
        meeting = await self.meetings.get_by_date(now)
        if meeting is None:
            # only scheduled windows may open a new meeting
            if not self.schedule.is_within_window(now):
                raise DeadlineExceeded("No meeting to attend at this time")
            meeting = await self.meetings.create(now)
        else:
            if not self.schedule.is_within_schedule(now):
                raise DeadlineExceeded("No meeting to attend at this time")
            existing = await self.attendances.query(user_id=user.id, meeting_id=meeting.id)
            if existing:
                raise AlreadyExists("Already logged attendance")

        await self.attendances.create(user, meeting, description)


__all__ = ["AttendanceService", "EMAIL_PATTERN", "utc_now", "validate_email"]
