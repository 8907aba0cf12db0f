"""Weekly trigger for the attendance export, anchored to the civil timezone."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable
from zoneinfo import ZoneInfo

from .errors import AttendanceError
from .report import AttendanceExporter
from .service import utc_now
from .timeutils import DEFAULT_TIMEZONE, to_civil

logger = logging.getLogger(__name__)

EXPORT_WEEKDAY = 6  # Sunday
EXPORT_TIME = time(5, 0)


def next_weekly_run(
    now: datetime,
    tz: str = DEFAULT_TIMEZONE,
    weekday: int = EXPORT_WEEKDAY,
    at: time = EXPORT_TIME,
) -> datetime:
    """Return the next instant strictly after ``now`` falling on ``weekday`` at ``at`` civil time."""

    local = to_civil(now, tz)
    days_ahead = (weekday - local.weekday()) % 7
    candidate = datetime.combine(local.date() + timedelta(days=days_ahead), at, tzinfo=ZoneInfo(tz))
    if candidate <= local:
        candidate = datetime.combine(
            local.date() + timedelta(days=days_ahead + 7), at, tzinfo=ZoneInfo(tz)
        )
    return candidate


async def run_weekly_export(
    exporter: AttendanceExporter,
    tz: str = DEFAULT_TIMEZONE,
    clock: Callable[[], datetime] = utc_now,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """Run the export every week. Failures are logged and the loop keeps going."""

    while True:
        now = clock()
        next_run = next_weekly_run(now, tz)
        delay = (next_run - now).total_seconds()
        logger.info("Next attendance export at %s", next_run.isoformat())
        await sleep(max(delay, 0.0))
        try:
            await exporter.export_attendance()
        except AttendanceError as exc:
            logger.error("Scheduled attendance export failed: %s %s", exc.status, exc.message)
        except Exception:
            logger.exception("Scheduled attendance export failed")


__all__ = ["EXPORT_TIME", "EXPORT_WEEKDAY", "next_weekly_run", "run_weekly_export"]
