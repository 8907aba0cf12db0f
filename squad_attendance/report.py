"""Weekly attendance aggregation and export to Google Sheets."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import gspread

from .config import Settings
from .errors import FailedPrecondition, Internal
from .google_sheets import (
    AMBER,
    GREEN,
    RED,
    basic_filter_view,
    color_point,
    get_or_create_worksheet,
    gradient_rule,
    open_spreadsheet,
    update_dimension,
)
from .models import Attendance, Meeting
from .repositories import AttendanceRepository, MeetingRepository
from .schedule import MeetingSchedule
from .service import utc_now
from .timeutils import (
    DEFAULT_TIMEZONE,
    ONE_DAY,
    civil_date_display,
    civil_date_key,
    date_from_civil_date_key,
    to_civil,
)

logger = logging.getLogger(__name__)

WEEK_HEADER = ["Email", "Day", "Hours", "", "Name", "Notion Email", "Attendance"]
AGGREGATE_HEADER = ["Name", "Email", "Day", "Hours"]

RECREATE_HINT = "It is recommended to delete the attendance sheet and re-run the export"


@dataclass(slots=True)
class DetailRow:
    email: str
    day: str
    hours: float


@dataclass(slots=True)
class AggregateRow:
    name: str
    email: str
    day: str
    hours: float

    def as_record(self) -> Dict[str, Any]:
        return {"Name": self.name, "Email": self.email, "Day": self.day, "Hours": self.hours}


@dataclass(slots=True)
class PersonSummary:
    name: str
    email: str
    hours: float
    attendance: float


@dataclass(slots=True)
class WeeklyReport:
    start: str
    end: str
    total_hours: float
    detail_rows: List[DetailRow] = field(default_factory=list)
    aggregate_rows: List[AggregateRow] = field(default_factory=list)
    people: List[PersonSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def week_range(now: datetime, tz: str = DEFAULT_TIMEZONE) -> tuple[datetime, datetime]:
    """Return civil midnight one week ago and civil midnight yesterday.

    Today is excluded because its meeting may still be in progress. The
    arithmetic is done on civil dates so a DST change inside the week does
    not shift the range.
    """

    today = to_civil(now, tz).date()
    start = date_from_civil_date_key((today - 7 * ONE_DAY).isoformat(), tz)
    end = date_from_civil_date_key((today - ONE_DAY).isoformat(), tz)
    return start, end


def weekly_sheet_title(start: datetime, end: datetime, tz: str) -> str:
    return f"{civil_date_display(start, tz)} - {civil_date_display(end, tz)}"


def summarize_week(
    meetings: Sequence[Meeting],
    attendances: Iterable[Attendance],
    schedule: MeetingSchedule,
    start: str = "",
    end: str = "",
) -> WeeklyReport:
    """Compute detail, aggregate and per-person rows for a set of meetings."""

    hours_by_meeting: Dict[str, float] = {}
    day_by_meeting: Dict[str, str] = {}
    total_hours = 0.0
    for meeting in meetings:
        hours = schedule.meeting_hours(meeting.date)
        hours_by_meeting[meeting.id] = hours
        day_by_meeting[meeting.id] = civil_date_key(meeting.date, schedule.tz)
        total_hours += hours

    report = WeeklyReport(start=start, end=end, total_hours=total_hours)
    seen: set[tuple[str, str]] = set()
    names: Dict[str, str] = {}
    person_hours: Dict[str, float] = {}
    for entry in attendances:
        name, email = entry.user.name, entry.user.email
        if not name or not email:
            continue
        if entry.meeting_id not in hours_by_meeting:
            continue
        if (email, entry.meeting_id) in seen:
            continue
        seen.add((email, entry.meeting_id))

        hours = hours_by_meeting[entry.meeting_id]
        day = day_by_meeting[entry.meeting_id]
        report.detail_rows.append(DetailRow(email=email, day=day, hours=hours))
        report.aggregate_rows.append(AggregateRow(name=name, email=email, day=day, hours=hours))
        names.setdefault(email, name)
        person_hours[email] = person_hours.get(email, 0.0) + hours

    for email, name in names.items():
        hours = person_hours[email]
        report.people.append(
            PersonSummary(
                name=name,
                email=email,
                hours=hours,
                attendance=hours / total_hours if total_hours else 0.0,
            )
        )
    return report


def weekly_sheet_values(report: WeeklyReport) -> List[List[Any]]:
    """Header, detail rows in A-C and one summary row per person in E-G."""

    values: List[List[Any]] = [list(WEEK_HEADER)]
    for index, row in enumerate(report.detail_rows):
        line: List[Any] = [row.email, row.day, row.hours]
        if index < len(report.people):
            person = report.people[index]
            line += ["", person.name, person.email, f"=SUMIF(A2:A, F{index + 2}, C2:C) / J3"]
        values.append(line)
    return values


def metadata_values(report: WeeklyReport, target: float, minimum: float) -> List[List[Any]]:
    return [
        ["Attendance Target", target],
        ["Minimum Attendance", minimum],
        ["Total Meeting Hours", report.total_hours],
        ["Total Man Hours", "=SUM(C2:C)"],
    ]


def aggregate_values(header: Sequence[str], rows: Iterable[AggregateRow]) -> List[List[Any]]:
    columns = [column for column in header if column] or AGGREGATE_HEADER
    return [[row.as_record().get(column, "") for column in columns] for row in rows]


class AttendanceExporter:
    """Writes last week's attendance to the weekly and aggregate worksheets."""

    def __init__(
        self,
        settings: Settings,
        meetings: MeetingRepository,
        attendances: AttendanceRepository,
        schedule: MeetingSchedule,
        spreadsheet_factory: Optional[Callable[[], gspread.Spreadsheet]] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.meetings = meetings
        self.attendances = attendances
        self.schedule = schedule
        self.spreadsheet_factory = spreadsheet_factory or (lambda: open_spreadsheet(settings))
        self.clock = clock

    async def export_attendance(self) -> WeeklyReport:
        logger.debug("Exporting attendance")
        tz = self.settings.timezone
        try:
            spreadsheet = await asyncio.to_thread(self.spreadsheet_factory)
        except Exception as exc:
            logger.exception("Error opening attendance spreadsheet")
            raise Internal("Error opening attendance spreadsheet") from exc

        try:
            aggregate_sheet = await asyncio.to_thread(
                spreadsheet.get_worksheet_by_id, self.settings.google_aggregate_worksheet_id
            )
        except gspread.exceptions.WorksheetNotFound as exc:
            logger.error("Aggregate worksheet not found")
            raise FailedPrecondition("Attendance aggregate worksheet not found") from exc
        except Exception as exc:
            logger.exception("Error getting attendance aggregate worksheet")
            raise Internal("Error getting attendance data") from exc

        now = self.clock()
        start, end = week_range(now, tz)
        try:
            week_sheet, meetings, attendances = await asyncio.gather(
                asyncio.to_thread(
                    get_or_create_worksheet, spreadsheet, weekly_sheet_title(start, end, tz)
                ),
                self.meetings.query(on_or_after=start, on_or_before=end),
                # created_time filters compare UTC dates, so bound by now and let
                # the meeting lookup drop entries outside the range
                self.attendances.query(on_or_after=start, on_or_before=now),
            )
        except Exception as exc:
            logger.exception("Error getting attendance data")
            raise Internal("Error getting attendance data") from exc

        report = summarize_week(
            meetings,
            attendances,
            self.schedule,
            start=civil_date_key(start, tz),
            end=civil_date_key(end, tz),
        )

        try:
            await asyncio.to_thread(self._append_aggregate, aggregate_sheet, report)
            await asyncio.to_thread(self._write_week_sheet, spreadsheet, week_sheet, report)
        except Exception as exc:
            logger.exception("Error updating attendance sheet. %s", RECREATE_HINT)
            raise Internal("Error updating attendance sheet") from exc

        logger.info(
            "Attendance exported for %s - %s: %s rows, %s people, %s meeting hours",
            report.start,
            report.end,
            len(report.detail_rows),
            len(report.people),
            report.total_hours,
        )
        return report

    def _append_aggregate(self, worksheet: gspread.Worksheet, report: WeeklyReport) -> None:
        if not report.aggregate_rows:
            return
        values = aggregate_values(worksheet.row_values(1), report.aggregate_rows)
        worksheet.append_rows(
            values, value_input_option="USER_ENTERED", insert_data_option="INSERT_ROWS"
        )

    def _write_week_sheet(
        self, spreadsheet: gspread.Spreadsheet, worksheet: gspread.Worksheet, report: WeeklyReport
    ) -> None:
        worksheet.batch_update(
            [
                {"range": "A1", "values": weekly_sheet_values(report)},
                {
                    "range": "I1:J4",
                    "values": metadata_values(
                        report, self.settings.attendance_target, self.settings.attendance_minimum
                    ),
                },
            ],
            value_input_option="USER_ENTERED",
        )

        formats: List[Dict[str, Any]] = [
            {"range": "J1:J2", "format": {"numberFormat": {"type": "PERCENT", "pattern": "0%"}}}
        ]
        if report.people:
            formats.append(
                {
                    "range": f"G2:G{len(report.people) + 1}",
                    "format": {"numberFormat": {"type": "PERCENT", "pattern": "0.0%"}},
                }
            )
        if report.detail_rows:
            formats.append(
                {
                    "range": f"B2:B{len(report.detail_rows) + 1}",
                    "format": {"numberFormat": {"type": "DATE", "pattern": "M/D/YYYY"}},
                }
            )
        worksheet.batch_format(formats)

        spreadsheet.batch_update({"requests": self.format_requests(worksheet.id, report)})

    def format_requests(self, sheet_id: int, report: WeeklyReport) -> List[Dict[str, Any]]:
        requests: List[Dict[str, Any]] = []
        if report.people:
            requests.append(
                gradient_rule(
                    sheet_id,
                    start_row=1,
                    end_row=len(report.people) + 1,
                    start_column=6,
                    end_column=7,
                    minpoint=color_point(RED, 0),
                    midpoint=color_point(AMBER, self.settings.attendance_minimum),
                    maxpoint=color_point(GREEN, self.settings.attendance_target),
                )
            )
        requests += [
            update_dimension(sheet_id, "COLUMNS", 200, 0, 1),
            update_dimension(sheet_id, "COLUMNS", 200, 4, 6),
            update_dimension(sheet_id, "COLUMNS", 135, 8),
            update_dimension(sheet_id, "COLUMNS", 50, 9),
            basic_filter_view(sheet_id, 0, 3, "Email"),
        ]
        return requests


__all__ = [
    "AGGREGATE_HEADER",
    "AggregateRow",
    "AttendanceExporter",
    "DetailRow",
    "PersonSummary",
    "WEEK_HEADER",
    "WeeklyReport",
    "aggregate_values",
    "metadata_values",
    "summarize_week",
    "week_range",
    "weekly_sheet_title",
]
