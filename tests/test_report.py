"""Tests for the weekly attendance aggregation."""

from datetime import timezone

import pytest

from squad_attendance.models import Attendance, Meeting, User
from squad_attendance.report import (
    AGGREGATE_HEADER,
    WEEK_HEADER,
    AggregateRow,
    aggregate_values,
    metadata_values,
    summarize_week,
    week_range,
    weekly_sheet_title,
    weekly_sheet_values,
)
from squad_attendance.schedule import MeetingSchedule
from squad_attendance.timeutils import date_from_civil_date_key

ADA = User(id="user-1", name="Ada Lovelace", email="ada@example.com")
GRACE = User(id="user-2", name="Grace Hopper", email="grace@example.com")


def meeting(key):
    return Meeting(id=f"meeting-{key}", date=date_from_civil_date_key(key))


def attended(user, key, index=0):
    return Attendance(id=f"{user.id}-{key}-{index}", user=user, meeting_id=f"meeting-{key}")


@pytest.fixture
def schedule():
    return MeetingSchedule()


def test_total_hours_for_tuesday_and_saturday(schedule):
    report = summarize_week([meeting("2024-01-09"), meeting("2024-01-13")], [], schedule)

    assert report.total_hours == 9.0


def test_unscheduled_meeting_uses_default_hours(schedule):
    report = summarize_week([meeting("2024-01-08")], [], schedule)

    assert report.total_hours == 3.0


def test_duplicate_entries_produce_one_row(schedule):
    report = summarize_week(
        [meeting("2024-01-09")],
        [attended(ADA, "2024-01-09", 0), attended(ADA, "2024-01-09", 1)],
        schedule,
    )

    assert len(report.detail_rows) == 1
    assert len(report.aggregate_rows) == 1
    assert report.aggregate_rows[0] == AggregateRow(
        name="Ada Lovelace", email="ada@example.com", day="2024-01-09", hours=3.0
    )


def test_three_of_four_meetings_is_seventy_five_percent(schedule):
    days = ["2024-01-09", "2024-01-10", "2024-01-11", "2024-01-16"]
    report = summarize_week(
        [meeting(day) for day in days],
        [attended(ADA, day) for day in days[:3]],
        schedule,
    )

    assert report.total_hours == 12.0
    (ada,) = report.people
    assert ada.hours == 9.0
    assert ada.attendance == pytest.approx(0.75)


def test_entries_without_meeting_or_identity_are_skipped(schedule):
    nameless = User(id="user-3", name=None, email="ghost@example.com")
    report = summarize_week(
        [meeting("2024-01-09")],
        [
            attended(ADA, "2024-01-02"),  # meeting outside the range
            attended(nameless, "2024-01-09"),
            attended(GRACE, "2024-01-09"),
        ],
        schedule,
    )

    assert [row.email for row in report.detail_rows] == ["grace@example.com"]
    assert [p.email for p in report.people] == ["grace@example.com"]


def test_people_keep_first_seen_order(schedule):
    report = summarize_week(
        [meeting("2024-01-09"), meeting("2024-01-13")],
        [attended(GRACE, "2024-01-09"), attended(ADA, "2024-01-09"), attended(GRACE, "2024-01-13")],
        schedule,
    )

    assert [(p.name, p.hours) for p in report.people] == [("Grace Hopper", 9.0), ("Ada Lovelace", 3.0)]


def test_no_meetings_gives_zero_attendance(schedule):
    report = summarize_week([], [attended(ADA, "2024-01-09")], schedule)

    assert report.total_hours == 0
    assert report.people == []


def test_weekly_sheet_values_layout(schedule):
    report = summarize_week(
        [meeting("2024-01-09"), meeting("2024-01-13")],
        [attended(ADA, "2024-01-09"), attended(ADA, "2024-01-13"), attended(GRACE, "2024-01-13")],
        schedule,
    )

    values = weekly_sheet_values(report)

    assert values[0] == WEEK_HEADER
    assert values[1] == [
        "ada@example.com",
        "2024-01-09",
        3.0,
        "",
        "Ada Lovelace",
        "ada@example.com",
        "=SUMIF(A2:A, F2, C2:C) / J3",
    ]
    assert values[2][4:6] == ["Grace Hopper", "grace@example.com"]
    assert values[3] == ["grace@example.com", "2024-01-13", 6.0]


def test_metadata_values(schedule):
    report = summarize_week([meeting("2024-01-09")], [], schedule)

    assert metadata_values(report, 0.75, 0.5) == [
        ["Attendance Target", 0.75],
        ["Minimum Attendance", 0.5],
        ["Total Meeting Hours", 3.0],
        ["Total Man Hours", "=SUM(C2:C)"],
    ]


def test_aggregate_values_follow_sheet_header():
    row = AggregateRow(name="Ada Lovelace", email="ada@example.com", day="2024-01-09", hours=3.0)

    assert aggregate_values(["Email", "Day", "Hours", "Name"], [row]) == [
        ["ada@example.com", "2024-01-09", 3.0, "Ada Lovelace"]
    ]
    assert aggregate_values([], [row]) == [[row.as_record()[c] for c in AGGREGATE_HEADER]]


def test_week_range_and_title(pacific):
    start, end = week_range(pacific(2024, 1, 14, 5, 0))

    assert weekly_sheet_title(start, end, "America/Los_Angeles") == "1/7/24 - 1/13/24"


def test_week_range_uses_civil_dates_across_daylight_saving(pacific):
    now = pacific(2024, 3, 11, 0, 30).astimezone(timezone.utc)

    start, end = week_range(now)

    assert (start, end) == (pacific(2024, 3, 4), pacific(2024, 3, 10))
    assert weekly_sheet_title(start, end, "America/Los_Angeles") == "3/4/24 - 3/10/24"
