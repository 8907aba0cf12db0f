"""Wires the Notion client, repositories and handlers from settings."""

from __future__ import annotations

from dataclasses import dataclass

from .config import Settings
from .notion_client import NotionClient
from .report import AttendanceExporter
from .repositories import AttendanceRepository, MeetingRepository, UserCache, UserRepository
from .schedule import MeetingSchedule
from .service import AttendanceService


@dataclass(frozen=True)
class Container:
    notion: NotionClient
    schedule: MeetingSchedule
    users: UserRepository
    meetings: MeetingRepository
    attendances: AttendanceRepository
    service: AttendanceService
    exporter: AttendanceExporter


def build_container(settings: Settings) -> Container:
    notion = NotionClient(settings.notion_token, base_url=settings.notion_api_base)
    schedule = MeetingSchedule(epsilon=settings.meeting_time_epsilon, tz=settings.timezone)
    users = UserRepository(notion, UserCache(notion))
    meetings = MeetingRepository(notion, settings)
    attendances = AttendanceRepository(notion, settings)
    return Container(
        notion=notion,
        schedule=schedule,
        users=users,
        meetings=meetings,
        attendances=attendances,
        service=AttendanceService(users, meetings, attendances, schedule),
        exporter=AttendanceExporter(settings, meetings, attendances, schedule),
    )


__all__ = ["Container", "build_container"]
