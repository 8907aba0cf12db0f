"""Configuration helpers for Squad Attendance."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = ("https://localhost:5173", "https://sushisquad.org")


@dataclass(slots=True)
class NotionSchema:
    """Property names used in the Notion meeting and attendance databases."""

    meeting_title: str = "Name"
    meeting_date: str = "Date"
    attendance_title: str = "Title"
    attendance_person: str = "Person"
    attendance_meeting: str = "Engineering Notebook"


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    notion_token: str
    notion_meetings_db_id: str
    notion_attendance_db_id: str
    google_sheet_id: str
    google_aggregate_worksheet_id: int
    google_service_account_email: str
    google_private_key: str
    timezone: str = "America/Los_Angeles"
    meeting_time_epsilon: int = 30
    attendance_target: float = 0.75
    attendance_minimum: float = 0.5
    attendance_form_url: str = "https://sushisquad.org/sushi-squad-attendance"
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    export_schedule_enabled: bool = True
    notion_api_base: Optional[str] = None
    notion: NotionSchema = field(default_factory=NotionSchema)


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"{name} must be configured")
    return value


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    notion_token = _require("NOTION_TOKEN")
    meetings_db = _require("NOTION_MEETINGS_DBID")
    attendance_db = _require("NOTION_ATTENDANCE_DBID")
    sheet_id = _require("GOOGLE_ATTENDANCE_SHEET_ID")
    aggregate_id = _require("GOOGLE_ATTENDANCE_AGGREGATE_WORKSHEET_ID")
    service_email = _require("GOOGLE_SERVICE_ACCOUNT_EMAIL")
    # keys pasted into .env files usually carry escaped newlines
    private_key = _require("GOOGLE_PRIVATE_KEY").replace("\\n", "\n")

    try:
        aggregate_worksheet_id = int(aggregate_id)
    except ValueError as exc:
        raise RuntimeError("GOOGLE_ATTENDANCE_AGGREGATE_WORKSHEET_ID must be an integer") from exc

    origins = os.getenv("CORS_ORIGINS")
    cors_origins = (
        tuple(origin.strip() for origin in origins.split(",") if origin.strip())
        if origins
        else DEFAULT_CORS_ORIGINS
    )

    schema = NotionSchema(
        meeting_title=os.getenv("NOTION_MEETING_TITLE_PROPERTY", "Name"),
        meeting_date=os.getenv("NOTION_MEETING_DATE_PROPERTY", "Date"),
        attendance_title=os.getenv("NOTION_ATTENDANCE_TITLE_PROPERTY", "Title"),
        attendance_person=os.getenv("NOTION_ATTENDANCE_PERSON_PROPERTY", "Person"),
        attendance_meeting=os.getenv(
            "NOTION_ATTENDANCE_MEETING_PROPERTY", "Engineering Notebook"
        ),
    )

    return Settings(
        notion_token=notion_token,
        notion_meetings_db_id=meetings_db,
        notion_attendance_db_id=attendance_db,
        google_sheet_id=sheet_id,
        google_aggregate_worksheet_id=aggregate_worksheet_id,
        google_service_account_email=service_email,
        google_private_key=private_key,
        timezone=os.getenv("TIMEZONE", "America/Los_Angeles"),
        meeting_time_epsilon=int(os.getenv("MEETING_TIME_EPSILON", "30")),
        attendance_target=float(os.getenv("ATTENDANCE_TARGET", "0.75")),
        attendance_minimum=float(os.getenv("ATTENDANCE_MINIMUM", "0.5")),
        attendance_form_url=os.getenv(
            "ATTENDANCE_FORM_URL", "https://sushisquad.org/sushi-squad-attendance"
        ),
        cors_origins=cors_origins,
        export_schedule_enabled=_as_bool(os.getenv("EXPORT_SCHEDULE_ENABLED", "true")),
        notion_api_base=os.getenv("NOTION_API_BASE"),
        notion=schema,
    )


__all__ = ["NotionSchema", "Settings", "load_settings"]
