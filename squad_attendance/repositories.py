"""Repositories translating between records and Notion pages."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import Settings
from .errors import MalformedRecordError
from .models import Attendance, Meeting, User
from .notion_client import NotionClient, and_filter, rich_text, title_property
from .timeutils import civil_date_key

logger = logging.getLogger(__name__)


def _require_page(response: Dict[str, Any], action: str) -> Dict[str, Any]:
    if not response.get("properties"):
        raise MalformedRecordError(f"Notion API returned a partial page on {action}")
    return response


class UserCache:
    """Process-wide copy of the Notion user list.

    Populated on first use and kept until :meth:`invalidate` is called. Two
    callers racing on the first ``get`` may both fetch; the store is not
    mutated so the redundant request is harmless.
    """

    def __init__(self, client: NotionClient) -> None:
        self._client = client
        self._users: Optional[List[Dict[str, Any]]] = None

    @property
    def loaded(self) -> bool:
        return self._users is not None

    async def get(self) -> List[Dict[str, Any]]:
        if self._users is None:
            users = await self._client.list_users()
            logger.debug("Cached %s Notion users", len(users))
            self._users = users
        return self._users

    async def refresh(self) -> List[Dict[str, Any]]:
        self.invalidate()
        return await self.get()

    def invalidate(self) -> None:
        self._users = None


class UserRepository:
    def __init__(self, client: NotionClient, cache: UserCache) -> None:
        self.client = client
        self.cache = cache

    def create(self, *args: Any, **kwargs: Any) -> User:
        raise NotImplementedError("Users are managed in Notion")

    async def query(self, email: Optional[str] = None) -> List[User]:
        users = await self.cache.get()
        if email:
            match = next(
                (
                    u
                    for u in users
                    if u.get("type") == "person" and (u.get("person") or {}).get("email") == email
                ),
                None,
            )
            return [User.from_notion(match)] if match else []
        return [User.from_notion(u) for u in users]

    async def find_by_email(self, email: str) -> Optional[User]:
        users = await self.query(email=email)
        return users[0] if users else None

    async def get_by_id(self, user_id: str) -> User:
        return User.from_notion(await self.client.retrieve_user(user_id))


class MeetingRepository:
    def __init__(self, client: NotionClient, settings: Settings) -> None:
        self.client = client
        self.database_id = settings.notion_meetings_db_id
        self.schema = settings.notion
        self.tz = settings.timezone

    def _from_page(self, page: Dict[str, Any]) -> Meeting:
        return Meeting.from_page(page, self.schema, self.tz)

    async def create(self, date: datetime) -> Meeting:
        key = civil_date_key(date, self.tz)
        properties = {
            self.schema.meeting_title: title_property(key),
            self.schema.meeting_date: {
                "type": "date",
                "date": {"start": key, "time_zone": self.tz},
            },
        }
        response = await self.client.create_page(self.database_id, properties)
        meeting = self._from_page(_require_page(response, "page creation"))
        logger.info("Created meeting %s for %s", meeting.id, key)
        return meeting

    async def query(
        self, on_or_after: datetime, on_or_before: Optional[datetime] = None
    ) -> List[Meeting]:
        filters = [
            {
                "property": self.schema.meeting_date,
                "date": {"on_or_after": civil_date_key(on_or_after, self.tz)},
            }
        ]
        if on_or_before:
            filters.append(
                {
                    "property": self.schema.meeting_date,
                    "date": {"on_or_before": civil_date_key(on_or_before, self.tz)},
                }
            )
        results = await self.client.query_database(self.database_id, and_filter(filters))
        return [self._from_page(page) for page in results if page.get("properties")]

    async def get_by_date(self, date: datetime) -> Optional[Meeting]:
        page = await self.client.query_first(
            self.database_id,
            {
                "property": self.schema.meeting_date,
                "date": {"equals": civil_date_key(date, self.tz)},
            },
        )
        if page is None:
            return None
        return self._from_page(_require_page(page, "page retrieval"))

    async def get_by_id(self, meeting_id: str) -> Meeting:
        response = await self.client.retrieve_page(meeting_id)
        return self._from_page(_require_page(response, "page retrieval"))


class AttendanceRepository:
    def __init__(self, client: NotionClient, settings: Settings) -> None:
        self.client = client
        self.database_id = settings.notion_attendance_db_id
        self.schema = settings.notion
        self.tz = settings.timezone
        self.form_url = settings.attendance_form_url

    async def create(self, user: User, meeting: Meeting, description: str = "") -> Attendance:
        children: List[Dict[str, Any]] = [
            {
                "object": "block",
                "type": "paragraph",
                "paragraph": rich_text(f"Attendance logged via {self.form_url}"),
            }
        ]
        if description:
            children.append(
                {"object": "block", "type": "heading_2", "heading_2": rich_text("Description")}
            )
            children.append(
                {"object": "block", "type": "paragraph", "paragraph": rich_text(description)}
            )

        key = civil_date_key(meeting.date, self.tz)
        properties = {
            self.schema.attendance_title: title_property(f"{user.name} {key}"),
            self.schema.attendance_person: {"type": "people", "people": [{"id": user.id}]},
            self.schema.attendance_meeting: {"type": "relation", "relation": [{"id": meeting.id}]},
        }
        response = await self.client.create_page(self.database_id, properties, children)
        attendance = Attendance.from_page(_require_page(response, "page creation"), self.schema)
        attendance.description = description or None
        return attendance

    async def query(
        self,
        user_id: Optional[str] = None,
        meeting_id: Optional[str] = None,
        on_or_after: Optional[datetime] = None,
        on_or_before: Optional[datetime] = None,
    ) -> List[Attendance]:
        filters: List[Dict[str, Any]] = []
        if user_id:
            filters.append(
                {"property": self.schema.attendance_person, "people": {"contains": user_id}}
            )
        if meeting_id:
            filters.append(
                {"property": self.schema.attendance_meeting, "relation": {"contains": meeting_id}}
            )
        else:
            # entries without a meeting cannot be attributed to anything
            filters.append(
                {"property": self.schema.attendance_meeting, "relation": {"is_not_empty": True}}
            )
        if on_or_after:
            filters.append(
                {
                    "timestamp": "created_time",
                    "created_time": {"on_or_after": civil_date_key(on_or_after, self.tz)},
                }
            )
        if on_or_before:
            filters.append(
                {
                    "timestamp": "created_time",
                    "created_time": {"on_or_before": civil_date_key(on_or_before, self.tz)},
                }
            )
        results = await self.client.query_database(self.database_id, and_filter(filters))
        return [
            Attendance.from_page(page, self.schema) for page in results if page.get("properties")
        ]

    async def get_by_id(self, attendance_id: str) -> Attendance:
        response = await self.client.retrieve_page(attendance_id)
        return Attendance.from_page(_require_page(response, "page retrieval"), self.schema)


__all__ = ["AttendanceRepository", "MeetingRepository", "UserCache", "UserRepository"]
