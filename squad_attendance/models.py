"""Dataclasses representing Squad Attendance records stored in Notion."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from .config import NotionSchema
from .errors import MalformedRecordError
from .timeutils import DEFAULT_TIMEZONE, date_from_civil_date_key


def _properties(page: Mapping[str, Any]) -> Mapping[str, Any]:
    properties = page.get("properties")
    if not properties:
        raise MalformedRecordError(f"Page {page.get('id')} has no properties (partial page)")
    return properties


@dataclass(slots=True)
class User:
    id: str
    type: str = "person"
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_notion(cls, payload: Mapping[str, Any], strict: bool = True) -> "User":
        """Build a user from a Notion user object.

        With ``strict`` a person must carry both a name and an email. Users
        embedded in page properties are parsed leniently because Notion may
        omit those fields there.
        """

        user_id = payload.get("id")
        if not user_id:
            raise MalformedRecordError("User id is undefined")
        user_type = payload.get("type", "person")
        name = payload.get("name") or None
        if user_type == "bot":
            return cls(id=user_id, type="bot", name=name)

        email = (payload.get("person") or {}).get("email") or None
        if strict:
            if not email:
                raise MalformedRecordError(f"User {user_id} email is undefined")
            if not name:
                raise MalformedRecordError(f"User {user_id} name is undefined")
        return cls(id=user_id, type="person", name=name, email=email)


@dataclass(slots=True)
class Meeting:
    id: str
    date: datetime

    @classmethod
    def from_page(
        cls,
        page: Mapping[str, Any],
        schema: NotionSchema,
        tz: str | ZoneInfo = DEFAULT_TIMEZONE,
    ) -> "Meeting":
        prop = _properties(page).get(schema.meeting_date)
        if not prop or prop.get("type") != "date":
            raise MalformedRecordError("Meeting date is undefined")
        start = (prop.get("date") or {}).get("start")
        if not start:
            raise MalformedRecordError("Meeting date is undefined")
        # the date may carry a time component when edited by hand in Notion
        return cls(id=page["id"], date=date_from_civil_date_key(start[:10], tz))


@dataclass(slots=True)
class Attendance:
    id: str
    user: User
    meeting_id: Optional[str]
    description: Optional[str] = None

    @classmethod
    def from_page(cls, page: Mapping[str, Any], schema: NotionSchema) -> "Attendance":
        properties = _properties(page)

        person_prop = properties.get(schema.attendance_person)
        if not person_prop or person_prop.get("type") != "people" or not person_prop.get("people"):
            raise MalformedRecordError("Attendance person is undefined")
        person = person_prop["people"][0]
        if person.get("type", "person") != "person":
            raise MalformedRecordError("Attendance person is not a person")

        meeting_prop = properties.get(schema.attendance_meeting)
        if not meeting_prop or meeting_prop.get("type") != "relation":
            raise MalformedRecordError("Attendance meeting is not a relation")
        relation = meeting_prop.get("relation") or []

        return cls(
            id=page["id"],
            user=User.from_notion(person, strict=False),
            meeting_id=relation[0]["id"] if relation else None,
        )


__all__ = ["Attendance", "Meeting", "User"]
