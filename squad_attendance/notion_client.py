"""HTTP client for interacting with the Notion REST API."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Dict, List, Optional

import httpx

NOTION_API_BASE = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"


class NotionApiError(RuntimeError):
    """Raised when Notion returns an error response."""

    def __init__(self, path: str, status_code: int, code: str, message: str = "") -> None:
        super().__init__(f"Notion API error for {path}: {status_code} {code} {message}".rstrip())
        self.path = path
        self.status_code = status_code
        self.code = code


class NotionClient:
    """Async wrapper around the Notion endpoints used by Squad Attendance."""

    def __init__(
        self,
        token: str,
        timeout: float = 10.0,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or NOTION_API_BASE,
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": NOTION_VERSION,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        response = await self._client.request(method, path, params=params, json=json)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            raise NotionApiError(
                path,
                response.status_code,
                data.get("code", "unknown_error"),
                data.get("message", ""),
            )
        return data

    async def list_users(self) -> List[Dict[str, Any]]:
        users: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"page_size": 100}
            if cursor:
                params["start_cursor"] = cursor
            data = await self._request("GET", "/users", params=params)
            users.extend(data.get("results", []))
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break
        return users

    async def retrieve_user(self, user_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/users/{user_id}")

    async def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/pages/{page_id}")

    async def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        page_size: int = 100,
    ) -> List[Dict[str, Any]]:
        """Return every page in the database matching ``filter``, following pagination."""

        results: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            body: Dict[str, Any] = {"page_size": page_size}
            if filter:
                body["filter"] = filter
            if cursor:
                body["start_cursor"] = cursor
            data = await self._request("POST", f"/databases/{database_id}/query", json=body)
            results.extend(data.get("results", []))
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break
        return results

    async def query_first(
        self, database_id: str, filter: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        body: Dict[str, Any] = {"page_size": 1}
        if filter:
            body["filter"] = filter
        data = await self._request("POST", f"/databases/{database_id}/query", json=body)
        results = data.get("results", [])
        return results[0] if results else None

    async def create_page(
        self,
        database_id: str,
        properties: Dict[str, Any],
        children: Iterable[Dict[str, Any]] = (),
    ) -> Dict[str, Any]:
        body = {
            "parent": {"database_id": database_id},
            "properties": properties,
            "children": list(children),
        }
        return await self._request("POST", "/pages", json=body)


def rich_text(text: str) -> Dict[str, Any]:
    """Wrap text in the rich text shape Notion blocks expect."""

    return {"rich_text": [{"type": "text", "text": {"content": text}}]}


def title_property(text: str) -> Dict[str, Any]:
    return {"type": "title", "title": [{"type": "text", "text": {"content": text}}]}


def and_filter(filters: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not filters:
        return None
    if len(filters) == 1:
        return filters[0]
    return {"and": filters}


__all__ = [
    "NOTION_API_BASE",
    "NOTION_VERSION",
    "NotionApiError",
    "NotionClient",
    "and_filter",
    "rich_text",
    "title_property",
]
