"""MCP server exposing attendance logging and export tools."""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .container import build_container
from .errors import AttendanceError

mcp = FastMCP("squad-attendance")

_settings = load_settings()
_container = build_container(_settings)


@mcp.tool()
async def log_attendance(email: str, description: Optional[str] = None) -> dict:
    """Log attendance at today's meeting for the Notion user with this email."""

    try:
        return await _container.service.log_attendance(email, description)
    except AttendanceError as exc:
        raise ValueError(f"{exc.status}: {exc.message}") from exc


@mcp.tool()
async def export_attendance() -> dict:
    """Export last week's attendance to the Google Sheets report."""

    try:
        report = await _container.exporter.export_attendance()
    except AttendanceError as exc:
        raise ValueError(f"{exc.status}: {exc.message}") from exc
    return report.to_dict()


__all__ = ["mcp", "log_attendance", "export_attendance"]


if __name__ == "__main__":  # pragma: no cover
    mcp.run()
