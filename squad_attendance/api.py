"""FastAPI application exposing the attendance operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .container import Container, build_container
from .errors import AttendanceError, Internal
from .report import AttendanceExporter
from .scheduler import run_weekly_export
from .service import AttendanceService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[AttendanceService] = None,
    exporter: Optional[AttendanceExporter] = None,
) -> FastAPI:
    settings = settings or load_settings()
    container: Optional[Container] = None
    if service is None or exporter is None:
        container = build_container(settings)
        service = service or container.service
        exporter = exporter or container.exporter

    app = FastAPI(title="Squad Attendance API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(AttendanceError)
    async def attendance_error_handler(_: Request, exc: AttendanceError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content={"error": exc.to_dict()})

    @app.on_event("startup")
    async def startup_event() -> None:  # pragma: no cover - io bound
        if settings.export_schedule_enabled:
            app.state.export_task = asyncio.create_task(
                run_weekly_export(exporter, settings.timezone)
            )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        task = getattr(app.state, "export_task", None)
        if task is not None:
            task.cancel()
        if container is not None:
            await container.notion.close()

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/log-attendance")
    async def log_attendance(payload: Dict[str, Any] = Body(default={})) -> Dict[str, Any]:
        # callable clients wrap arguments as {"data": {...}} and expect {"result": ...}
        enveloped = isinstance(payload.get("data"), dict)
        data = payload["data"] if enveloped else payload
        try:
            result = await service.log_attendance(data.get("email"), data.get("description"))
        except AttendanceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error logging attendance")
            raise Internal("Error logging attendance") from exc
        return {"result": result} if enveloped else result

    @app.post("/api/export-attendance")
    async def export_attendance() -> Dict[str, Any]:
        try:
            report = await exporter.export_attendance()
        except AttendanceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error exporting attendance")
            raise Internal("Error exporting attendance") from exc
        return {
            "start": report.start,
            "end": report.end,
            "total_hours": report.total_hours,
            "rows": len(report.detail_rows),
            "people": [
                {"name": p.name, "email": p.email, "hours": p.hours, "attendance": p.attendance}
                for p in report.people
            ],
        }

    return app


__all__ = ["create_app"]
