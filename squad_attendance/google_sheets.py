"""Google Sheets client setup and batchUpdate request builders."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import gspread
from google.oauth2.service_account import Credentials

from .config import Settings

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]

TOKEN_URI = "https://oauth2.googleapis.com/token"

RED = {"red": 0.78, "green": 0.0, "blue": 0.22}
AMBER = {"red": 1.0, "green": 0.76}
GREEN = {"red": 0.18, "green": 0.8, "blue": 0.44}


def color_point(color: Dict[str, float], value: float | str) -> Dict[str, Any]:
    return {"color": color, "type": "NUMBER", "value": str(value)}


def gradient_rule(
    sheet_id: int,
    start_row: Optional[int] = None,
    end_row: Optional[int] = None,
    start_column: Optional[int] = None,
    end_column: Optional[int] = None,
    *,
    minpoint: Dict[str, Any],
    midpoint: Optional[Dict[str, Any]] = None,
    maxpoint: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build an ``addConditionalFormatRule`` request with a color gradient."""

    grid_range: Dict[str, int] = {"sheetId": sheet_id}
    # zero or missing indices mean "unbounded" to the Sheets API
    if start_row:
        grid_range["startRowIndex"] = start_row
    if end_row:
        grid_range["endRowIndex"] = end_row
    if start_column:
        grid_range["startColumnIndex"] = start_column
    if end_column:
        grid_range["endColumnIndex"] = end_column

    points: Dict[str, Any] = {"minpoint": minpoint}
    if midpoint:
        points["midpoint"] = midpoint
    if maxpoint:
        points["maxpoint"] = maxpoint

    return {
        "addConditionalFormatRule": {
            "rule": {"ranges": [grid_range], "gradientRule": points},
            "index": 0,
        }
    }


def update_dimension(
    sheet_id: int,
    dimension: str,
    pixel_size: int,
    start_index: int,
    end_index: Optional[int] = None,
) -> Dict[str, Any]:
    if dimension not in ("ROWS", "COLUMNS"):
        raise ValueError("dimension must be ROWS or COLUMNS")
    return {
        "updateDimensionProperties": {
            "range": {
                "sheetId": sheet_id,
                "dimension": dimension,
                "startIndex": start_index,
                "endIndex": end_index if end_index is not None else start_index + 1,
            },
            "properties": {"pixelSize": pixel_size},
            "fields": "pixelSize",
        }
    }


def basic_filter_view(
    sheet_id: int,
    start_column: int,
    end_column: int,
    sort_column: str,
    sort_order: str = "ASCENDING",
) -> Dict[str, Any]:
    return {
        "setBasicFilter": {
            "filter": {
                "range": {
                    "sheetId": sheet_id,
                    "startColumnIndex": start_column,
                    "endColumnIndex": end_column,
                },
                "sortSpecs": [
                    {
                        "sortOrder": sort_order,
                        "dataSourceColumnReference": {"name": sort_column},
                    }
                ],
            }
        }
    }


def sheets_client(settings: Settings) -> gspread.Client:
    logger.debug("Initialising Google Sheets client for %s", settings.google_service_account_email)
    info = {
        "type": "service_account",
        "client_email": settings.google_service_account_email,
        "private_key": settings.google_private_key,
        "token_uri": TOKEN_URI,
    }
    creds = Credentials.from_service_account_info(info, scopes=SCOPES)
    return gspread.authorize(creds)


def open_spreadsheet(settings: Settings) -> gspread.Spreadsheet:
    return sheets_client(settings).open_by_key(settings.google_sheet_id)


def get_or_create_worksheet(
    spreadsheet: gspread.Spreadsheet, title: str, rows: int = 1000, cols: int = 26
) -> gspread.Worksheet:
    try:
        return spreadsheet.worksheet(title)
    except gspread.exceptions.WorksheetNotFound:
        logger.info("Creating worksheet %s", title)
        return spreadsheet.add_worksheet(title=title, rows=rows, cols=cols)


__all__ = [
    "AMBER",
    "GREEN",
    "RED",
    "SCOPES",
    "basic_filter_view",
    "color_point",
    "get_or_create_worksheet",
    "gradient_rule",
    "open_spreadsheet",
    "sheets_client",
    "update_dimension",
]
