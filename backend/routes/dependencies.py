import re
from typing import Any, Dict, Optional

from fastapi import Header, HTTPException, Request

from services.spreadsheet_service import SpreadsheetService

INVALID_ROW_INDEX = "Invalid rowIndex. Must be >= 2 (row 1 contains headers)"

_ROW_INDEX_PATTERN = re.compile(r"-?[0-9]+")


def get_spreadsheet_id(x_spreadsheet_id: Optional[str] = Header(None)) -> str:
    """Spreadsheet the request targets, taken from the X-Spreadsheet-Id header"""
    if not x_spreadsheet_id:
        raise HTTPException(status_code=400, detail="Missing required header: X-Spreadsheet-Id")
    return x_spreadsheet_id


def get_spreadsheet_service(request: Request) -> SpreadsheetService:
    return request.app.state.spreadsheet_service


def parse_row_index(row_index: str) -> int:
    # int() alone would also take "1_0", " 3" and non-ASCII digits
    if not _ROW_INDEX_PATTERN.fullmatch(row_index):
        raise HTTPException(status_code=400, detail=INVALID_ROW_INDEX)
    index = int(row_index)
    if index < 2:
        raise HTTPException(status_code=400, detail=INVALID_ROW_INDEX)
    return index


def require_object(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Request body must be an object")
    return data
