from fastapi import APIRouter, Body, Depends, HTTPException, Response
from typing import Any

from models.spreadsheet import CreateRowResult, RowResponse, RowsResponse
from routes.dependencies import (
    get_spreadsheet_id,
    get_spreadsheet_service,
    parse_row_index,
    require_object,
)
from services.exceptions import SheetNotFoundError
from services.spreadsheet_service import SpreadsheetService

router = APIRouter()

@router.get("", response_model=RowsResponse)
def get_rows(
    sheet_name: str,
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """All data rows of a sheet, keyed by header"""
    return {"rows": service.get_rows(spreadsheet_id, sheet_name)}

@router.get("/{row_index}", response_model=RowResponse)
def get_row(
    sheet_name: str,
    row_index: str,
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """A single row by its 1-based index (>= 2)"""
    index = parse_row_index(row_index)
    row = service.get_row(spreadsheet_id, sheet_name, index)
    if row is None:
        raise HTTPException(status_code=404, detail="Row not found")
    return {"row": row}

@router.post("", response_model=CreateRowResult, status_code=201)
def create_row(
    sheet_name: str,
    data: Any = Body(None),
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """Append a row; the header row is created from the first record's keys"""
    record = require_object(data)
    return {"rowIndex": service.append_row(spreadsheet_id, sheet_name, record)}

@router.put("/{row_index}", status_code=204)
def update_row(
    sheet_name: str,
    row_index: str,
    data: Any = Body(None),
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """Replace a whole row; fields left out are cleared"""
    index = parse_row_index(row_index)
    record = require_object(data)
    service.update_row(spreadsheet_id, sheet_name, index, record)
    return Response(status_code=204)

@router.delete("/{row_index}", status_code=204)
def delete_row(
    sheet_name: str,
    row_index: str,
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """Remove a row; rows below it move up by one"""
    index = parse_row_index(row_index)
    try:
        service.delete_row(spreadsheet_id, sheet_name, index)
    except SheetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
