from fastapi import APIRouter, Body, Depends, HTTPException, Response
from typing import Any
from urllib.parse import quote

from models.spreadsheet import SchemaResponse, SheetListResponse, SheetResponse
from routes.dependencies import get_spreadsheet_id, get_spreadsheet_service
from services.exceptions import SheetNotFoundError
from services.spreadsheet_service import SpreadsheetService

router = APIRouter()

@router.get("", response_model=SheetListResponse)
def list_sheets(
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """List every sheet in the spreadsheet"""
    return {"sheets": service.list_sheets(spreadsheet_id)}

@router.post("", response_model=SheetResponse, status_code=201)
def create_sheet(
    payload: Any = Body(None),
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """Add a new sheet"""
    name = payload.get("name") if isinstance(payload, dict) else None
    if not name or not isinstance(name, str):
        raise HTTPException(status_code=400, detail="Missing required field: name")

    return {"sheet": service.create_sheet(spreadsheet_id, name)}

@router.delete("/{sheet_name}", status_code=204)
def delete_sheet(
    sheet_name: str,
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """Delete a sheet by name"""
    try:
        service.delete_sheet(spreadsheet_id, sheet_name)
    except SheetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)

@router.get("/{sheet_name}/schema", response_model=SchemaResponse)
def get_schema(
    sheet_name: str,
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """Column headers (row 1) of a sheet"""
    return {"columns": service.get_schema(spreadsheet_id, sheet_name)}

@router.get("/{sheet_name}/export")
def export_sheet(
    sheet_name: str,
    format: str = "csv",
    spreadsheet_id: str = Depends(get_spreadsheet_id),
    service: SpreadsheetService = Depends(get_spreadsheet_service),
):
    """Export a sheet's records as CSV or JSON"""
    try:
        data = service.export_rows(spreadsheet_id, sheet_name, format)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    media_type = "text/csv" if format.lower() == "csv" else "application/json"
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={quote(sheet_name)}.{format.lower()}"}
    )
