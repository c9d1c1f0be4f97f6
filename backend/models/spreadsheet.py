from pydantic import BaseModel
from typing import List, Dict, Optional, Union

CellValue = Union[bool, int, float, str, None]
RowData = Dict[str, CellValue]

class SheetInfo(BaseModel):
    sheetId: int
    title: str
    index: int

class SheetListResponse(BaseModel):
    sheets: List[SheetInfo]

class SheetResponse(BaseModel):
    sheet: SheetInfo

class SchemaResponse(BaseModel):
    columns: List[str]

class RowsResponse(BaseModel):
    rows: List[RowData]

class RowResponse(BaseModel):
    row: RowData

class CreateRowResult(BaseModel):
    rowIndex: int

class ErrorResponse(BaseModel):
    error: str

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    environment: Optional[str] = None
