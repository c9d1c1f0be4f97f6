import json
import logging
import re
from typing import Any, Dict, List, Optional

import pandas as pd

from models.spreadsheet import RowData, SheetInfo
from services.exceptions import SheetNotFoundError
from services.gateway import SheetsGateway, sheet_range
from services.value_codec import decode_row, encode_row

logger = logging.getLogger(__name__)

HEADER_ROW = 1
UNKNOWN_ROW_INDEX = -1

_TRAILING_ROW_NUMBER = re.compile(r":?(\d+)$")


def parse_updated_row(updated_range: str) -> int:
    """Row number at the end of an A1 range such as ``'Users'!A7:D7``"""
    match = _TRAILING_ROW_NUMBER.search(updated_range or "")
    return int(match.group(1)) if match else UNKNOWN_ROW_INDEX


class SpreadsheetService:
    """
    Maps the sheets of a spreadsheet onto records.

    Row 1 of every sheet holds the headers, data records start at row 2. The
    headers are read again on every call; nothing is cached between calls.
    """

    def __init__(self, gateway: SheetsGateway):
        self.gateway = gateway

    # -- sheets ---------------------------------------------------------------

    def list_sheets(self, spreadsheet_id: str) -> List[SheetInfo]:
        properties = self.gateway.get_sheet_properties(spreadsheet_id)
        return [
            SheetInfo(
                sheetId=props.get("sheetId") or 0,
                title=props.get("title") or "",
                index=props.get("index") or 0,
            )
            for props in properties
        ]

    def create_sheet(self, spreadsheet_id: str, sheet_name: str) -> SheetInfo:
        response = self.gateway.batch_update(
            spreadsheet_id,
            [{"addSheet": {"properties": {"title": sheet_name}}}],
        )
        replies = response.get("replies") or [{}]
        added = (replies[0] or {}).get("addSheet", {}).get("properties", {})
        sheet = SheetInfo(
            sheetId=added.get("sheetId") or 0,
            title=added.get("title") or sheet_name,
            index=added.get("index") or 0,
        )
        logger.info(f"Created sheet '{sheet.title}' ({sheet.sheetId}) in {spreadsheet_id}")
        return sheet

    def delete_sheet(self, spreadsheet_id: str, sheet_name: str) -> None:
        sheet = self._find_sheet(spreadsheet_id, sheet_name)
        self.gateway.batch_update(
            spreadsheet_id,
            [{"deleteSheet": {"sheetId": sheet.sheetId}}],
        )
        logger.info(f"Deleted sheet '{sheet_name}' ({sheet.sheetId}) from {spreadsheet_id}")

    def _find_sheet(self, spreadsheet_id: str, sheet_name: str) -> SheetInfo:
        for sheet in self.list_sheets(spreadsheet_id):
            if sheet.title == sheet_name:
                return sheet
        raise SheetNotFoundError(sheet_name)

    # -- schema and rows ------------------------------------------------------

    def get_schema(self, spreadsheet_id: str, sheet_name: str) -> List[str]:
        values = self.gateway.get_values(spreadsheet_id, sheet_range(sheet_name, HEADER_ROW))
        headers = values[0] if values else []
        return [str(header) for header in headers]

    def get_rows(self, spreadsheet_id: str, sheet_name: str) -> List[RowData]:
        values = self.gateway.get_values(spreadsheet_id, sheet_range(sheet_name))
        if len(values) < 2:
            return []

        headers = [str(header) for header in values[0]]
        return [self._to_record(headers, row) for row in values[1:]]

    def get_row(self, spreadsheet_id: str, sheet_name: str, row_index: int) -> Optional[RowData]:
        headers = self.get_schema(spreadsheet_id, sheet_name)
        values = self.gateway.get_values(spreadsheet_id, sheet_range(sheet_name, row_index))
        row = values[0] if values else None
        if not row:
            return None
        return self._to_record(headers, row)

    def append_row(self, spreadsheet_id: str, sheet_name: str, data: Dict[str, Any]) -> int:
        """Append a record; returns its row index, or -1 if the backend reply can't be parsed"""
        headers = self.get_schema(spreadsheet_id, sheet_name)

        if not headers:
            headers = [str(key) for key in data.keys()]
            self.gateway.update_values(spreadsheet_id, sheet_range(sheet_name, HEADER_ROW), [headers])
            logger.info(f"Created header row for '{sheet_name}': {headers}")

        response = self.gateway.append_values(
            spreadsheet_id,
            sheet_range(sheet_name),
            [self._to_cells(sheet_name, headers, data)],
        )

        updated_range = (response.get("updates") or {}).get("updatedRange", "")
        row_index = parse_updated_row(updated_range)
        if row_index == UNKNOWN_ROW_INDEX:
            logger.warning(f"Appended to '{sheet_name}' but could not read row from range {updated_range!r}")
        return row_index

    def update_row(self, spreadsheet_id: str, sheet_name: str, row_index: int, data: Dict[str, Any]) -> None:
        headers = self.get_schema(spreadsheet_id, sheet_name)
        self.gateway.update_values(
            spreadsheet_id,
            sheet_range(sheet_name, row_index),
            [self._to_cells(sheet_name, headers, data)],
        )

    def delete_row(self, spreadsheet_id: str, sheet_name: str, row_index: int) -> None:
        sheet = self._find_sheet(spreadsheet_id, sheet_name)
        self.gateway.batch_update(
            spreadsheet_id,
            [{
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet.sheetId,
                        "dimension": "ROWS",
                        "startIndex": row_index - 1,
                        "endIndex": row_index,
                    }
                }
            }],
        )
        logger.info(f"Deleted row {row_index} from '{sheet_name}'")

    # -- export ---------------------------------------------------------------

    def export_rows(self, spreadsheet_id: str, sheet_name: str, format_type: str = "csv") -> bytes:
        """Export every record of a sheet as CSV or JSON"""
        format_type = format_type.lower()
        if format_type not in ("csv", "json"):
            raise ValueError(f"Unsupported format: {format_type}")

        rows = self.get_rows(spreadsheet_id, sheet_name)
        logger.info(f"Exporting {len(rows)} records from '{sheet_name}' as {format_type}")

        if format_type == "json":
            json_data = json.dumps({"sheet": sheet_name, "rows": rows}, indent=2, default=str)
            return json_data.encode('utf-8')

        columns = list(rows[0].keys()) if rows else self.get_schema(spreadsheet_id, sheet_name)
        df = pd.DataFrame(rows, columns=columns)
        csv_data = df.to_csv(index=False)
        return csv_data.encode('utf-8')

    # -- mapping --------------------------------------------------------------

    @staticmethod
    def _to_record(headers: List[str], row: List[Any]) -> RowData:
        cells = decode_row(row[:len(headers)])
        cells.extend([None] * (len(headers) - len(cells)))
        return dict(zip(headers, cells))

    @staticmethod
    def _to_cells(sheet_name: str, headers: List[str], data: Dict[str, Any]) -> List[Any]:
        dropped = [key for key in data if key not in headers]
        if dropped:
            logger.warning(f"Dropping fields not in the '{sheet_name}' header row: {dropped}")
        return encode_row([data.get(header) for header in headers])
