"""
In-memory stand-in for the Google Sheets backend.

Used when no Google credentials are configured and as the gateway in tests.
It mirrors the parts of Sheets API v4 behaviour the record mapper relies on:
reads omit trailing empty rows and cells, appends land after the last row with
data, and deleting rows shifts the rows below them up.
"""

import copy
import itertools
import logging
import threading
from typing import Any, Dict, List, Optional

from gspread.utils import rowcol_to_a1

from services.exceptions import BackendError
from services.gateway import SheetsGateway, parse_sheet_range, quote_sheet_title

logger = logging.getLogger(__name__)

DEFAULT_SHEET_TITLE = "Sheet1"


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _trim_row(row: List[Any]) -> List[Any]:
    end = len(row)
    while end > 0 and _is_empty(row[end - 1]):
        end -= 1
    return list(row[:end])


def _trim_grid(rows: List[List[Any]]) -> List[List[Any]]:
    trimmed = [_trim_row(row) for row in rows]
    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return trimmed


def _check_values(values: List[List[Any]]) -> None:
    """Reject nested cells the way Sheets does (``struct_value`` / ``list_value``)"""
    for r, row in enumerate(values):
        for c, value in enumerate(row):
            if isinstance(value, dict):
                raise BackendError(f"Invalid values[{r}][{c}]: struct_value {value}")
            if isinstance(value, (list, tuple)):
                raise BackendError(f"Invalid values[{r}][{c}]: list_value {list(value)}")


class _Sheet:
    def __init__(self, sheet_id: int, title: str):
        self.sheet_id = sheet_id
        self.title = title
        self.rows: List[List[Any]] = []

    def last_data_row(self) -> int:
        """1-based number of the last row holding any value (0 if none)"""
        return len(_trim_grid(self.rows))


class InMemorySheetsGateway(SheetsGateway):
    name = "memory"

    def __init__(self):
        self._spreadsheets: Dict[str, List[_Sheet]] = {}
        self._sheet_ids = itertools.count(1000)
        self._lock = threading.Lock()

    # -- helpers --------------------------------------------------------------

    def _sheets(self, spreadsheet_id: str) -> List[_Sheet]:
        if spreadsheet_id not in self._spreadsheets:
            logger.info(f"Creating in-memory spreadsheet {spreadsheet_id}")
            self._spreadsheets[spreadsheet_id] = [_Sheet(0, DEFAULT_SHEET_TITLE)]
        return self._spreadsheets[spreadsheet_id]

    def _sheet_by_title(self, spreadsheet_id: str, range_expression: str) -> _Sheet:
        try:
            title, _, _ = parse_sheet_range(range_expression)
        except ValueError as e:
            raise BackendError(f"Unable to parse range: {range_expression}") from e
        for sheet in self._sheets(spreadsheet_id):
            if sheet.title == title:
                return sheet
        raise BackendError(f"Unable to parse range: {range_expression}")

    def _sheet_by_id(self, spreadsheet_id: str, sheet_id: Any) -> _Sheet:
        for sheet in self._sheets(spreadsheet_id):
            if sheet.sheet_id == sheet_id:
                return sheet
        raise BackendError(f"No grid with id: {sheet_id}")

    def load_sheet(self, spreadsheet_id: str, title: str, rows: List[List[Any]]) -> int:
        """Create (or replace the contents of) a sheet; returns its sheet id"""
        with self._lock:
            sheets = self._sheets(spreadsheet_id)
            sheet = next((s for s in sheets if s.title == title), None)
            if sheet is None:
                sheet = _Sheet(next(self._sheet_ids), title)
                sheets.append(sheet)
            sheet.rows = copy.deepcopy(rows)
            return sheet.sheet_id

    def dump_sheet(self, spreadsheet_id: str, title: str) -> List[List[Any]]:
        """Raw cell grid of a sheet as stored (before any read trimming)"""
        with self._lock:
            sheet = self._sheet_by_title(spreadsheet_id, quote_sheet_title(title))
            return copy.deepcopy(sheet.rows)

    # -- gateway --------------------------------------------------------------

    def get_sheet_properties(self, spreadsheet_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                {"sheetId": sheet.sheet_id, "title": sheet.title, "index": index, "sheetType": "GRID"}
                for index, sheet in enumerate(self._sheets(spreadsheet_id))
            ]

    def get_values(self, spreadsheet_id: str, range_expression: str) -> List[List[Any]]:
        with self._lock:
            sheet = self._sheet_by_title(spreadsheet_id, range_expression)
            _, first_row, last_row = parse_sheet_range(range_expression)
            if first_row is None:
                rows = sheet.rows
            else:
                rows = sheet.rows[first_row - 1:last_row]
            return copy.deepcopy(_trim_grid(rows))

    def append_values(
        self, spreadsheet_id: str, range_expression: str, values: List[List[Any]]
    ) -> Dict[str, Any]:
        _check_values(values)
        with self._lock:
            sheet = self._sheet_by_title(spreadsheet_id, range_expression)
            start = sheet.last_data_row()
            sheet.rows[start:start] = [list(row) for row in values]

            first_row = start + 1
            last_row = start + len(values)
            width = max([len(row) for row in values] + [1])
            quoted = quote_sheet_title(sheet.title)
            updated_range = f"{quoted}!{rowcol_to_a1(first_row, 1)}:{rowcol_to_a1(last_row, width)}"
            return {
                "spreadsheetId": spreadsheet_id,
                "updates": {
                    "spreadsheetId": spreadsheet_id,
                    "updatedRange": updated_range,
                    "updatedRows": len(values),
                    "updatedColumns": width,
                    "updatedCells": sum(len(row) for row in values),
                },
            }

    def update_values(
        self, spreadsheet_id: str, range_expression: str, values: List[List[Any]]
    ) -> Dict[str, Any]:
        _check_values(values)
        with self._lock:
            sheet = self._sheet_by_title(spreadsheet_id, range_expression)
            _, first_row, _ = parse_sheet_range(range_expression)
            first_row = first_row or 1

            for offset, new_values in enumerate(values):
                row_number = first_row + offset
                while len(sheet.rows) < row_number:
                    sheet.rows.append([])
                row = sheet.rows[row_number - 1]
                if len(row) < len(new_values):
                    row.extend([""] * (len(new_values) - len(row)))
                row[:len(new_values)] = list(new_values)

            return {
                "spreadsheetId": spreadsheet_id,
                "updatedRange": range_expression,
                "updatedRows": len(values),
                "updatedCells": sum(len(row) for row in values),
            }

    def batch_update(self, spreadsheet_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        with self._lock:
            sheets = self._sheets(spreadsheet_id)
            replies: List[Dict[str, Any]] = []
            for position, request in enumerate(requests):
                if "addSheet" in request:
                    replies.append(self._add_sheet(sheets, position, request["addSheet"]))
                elif "deleteSheet" in request:
                    self._delete_sheet(spreadsheet_id, sheets, request["deleteSheet"])
                    replies.append({})
                elif "deleteDimension" in request:
                    self._delete_dimension(spreadsheet_id, request["deleteDimension"])
                    replies.append({})
                else:
                    kinds = ", ".join(request.keys())
                    raise BackendError(f"Invalid requests[{position}]: unsupported request {kinds}")
            return {"spreadsheetId": spreadsheet_id, "replies": replies}

    def _add_sheet(self, sheets: List[_Sheet], position: int, body: Dict[str, Any]) -> Dict[str, Any]:
        title: Optional[str] = body.get("properties", {}).get("title")
        if not title:
            title = f"Sheet{len(sheets) + 1}"
        if any(sheet.title == title for sheet in sheets):
            raise BackendError(
                f'Invalid requests[{position}].addSheet: A sheet with the name "{title}" '
                "already exists. Please enter another name."
            )
        sheet = _Sheet(next(self._sheet_ids), title)
        sheets.append(sheet)
        logger.debug(f"Added in-memory sheet {title} ({sheet.sheet_id})")
        return {
            "addSheet": {
                "properties": {
                    "sheetId": sheet.sheet_id,
                    "title": sheet.title,
                    "index": len(sheets) - 1,
                    "sheetType": "GRID",
                }
            }
        }

    def _delete_sheet(self, spreadsheet_id: str, sheets: List[_Sheet], body: Dict[str, Any]) -> None:
        sheet = self._sheet_by_id(spreadsheet_id, body.get("sheetId"))
        if len(sheets) == 1:
            raise BackendError("You can't remove all the sheets in a document.")
        sheets.remove(sheet)

    def _delete_dimension(self, spreadsheet_id: str, body: Dict[str, Any]) -> None:
        span = body.get("range", {})
        sheet = self._sheet_by_id(spreadsheet_id, span.get("sheetId"))
        if span.get("dimension") != "ROWS":
            raise BackendError(f"Unsupported dimension: {span.get('dimension')}")
        del sheet.rows[span.get("startIndex", 0):span.get("endIndex")]
