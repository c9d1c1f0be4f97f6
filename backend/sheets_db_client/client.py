"""
Python client for the Sheets DB API.

    client = SheetsDbClient("https://example.com/sheetsApi", spreadsheet_id="1AbC...")
    users = client.sheet("Users")
    row_index = users.create_row({"name": "Jane", "createdAt": "2025-12-29T17:29:33.000Z"})
    users.get_row(row_index)
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

RowData = Dict[str, Any]


class SheetsDbError(Exception):
    """Raised for any non-2xx response from the API"""

    def __init__(self, message: str, status: int, response: Any = None):
        super().__init__(message)
        self.status = status
        self.response = response


class SheetsDbClient:
    def __init__(self, base_url: str, spreadsheet_id: str, session: Optional[Any] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.spreadsheet_id = spreadsheet_id
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        headers = {
            "Content-Type": "application/json",
            "X-Spreadsheet-Id": self.spreadsheet_id,
        }
        kwargs: Dict[str, Any] = {"headers": headers, "timeout": self.timeout}
        if json is not None:
            kwargs["json"] = json

        response = self.session.request(method, f"{self.base_url}{path}", **kwargs)

        if not 200 <= response.status_code < 300:
            try:
                error_data = response.json()
            except ValueError:
                error_data = response.text
            if isinstance(error_data, dict) and "error" in error_data:
                message = str(error_data["error"])
            else:
                message = f"Request failed with status {response.status_code}"
            raise SheetsDbError(message, response.status_code, error_data)

        if response.status_code == 204:
            return None
        return response.json()

    @staticmethod
    def _sheet_path(sheet_name: str) -> str:
        return f"/sheets/{quote(sheet_name, safe='')}"

    def health(self) -> Dict[str, Any]:
        """Check API health status"""
        response = self.session.request("GET", f"{self.base_url}/health", timeout=self.timeout)
        return response.json()

    def list_sheets(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/sheets")["sheets"]

    def create_sheet(self, name: str) -> Dict[str, Any]:
        return self._request("POST", "/sheets", json={"name": name})["sheet"]

    def delete_sheet(self, sheet_name: str) -> None:
        self._request("DELETE", self._sheet_path(sheet_name))

    def get_schema(self, sheet_name: str) -> List[str]:
        return self._request("GET", f"{self._sheet_path(sheet_name)}/schema")["columns"]

    def get_rows(self, sheet_name: str) -> List[RowData]:
        return self._request("GET", f"{self._sheet_path(sheet_name)}/rows")["rows"]

    def get_row(self, sheet_name: str, row_index: int) -> RowData:
        """Get a single row by index (must be >= 2)"""
        return self._request("GET", f"{self._sheet_path(sheet_name)}/rows/{row_index}")["row"]

    def create_row(self, sheet_name: str, data: RowData) -> int:
        """Append a row; returns its row index (-1 if the server couldn't tell)"""
        return self._request("POST", f"{self._sheet_path(sheet_name)}/rows", json=data)["rowIndex"]

    def update_row(self, sheet_name: str, row_index: int, data: RowData) -> None:
        self._request("PUT", f"{self._sheet_path(sheet_name)}/rows/{row_index}", json=data)

    def delete_row(self, sheet_name: str, row_index: int) -> None:
        self._request("DELETE", f"{self._sheet_path(sheet_name)}/rows/{row_index}")

    def sheet(self, sheet_name: str) -> "SheetHelper":
        return SheetHelper(self, sheet_name)


class SheetHelper:
    """Shortcut for working with one sheet"""

    def __init__(self, client: SheetsDbClient, sheet_name: str):
        self.client = client
        self.sheet_name = sheet_name

    def get_schema(self) -> List[str]:
        return self.client.get_schema(self.sheet_name)

    def get_rows(self) -> List[RowData]:
        return self.client.get_rows(self.sheet_name)

    def get_row(self, row_index: int) -> RowData:
        return self.client.get_row(self.sheet_name, row_index)

    def create_row(self, data: RowData) -> int:
        return self.client.create_row(self.sheet_name, data)

    def update_row(self, row_index: int, data: RowData) -> None:
        self.client.update_row(self.sheet_name, row_index, data)

    def delete_row(self, row_index: int) -> None:
        self.client.delete_row(self.sheet_name, row_index)

    def delete(self) -> None:
        self.client.delete_sheet(self.sheet_name)
