import json
import logging
import os
from typing import Any, Dict, List, Optional

import gspread
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from services.exceptions import BackendError
from services.gateway import INSERT_DATA_OPTION, VALUE_INPUT_OPTION, SheetsGateway

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]


def load_credentials(
    credentials_json: Optional[str] = None,
    credentials_file: Optional[str] = None,
) -> Optional[Credentials]:
    """
    Load service account credentials.

    An inline JSON string wins over a key file. For the key file, the
    configured path is tried first, then ``credentials.json`` in the working
    directory and next to this package. Returns None when nothing usable is
    found.
    """
    if credentials_json:
        try:
            info = json.loads(credentials_json)
        except json.JSONDecodeError as e:
            logger.error(f"GOOGLE_CREDENTIALS_JSON is not valid JSON: {e}")
            return None
        try:
            creds = Credentials.from_service_account_info(info, scopes=SCOPES)
        except ValueError as e:
            logger.error(f"GOOGLE_CREDENTIALS_JSON is not a usable service account key: {e}")
            return None
        logger.info("Google Sheets credentials loaded from GOOGLE_CREDENTIALS_JSON")
        return creds

    possible_paths = [
        credentials_file,
        "credentials.json",
        os.path.join(os.path.dirname(__file__), "..", "credentials.json"),
    ]
    for path in possible_paths:
        if path and os.path.exists(path):
            try:
                creds = Credentials.from_service_account_file(path, scopes=SCOPES)
            except (ValueError, OSError) as e:
                logger.error(f"Unusable credentials file {path}: {e}")
                return None
            logger.info(f"Google Sheets credentials loaded from: {path}")
            return creds

    return None


class GoogleSheetsGateway(SheetsGateway):
    """Sheets API v4 gateway backed by gspread's HTTP client."""

    name = "google_sheets"

    def __init__(self, credentials: Credentials):
        self.gc = gspread.authorize(credentials)

    @property
    def http(self):
        return self.gc.http_client

    def _call(self, description: str, func, *args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except (gspread.exceptions.APIError, requests.RequestException, GoogleAuthError) as e:
            logger.error(f"Google Sheets {description} failed: {e}")
            raise BackendError(str(e)) from e

    def get_sheet_properties(self, spreadsheet_id: str) -> List[Dict[str, Any]]:
        metadata = self._call(
            "metadata fetch",
            self.http.fetch_sheet_metadata,
            spreadsheet_id,
            params={"includeGridData": "false", "fields": "sheets.properties"},
        )
        return [sheet.get("properties", {}) for sheet in metadata.get("sheets", [])]

    def get_values(self, spreadsheet_id: str, range_expression: str) -> List[List[Any]]:
        response = self._call("values.get", self.http.values_get, spreadsheet_id, range_expression)
        return response.get("values", [])

    def append_values(
        self, spreadsheet_id: str, range_expression: str, values: List[List[Any]]
    ) -> Dict[str, Any]:
        return self._call(
            "values.append",
            self.http.values_append,
            spreadsheet_id,
            range_expression,
            params={
                "valueInputOption": VALUE_INPUT_OPTION,
                "insertDataOption": INSERT_DATA_OPTION,
            },
            body={"values": values},
        )

    def update_values(
        self, spreadsheet_id: str, range_expression: str, values: List[List[Any]]
    ) -> Dict[str, Any]:
        return self._call(
            "values.update",
            self.http.values_update,
            spreadsheet_id,
            range_expression,
            params={"valueInputOption": VALUE_INPUT_OPTION},
            body={"values": values},
        )

    def batch_update(self, spreadsheet_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._call(
            "batchUpdate",
            self.http.batch_update,
            spreadsheet_id,
            body={"requests": requests},
        )
