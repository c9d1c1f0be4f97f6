"""Abstract port for the spreadsheet backend, plus A1 range helpers."""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

VALUE_INPUT_OPTION = "USER_ENTERED"
INSERT_DATA_OPTION = "INSERT_ROWS"

_RANGE_PATTERN = re.compile(r"'((?:[^']|'')*)'(?:!(\d+):(\d+))?")


def quote_sheet_title(title: str) -> str:
    """Quote a sheet title for A1 notation (embedded quotes are doubled)"""
    return "'" + title.replace("'", "''") + "'"


def sheet_range(title: str, row: Optional[int] = None) -> str:
    """Build ``'Title'`` or ``'Title'!N:N`` for a whole sheet or a single row"""
    quoted = quote_sheet_title(title)
    if row is None:
        return quoted
    return f"{quoted}!{row}:{row}"


def parse_sheet_range(range_expression: str) -> Tuple[str, Optional[int], Optional[int]]:
    """
    Split a range built by ``sheet_range`` into (title, first_row, last_row).

    Rows are ``None`` when the range covers the whole sheet.
    """
    match = _RANGE_PATTERN.fullmatch(range_expression)
    if not match:
        raise ValueError(f"Unsupported range expression: {range_expression}")
    title = match.group(1).replace("''", "'")
    if match.group(2) is None:
        return title, None, None
    return title, int(match.group(2)), int(match.group(3))


class SheetsGateway(ABC):
    """
    The five backend calls the record mapper needs.

    Every method is a single round trip; implementations raise
    ``BackendError`` on failure and never retry.
    """

    #: Human readable backend name reported by the health endpoint.
    name = "abstract"

    @abstractmethod
    def get_sheet_properties(self, spreadsheet_id: str) -> List[Dict[str, Any]]:
        """Return the ``properties`` object of every sheet, in backend order."""

    @abstractmethod
    def get_values(self, spreadsheet_id: str, range_expression: str) -> List[List[Any]]:
        """Return the value grid for a range (trailing empty rows/cells omitted)."""

    @abstractmethod
    def append_values(
        self, spreadsheet_id: str, range_expression: str, values: List[List[Any]]
    ) -> Dict[str, Any]:
        """Append rows after the last row with data; returns the raw append reply."""

    @abstractmethod
    def update_values(
        self, spreadsheet_id: str, range_expression: str, values: List[List[Any]]
    ) -> Dict[str, Any]:
        """Overwrite the cells of a range; returns the raw update reply."""

    @abstractmethod
    def batch_update(self, spreadsheet_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Apply structural changes; returns the raw reply with ``replies``."""
