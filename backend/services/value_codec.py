"""
Conversion of cell values between the API wire format and the text the
spreadsheet accepts.

Wire timestamps are ISO-8601 UTC instants (``2025-12-29T17:29:33.195Z``).
The spreadsheet stores them as ``2025-12-29 17:29:33`` or, for plain dates,
``2025-12-29``. Everything else passes through untouched.
"""

import re
from datetime import datetime
from typing import Any, List

WIRE_TIMESTAMP = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{3})?Z")
BACKEND_DATETIME = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")
BACKEND_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")

BACKEND_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_backend(value: Any) -> Any:
    """Convert a value received from an API client into a cell value"""
    if value is None:
        return ""

    if isinstance(value, str) and WIRE_TIMESTAMP.fullmatch(value):
        try:
            instant = datetime.strptime(value[:19], "%Y-%m-%dT%H:%M:%S")
        except ValueError:
            # Shaped like a timestamp but not a real instant (month 13 etc.)
            return value
        return instant.strftime(BACKEND_DATETIME_FORMAT)

    return value


def from_backend(value: Any) -> Any:
    """Convert a cell value read from the spreadsheet into its wire form"""
    if value is None or value == "":
        return None

    if isinstance(value, str):
        if BACKEND_DATETIME.fullmatch(value):
            date_part, time_part = value.split(" ")
            return f"{date_part}T{time_part}.000Z"
        if BACKEND_DATE.fullmatch(value):
            return f"{value}T00:00:00.000Z"

    return value


def encode_row(values: List[Any]) -> List[Any]:
    return [to_backend(value) for value in values]


def decode_row(values: List[Any]) -> List[Any]:
    return [from_backend(value) for value in values]
