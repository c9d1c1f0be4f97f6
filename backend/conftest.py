import os

import pytest
from fastapi.testclient import TestClient

# Keep main's module-level app off the real Google backend
os.environ.setdefault("SHEETS_BACKEND", "memory")

from config import Settings
from main import create_app
from services.memory_gateway import InMemorySheetsGateway
from services.spreadsheet_service import SpreadsheetService

SPREADSHEET_ID = "test-spreadsheet-id"

USERS = [
    ["id", "name", "email", "active"],
    [1, "John Doe", "john@example.com", True],
    [2, "Jane Doe", "jane@example.com", False],
]


@pytest.fixture
def gateway():
    return InMemorySheetsGateway()


@pytest.fixture
def users_gateway(gateway):
    """Gateway holding a Users sheet with two records"""
    gateway.load_sheet(SPREADSHEET_ID, "Users", USERS)
    return gateway


@pytest.fixture
def service(gateway):
    return SpreadsheetService(gateway)


@pytest.fixture
def app(gateway):
    return create_app(settings=Settings(sheets_backend="memory"), gateway=gateway)


@pytest.fixture
def client(app):
    return TestClient(app, headers={"X-Spreadsheet-Id": SPREADSHEET_ID})
