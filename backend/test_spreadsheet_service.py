"""Record mapper behaviour against the in-memory backend."""

from unittest.mock import MagicMock

import pytest

from conftest import SPREADSHEET_ID
from services.exceptions import BackendError, SheetNotFoundError
from services.spreadsheet_service import SpreadsheetService, parse_updated_row

JOHN = {"id": 1, "name": "John Doe", "email": "john@example.com", "active": True}
JANE = {"id": 2, "name": "Jane Doe", "email": "jane@example.com", "active": False}


def test_list_sheets_returns_backend_order(service, gateway):
    gateway.load_sheet(SPREADSHEET_ID, "Users", [])
    gateway.load_sheet(SPREADSHEET_ID, "Orders", [])

    sheets = service.list_sheets(SPREADSHEET_ID)

    assert [(s.title, s.index) for s in sheets] == [("Sheet1", 0), ("Users", 1), ("Orders", 2)]


def test_list_sheets_defaults_missing_properties():
    gateway = MagicMock()
    gateway.get_sheet_properties.return_value = [{}, {"sheetId": 7, "title": "Data", "index": 1}]

    sheets = SpreadsheetService(gateway).list_sheets(SPREADSHEET_ID)

    assert sheets[0].model_dump() == {"sheetId": 0, "title": "", "index": 0}
    assert sheets[1].model_dump() == {"sheetId": 7, "title": "Data", "index": 1}


def test_create_sheet_returns_reply_properties(service):
    sheet = service.create_sheet(SPREADSHEET_ID, "Users")

    assert sheet.title == "Users"
    assert sheet.index == 1
    assert sheet.sheetId != 0
    assert "Users" in [s.title for s in service.list_sheets(SPREADSHEET_ID)]


def test_create_sheet_duplicate_name_is_backend_error(service):
    service.create_sheet(SPREADSHEET_ID, "Users")

    with pytest.raises(BackendError, match="already exists"):
        service.create_sheet(SPREADSHEET_ID, "Users")


def test_delete_sheet(service):
    service.create_sheet(SPREADSHEET_ID, "Temp")

    service.delete_sheet(SPREADSHEET_ID, "Temp")

    assert [s.title for s in service.list_sheets(SPREADSHEET_ID)] == ["Sheet1"]


def test_delete_sheet_unknown_name(service):
    with pytest.raises(SheetNotFoundError) as excinfo:
        service.delete_sheet(SPREADSHEET_ID, "Missing")

    assert str(excinfo.value) == 'Sheet "Missing" not found'
    assert excinfo.value.sheet_name == "Missing"


def test_get_schema(service, users_gateway):
    assert service.get_schema(SPREADSHEET_ID, "Users") == ["id", "name", "email", "active"]


def test_get_schema_of_empty_sheet(service):
    assert service.get_schema(SPREADSHEET_ID, "Sheet1") == []


def test_get_schema_coerces_headers_to_text(service, gateway):
    gateway.load_sheet(SPREADSHEET_ID, "Years", [[2024, 2025]])

    assert service.get_schema(SPREADSHEET_ID, "Years") == ["2024", "2025"]


def test_get_rows(service, users_gateway):
    assert service.get_rows(SPREADSHEET_ID, "Users") == [JOHN, JANE]


def test_get_rows_without_data_rows(service, gateway):
    gateway.load_sheet(SPREADSHEET_ID, "HeadersOnly", [["a", "b"]])

    assert service.get_rows(SPREADSHEET_ID, "HeadersOnly") == []
    assert service.get_rows(SPREADSHEET_ID, "Sheet1") == []


def test_get_rows_pads_short_rows_and_drops_extra_cells(service, gateway):
    gateway.load_sheet(SPREADSHEET_ID, "Ragged", [
        ["a", "b", "c"],
        ["1"],
        ["1", "2", "3", "4", "5"],
        ["", "x", ""],
    ])

    assert service.get_rows(SPREADSHEET_ID, "Ragged") == [
        {"a": "1", "b": None, "c": None},
        {"a": "1", "b": "2", "c": "3"},
        {"a": None, "b": "x", "c": None},
    ]


def test_get_rows_decodes_dates(service, gateway):
    gateway.load_sheet(SPREADSHEET_ID, "Events", [
        ["name", "at", "on"],
        ["launch", "2025-12-29 17:29:33", "2025-12-30"],
    ])

    assert service.get_rows(SPREADSHEET_ID, "Events") == [
        {"name": "launch", "at": "2025-12-29T17:29:33.000Z", "on": "2025-12-30T00:00:00.000Z"},
    ]


def test_get_row(service, users_gateway):
    assert service.get_row(SPREADSHEET_ID, "Users", 2) == JOHN
    assert service.get_row(SPREADSHEET_ID, "Users", 3) == JANE


def test_get_row_past_last_row_is_none(service, users_gateway):
    assert service.get_row(SPREADSHEET_ID, "Users", 4) is None
    assert service.get_row(SPREADSHEET_ID, "Users", 100) is None


def test_get_row_blank_row_is_none(service, gateway):
    gateway.load_sheet(SPREADSHEET_ID, "Gaps", [["a"], ["", ""], ["x"]])

    assert service.get_row(SPREADSHEET_ID, "Gaps", 2) is None
    assert service.get_row(SPREADSHEET_ID, "Gaps", 3) == {"a": "x"}


def test_first_append_writes_headers_from_record_keys(service, gateway):
    row_index = service.append_row(SPREADSHEET_ID, "Sheet1", {"name": "John", "age": 30, "city": "Paris"})

    assert row_index == 2
    assert service.get_schema(SPREADSHEET_ID, "Sheet1") == ["name", "age", "city"]
    assert gateway.dump_sheet(SPREADSHEET_ID, "Sheet1") == [
        ["name", "age", "city"],
        ["John", 30, "Paris"],
    ]


def test_second_append_lands_on_next_row(service):
    assert service.append_row(SPREADSHEET_ID, "Sheet1", {"name": "John"}) == 2
    assert service.append_row(SPREADSHEET_ID, "Sheet1", {"name": "Jane"}) == 3

    assert service.get_rows(SPREADSHEET_ID, "Sheet1") == [{"name": "John"}, {"name": "Jane"}]


def test_append_projects_onto_existing_headers(service, users_gateway):
    row_index = service.append_row(SPREADSHEET_ID, "Users", {"name": "Max", "nickname": "maxi", "id": 3})

    assert row_index == 4
    assert users_gateway.dump_sheet(SPREADSHEET_ID, "Users")[3] == [3, "Max", "", ""]
    assert service.get_row(SPREADSHEET_ID, "Users", 4) == {"id": 3, "name": "Max", "email": None, "active": None}
    assert service.get_schema(SPREADSHEET_ID, "Users") == ["id", "name", "email", "active"]


def test_append_encodes_timestamps(service, gateway):
    service.append_row(SPREADSHEET_ID, "Sheet1", {"createdAt": "2025-12-29T17:29:33.195Z"})

    assert gateway.dump_sheet(SPREADSHEET_ID, "Sheet1")[1] == ["2025-12-29 17:29:33"]
    assert service.get_rows(SPREADSHEET_ID, "Sheet1") == [{"createdAt": "2025-12-29T17:29:33.000Z"}]


def test_append_to_unknown_sheet_is_backend_error(service):
    with pytest.raises(BackendError):
        service.append_row(SPREADSHEET_ID, "Nope", {"a": 1})


def test_append_with_unparseable_range_reports_sentinel():
    gateway = MagicMock()
    gateway.get_values.return_value = [["a"]]
    gateway.append_values.return_value = {"updates": {}}

    row_index = SpreadsheetService(gateway).append_row(SPREADSHEET_ID, "Sheet1", {"a": 1})

    assert row_index == -1
    gateway.update_values.assert_not_called()


def test_append_uses_whole_sheet_range_and_header_range():
    gateway = MagicMock()
    gateway.get_values.return_value = []
    gateway.append_values.return_value = {"updates": {"updatedRange": "'My Sheet'!A2:B2"}}

    row_index = SpreadsheetService(gateway).append_row(SPREADSHEET_ID, "My Sheet", {"a": None, "b": 2})

    assert row_index == 2
    gateway.get_values.assert_called_once_with(SPREADSHEET_ID, "'My Sheet'!1:1")
    gateway.update_values.assert_called_once_with(SPREADSHEET_ID, "'My Sheet'!1:1", [["a", "b"]])
    gateway.append_values.assert_called_once_with(SPREADSHEET_ID, "'My Sheet'", [["", 2]])


def test_update_row_replaces_whole_row(service, users_gateway):
    service.update_row(SPREADSHEET_ID, "Users", 3, {"id": 2, "name": "Jane Smith"})

    assert service.get_row(SPREADSHEET_ID, "Users", 3) == {
        "id": 2, "name": "Jane Smith", "email": None, "active": None,
    }
    assert service.get_row(SPREADSHEET_ID, "Users", 2) == JOHN


def test_update_row_encodes_timestamps(service, gateway):
    gateway.load_sheet(SPREADSHEET_ID, "Events", [["at"], ["2020-01-01 00:00:00"]])

    service.update_row(SPREADSHEET_ID, "Events", 2, {"at": "2025-06-01T08:30:00.500Z", "ignored": 1})

    assert gateway.dump_sheet(SPREADSHEET_ID, "Events")[1] == ["2025-06-01 08:30:00"]


def test_delete_row_shifts_rows_up(service, users_gateway):
    service.delete_row(SPREADSHEET_ID, "Users", 2)

    assert service.get_rows(SPREADSHEET_ID, "Users") == [JANE]
    assert service.get_row(SPREADSHEET_ID, "Users", 2) == JANE


def test_delete_row_sends_zero_based_dimension_range():
    gateway = MagicMock()
    gateway.get_sheet_properties.return_value = [{"sheetId": 42, "title": "Users", "index": 0}]

    SpreadsheetService(gateway).delete_row(SPREADSHEET_ID, "Users", 5)

    gateway.batch_update.assert_called_once_with(SPREADSHEET_ID, [{
        "deleteDimension": {
            "range": {"sheetId": 42, "dimension": "ROWS", "startIndex": 4, "endIndex": 5}
        }
    }])


def test_delete_row_unknown_sheet(service):
    with pytest.raises(SheetNotFoundError, match='Sheet "Ghost" not found'):
        service.delete_row(SPREADSHEET_ID, "Ghost", 2)


def test_users_scenario(service, users_gateway):
    assert service.get_rows(SPREADSHEET_ID, "Users") == [JOHN, JANE]
    assert service.get_row(SPREADSHEET_ID, "Users", 3) == JANE

    service.delete_row(SPREADSHEET_ID, "Users", 3)

    assert service.get_rows(SPREADSHEET_ID, "Users") == [JOHN]


def test_sheet_titles_with_quotes(service):
    service.create_sheet(SPREADSHEET_ID, "O'Brien")

    assert service.append_row(SPREADSHEET_ID, "O'Brien", {"x": "y"}) == 2
    assert service.get_rows(SPREADSHEET_ID, "O'Brien") == [{"x": "y"}]


@pytest.mark.parametrize("updated_range, expected", [
    ("'Users'!A7:D7", 7),
    ("Sheet1!A12:C12", 12),
    ("'Users'!A3", 3),
    ("", -1),
    ("'Users'!A:D", -1),
    (None, -1),
])
def test_parse_updated_row(updated_range, expected):
    assert parse_updated_row(updated_range) == expected
