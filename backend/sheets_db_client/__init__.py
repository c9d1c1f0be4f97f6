from sheets_db_client.client import SheetHelper, SheetsDbClient, SheetsDbError

__all__ = ["SheetHelper", "SheetsDbClient", "SheetsDbError"]
