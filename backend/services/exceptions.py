class SheetsServiceError(Exception):
    """Base class for errors raised by the spreadsheet service layer"""


class SheetNotFoundError(SheetsServiceError):
    """Raised when a sheet title cannot be resolved to a sheet id"""

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(f'Sheet "{sheet_name}" not found')


class BackendError(SheetsServiceError):
    """Raised when the spreadsheet backend rejects or fails a call"""
