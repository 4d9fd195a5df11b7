"""
Error taxonomy for the CSV -> sheet greying pipeline.

Every error carries a ``kind`` and the HTTP status the API layer answers with.
"""


class SheetMarkError(Exception):
    """Base exception for sheetmark errors"""

    kind = "unknown"
    status_code = 500

    def __init__(self, message: str, stage=None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class ConfigurationError(SheetMarkError):
    """Raised at startup when service account credentials are missing or malformed"""

    kind = "configuration"
    status_code = 500


class InputError(SheetMarkError):
    """Raised when the caller supplied unusable input"""

    kind = "input"
    status_code = 400


class EmptyInputError(InputError):
    """Raised when the CSV has no data rows"""
    pass


class HeaderNotFoundError(InputError):
    """Raised when the CSV header row lacks the project ID label"""
    pass


class CsvParseError(InputError):
    """Raised when the CSV is not well-formed"""
    pass


class CsvEncodingError(InputError):
    """Raised when the CSV bytes cannot be decoded"""
    pass


class ColumnNotFoundError(InputError):
    """Raised when row 1 of the sheet lacks the project ID label"""
    pass


class InvalidRequestError(InputError):
    """Raised when a request is missing fields or carries a non-CSV upload"""
    pass


class NotFoundError(SheetMarkError):
    kind = "not_found"
    status_code = 404


class SheetNotFoundError(NotFoundError):
    """Raised when the spreadsheet has no sheet with the requested title"""
    pass


class RemoteError(SheetMarkError):
    """Raised when a Google Sheets API call fails"""

    kind = "remote"
    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None, stage=None):
        super().__init__(message, stage=stage)
        self.upstream_status = upstream_status


class UnknownError(SheetMarkError):
    kind = "unknown"
    status_code = 500
