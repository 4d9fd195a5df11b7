import logging
import re
from typing import Any, Sequence

import google_auth_httplib2
import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from openpyxl.utils import get_column_letter

from ..credentials import ServiceAccountConfig
from ..errors import InvalidRequestError, RemoteError
from ..models import SheetRef

logger = logging.getLogger(__name__)


SPREADSHEET_URL_RE = re.compile(r"/spreadsheets/d/([A-Za-z0-9_-]+)")
SPREADSHEET_ID_RE = re.compile(r"^[A-Za-z0-9_-]{10,}$")


def parse_spreadsheet_id(value: str | None) -> str:
    '''
    Accept a bare spreadsheet ID or a docs.google.com/spreadsheets/d/<id>/... URL.
    '''
    value = (value or "").strip()
    if not value:
        raise InvalidRequestError("Spreadsheet ID or URL is required.")

    match = SPREADSHEET_URL_RE.search(value)
    if match:
        return match.group(1)
    if SPREADSHEET_ID_RE.match(value):
        return value

    raise InvalidRequestError(f"Not a Google Sheets URL or spreadsheet ID: {value!r}")


def column_letter(index: int) -> str:
    '''
    Zero-based column index to A1 letters: 0 -> A, 25 -> Z, 26 -> AA.
    '''
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")
    return get_column_letter(index + 1)


def quote_sheet_title(title: str) -> str:
    return "'" + title.replace("'", "''") + "'"


def a1_range(title: str, cells: str) -> str:
    return f"{quote_sheet_title(title)}!{cells}"


class GoogleSheetsStore:
    '''
    The three Sheets v4 calls the reconciler needs, bound to one spreadsheet:
    list sheets, read a value range, apply a batch of requests.
    HttpError, token refresh and transport failures are raised as RemoteError.
    '''

    def __init__(self, service, spreadsheet_id: str, num_retries: int = 0):
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        self.num_retries = num_retries

    @classmethod
    def from_config(
        cls,
        config: ServiceAccountConfig,
        spreadsheet_id: str,
        timeout: float | None = None,
        num_retries: int = 0,
    ) -> "GoogleSheetsStore":
        http = google_auth_httplib2.AuthorizedHttp(
            config.credentials, http=httplib2.Http(timeout=timeout)
        )
        service = build("sheets", "v4", http=http, cache_discovery=False)
        return cls(service, spreadsheet_id, num_retries=num_retries)

    def _execute(self, request, description: str) -> dict:
        logger.debug("Sheets API %s on %s", description, self.spreadsheet_id)
        try:
            return request.execute(num_retries=self.num_retries)
        except HttpError as e:
            status = getattr(e, "status_code", None) or getattr(e.resp, "status", None)
            reason = getattr(e, "reason", None) or str(e)
            raise RemoteError(
                f"Sheets API {description} failed ({status}): {reason}",
                upstream_status=status,
            ) from e
        except (GoogleAuthError, OSError, httplib2.HttpLib2Error) as e:
            raise RemoteError(f"Sheets API {description} failed: {e}") from e

    def list_sheets(self) -> list[SheetRef]:
        request = self.service.spreadsheets().get(
            spreadsheetId=self.spreadsheet_id,
            fields="sheets(properties(sheetId,title))",
        )
        metadata = self._execute(request, "spreadsheets.get")

        return [
            SheetRef(title=sheet["properties"]["title"], sheet_id=sheet["properties"]["sheetId"])
            for sheet in metadata.get("sheets", [])
        ]

    def get_values(self, range_: str) -> list[list[Any]]:
        request = self.service.spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=range_,
        )
        return self._execute(request, "values.get").get("values", [])

    def batch_update(self, requests: Sequence[dict]) -> dict:
        request = self.service.spreadsheets().batchUpdate(
            spreadsheetId=self.spreadsheet_id,
            body={"requests": list(requests)},
        )
        return self._execute(request, "spreadsheets.batchUpdate")
