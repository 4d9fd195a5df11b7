# backend/tests/conftest.py
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from sheetmark.config import Settings
from sheetmark.models import SheetRef
from sheetmark.wsgi import create_app


class FakeSheetsStore:
    """In-memory stand-in for GoogleSheetsStore; records every call."""

    def __init__(self, sheets=None, columns=None):
        # {title: sheet_id}
        self.sheets = sheets if sheets is not None else {"Sheet1": 0}
        # {title: [row1_cells, row2_cells, ...]}
        self.grids = dict(columns or {})
        self.calls = []
        self.batches = []
        self.fail_on = None

    def list_sheets(self):
        self.calls.append(("list_sheets",))
        return [SheetRef(title=t, sheet_id=i) for t, i in self.sheets.items()]

    def get_values(self, range_):
        self.calls.append(("get_values", range_))
        title, cells = range_.rsplit("!", 1)
        title = title[1:-1].replace("''", "'")
        grid = self.grids.get(title, [])

        if cells == "1:1":
            return [grid[0]] if grid else []

        letter = cells.split(":")[0]
        index = _letter_index(letter)
        return [[row[index]] if len(row) > index else [] for row in grid]

    def batch_update(self, requests):
        self.calls.append(("batch_update", len(requests)))
        if self.fail_on == "batch_update":
            from sheetmark.errors import RemoteError
            raise RemoteError("Sheets API spreadsheets.batchUpdate failed (503): backendError", upstream_status=503)
        self.batches.append(list(requests))
        return {"replies": [{} for _ in requests]}


def _letter_index(letter: str) -> int:
    index = 0
    for ch in letter:
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1


def grid_from_column(values, column_index=0):
    """Build sheet rows that hold ``values`` in ``column_index``."""
    return [[""] * column_index + [v] for v in values]


@pytest.fixture(scope="session")
def service_account_info():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return {
        "type": "service_account",
        "project_id": "sheetmark-test",
        "private_key_id": "0123456789abcdef",
        "private_key": pem.decode("ascii"),
        "client_email": "marker@sheetmark-test.iam.gserviceaccount.com",
        "client_id": "1234567890",
        "token_uri": "https://oauth2.googleapis.com/token",
    }


@pytest.fixture()
def settings():
    return Settings(
        ENV="test",
        GOOGLE_SERVICE_ACCOUNT_KEY=None,
        GOOGLE_CREDS_PATH=None,
        CSV_ENCODING=None,
    )


@pytest.fixture()
def store():
    return FakeSheetsStore(
        sheets={"Sheet1": 0, "掲載中": 123456},
        columns={"掲載中": grid_from_column(["案件ID", "XYZ", "ABC", "DEF", "GHI"])},
    )


@pytest.fixture()
def app(settings, store):
    requested = []

    def store_factory(spreadsheet_id):
        requested.append(spreadsheet_id)
        return store

    flask_app = create_app(settings, store_factory=store_factory)
    flask_app.config.update(TESTING=True, REQUESTED_SPREADSHEETS=requested)
    return flask_app


@pytest.fixture()
def client(app):
    return app.test_client()
