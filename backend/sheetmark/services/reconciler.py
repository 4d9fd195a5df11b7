import logging
from typing import Any, Iterable

from ..errors import ColumnNotFoundError, SheetMarkError, SheetNotFoundError
from ..models import MatchRecord, ReconcileResult, SheetRef, Stage
from .headers import header_map
from .sheets import a1_range, column_letter

logger = logging.getLogger(__name__)

GREY_COLOR = {"red": 0.3, "green": 0.3, "blue": 0.3}
PROJECT_ID_LABEL = "案件ID"


def grey_out_request(sheet_id: int, match: MatchRecord, color: dict) -> dict:
    # no column bounds, so the format covers the whole row
    return {
        "repeatCell": {
            "range": {
                "sheetId": sheet_id,
                "startRowIndex": match.start_row_index,
                "endRowIndex": match.end_row_index,
            },
            "cell": {
                "userEnteredFormat": {
                    "backgroundColor": dict(color)
                }
            },
            "fields": "userEnteredFormat.backgroundColor"
        }
    }


def find_matches(column_values: list[list[Any]], identifiers: Iterable[str]) -> list[MatchRecord]:
    '''
    Scan a single-column values.get response. Entry 0 is the header row and
    is skipped; entry i is sheet row i + 1.
    '''
    wanted = frozenset(identifiers)
    matches = []

    for i, row in enumerate(column_values[1:], start=2):
        value = str(row[0]).strip() if row else ""
        if value and value in wanted:
            matches.append(MatchRecord(row_number=i, value=value))

    return matches


class SheetReconciler:
    '''
    Greys out every row of a sheet whose project ID cell is in a given set.

    One instance serves one request: it walks through the Stage values and
    stamps the stage it failed in onto any SheetMarkError it raises.
    '''

    def __init__(self, store, label: str = PROJECT_ID_LABEL, color: dict | None = None):
        self.store = store
        self.label = label
        self.color = dict(color or GREY_COLOR)
        self.stage = Stage.IDLE

    def _advance(self, stage: Stage):
        logger.debug("reconcile stage %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def resolve_sheet(self, sheet_name: str) -> SheetRef:
        self._advance(Stage.RESOLVING_SHEET)

        sheet = next((s for s in self.store.list_sheets() if s.title == sheet_name), None)
        if sheet is None:
            raise SheetNotFoundError(
                f'Spreadsheet structure error: Sheet named "{sheet_name}" could not be found.'
            )
        return sheet

    def resolve_column(self, sheet: SheetRef) -> str:
        self._advance(Stage.RESOLVING_COLUMN)

        header_rows = self.store.get_values(a1_range(sheet.title, "1:1"))
        header_row = header_rows[0] if header_rows else []

        index = header_map(header_row).get(self.label)
        if index is None:
            raise ColumnNotFoundError(
                f"The column '{self.label}' was not found in the first row of the sheet."
            )
        return column_letter(index)

    def read_column(self, sheet: SheetRef, letter: str) -> list[list[Any]]:
        self._advance(Stage.READING_COLUMN)
        return self.store.get_values(a1_range(sheet.title, f"{letter}:{letter}"))

    def build_requests(self, sheet: SheetRef, matches: list[MatchRecord]) -> tuple[dict, ...]:
        return tuple(grey_out_request(sheet.sheet_id, match, self.color) for match in matches)

    def submit(self, requests: tuple[dict, ...]) -> bool:
        self._advance(Stage.SUBMITTING)
        if not requests:
            return False
        self.store.batch_update(requests)
        return True

    def reconcile(self, sheet_name: str, identifiers: Iterable[str]) -> ReconcileResult:
        try:
            sheet = self.resolve_sheet(sheet_name)
            letter = self.resolve_column(sheet)
            column_values = self.read_column(sheet, letter)

            self._advance(Stage.MATCHING)
            matches = find_matches(column_values, identifiers)
            requests = self.build_requests(sheet, matches)

            submitted = self.submit(requests)
        except Exception as e:
            if isinstance(e, SheetMarkError) and e.stage is None:
                e.stage = self.stage
            logger.debug("reconcile failed at stage %s", self.stage.value)
            self.stage = Stage.FAILED
            raise

        if submitted:
            logger.info("Greyed out %d rows in sheet %r", len(matches), sheet.title)
        else:
            logger.info("No matching project IDs found to grey out in sheet %r", sheet.title)

        self._advance(Stage.DONE)
        return ReconcileResult(
            sheet=sheet,
            column_letter=letter,
            matches=tuple(matches),
            requests=requests,
            submitted=submitted,
        )
