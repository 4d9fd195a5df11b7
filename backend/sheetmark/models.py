# backend/sheetmark/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Stage(str, Enum):
    """Reconciliation progress for a single request."""

    IDLE = "idle"
    RESOLVING_SHEET = "resolving_sheet"
    RESOLVING_COLUMN = "resolving_column"
    READING_COLUMN = "reading_column"
    MATCHING = "matching"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


# -----------------------------
# sheet metadata
# -----------------------------
@dataclass(frozen=True)
class SheetRef:
    # spreadsheets.get -> sheets[].properties.title
    title: str

    # spreadsheets.get -> sheets[].properties.sheetId, opaque to us
    sheet_id: int

    def __repr__(self) -> str:
        return f"<SheetRef title={self.title!r} sheet_id={self.sheet_id}>"


# -----------------------------
# matching
# -----------------------------
@dataclass(frozen=True)
class MatchRecord:
    # 1-based, as shown in the Sheets UI
    row_number: int
    value: str

    @property
    def start_row_index(self) -> int:
        return self.row_number - 1

    @property
    def end_row_index(self) -> int:
        return self.row_number


@dataclass(frozen=True)
class ReconcileResult:
    sheet: SheetRef
    column_letter: str
    matches: tuple[MatchRecord, ...] = ()
    requests: tuple[dict[str, Any], ...] = field(default=(), repr=False)
    submitted: bool = False

    @property
    def updated_rows(self) -> int:
        return len(self.matches)

    @property
    def message(self) -> str:
        return f"{self.updated_rows} rows updated in sheet {self.sheet.title}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "updatedRows": self.updated_rows,
        }
