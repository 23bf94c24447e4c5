"""Import run state, progress, outcome and persistence result models."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from haulpay.core.types import RowRef
from haulpay.models.fuel_transaction import FuelTransaction


class ImportState(StrEnum):
    IDLE = "IDLE"
    READING = "READING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportState.COMPLETED, ImportState.CANCELLED, ImportState.FAILED)


class InsertStatus(StrEnum):
    INSERTED = "INSERTED"
    DUPLICATE = "DUPLICATE"
    ERROR = "ERROR"


class InsertResult(BaseModel):
    """Outcome of a single store insert: Inserted | Duplicate | Error."""

    status: InsertStatus
    transaction_id: Optional[int] = None
    message: str = ""

    @classmethod
    def inserted(cls, transaction_id: int) -> InsertResult:
        return cls(status=InsertStatus.INSERTED, transaction_id=transaction_id)

    @classmethod
    def duplicate(cls, message: str = "") -> InsertResult:
        return cls(status=InsertStatus.DUPLICATE, message=message)

    @classmethod
    def error(cls, message: str) -> InsertResult:
        return cls(status=InsertStatus.ERROR, message=message)


class ParsedCandidate(BaseModel):
    """A parsed, not-yet-persisted transaction and the file row it came from."""

    row_ref: int  # 1-based physical row; the header is row 1
    transaction: FuelTransaction


class ImportErrorEntry(BaseModel):
    row_ref: int
    message: str


class ImportProgress(BaseModel):
    """Progress event emitted once per processed row."""

    state: ImportState
    processed: int = 0
    total: int = 0
    message: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0 if self.state.is_terminal else 0.0
        return min(self.processed / self.total, 1.0)


class ImportResult(BaseModel):
    """Terminal tally of one import run. Never persisted."""

    state: ImportState = ImportState.COMPLETED
    total: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    error_list: list[ImportErrorEntry] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.imported + self.skipped + self.errors

    def add_error(self, row_ref: RowRef, message: str) -> None:
        self.errors += 1
        self.error_list.append(ImportErrorEntry(row_ref=row_ref, message=message))

    def summary(self, max_errors: int = 5) -> str:
        """Render the tally for display, showing at most ``max_errors`` entries."""
        heading = {
            ImportState.COMPLETED: "Import complete!",
            ImportState.CANCELLED: "Import cancelled.",
        }.get(self.state, f"Import {self.state.lower()}.")
        lines = [
            heading,
            f"Total rows: {self.total}",
            f"Imported: {self.imported}",
            f"Skipped (duplicates): {self.skipped}",
            f"Errors: {self.errors}",
        ]
        shown = self.error_list[:max(max_errors, 0)]
        for entry in shown:
            lines.append(f"  Row {entry.row_ref}: {entry.message}")
        remainder = len(self.error_list) - len(shown)
        if remainder > 0:
            lines.append(f"  ... and {remainder} more")
        return "\n".join(lines)
