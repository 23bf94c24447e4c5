"""ImportPipeline: read -> parse -> per-row duplicate check, correlate, persist.

State machine::

    IDLE -> READING -> PROCESSING -> COMPLETED
                  \\            \\-> CANCELLED
                   \\-> FAILED

A pipeline instance runs once. Reading is eager: the whole file is parsed
before the first row is checked against the store, so a read failure leaves
the store untouched. During processing, problems with a single row are
recorded on the result and the loop moves on; cancellation is polled at the
start of every row.
"""

from __future__ import annotations

import logging
from pathlib import Path

from haulpay.core.config import ImportConfig
from haulpay.core.exceptions import (
    ImportReadError,
    PipelineStateError,
    StorageError,
    UnsupportedFormatError,
)
from haulpay.core.protocols import IEmployeeDirectory, IProgressSink, ITransactionStore
from haulpay.core.types import CancelCheck
from haulpay.ingest.readers import open_reader
from haulpay.ingest.record_parser import RecordParser
from haulpay.models.field_map import FieldMap
from haulpay.models.imports import (
    ImportProgress,
    ImportResult,
    ImportState,
    InsertStatus,
    ParsedCandidate,
)
from haulpay.services.duplicate_checker import DuplicateChecker
from haulpay.services.employee_correlator import EmployeeCorrelator

logger = logging.getLogger(__name__)


def _never_cancelled() -> bool:
    return False


class ImportPipeline:
    """Single-use orchestrator for one fuel-card file import."""

    def __init__(
        self,
        *,
        store: ITransactionStore,
        directory: IEmployeeDirectory,
        field_map: FieldMap,
        config: ImportConfig | None = None,
        progress: IProgressSink | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._field_map = field_map
        self._config = config or ImportConfig()
        self._progress = progress
        self._is_cancelled = is_cancelled or _never_cancelled
        self._checker = DuplicateChecker(store)
        self._correlator: EmployeeCorrelator | None = None
        self._state = ImportState.IDLE

    @property
    def state(self) -> ImportState:
        return self._state

    def start(self, path: str | Path) -> ImportResult:
        """Run the import to a terminal state.

        Returns the ImportResult for COMPLETED and CANCELLED runs. Raises
        UnsupportedFormatError or ImportReadError after moving to FAILED.
        """
        if self._state is not ImportState.IDLE:
            raise PipelineStateError(f"Import pipeline already used (state {self._state})")

        path = Path(path)
        self._transition(ImportState.READING)
        self._emit(0, 0, f"Reading {path.name}")
        try:
            candidates = self._read(path)
        except (UnsupportedFormatError, ImportReadError) as exc:
            self._fail(exc)
            raise
        except Exception as exc:
            error = ImportReadError(f"Failed to read {path.name}: {exc}")
            self._fail(error)
            raise error from exc

        self._transition(ImportState.PROCESSING)
        return self._process(candidates)

    # ---- Reading ----

    def _read(self, path: Path) -> list[ParsedCandidate]:
        reader = open_reader(path, self._config)
        self._correlator = EmployeeCorrelator.from_directory(self._directory)
        parser = RecordParser()
        with reader:
            candidates = list(parser.parse(reader, self._field_map))
        logger.info("Read %d transactions from %s", len(candidates), path.name)
        return candidates

    # ---- Processing ----

    def _process(self, candidates: list[ParsedCandidate]) -> ImportResult:
        total = len(candidates)
        result = ImportResult(state=ImportState.PROCESSING, total=total)
        self._emit(0, total, f"Importing {total} transactions")

        for position, candidate in enumerate(candidates, start=1):
            if self._is_cancelled():
                logger.info("Import cancelled after %d of %d rows", position - 1, total)
                result.state = ImportState.CANCELLED
                self._transition(ImportState.CANCELLED)
                self._emit(position - 1, total, "Import cancelled", ImportState.CANCELLED)
                return result

            self._process_row(candidate, result)
            self._emit(
                position, total,
                f"Processed {position} of {total}: {result.imported} imported, "
                f"{result.skipped} skipped, {result.errors} errors",
            )

        result.state = ImportState.COMPLETED
        self._transition(ImportState.COMPLETED)
        logger.info(
            "Import complete - Imported: %d, Skipped: %d, Errors: %d",
            result.imported, result.skipped, result.errors,
        )
        self._emit(total, total, "Import complete", ImportState.COMPLETED)
        return result

    def _process_row(self, candidate: ParsedCandidate, result: ImportResult) -> None:
        transaction = candidate.transaction
        try:
            if self._checker.is_duplicate(transaction):
                result.skipped += 1
                return

            if self._correlator is not None:
                transaction.employee_id = self._correlator.correlate(
                    transaction.driver_name, transaction.unit
                )

            outcome = self._store.add(transaction)
        except StorageError as exc:
            logger.warning("Row %d failed: %s", candidate.row_ref, exc)
            result.add_error(candidate.row_ref, str(exc))
            return
        except Exception as exc:
            logger.exception("Row %d failed unexpectedly", candidate.row_ref)
            result.add_error(candidate.row_ref, f"Unexpected: {exc}")
            return

        if outcome.status is InsertStatus.INSERTED:
            result.imported += 1
        elif outcome.status is InsertStatus.DUPLICATE:
            result.skipped += 1
        else:
            logger.warning("Row %d not stored: %s", candidate.row_ref, outcome.message)
            result.add_error(candidate.row_ref, outcome.message or "Insert failed")

    # ---- State & progress ----

    def _transition(self, new_state: ImportState) -> None:
        logger.info("Import pipeline %s -> %s", self._state, new_state)
        self._state = new_state

    def _fail(self, exc: Exception) -> None:
        logger.error("Import failed: %s", exc)
        self._transition(ImportState.FAILED)
        self._emit(0, 0, f"Import failed: {exc}", ImportState.FAILED)

    def _emit(self, processed: int, total: int, message: str, state: ImportState | None = None) -> None:
        if self._progress is None:
            return
        self._progress(ImportProgress(
            state=state or self._state, processed=processed, total=total, message=message,
        ))
