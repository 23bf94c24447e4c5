"""Tests for import progress, result tally and summary rendering."""

from __future__ import annotations

import pytest

from haulpay.models.imports import ImportProgress, ImportResult, ImportState, InsertResult, InsertStatus


class TestImportState:
    @pytest.mark.parametrize("state", [ImportState.COMPLETED, ImportState.CANCELLED, ImportState.FAILED])
    def test_terminal_states(self, state):
        assert state.is_terminal

    @pytest.mark.parametrize("state", [ImportState.IDLE, ImportState.READING, ImportState.PROCESSING])
    def test_non_terminal_states(self, state):
        assert not state.is_terminal


class TestImportProgress:
    def test_fraction(self):
        assert ImportProgress(state=ImportState.PROCESSING, processed=1, total=4).fraction == 0.25

    def test_fraction_with_nothing_to_do(self):
        assert ImportProgress(state=ImportState.READING).fraction == 0.0
        assert ImportProgress(state=ImportState.COMPLETED).fraction == 1.0

    def test_fraction_serialized(self):
        dumped = ImportProgress(state=ImportState.PROCESSING, processed=2, total=4).model_dump()
        assert dumped["fraction"] == 0.5


class TestInsertResult:
    def test_constructors(self):
        assert InsertResult.inserted(3).status is InsertStatus.INSERTED
        assert InsertResult.inserted(3).transaction_id == 3
        assert InsertResult.duplicate().status is InsertStatus.DUPLICATE
        assert InsertResult.error("boom").message == "boom"


class TestImportResult:
    def test_add_error_counts(self):
        result = ImportResult(total=3, imported=1, skipped=1)
        result.add_error(4, "bad row")
        assert result.errors == 1
        assert result.processed == 3
        assert result.error_list[0].row_ref == 4

    def test_summary_lists_errors(self):
        result = ImportResult(total=3, imported=2)
        result.add_error(3, "disk full")
        text = result.summary()
        assert text.startswith("Import complete!")
        assert "Imported: 2" in text
        assert "  Row 3: disk full" in text
        assert "more" not in text

    def test_summary_truncates_error_list(self):
        result = ImportResult(total=8)
        for row in range(2, 10):
            result.add_error(row, "bad")
        text = result.summary(max_errors=5)
        assert text.count("  Row ") == 5
        assert "  ... and 3 more" in text

    def test_summary_for_cancelled_run(self):
        assert ImportResult(state=ImportState.CANCELLED).summary().startswith("Import cancelled.")
