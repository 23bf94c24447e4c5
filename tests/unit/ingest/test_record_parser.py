"""Tests for RecordParser: column resolution, row filtering and coercion."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from haulpay.ingest import record_parser
from haulpay.ingest.readers import open_reader
from haulpay.ingest.record_parser import RecordParser
from haulpay.models.field_map import DEFAULT_HEADERS
from haulpay.services.employee_correlator import EmployeeCorrelator


def _parse(path, field_map, correlator=None):
    parser = RecordParser(correlator)
    with open_reader(path) as reader:
        candidates = list(parser.parse(reader, field_map))
    return parser, candidates


class TestDelimited:
    def test_builds_typed_transaction(self, write_csv, make_row, field_map):
        path = write_csv([make_row()])
        _, candidates = _parse(path, field_map)
        assert len(candidates) == 1
        txn = candidates[0].transaction
        assert candidates[0].row_ref == 2
        assert txn.invoice == "INV1"
        assert txn.tran_date == "2024-01-01"
        assert txn.location_name == "StationA"
        assert txn.state_prov == "TX"
        assert txn.amt == Decimal("100.00")
        assert txn.unit_price == Decimal("3.899")
        assert txn.employee_id == 0

    def test_short_rows_skipped(self, write_csv, make_row, field_map):
        short = make_row()[:10]
        path = write_csv([make_row(invoice="INV1"), short, make_row(invoice="INV3")])
        parser, candidates = _parse(path, field_map)
        assert [c.transaction.invoice for c in candidates] == ["INV1", "INV3"]
        assert [c.row_ref for c in candidates] == [2, 4]
        assert parser.malformed_rows == 1

    def test_unparseable_numbers_become_zero(self, write_csv, make_row, field_map):
        path = write_csv([make_row(amt="N/A", qty="$12")])
        _, candidates = _parse(path, field_map)
        txn = candidates[0].transaction
        assert txn.qty == Decimal("0")
        assert txn.amt == Decimal("0")

    def test_columns_found_by_header_not_position(self, write_csv, make_row, field_map):
        headers = list(reversed(DEFAULT_HEADERS.values()))
        path = write_csv([make_row(headers, invoice="INV7", amt="7.25")], headers=headers)
        _, candidates = _parse(path, field_map)
        assert candidates[0].transaction.invoice == "INV7"
        assert candidates[0].transaction.amt == Decimal("7.25")

    def test_unmapped_field_left_empty(self, write_csv, make_row, field_map):
        field_map.set("City", "town")
        path = write_csv([make_row()])
        _, candidates = _parse(path, field_map)
        assert candidates[0].transaction.city == ""

    def test_blank_invoice_kept_for_delimited(self, write_csv, make_row, field_map):
        path = write_csv([make_row(invoice="")])
        parser, candidates = _parse(path, field_map)
        assert len(candidates) == 1
        assert parser.blank_rows == 0

    def test_inline_correlation(self, write_csv, make_row, field_map, directory):
        path = write_csv([make_row(), make_row(invoice="INV2", driver_name="Nobody")])
        _, candidates = _parse(path, field_map, EmployeeCorrelator.from_directory(directory))
        assert [c.transaction.employee_id for c in candidates] == [7, 0]

    def test_module_level_parse(self, write_csv, make_row, field_map):
        path = write_csv([make_row(), make_row(invoice="INV2")])
        with open_reader(path) as reader:
            candidates = record_parser.parse(reader, field_map)
        assert len(candidates) == 2


class TestWorkbook:
    def test_blank_invoice_rows_skipped(self, write_xlsx, field_map):
        headers = ["invoice", "tran date", "location name", "amt", "driver name", "unit"]
        path = write_xlsx(
            [
                ["INV1", date(2024, 1, 1), "StationA", 100.0, "John Smith", "T101"],
                ["", date(2024, 1, 2), "StationB", 5.0, "", ""],
                ["INV4", date(2024, 1, 3), "StationC", 12.5, "", ""],
            ],
            headers=headers,
        )
        parser, candidates = _parse(path, field_map)
        assert [c.transaction.invoice for c in candidates] == ["INV1", "INV4"]
        assert [c.row_ref for c in candidates] == [2, 4]
        assert parser.blank_rows == 1

    def test_narrow_rows_accepted(self, write_xlsx, field_map):
        path = write_xlsx([["INV1", 42]], headers=["invoice", "amt"])
        _, candidates = _parse(path, field_map)
        assert len(candidates) == 1
        txn = candidates[0].transaction
        assert txn.amt == Decimal("42")
        assert txn.tran_date == ""

    def test_dates_rendered_iso(self, write_xlsx, field_map):
        path = write_xlsx([["INV1", date(2024, 3, 9)]], headers=["invoice", "tran date"])
        _, candidates = _parse(path, field_map)
        assert candidates[0].transaction.tran_date == "2024-03-09"
