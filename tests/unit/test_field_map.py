"""Tests for FieldMap defaults, editing and header resolution."""

from __future__ import annotations

import pytest

from haulpay.core.exceptions import UnknownFieldError
from haulpay.models.field_map import DEFAULT_HEADERS, LOGICAL_FIELDS, FieldMap


class TestDefaults:
    def test_default_map_covers_every_logical_field(self):
        field_map = FieldMap.load_default()
        assert len(LOGICAL_FIELDS) == 21
        assert dict(field_map.items()) == DEFAULT_HEADERS

    def test_items_in_file_order(self):
        fields = [f for f, _ in FieldMap.load_default().items()]
        assert fields[0] == "Card Number"
        assert fields[-1] == "Currency"

    def test_reset_restores_defaults(self):
        field_map = FieldMap.load_default()
        field_map.set("Invoice", "Ticket")
        field_map.reset()
        assert field_map.get("Invoice") == "invoice"


class TestGetSet:
    def test_set_then_get(self):
        field_map = FieldMap.load_default()
        field_map.set("Amount", "Total $")
        assert field_map.get("Amount") == "Total $"

    def test_unknown_field_rejected(self):
        field_map = FieldMap.load_default()
        with pytest.raises(UnknownFieldError):
            field_map.set("Mileage", "miles")
        with pytest.raises(KeyError):
            field_map.get("Mileage")


class TestFromMapping:
    def test_overlays_defaults(self):
        field_map = FieldMap.from_mapping({"Invoice": "Ticket #"})
        assert field_map.get("Invoice") == "Ticket #"
        assert field_map.get("Amount") == "amt"

    def test_drops_unknown_and_non_text_entries(self):
        field_map = FieldMap.from_mapping({"Mileage": "miles", "Amount": 5})
        assert "Mileage" not in field_map.mappings
        assert field_map.get("Amount") == "amt"

    def test_saved_items_round_trip(self):
        edited = FieldMap.load_default()
        edited.set("Driver Name", "Operator")
        assert FieldMap.from_mapping(dict(edited.items())) == edited


class TestResolve:
    def test_case_and_space_insensitive(self):
        indices = FieldMap.load_default().resolve(["  AMT ", "Invoice", "Card #"])
        assert indices == {"Amount": 0, "Invoice": 1, "Card Number": 2}

    def test_first_matching_column_wins(self):
        indices = FieldMap.load_default().resolve(["invoice", "amt", "INVOICE"])
        assert indices["Invoice"] == 0

    def test_missing_headers_left_unresolved(self):
        indices = FieldMap.load_default().resolve(["invoice"])
        assert "Amount" not in indices

    def test_empty_expected_header_never_matches(self):
        field_map = FieldMap.load_default()
        field_map.set("DB", "")
        assert "DB" not in field_map.resolve(["", "db"])

    def test_custom_header(self):
        field_map = FieldMap.load_default()
        field_map.set("Invoice", "Ticket")
        assert field_map.resolve(["invoice", "ticket"])["Invoice"] == 1

    def test_custom_then_reset_locates_same_field(self):
        default_headers = list(DEFAULT_HEADERS.values())
        custom_headers = ["Ticket" if h == "invoice" else h for h in default_headers]
        field_map = FieldMap.load_default()

        field_map.set("Invoice", "Ticket")
        custom_index = field_map.resolve(custom_headers)["Invoice"]
        field_map.reset()
        default_index = field_map.resolve(default_headers)["Invoice"]

        assert custom_index == default_index == 3
