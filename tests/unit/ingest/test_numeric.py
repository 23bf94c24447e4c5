"""Tests for fail-soft decimal parsing of provider cells."""

from __future__ import annotations

from decimal import Decimal

import pytest

from haulpay.ingest.numeric import parse_decimal


@pytest.mark.parametrize("text,expected", [
    ("3.899", Decimal("3.899")),
    (" 100.00 ", Decimal("100.00")),
    ("-2.57", Decimal("-2.57")),
    ("1e2", Decimal("100")),
])
def test_parses_numbers(text, expected):
    assert parse_decimal(text) == expected


@pytest.mark.parametrize("text", [None, "", "   ", "N/A", "$12", "1,234.50", "NaN", "Infinity"])
def test_non_numbers_become_zero(text):
    assert parse_decimal(text) == Decimal("0")
