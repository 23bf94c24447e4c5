"""Shared fixtures: in-memory collaborators and fuel export file builders."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from openpyxl import Workbook

from haulpay.models.employee import EmployeeRecord
from haulpay.models.field_map import DEFAULT_HEADERS, FieldMap
from tests.fakes import MemoryEmployeeDirectory, MemoryKeyValueBackend, MemoryTransactionStore

DEFAULT_HEADER_ROW: list[str] = list(DEFAULT_HEADERS.values())

SAMPLE_ROW: dict[str, str] = {
    "card #": "7083-0001",
    "tran date": "2024-01-01",
    "tran time": "08:15",
    "invoice": "INV1",
    "unit": "T101",
    "driver name": "John Smith",
    "odometer": "120500",
    "location name": "StationA",
    "city": "Dallas",
    "state/ prov": "TX",
    "fees": "0.00",
    "item": "ULSD",
    "unit price": "3.899",
    "disc ppu": "0.10",
    "disc cost": "3.799",
    "qty": "25.65",
    "disc amt": "2.57",
    "disc type": "RETAIL",
    "amt": "100.00",
    "db": "N",
    "currency": "USD",
}

_HEADER_KEYS: dict[str, str] = {
    h.replace("#", "").replace("/", "").strip().replace(" ", "_").replace("__", "_"): h
    for h in SAMPLE_ROW
}


def fuel_row(headers: list[str] | None = None, **overrides: str) -> list[str]:
    """One data row laid out for ``headers``.

    Overrides are keyed by header text with spaces as underscores and
    punctuation dropped: ``tran_date``, ``state_prov``, ``card``.
    """
    values = dict(SAMPLE_ROW)
    for key, value in overrides.items():
        values[_HEADER_KEYS[key]] = value
    return [values.get(h, "") for h in (headers or DEFAULT_HEADER_ROW)]


@pytest.fixture
def make_row() -> Callable[..., list[str]]:
    return fuel_row


@pytest.fixture
def store() -> MemoryTransactionStore:
    return MemoryTransactionStore()


@pytest.fixture
def directory() -> MemoryEmployeeDirectory:
    return MemoryEmployeeDirectory([
        EmployeeRecord(id=7, name="John Smith", unit="T101"),
        EmployeeRecord(id=9, name="Maria Lopez", unit="T202"),
    ])


@pytest.fixture
def kv_backend() -> MemoryKeyValueBackend:
    return MemoryKeyValueBackend()


@pytest.fixture
def field_map() -> FieldMap:
    return FieldMap.load_default()


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    def _write(rows: list[list[str]], headers: list[str] | None = None, name: str = "fuel.csv") -> Path:
        path = tmp_path / name
        lines = [",".join(headers or DEFAULT_HEADER_ROW)] + [",".join(r) for r in rows]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_xlsx(tmp_path: Path) -> Callable[..., Path]:
    def _write(rows: list[list[object]], headers: list[str] | None = None, name: str = "fuel.xlsx") -> Path:
        path = tmp_path / name
        wb = Workbook()
        ws = wb.active
        ws.append(headers or DEFAULT_HEADER_ROW)
        for row in rows:
            ws.append(row)
        wb.save(path)
        return path
    return _write


@pytest.fixture(autouse=True)
def _pytest_owns_logging(monkeypatch):
    """Keep setup_logging from attaching handlers to pytest's captured streams."""
    monkeypatch.setattr("haulpay.core.logging._LOGGING_CONFIGURED", True)
