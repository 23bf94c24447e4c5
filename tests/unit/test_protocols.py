"""Backends satisfy the collaborator protocols structurally."""

from __future__ import annotations

from haulpay.core.protocols import (
    IEmployeeDirectory,
    IFieldMapStore,
    IKeyValueBackend,
    IProgressSink,
    ITransactionStore,
)
from haulpay.persistence.field_map_store import JsonFileFieldMapStore, KeyValueFieldMapStore
from haulpay.persistence.sqlite_store import SqliteEmployeeDirectory, SqliteTransactionStore
from tests.fakes import MemoryEmployeeDirectory, MemoryKeyValueBackend, MemoryTransactionStore


def test_transaction_stores(tmp_path):
    assert isinstance(MemoryTransactionStore(), ITransactionStore)
    assert isinstance(SqliteTransactionStore(tmp_path / "p.db"), ITransactionStore)


def test_employee_directories(tmp_path):
    assert isinstance(MemoryEmployeeDirectory(), IEmployeeDirectory)
    assert isinstance(SqliteEmployeeDirectory(tmp_path / "p.db"), IEmployeeDirectory)


def test_field_map_stores(tmp_path):
    assert isinstance(JsonFileFieldMapStore(tmp_path / "fm.json"), IFieldMapStore)
    assert isinstance(KeyValueFieldMapStore(MemoryKeyValueBackend(), "fm"), IFieldMapStore)
    assert isinstance(MemoryKeyValueBackend(), IKeyValueBackend)


def test_list_append_is_a_progress_sink():
    events: list = []
    assert isinstance(events.append, IProgressSink)
