"""Tests for wiring persistence backends from settings."""

from __future__ import annotations

from unittest.mock import patch

import fakeredis

from haulpay.core.config import AppSettings, FieldMapConfig, StorageConfig
from haulpay.persistence import create_persistence
from haulpay.persistence.field_map_store import JsonFileFieldMapStore, KeyValueFieldMapStore
from haulpay.persistence.sqlite_store import SqliteEmployeeDirectory, SqliteTransactionStore


def test_file_backed_field_map(tmp_path):
    settings = AppSettings(
        storage=StorageConfig(db_path=str(tmp_path / "payroll.db")),
        field_map=FieldMapConfig(path=str(tmp_path / "fm.json")),
    )
    store, directory, field_maps = create_persistence(settings)
    assert isinstance(store, SqliteTransactionStore)
    assert isinstance(directory, SqliteEmployeeDirectory)
    assert isinstance(field_maps, JsonFileFieldMapStore)
    assert store.count() == 0
    assert directory.list_all() == []


def test_redis_backed_field_map(tmp_path):
    settings = AppSettings(
        storage=StorageConfig(db_path=str(tmp_path / "payroll.db")),
        field_map=FieldMapConfig(backend="redis"),
    )
    with patch("redis.Redis", return_value=fakeredis.FakeRedis(decode_responses=True)):
        _, _, field_maps = create_persistence(settings)
    assert isinstance(field_maps, KeyValueFieldMapStore)
    assert field_maps.load().get("Invoice") == "invoice"
