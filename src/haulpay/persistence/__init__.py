"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from haulpay.core.config import AppSettings
from haulpay.persistence.field_map_store import JsonFileFieldMapStore, KeyValueFieldMapStore
from haulpay.persistence.redis_backend import RedisKeyValueBackend
from haulpay.persistence.sqlite_store import SqliteEmployeeDirectory, SqliteTransactionStore


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (transaction_store, employee_directory, field_map_store).
    """
    if settings is None:
        settings = AppSettings()

    store = SqliteTransactionStore(
        settings.storage.db_path,
        timeout=settings.storage.timeout,
    )

    directory = SqliteEmployeeDirectory(
        settings.storage.db_path,
        timeout=settings.storage.timeout,
    )

    if settings.field_map.backend == "redis":
        backend = RedisKeyValueBackend.from_config(settings.redis)
        field_map_store = KeyValueFieldMapStore(backend, settings.field_map.redis_key)
    else:
        field_map_store = JsonFileFieldMapStore(settings.field_map.path)

    return store, directory, field_map_store
