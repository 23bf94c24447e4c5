"""Fuel import test doubles, re-exported from the memory backends."""

from __future__ import annotations

from haulpay.persistence.memory_backend import (
    MemoryEmployeeDirectory,
    MemoryKeyValueBackend,
    MemoryTransactionStore,
)

__all__ = ["MemoryEmployeeDirectory", "MemoryKeyValueBackend", "MemoryTransactionStore"]
