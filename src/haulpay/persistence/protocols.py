"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from haulpay.core.protocols import (
    IEmployeeDirectory,
    IFieldMapStore,
    IKeyValueBackend,
    ITransactionStore,
)

__all__ = ["IEmployeeDirectory", "IFieldMapStore", "IKeyValueBackend", "ITransactionStore"]
