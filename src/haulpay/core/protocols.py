"""Protocol interfaces for the collaborators of the fuel import.

Services depend on these, never on a concrete backend. SQLite, Redis and
the memory fakes satisfy them structurally.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from haulpay.models.employee import EmployeeRecord
    from haulpay.models.field_map import FieldMap
    from haulpay.models.fuel_transaction import FuelTransaction
    from haulpay.models.imports import ImportProgress, InsertResult


# ---------------------------------------------------------------------------
# Persistence: Fuel Transaction Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransactionStore(Protocol):
    """Relational fuel transaction table with a natural-key uniqueness constraint."""

    def add(self, transaction: FuelTransaction) -> InsertResult: ...

    def exists(self, invoice: str, tran_date: str, location_name: str, amount: Decimal) -> bool: ...

    def get_all(self) -> list[FuelTransaction]: ...

    def get_by_date_range(self, start: date | None, end: date | None) -> list[FuelTransaction]: ...

    def get_by_driver_and_date_range(
        self, driver_name: str, start: date | None, end: date | None
    ) -> list[FuelTransaction]: ...

    def count(self) -> int: ...


# ---------------------------------------------------------------------------
# Employee Directory
# ---------------------------------------------------------------------------

@runtime_checkable
class IEmployeeDirectory(Protocol):
    """Read-only employee listing used for driver correlation."""

    def list_all(self) -> list[EmployeeRecord]: ...


# ---------------------------------------------------------------------------
# Field Map Persistence
# ---------------------------------------------------------------------------

@runtime_checkable
class IFieldMapStore(Protocol):
    """Loads and saves the user-edited column mapping."""

    def load(self) -> FieldMap: ...

    def save(self, field_map: FieldMap) -> None: ...


@runtime_checkable
class IKeyValueBackend(Protocol):
    """Redis-compatible string key-value interface."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Progress Reporting
# ---------------------------------------------------------------------------

@runtime_checkable
class IProgressSink(Protocol):
    """Receives progress events from a running import."""

    def __call__(self, progress: ImportProgress) -> None: ...
