"""Dict-backed stores used by unit tests and local runs."""

from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal

from haulpay.core.exceptions import StorageError
from haulpay.models.employee import EmployeeRecord
from haulpay.models.fuel_transaction import FuelTransaction, NaturalKey, make_natural_key
from haulpay.models.imports import InsertResult


class MemoryTransactionStore:
    """Dict-backed ITransactionStore enforcing the natural-key constraint."""

    def __init__(self) -> None:
        self._rows: dict[int, FuelTransaction] = {}
        self._keys: dict[NaturalKey, int] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.exists_calls: list[NaturalKey] = []
        self.fail_invoices: set[str] = set()  # add() raises StorageError for these

    def add(self, transaction: FuelTransaction) -> InsertResult:
        if transaction.invoice in self.fail_invoices:
            raise StorageError(f"Simulated failure for invoice {transaction.invoice}")
        key = transaction.natural_key
        with self._lock:
            if key in self._keys:
                return InsertResult.duplicate(f"Natural key already stored: {key}")
            new_id = self._next_id
            self._next_id += 1
            stored = transaction.model_copy(update={"id": new_id})
            self._rows[new_id] = stored
            self._keys[key] = new_id
        transaction.id = new_id
        return InsertResult.inserted(new_id)

    def exists(self, invoice: str, tran_date: str, location_name: str, amount: Decimal) -> bool:
        key = make_natural_key(invoice, tran_date, location_name, amount)
        self.exists_calls.append(key)
        with self._lock:
            return key in self._keys

    def get_all(self) -> list[FuelTransaction]:
        with self._lock:
            return [self._rows[i] for i in sorted(self._rows)]

    def get_by_date_range(self, start: date | None, end: date | None) -> list[FuelTransaction]:
        rows = [t for t in self.get_all() if _in_range(t, start, end)]
        return sorted(rows, key=lambda t: (t.tran_date, t.tran_time), reverse=True)

    def get_by_driver_and_date_range(
        self, driver_name: str, start: date | None, end: date | None
    ) -> list[FuelTransaction]:
        wanted = (driver_name or "").strip().lower()
        rows = [
            t for t in self.get_all()
            if (not wanted or t.driver_name.strip().lower() == wanted) and _in_range(t, start, end)
        ]
        return sorted(rows, key=lambda t: t.tran_date)

    def count(self) -> int:
        with self._lock:
            return len(self._rows)


class MemoryEmployeeDirectory:
    """List-backed IEmployeeDirectory for unit tests."""

    def __init__(self, employees: list[EmployeeRecord] | None = None) -> None:
        self._employees = list(employees or [])
        self.list_calls = 0

    def add(self, employee_id: int, name: str, unit: str) -> None:
        self._employees.append(EmployeeRecord(id=employee_id, name=name, unit=unit))

    def list_all(self) -> list[EmployeeRecord]:
        self.list_calls += 1
        return list(self._employees)


class MemoryKeyValueBackend:
    """Dict-backed IKeyValueBackend for unit tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


def _in_range(transaction: FuelTransaction, start: date | None, end: date | None) -> bool:
    if start is not None and transaction.tran_date < start.isoformat():
        return False
    if end is not None and transaction.tran_date > end.isoformat():
        return False
    return True
