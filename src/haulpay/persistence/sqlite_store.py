"""SQLite backends implementing ITransactionStore and IEmployeeDirectory.

Every call opens its own short-lived connection, so a store instance can be
shared between the request thread and the import worker.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator

from haulpay.core.exceptions import StorageError
from haulpay.models.employee import EmployeeRecord
from haulpay.models.fuel_transaction import FuelTransaction, NaturalKey, make_natural_key
from haulpay.models.imports import InsertResult

logger = logging.getLogger(__name__)

_FUEL_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS fuel_transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        card_number TEXT,
        tran_date TEXT,
        tran_time TEXT,
        invoice TEXT,
        unit TEXT,
        driver_name TEXT,
        odometer TEXT,
        location_name TEXT,
        city TEXT,
        state_prov TEXT,
        fees REAL,
        item TEXT,
        unit_price REAL,
        disc_ppu REAL,
        disc_cost REAL,
        qty REAL,
        disc_amt REAL,
        disc_type TEXT,
        amt REAL,
        db TEXT,
        currency TEXT,
        employee_id INTEGER,
        key_invoice TEXT,
        key_date TEXT,
        key_location TEXT,
        key_amount_cents INTEGER
    )
"""

# Natural key columns hold make_natural_key() output; SQLite LOWER() only folds ASCII.
_KEY_COLUMNS = ("key_invoice", "key_date", "key_location", "key_amount_cents")

_FUEL_UNIQUE_SQL = """
    CREATE UNIQUE INDEX IF NOT EXISTS ux_fuel_transactions_natural_key_v2
    ON fuel_transactions (key_invoice, key_date, key_location, key_amount_cents)
"""

_LEGACY_UNIQUE_INDEX = "ux_fuel_transactions_natural_key"

_EMPLOYEE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS employees (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        truck_unit TEXT
    )
"""

_COLUMNS = (
    "card_number", "tran_date", "tran_time", "invoice", "unit", "driver_name",
    "odometer", "location_name", "city", "state_prov", "fees", "item",
    "unit_price", "disc_ppu", "disc_cost", "qty", "disc_amt", "disc_type",
    "amt", "db", "currency", "employee_id",
)
_DECIMAL_COLUMNS = frozenset({"fees", "unit_price", "disc_ppu", "disc_cost", "qty", "disc_amt", "amt"})

_INSERT_SQL = (
    f"INSERT INTO fuel_transactions ({', '.join(_COLUMNS + _KEY_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS + _KEY_COLUMNS)})"
)

_EXISTS_SQL = """
    SELECT COUNT(*) FROM fuel_transactions
    WHERE key_invoice = ? AND key_date = ? AND key_location = ? AND key_amount_cents = ?
"""


class _SqliteDatabase:
    def __init__(self, db_path: str | Path, timeout: float = 30.0) -> None:
        self._db_path = str(db_path)
        self._timeout = timeout

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to open SQLite database {self._db_path!r}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        conn.create_function("py_lower", 1, _lower, deterministic=True)
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        try:
            with self._connection() as conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"SQLite query failed: {exc}") from exc


class SqliteTransactionStore(_SqliteDatabase):
    """Production ITransactionStore over the fuel_transactions table."""

    def __init__(self, db_path: str | Path, timeout: float = 30.0) -> None:
        super().__init__(db_path, timeout)
        self.ensure_schema()

    def ensure_schema(self) -> None:
        try:
            with self._connection() as conn:
                conn.execute(_FUEL_TABLE_SQL)
                _backfill_natural_keys(conn)
                conn.execute(f"DROP INDEX IF EXISTS {_LEGACY_UNIQUE_INDEX}")
                conn.execute(_FUEL_UNIQUE_SQL)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to initialize fuel_transactions table: {exc}") from exc
        logger.info("Fuel transactions table initialized at %s", self._db_path)

    def add(self, transaction: FuelTransaction) -> InsertResult:
        params = tuple(_to_column(name, getattr(transaction, name)) for name in _COLUMNS)
        params += _key_params(transaction.natural_key)
        try:
            with self._connection() as conn:
                new_id = conn.execute(_INSERT_SQL, params).lastrowid
        except sqlite3.IntegrityError as exc:
            if getattr(exc, "sqlite_errorcode", None) == sqlite3.SQLITE_CONSTRAINT_UNIQUE:
                logger.warning(
                    "Duplicate fuel transaction detected - Invoice: %s, Date: %s, Location: %s",
                    transaction.invoice, transaction.tran_date, transaction.location_name,
                )
                return InsertResult.duplicate(str(exc))
            return InsertResult.error(f"Error adding fuel transaction: {exc}")
        except sqlite3.Error as exc:
            logger.error("Error adding fuel transaction: %s", exc)
            return InsertResult.error(f"Error adding fuel transaction: {exc}")

        transaction.id = new_id
        logger.debug("Fuel transaction added with ID: %s", new_id)
        return InsertResult.inserted(new_id)

    def exists(self, invoice: str, tran_date: str, location_name: str, amount: Decimal) -> bool:
        key = make_natural_key(invoice, tran_date, location_name, amount)
        rows = self._query(_EXISTS_SQL, _key_params(key))
        return bool(rows) and rows[0][0] > 0

    def get_all(self) -> list[FuelTransaction]:
        rows = self._query("SELECT * FROM fuel_transactions ORDER BY id")
        return [_map_row(r) for r in rows]

    def get_by_date_range(self, start: date | None, end: date | None) -> list[FuelTransaction]:
        where, params = _date_filter(start, end)
        rows = self._query(
            f"SELECT * FROM fuel_transactions WHERE 1=1{where} ORDER BY tran_date DESC, tran_time DESC",
            params,
        )
        logger.info("Retrieved %d fuel transactions between %s and %s", len(rows), start, end)
        return [_map_row(r) for r in rows]

    def get_by_driver_and_date_range(
        self, driver_name: str, start: date | None, end: date | None
    ) -> list[FuelTransaction]:
        where, params = "", ()
        if driver_name and driver_name.strip():
            where, params = " AND py_lower(TRIM(driver_name)) = ?", (driver_name.strip().lower(),)
        date_where, date_params = _date_filter(start, end)
        rows = self._query(
            f"SELECT * FROM fuel_transactions WHERE 1=1{where}{date_where} ORDER BY tran_date ASC",
            params + date_params,
        )
        return [_map_row(r) for r in rows]

    def count(self) -> int:
        rows = self._query("SELECT COUNT(*) FROM fuel_transactions")
        return int(rows[0][0])


class SqliteEmployeeDirectory(_SqliteDatabase):
    """Read-only IEmployeeDirectory over the employees table."""

    def __init__(self, db_path: str | Path, timeout: float = 30.0) -> None:
        super().__init__(db_path, timeout)
        try:
            with self._connection() as conn:
                conn.execute(_EMPLOYEE_TABLE_SQL)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to initialize employees table: {exc}") from exc

    def list_all(self) -> list[EmployeeRecord]:
        rows = self._query("SELECT id, name, truck_unit FROM employees ORDER BY id")
        return [
            EmployeeRecord(id=r["id"], name=r["name"] or "", unit=r["truck_unit"] or "")
            for r in rows
        ]


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _key_params(key: NaturalKey) -> tuple[str, str, str, int]:
    return key.invoice, key.tran_date, key.location_name, int(key.amount * 100)


def _backfill_natural_keys(conn: sqlite3.Connection) -> None:
    """Add and fill the key columns on tables created before they existed."""
    present = {row["name"] for row in conn.execute("PRAGMA table_info(fuel_transactions)")}
    missing = [c for c in _KEY_COLUMNS if c not in present]
    for column in missing:
        kind = "INTEGER" if column == "key_amount_cents" else "TEXT"
        conn.execute(f"ALTER TABLE fuel_transactions ADD COLUMN {column} {kind}")

    stale = conn.execute(
        "SELECT id, invoice, tran_date, location_name, amt FROM fuel_transactions "
        "WHERE key_invoice IS NULL"
    ).fetchall()
    if not stale:
        return
    conn.executemany(
        "UPDATE fuel_transactions SET key_invoice = ?, key_date = ?, key_location = ?, "
        "key_amount_cents = ? WHERE id = ?",
        [
            _key_params(make_natural_key(
                r["invoice"] or "", r["tran_date"] or "", r["location_name"] or "",
                Decimal(str(r["amt"])) if r["amt"] is not None else Decimal("0"),
            )) + (r["id"],)
            for r in stale
        ],
    )
    logger.info("Backfilled natural keys for %d fuel transactions", len(stale))


def _to_column(name: str, value: Any) -> Any:
    if name in _DECIMAL_COLUMNS:
        return float(value)
    return value


def _date_filter(start: date | None, end: date | None) -> tuple[str, tuple[Any, ...]]:
    where = ""
    params: list[Any] = []
    if start is not None:
        where += " AND tran_date >= ?"
        params.append(start.isoformat())
    if end is not None:
        where += " AND tran_date <= ?"
        params.append(end.isoformat())
    return where, tuple(params)


def _map_row(row: sqlite3.Row) -> FuelTransaction:
    values: dict[str, Any] = {"id": row["id"]}
    for name in _COLUMNS:
        raw = row[name]
        if name in _DECIMAL_COLUMNS:
            values[name] = Decimal(str(raw)) if raw is not None else Decimal("0")
        elif name == "employee_id":
            values[name] = raw or 0
        else:
            values[name] = raw or ""
    return FuelTransaction(**values)
