"""Seed the employees table used for driver correlation.

Usage:
    python scripts/seed_employees.py employees.csv --db payroll.db

The CSV needs ``id``, ``name`` and ``unit`` columns. Re-running updates
existing ids in place.
"""

from __future__ import annotations

import argparse
import csv
import sqlite3
from pathlib import Path

from haulpay.persistence.sqlite_store import SqliteEmployeeDirectory

_UPSERT_SQL = """
    INSERT INTO employees (id, name, truck_unit) VALUES (?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET name = excluded.name, truck_unit = excluded.truck_unit
"""


def create_tables(db_path: str) -> None:
    """Create the employees table if it does not exist."""
    SqliteEmployeeDirectory(db_path)


def seed_employees(db_path: str, csv_path: Path) -> int:
    """Upsert employees from ``csv_path``. Returns the number of rows written."""
    with csv_path.open(newline="", encoding="utf-8-sig") as handle:
        rows = [
            (int(r["id"]), r["name"].strip(), (r.get("unit") or "").strip())
            for r in csv.DictReader(handle)
            if (r.get("id") or "").strip()
        ]
    conn = sqlite3.connect(db_path)
    try:
        with conn:
            conn.executemany(_UPSERT_SQL, rows)
    finally:
        conn.close()
    print(f"  Seeded {len(rows)} employees")
    return len(rows)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed employees for fuel import correlation")
    parser.add_argument("csv_path", type=Path, help="CSV with id,name,unit columns")
    parser.add_argument("--db", default="payroll.db", help="SQLite payroll database")
    args = parser.parse_args(argv)

    print("Creating tables...")
    create_tables(args.db)

    print("Seeding data...")
    seed_employees(args.db, args.csv_path)

    print("Done!")


if __name__ == "__main__":
    main()
