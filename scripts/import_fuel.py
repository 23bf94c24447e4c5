"""Import a fuel-card CSV/XLSX export into the payroll database.

Usage:
    python scripts/import_fuel.py exports/fuel_june.csv --db payroll.db

Ctrl-C requests cancellation; rows already stored are kept.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from haulpay.core.config import AppSettings
from haulpay.core.exceptions import HaulpayError
from haulpay.core.logging import setup_logging
from haulpay.models.imports import ImportState
from haulpay.persistence.field_map_store import JsonFileFieldMapStore
from haulpay.persistence.sqlite_store import SqliteEmployeeDirectory, SqliteTransactionStore
from haulpay.services.import_runner import ImportRunner

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def run_import(path: Path, *, db_path: str, field_map_path: str, settings: AppSettings) -> int:
    """Run one import to completion, printing progress. Returns the exit code."""
    store = SqliteTransactionStore(db_path, timeout=settings.storage.timeout)
    directory = SqliteEmployeeDirectory(db_path, timeout=settings.storage.timeout)
    field_map_store = JsonFileFieldMapStore(field_map_path)

    with ImportRunner(
        store=store, directory=directory, field_map_store=field_map_store, config=settings.imports,
    ) as runner:
        job = runner.submit(path)
        try:
            for progress in job.iter_progress():
                print(f"  [{progress.fraction:6.1%}] {progress.message}")
        except KeyboardInterrupt:
            print("  Cancelling...")
            job.cancel()
            for _ in job.iter_progress():
                pass

        try:
            result = job.result()
        except HaulpayError as exc:
            print(f"Import failed: {exc}", file=sys.stderr)
            return EXIT_FAILED

    print(result.summary(settings.imports.max_error_display))
    return EXIT_CANCELLED if result.state is ImportState.CANCELLED else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    settings = AppSettings()
    parser = argparse.ArgumentParser(description="Import fuel-card transactions")
    parser.add_argument("file", type=Path, help="CSV or XLSX export from the fuel-card provider")
    parser.add_argument("--db", default=settings.storage.db_path, help="SQLite payroll database")
    parser.add_argument("--field-map", default=settings.field_map.path, help="Saved column mapping (JSON)")
    args = parser.parse_args(argv)

    setup_logging(settings)
    print(f"Importing {args.file}...")
    return run_import(args.file, db_path=args.db, field_map_path=args.field_map, settings=settings)


if __name__ == "__main__":
    sys.exit(main())
