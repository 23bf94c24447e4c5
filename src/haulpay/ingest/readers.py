"""Tabular readers: a uniform header + rows view over CSV and XLSX exports.

Each reader is a context manager. Inside the ``with`` block ``headers`` holds
the first row and ``rows()`` yields the remaining rows once, lazily.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time
from decimal import Decimal
from enum import StrEnum
from pathlib import Path
from typing import IO, Any, Iterator

from openpyxl import load_workbook

from haulpay.core.config import ImportConfig
from haulpay.core.exceptions import ImportReadError, UnsupportedFormatError

logger = logging.getLogger(__name__)


class TabularFormat(StrEnum):
    DELIMITED = "delimited"
    WORKBOOK = "workbook"


EXTENSION_FORMATS: dict[str, TabularFormat] = {
    ".csv": TabularFormat.DELIMITED,
    ".xlsx": TabularFormat.WORKBOOK,
    ".xlsm": TabularFormat.WORKBOOK,
}


class TabularRow:
    """One data row with string access by column index."""

    __slots__ = ("row_ref", "_cells")

    def __init__(self, row_ref: int, cells: list[str]) -> None:
        self.row_ref = row_ref
        self._cells = cells

    def cell(self, index: int) -> str:
        if 0 <= index < len(self._cells):
            return self._cells[index]
        return ""

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"TabularRow(row_ref={self.row_ref}, cells={self._cells!r})"


class DelimitedTextReader:
    """Comma-delimited text. Lines are split literally; quotes are not special."""

    format = TabularFormat.DELIMITED
    skip_blank_invoice = False

    def __init__(self, path: str | Path, config: ImportConfig | None = None) -> None:
        config = config or ImportConfig()
        self.path = Path(path)
        self.delimiter = config.delimiter
        self.encoding = config.encoding
        self.min_width: int | None = config.min_columns
        self.headers: list[str] = []
        self._handle: IO[str] | None = None
        self._consumed = False

    def __enter__(self) -> DelimitedTextReader:
        self._handle = self.path.open("r", encoding=self.encoding, newline="")
        try:
            first = self._handle.readline()
        except Exception:
            self.close()
            raise
        if not first:
            self.close()
            raise ImportReadError(f"{self.path.name} is empty; expected a header row")
        self.headers = [h.strip() for h in self._split(first)]
        logger.debug("CSV headers: %s", self.headers)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _split(self, line: str) -> list[str]:
        return line.rstrip("\r\n").split(self.delimiter)

    def rows(self) -> Iterator[TabularRow]:
        if self._handle is None or self._consumed:
            raise ImportReadError(f"{self.path.name} is not open or was already read")
        self._consumed = True
        for row_ref, line in enumerate(self._handle, start=2):
            yield TabularRow(row_ref, self._split(line))


def render_cell(cell: Any) -> str:
    """Render a workbook cell the way a user sees it, as plain text."""
    value = getattr(cell, "value", None)
    if value is None or getattr(cell, "data_type", None) == "e":
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        number = float(value)
        if not math.isfinite(number):
            return ""
        if number.is_integer():
            return str(int(number))
        return repr(number)
    if isinstance(value, str):
        return value.strip()
    return ""


class WorkbookReader:
    """First sheet of an XLSX workbook; row 1 is the header row."""

    format = TabularFormat.WORKBOOK
    skip_blank_invoice = True
    min_width: int | None = None

    def __init__(self, path: str | Path, config: ImportConfig | None = None) -> None:
        self.path = Path(path)
        self.headers: list[str] = []
        self._workbook: Any = None
        self._rows: Iterator[tuple[Any, ...]] | None = None
        self._consumed = False

    def __enter__(self) -> WorkbookReader:
        self._workbook = load_workbook(self.path, read_only=True, data_only=True)
        try:
            if not self._workbook.worksheets:
                raise ImportReadError(f"{self.path.name} has no worksheets")
            sheet = self._workbook.worksheets[0]
            self._rows = sheet.iter_rows()
            header_row = next(self._rows, None)
            if header_row is None:
                raise ImportReadError(f"{self.path.name} is empty; expected a header row")
        except Exception:
            self.close()
            raise
        self.headers = [render_cell(c) for c in header_row]
        logger.debug("XLSX has %d columns: %s", len(self.headers), self.headers)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._workbook is not None:
            self._workbook.close()
            self._workbook = None
        self._rows = None

    def rows(self) -> Iterator[TabularRow]:
        if self._rows is None or self._consumed:
            raise ImportReadError(f"{self.path.name} is not open or was already read")
        self._consumed = True
        for row_ref, cells in enumerate(self._rows, start=2):
            yield TabularRow(row_ref, [render_cell(c) for c in cells])


TabularReader = DelimitedTextReader | WorkbookReader


def detect_format(path: str | Path) -> TabularFormat:
    """Pick the reader variant from the file extension without touching the file."""
    suffix = Path(path).suffix.lower()
    fmt = EXTENSION_FORMATS.get(suffix)
    if fmt is None:
        raise UnsupportedFormatError(Path(path).name, tuple(EXTENSION_FORMATS))
    return fmt


def open_reader(path: str | Path, config: ImportConfig | None = None) -> TabularReader:
    """Return an unopened reader for ``path``; use it as a context manager."""
    fmt = detect_format(path)
    logger.info("Processing %s file: %s", fmt, Path(path).name)
    if fmt is TabularFormat.DELIMITED:
        return DelimitedTextReader(path, config)
    return WorkbookReader(path, config)
