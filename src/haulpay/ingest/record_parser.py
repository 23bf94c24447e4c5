"""RecordParser: raw tabular rows -> typed FuelTransaction candidates.

Column positions come from ``FieldMap.resolve`` over the header row. Row
filtering follows the reader's policy: delimited rows narrower than
``min_width`` are dropped as malformed, workbook rows with an empty invoice
are dropped as blank. Neither is an import error.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Protocol

from haulpay.core.types import ColumnIndex, LogicalField
from haulpay.ingest.numeric import parse_decimal
from haulpay.ingest.readers import TabularRow
from haulpay.models.field_map import FIELD_ATTRIBUTES, NUMERIC_FIELDS, FieldMap
from haulpay.models.fuel_transaction import FuelTransaction
from haulpay.models.imports import ParsedCandidate

logger = logging.getLogger(__name__)


class _Reader(Protocol):
    headers: list[str]
    min_width: int | None
    skip_blank_invoice: bool

    def rows(self) -> Iterator[TabularRow]: ...


class _Correlator(Protocol):
    def correlate(self, driver_name: str, unit: str) -> int: ...


class RecordParser:
    """Turns reader rows into candidates; counts structural skips as it goes."""

    def __init__(self, correlator: _Correlator | None = None) -> None:
        self._correlator = correlator
        self.malformed_rows = 0
        self.blank_rows = 0
        self.parsed_rows = 0

    def parse(self, reader: _Reader, field_map: FieldMap) -> Iterator[ParsedCandidate]:
        indices = field_map.resolve(reader.headers)
        min_width = reader.min_width
        for row in reader.rows():
            if min_width is not None and len(row) < min_width:
                self.malformed_rows += 1
                logger.warning(
                    "Line %d has insufficient columns (%d), skipping", row.row_ref, len(row)
                )
                continue

            transaction = self._build(row, indices)
            if reader.skip_blank_invoice and not transaction.invoice:
                self.blank_rows += 1
                logger.debug("Skipping empty row %d", row.row_ref)
                continue

            if self._correlator is not None:
                transaction.employee_id = self._correlator.correlate(
                    transaction.driver_name, transaction.unit
                )
            self.parsed_rows += 1
            yield ParsedCandidate(row_ref=row.row_ref, transaction=transaction)

        logger.info(
            "Parsed %d transactions (%d malformed, %d blank rows skipped)",
            self.parsed_rows, self.malformed_rows, self.blank_rows,
        )

    @staticmethod
    def _build(row: TabularRow, indices: dict[LogicalField, ColumnIndex]) -> FuelTransaction:
        values: dict[str, Any] = {}
        for field, attribute in FIELD_ATTRIBUTES.items():
            index = indices.get(field)
            text = row.cell(index).strip() if index is not None else ""
            values[attribute] = parse_decimal(text) if field in NUMERIC_FIELDS else text
        return FuelTransaction(**values)


def parse(reader: _Reader, field_map: FieldMap, correlator: _Correlator | None = None) -> list[ParsedCandidate]:
    """Parse every row of an open reader into a list of candidates."""
    return list(RecordParser(correlator).parse(reader, field_map))
