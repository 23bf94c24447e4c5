"""Fuel import field map: logical field name -> expected column header.

Headers are matched case-insensitively after trimming. A logical field whose
header is absent from a file is simply left unresolved.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping

from pydantic import BaseModel, Field

from haulpay.core.exceptions import UnknownFieldError
from haulpay.core.types import ColumnIndex, LogicalField

logger = logging.getLogger(__name__)

# Logical field -> default header, in file order.
DEFAULT_HEADERS: dict[str, str] = {
    "Card Number": "card #",
    "Transaction Date": "tran date",
    "Transaction Time": "tran time",
    "Invoice": "invoice",
    "Unit": "unit",
    "Driver Name": "driver name",
    "Odometer": "odometer",
    "Location Name": "location name",
    "City": "city",
    "State/Province": "state/ prov",
    "Fees": "fees",
    "Item": "item",
    "Unit Price": "unit price",
    "Discount PPU": "disc ppu",
    "Discount Cost": "disc cost",
    "Quantity": "qty",
    "Discount Amount": "disc amt",
    "Discount Type": "disc type",
    "Amount": "amt",
    "DB": "db",
    "Currency": "currency",
}

LOGICAL_FIELDS: tuple[str, ...] = tuple(DEFAULT_HEADERS)

# Logical field -> FuelTransaction attribute
FIELD_ATTRIBUTES: dict[str, str] = {
    "Card Number": "card_number",
    "Transaction Date": "tran_date",
    "Transaction Time": "tran_time",
    "Invoice": "invoice",
    "Unit": "unit",
    "Driver Name": "driver_name",
    "Odometer": "odometer",
    "Location Name": "location_name",
    "City": "city",
    "State/Province": "state_prov",
    "Fees": "fees",
    "Item": "item",
    "Unit Price": "unit_price",
    "Discount PPU": "disc_ppu",
    "Discount Cost": "disc_cost",
    "Quantity": "qty",
    "Discount Amount": "disc_amt",
    "Discount Type": "disc_type",
    "Amount": "amt",
    "DB": "db",
    "Currency": "currency",
}

NUMERIC_FIELDS: frozenset[str] = frozenset({
    "Fees", "Unit Price", "Discount PPU", "Discount Cost",
    "Quantity", "Discount Amount", "Amount",
})


def _normalize(header: Any) -> str:
    return str(header if header is not None else "").strip().lower()


class FieldMap(BaseModel):
    """Ordered, mutable mapping of logical field to expected header text."""

    mappings: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))

    @classmethod
    def load_default(cls) -> FieldMap:
        return cls(mappings=dict(DEFAULT_HEADERS))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FieldMap:
        """Overlay persisted entries on the defaults, dropping unknown fields."""
        field_map = cls.load_default()
        for field, header in data.items():
            if field not in DEFAULT_HEADERS:
                logger.warning("Ignoring unknown fuel import field %r in saved mapping", field)
                continue
            if not isinstance(header, str):
                logger.warning("Ignoring non-text header for field %r in saved mapping", field)
                continue
            field_map.mappings[field] = header
        return field_map

    def get(self, field: str) -> str:
        if field not in DEFAULT_HEADERS:
            raise UnknownFieldError(field)
        return self.mappings.get(field, "")

    def set(self, field: str, header: str) -> None:
        if field not in DEFAULT_HEADERS:
            raise UnknownFieldError(field)
        self.mappings[field] = header

    def reset(self) -> None:
        self.mappings = dict(DEFAULT_HEADERS)

    def items(self) -> Iterator[tuple[str, str]]:
        for field in LOGICAL_FIELDS:
            yield field, self.mappings.get(field, "")

    def resolve(self, headers: list[str]) -> dict[LogicalField, ColumnIndex]:
        """Map each logical field to the index of its header, first match wins."""
        normalized = [_normalize(h) for h in headers]
        indices: dict[LogicalField, ColumnIndex] = {}
        for field, expected in self.items():
            target = _normalize(expected)
            if not target:
                continue
            try:
                indices[field] = normalized.index(target)
            except ValueError:
                continue
        logger.debug("Column indices mapping: %s", indices)
        return indices
