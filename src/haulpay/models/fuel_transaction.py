"""Fuel-card transaction model: one charge event from a provider export."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import NamedTuple, Optional

from pydantic import BaseModel

_CENT = Decimal("0.01")


class NaturalKey(NamedTuple):
    """Normalized (invoice, date, location, amount) identity of a transaction."""

    invoice: str
    tran_date: str
    location_name: str
    amount: Decimal


def round_amount(amount: Decimal | float | int | str) -> Decimal:
    """Round a currency amount to cents, half away from zero."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return Decimal("0.00")
    if not value.is_finite():
        return Decimal("0.00")
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def make_natural_key(
    invoice: str, tran_date: str, location_name: str, amount: Decimal | float | int | str
) -> NaturalKey:
    return NaturalKey(
        invoice=(invoice or "").strip().lower(),
        tran_date=(tran_date or "").strip().lower(),
        location_name=(location_name or "").strip().lower(),
        amount=round_amount(amount),
    )


class FuelTransaction(BaseModel):
    """Single fuel-card charge as stored in the fuel_transactions table."""

    id: Optional[int] = None  # assigned by the store on insert

    # --- Card & Timing ---
    card_number: str = ""
    tran_date: str = ""  # ISO calendar date text
    tran_time: str = ""
    invoice: str = ""

    # --- Vehicle & Driver ---
    unit: str = ""
    driver_name: str = ""  # free text, correlated to employee_id
    odometer: str = ""

    # --- Location ---
    location_name: str = ""
    city: str = ""
    state_prov: str = ""

    # --- Charge Lines ---
    fees: Decimal = Decimal("0")
    item: str = ""
    unit_price: Decimal = Decimal("0")
    disc_ppu: Decimal = Decimal("0")
    disc_cost: Decimal = Decimal("0")
    qty: Decimal = Decimal("0")
    disc_amt: Decimal = Decimal("0")
    disc_type: str = ""
    amt: Decimal = Decimal("0")
    db: str = ""  # provider debit/credit flag
    currency: str = ""

    employee_id: int = 0  # 0 = unassigned

    model_config = {"str_strip_whitespace": True}

    @property
    def natural_key(self) -> NaturalKey:
        return make_natural_key(self.invoice, self.tran_date, self.location_name, self.amt)

    @property
    def is_assigned(self) -> bool:
        return self.employee_id > 0
