"""DuplicateChecker: advisory natural-key lookup ahead of insert.

The store's uniqueness constraint stays authoritative; this check only lets
the pipeline classify a row as skipped before attempting the insert.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from haulpay.core.protocols import ITransactionStore
from haulpay.models.fuel_transaction import FuelTransaction

logger = logging.getLogger(__name__)


class DuplicateChecker:

    def __init__(self, store: ITransactionStore) -> None:
        self._store = store

    def exists(self, invoice: str, tran_date: str, location_name: str, amount: Decimal) -> bool:
        found = self._store.exists(
            invoice.strip(), tran_date.strip(), location_name.strip(), amount
        )
        if found:
            logger.debug(
                "Skipping duplicate transaction - Invoice: %s, Date: %s, Location: %s",
                invoice, tran_date, location_name,
            )
        return found

    def is_duplicate(self, transaction: FuelTransaction) -> bool:
        return self.exists(
            transaction.invoice, transaction.tran_date, transaction.location_name, transaction.amt
        )
