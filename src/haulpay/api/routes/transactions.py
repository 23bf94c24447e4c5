"""Read endpoints over stored fuel transactions."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Request

router = APIRouter(tags=["transactions"])


@router.get("/transactions")
def list_transactions(
    request: Request,
    start: Optional[date] = None,
    end: Optional[date] = None,
    driver: str = "",
) -> dict:
    """Stored transactions, optionally filtered by date range and driver."""
    store = request.app.state.store
    if driver.strip():
        rows = store.get_by_driver_and_date_range(driver, start, end)
    else:
        rows = store.get_by_date_range(start, end)
    return {
        "count": len(rows),
        "transactions": [t.model_dump(mode="json") for t in rows],
    }
