"""Employee directory entry used for driver correlation."""

from __future__ import annotations

from pydantic import BaseModel


class EmployeeRecord(BaseModel):
    """Read-only view of an employee: id, driver name and assigned truck unit."""

    id: int
    name: str = ""
    unit: str = ""
