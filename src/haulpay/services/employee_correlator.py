"""EmployeeCorrelator: driver name + truck unit -> employee id."""

from __future__ import annotations

import logging
from typing import Iterable

from haulpay.core.protocols import IEmployeeDirectory
from haulpay.core.types import EmployeeId
from haulpay.models.employee import EmployeeRecord

logger = logging.getLogger(__name__)

UNASSIGNED = 0


def correlate(driver_name: str, unit: str, employees: Iterable[EmployeeRecord]) -> EmployeeId:
    """Linear scan: id of the first employee matching both name and unit, else 0."""
    name_key = (driver_name or "").lower()
    unit_key = (unit or "").lower()
    for employee in employees:
        if employee.name.lower() == name_key and employee.unit.lower() == unit_key:
            return employee.id
    return UNASSIGNED


class EmployeeCorrelator:
    """Index of (name, unit) -> id built once from a directory snapshot.

    Equivalent to ``correlate`` over the same snapshot: comparisons are
    case-insensitive, both parts must match, and the first listed employee
    wins when several share a name and unit.
    """

    def __init__(self, employees: Iterable[EmployeeRecord]) -> None:
        self._index: dict[tuple[str, str], EmployeeId] = {}
        for employee in employees:
            self._index.setdefault((employee.name.lower(), employee.unit.lower()), employee.id)

    @classmethod
    def from_directory(cls, directory: IEmployeeDirectory) -> EmployeeCorrelator:
        employees = directory.list_all()
        logger.debug("Loaded %d employees for correlation", len(employees))
        return cls(employees)

    def __len__(self) -> int:
        return len(self._index)

    def correlate(self, driver_name: str, unit: str) -> EmployeeId:
        employee_id = self._index.get(((driver_name or "").lower(), (unit or "").lower()), UNASSIGNED)
        if employee_id:
            logger.debug("Matched employee %d for driver %s unit %s", employee_id, driver_name, unit)
        else:
            logger.debug("No employee match found for driver %s unit %s", driver_name, unit)
        return employee_id
