"""Type aliases used across the Haulpay fuel import."""

from __future__ import annotations

from typing import Any, Callable

JsonDict = dict[str, Any]
EmployeeId = int
RowRef = int
LogicalField = str
ColumnIndex = int
CancelCheck = Callable[[], bool]
