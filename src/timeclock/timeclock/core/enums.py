from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Lifecycle state of a day's attendance record, stored as-is in the DB."""

    CLOCKED_IN = "CLOCKED_IN"
    ON_BREAK = "ON_BREAK"
    CLOCKED_OUT = "CLOCKED_OUT"

    @property
    def is_open(self) -> bool:
        return self is not AttendanceStatus.CLOCKED_OUT


class StoreBackend(str, Enum):
    MYSQL = "mysql"
    MEMORY = "memory"
