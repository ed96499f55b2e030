from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class StoreIntegrityError(Exception):
    """The store refused a write that would break one of its constraints."""


class DuplicateRecordError(StoreIntegrityError):
    """A record for (employee_id, work_date) already exists."""


@dataclass(frozen=True)
class RecordQuery:
    """Filter used by list/count/summarize. `employee_ids=None` means everyone."""

    employee_ids: Optional[tuple[str, ...]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None

    def matches(self, record: AttendanceRecord) -> bool:
        if self.employee_ids is not None and record.employee_id not in self.employee_ids:
            return False
        if self.start_date is not None and record.work_date < self.start_date:
            return False
        if self.end_date is not None and record.work_date > self.end_date:
            return False
        if self.status is not None and record.status is not self.status:
            return False
        return True


@dataclass(frozen=True)
class RecordTotals:
    days: int
    closed_days: int
    total_hours: Decimal


class AttendanceRepository(Protocol):
    """Store contract.

    Implementations must enforce (employee_id, work_date) uniqueness in `create`
    and compare-and-swap on `version` in `save`; the service relies on both for
    concurrent correctness.
    """

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new record, raising DuplicateRecordError if the day already has one."""

        raise NotImplementedError

    def save(self, record: AttendanceRecord, *, expected_version: int) -> Optional[AttendanceRecord]:
        """Write `record` if the stored version is still `expected_version`.

        Returns the stored record (new version, break ids assigned) or None when
        someone else wrote first.
        """

        raise NotImplementedError

    def find(self, query: RecordQuery, *, offset: int, limit: int) -> Sequence[AttendanceRecord]:
        """Newest first (work_date desc, clock_in_time desc)."""

        raise NotImplementedError

    def count(self, query: RecordQuery) -> int:
        raise NotImplementedError

    def summarize(self, query: RecordQuery) -> RecordTotals:
        raise NotImplementedError
