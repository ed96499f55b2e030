from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord
from .repository import AttendanceRepository, DuplicateRecordError, RecordQuery, RecordTotals, StoreIntegrityError


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-local store for tests and the `memory` backend.

    A single lock makes each create/save atomic, which gives the same
    guarantees as the unique key and version check of the MySQL store.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._by_employee_date: dict[tuple[str, date], AttendanceRecord] = {}
        self._key_by_id: dict[int, tuple[str, date]] = {}
        self._next_id = 0
        self._next_break_id = 0

    def _assign_break_ids(self, record: AttendanceRecord) -> AttendanceRecord:
        breaks = []
        for b in record.breaks:
            if b.break_id is None:
                self._next_break_id += 1
                b = replace(b, break_id=self._next_break_id)
            breaks.append(b)
        return replace(record, breaks=tuple(breaks))

    @staticmethod
    def _check_constraints(record: AttendanceRecord) -> None:
        active = sum(1 for b in record.breaks if b.is_active)
        if active > 1:
            raise StoreIntegrityError(f"attendance {record.attendance_id} has {active} active breaks")
        if (record.status is AttendanceStatus.ON_BREAK) != (active == 1):
            raise StoreIntegrityError(f"attendance {record.attendance_id} status {record.status.value} with {active} active breaks")

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._by_employee_date.get((employee_id, work_date))

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        key = (record.employee_id, record.work_date)
        with self._lock:
            if key in self._by_employee_date:
                raise DuplicateRecordError(f"attendance already exists for {key[0]} on {key[1]}")
            self._check_constraints(record)

            self._next_id += 1
            stored = self._assign_break_ids(replace(record, attendance_id=self._next_id, version=1))
            self._by_employee_date[key] = stored
            self._key_by_id[stored.attendance_id] = key
            return stored

    def save(self, record: AttendanceRecord, *, expected_version: int) -> Optional[AttendanceRecord]:
        with self._lock:
            key = self._key_by_id.get(record.attendance_id)
            current = self._by_employee_date.get(key) if key else None
            if current is None or current.version != expected_version:
                return None
            self._check_constraints(record)

            stored = self._assign_break_ids(replace(record, version=current.version + 1))
            self._by_employee_date[key] = stored
            return stored

    def _select(self, query: RecordQuery) -> list[AttendanceRecord]:
        with self._lock:
            items = [r for r in self._by_employee_date.values() if query.matches(r)]
        items.sort(key=lambda r: (r.work_date, r.clock_in_time), reverse=True)
        return items

    def find(self, query: RecordQuery, *, offset: int, limit: int) -> Sequence[AttendanceRecord]:
        return self._select(query)[offset : offset + limit]

    def count(self, query: RecordQuery) -> int:
        return len(self._select(query))

    def summarize(self, query: RecordQuery) -> RecordTotals:
        items = self._select(query)
        closed = [r for r in items if r.status is AttendanceStatus.CLOCKED_OUT]
        return RecordTotals(
            days=len(items),
            closed_days=len(closed),
            total_hours=sum((r.total_hours or Decimal(0) for r in closed), Decimal(0)),
        )
