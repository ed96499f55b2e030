from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import Clock, SystemClock, ensure_aware
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_CONCURRENCY_MAX_RETRIES
from ..core.exceptions import AlreadyClockedIn, ConcurrencyConflict, EmployeeNotFound
from ..employees.repository import EmployeeDirectory
from . import state_machine
from .model import AttendanceRecord, GeoLocation, TodayStatus
from .repository import AttendanceRepository, DuplicateRecordError

logger = logging.getLogger(__name__)

Transition = Callable[[Optional[AttendanceRecord], datetime], AttendanceRecord]


class AttendanceService:
    """Use cases: clock in, start/end break, clock out, today's status.

    Each call is one atomic read-modify-write on today's record. Creation
    relies on the store's uniqueness; updates use the record version and are
    retried (reload, re-validate, write) a bounded number of times.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory | None = None,
        *,
        clock: Clock | None = None,
        max_retries: int = DEFAULT_CONCURRENCY_MAX_RETRIES,
        auto_close_break_on_clock_out: bool = True,
    ):
        if int(max_retries) < 1:
            raise ValueError("max_retries must be >= 1")
        self._attendance = attendance
        self._employees = employees
        self._clock = clock or SystemClock()
        self._max_retries = int(max_retries)
        self._auto_close_break = bool(auto_close_break_on_clock_out)

    def _ensure_employee_active(self, employee_id: str) -> None:
        require_non_empty(employee_id, "employee_id")
        if self._employees is None:
            return
        employee = self._employees.get_by_id(employee_id)
        if not employee or not employee.is_active:
            raise EmployeeNotFound()

    def _now(self, now: datetime | None) -> datetime:
        return ensure_aware(now) if now is not None else self._clock.now()

    def _apply(self, employee_id: str, now: datetime | None, action: str, transition: Transition) -> AttendanceRecord:
        self._ensure_employee_active(employee_id)
        now = self._now(now)
        today = self._clock.work_date(now)

        for attempt in range(1, self._max_retries + 1):
            current = self._attendance.get_for_employee_and_date(employee_id, today)
            # Business-rule failures surface immediately; only lost races are retried.
            updated = transition(current, now)

            saved = self._attendance.save(updated, expected_version=current.version)
            if saved is not None:
                logger.info(
                    "attendance %s: employee=%s work_date=%s status=%s",
                    action,
                    employee_id,
                    today,
                    saved.status.value,
                )
                return saved

            logger.warning(
                "attendance %s: concurrent update on record %s, attempt %d/%d",
                action,
                current.attendance_id,
                attempt,
                self._max_retries,
            )

        raise ConcurrencyConflict()

    def clock_in(
        self,
        employee_id: str,
        *,
        now: datetime | None = None,
        location: GeoLocation | None = None,
    ) -> AttendanceRecord:
        self._ensure_employee_active(employee_id)
        now = self._now(now)
        today = self._clock.work_date(now)

        existing = self._attendance.get_for_employee_and_date(employee_id, today)
        record = state_machine.clock_in(existing, employee_id=employee_id, work_date=today, now=now, location=location)

        try:
            saved = self._attendance.create(record)
        except DuplicateRecordError:
            # Lost the race against a concurrent clock-in for the same day.
            logger.info("attendance clock_in: duplicate for employee=%s work_date=%s", employee_id, today)
            raise AlreadyClockedIn()

        logger.info("attendance clock_in: employee=%s work_date=%s", employee_id, today)
        return saved

    def start_break(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        return self._apply(employee_id, now, "start_break", state_machine.start_break)

    def end_break(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        return self._apply(employee_id, now, "end_break", state_machine.end_break)

    def clock_out(
        self,
        employee_id: str,
        *,
        now: datetime | None = None,
        location: GeoLocation | None = None,
    ) -> AttendanceRecord:
        def transition(record: Optional[AttendanceRecord], at: datetime) -> AttendanceRecord:
            return state_machine.clock_out(record, at, location=location, auto_close_break=self._auto_close_break)

        return self._apply(employee_id, now, "clock_out", transition)

    def today_status(self, employee_id: str, *, now: datetime | None = None) -> TodayStatus:
        self._ensure_employee_active(employee_id)
        now = self._now(now)

        record = self._attendance.get_for_employee_and_date(employee_id, self._clock.work_date(now))
        if record is None:
            return TodayStatus(record=None)
        return TodayStatus(record=record, live=state_machine.live_status(record, now))

