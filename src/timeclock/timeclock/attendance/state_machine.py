"""Attendance lifecycle for a single work date.

    NO_RECORD --clock_in--> CLOCKED_IN --start_break--> ON_BREAK
    ON_BREAK --end_break--> CLOCKED_IN
    CLOCKED_IN | ON_BREAK --clock_out--> CLOCKED_OUT (terminal)

Every function here is pure: it takes the current record (or None) and an
instant and returns the next record, or raises an AttendanceError. Loading and
saving is the service's job.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.hours import elapsed_minutes, worked_hours
from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyClockedIn, AlreadyClockedOut, AlreadyOnBreak, NotClockedIn, NotOnBreak
from .model import AttendanceRecord, BreakInterval, GeoLocation, LiveStatus


def _location(value: Optional[GeoLocation]) -> Optional[GeoLocation]:
    if value is None or value.is_empty:
        return None
    return value


def _require_open(record: Optional[AttendanceRecord]) -> AttendanceRecord:
    if record is None:
        raise NotClockedIn()
    if record.status is AttendanceStatus.CLOCKED_OUT:
        raise AlreadyClockedOut()
    return record


def _latest_instant(record: AttendanceRecord) -> datetime:
    # New events never precede anything already on the record.
    instants = [record.clock_in_time]
    for b in record.breaks:
        instants.append(b.break_start)
        if b.break_end is not None:
            instants.append(b.break_end)
    return max(instants)


def _close_active_break(record: AttendanceRecord, now: datetime) -> AttendanceRecord:
    closed_breaks = []
    added = 0
    for b in record.breaks:
        if b.is_active:
            end = max(now, b.break_start)
            added = elapsed_minutes(b.break_start, end)
            b = replace(b, break_end=end, duration_minutes=added)
        closed_breaks.append(b)

    return replace(
        record,
        breaks=tuple(closed_breaks),
        total_break_minutes=record.total_break_minutes + added,
        status=AttendanceStatus.CLOCKED_IN,
        updated_at=now,
    )


def clock_in(
    existing: Optional[AttendanceRecord],
    *,
    employee_id: str,
    work_date: date,
    now: datetime,
    location: Optional[GeoLocation] = None,
) -> AttendanceRecord:
    # One record per day, whatever its status.
    if existing is not None:
        raise AlreadyClockedIn()

    return AttendanceRecord(
        attendance_id=None,
        employee_id=employee_id,
        work_date=work_date,
        clock_in_time=now,
        status=AttendanceStatus.CLOCKED_IN,
        clock_in_location=_location(location),
        created_at=now,
        updated_at=now,
    )


def start_break(record: Optional[AttendanceRecord], now: datetime) -> AttendanceRecord:
    record = _require_open(record)
    if record.status is AttendanceStatus.ON_BREAK:
        raise AlreadyOnBreak()

    new_break = BreakInterval(break_id=None, break_start=max(now, _latest_instant(record)))
    return replace(
        record,
        breaks=record.breaks + (new_break,),
        status=AttendanceStatus.ON_BREAK,
        updated_at=now,
    )


def end_break(record: Optional[AttendanceRecord], now: datetime) -> AttendanceRecord:
    if record is None or record.status is not AttendanceStatus.ON_BREAK:
        raise NotOnBreak()
    return _close_active_break(record, now)


def clock_out(
    record: Optional[AttendanceRecord],
    now: datetime,
    *,
    location: Optional[GeoLocation] = None,
    auto_close_break: bool = True,
) -> AttendanceRecord:
    record = _require_open(record)
    if record.status is AttendanceStatus.ON_BREAK and not auto_close_break:
        raise AlreadyOnBreak("End your break before clocking out")

    end = max(now, _latest_instant(record))
    if record.status is AttendanceStatus.ON_BREAK:
        record = _close_active_break(record, end)

    return replace(
        record,
        clock_out_time=end,
        status=AttendanceStatus.CLOCKED_OUT,
        total_hours=worked_hours(record.clock_in_time, end, record.total_break_minutes),
        clock_out_location=_location(location),
        updated_at=now,
    )


def live_status(record: AttendanceRecord, now: datetime) -> LiveStatus:
    """Working hours as of `now`; accrual pauses while a break is running."""
    if record.status is AttendanceStatus.CLOCKED_OUT:
        return LiveStatus(working_hours=record.total_hours if record.total_hours is not None else Decimal(0))

    active = record.active_break
    if record.status is AttendanceStatus.ON_BREAK and active is not None:
        return LiveStatus(
            working_hours=worked_hours(record.clock_in_time, active.break_start, record.total_break_minutes),
            active_break=active,
            current_break_minutes=elapsed_minutes(active.break_start, now),
        )

    return LiveStatus(working_hours=worked_hours(record.clock_in_time, now, record.total_break_minutes))
