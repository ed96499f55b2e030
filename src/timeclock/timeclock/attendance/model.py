from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.hours import round_hours
from ..core.enums import AttendanceStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class GeoLocation:
    """Where a clock-in/clock-out happened. Validated by the caller, stored as-is."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    address: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.latitude is None and self.longitude is None and self.accuracy is None and not self.address

    def to_dict(self, prefix: str) -> dict:
        out = {}
        for name in ("latitude", "longitude", "accuracy", "address"):
            value = getattr(self, name)
            if value is not None:
                out[f"{prefix}{name.capitalize()}"] = value
        return out


@dataclass(frozen=True)
class BreakInterval:
    """A break inside a day's record. Active while `break_end` is None."""

    break_id: Optional[int]
    break_start: datetime
    break_end: Optional[datetime] = None
    duration_minutes: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.break_end is None

    def to_dict(self) -> dict:
        return {
            "id": self.break_id,
            "breakStart": _iso(self.break_start),
            "breakEnd": _iso(self.break_end),
            "durationMinutes": self.duration_minutes,
        }


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one work date.

    `attendance_id` is None until the store assigns one; `version` is bumped by
    the store on every successful write.
    """

    attendance_id: Optional[int]
    employee_id: str
    work_date: date
    clock_in_time: datetime
    status: AttendanceStatus
    clock_out_time: Optional[datetime] = None
    total_break_minutes: int = 0
    total_hours: Optional[Decimal] = None
    breaks: tuple[BreakInterval, ...] = ()
    clock_in_location: Optional[GeoLocation] = None
    clock_out_location: Optional[GeoLocation] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    @property
    def is_open(self) -> bool:
        return self.status.is_open

    @property
    def active_break(self) -> Optional[BreakInterval]:
        for b in self.breaks:
            if b.is_active:
                return b
        return None

    def to_dict(self) -> dict:
        out = {
            "id": self.attendance_id,
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "clockInTime": _iso(self.clock_in_time),
            "clockOutTime": _iso(self.clock_out_time),
            "totalBreakMinutes": self.total_break_minutes,
            "totalHours": round_hours(self.total_hours),
            "status": self.status.value,
            "breaks": [b.to_dict() for b in self.breaks],
        }
        if self.clock_in_location:
            out.update(self.clock_in_location.to_dict("clockIn"))
        if self.clock_out_location:
            out.update(self.clock_out_location.to_dict("clockOut"))
        return out


@dataclass(frozen=True)
class LiveStatus:
    """Read-time view of a record at a given instant. Never persisted."""

    working_hours: Decimal
    active_break: Optional[BreakInterval] = None
    current_break_minutes: Optional[int] = None


@dataclass(frozen=True)
class TodayStatus:
    record: Optional[AttendanceRecord]
    live: Optional[LiveStatus] = None

    @property
    def active_break(self) -> Optional[BreakInterval]:
        return self.live.active_break if self.live else None

    @property
    def live_working_hours(self) -> Optional[Decimal]:
        return self.live.working_hours if self.live else None

    def to_dict(self) -> dict:
        if self.record is None:
            return {"attendance": None, "activeBreak": None}

        attendance = self.record.to_dict()
        attendance["currentWorkingHours"] = round_hours(self.live_working_hours) if self.record.is_open else None

        active = None
        if self.active_break:
            active = {
                "id": self.active_break.break_id,
                "breakStart": _iso(self.active_break.break_start),
                "currentBreakMinutes": self.live.current_break_minutes,
            }
        return {"attendance": attendance, "activeBreak": active}
