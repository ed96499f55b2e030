from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.timeclock.timeclock.attendance.model import GeoLocation
from src.timeclock.timeclock.attendance.service import AttendanceService
from src.timeclock.timeclock.common.datetime_utils import FixedClock
from src.timeclock.timeclock.core.enums import AttendanceStatus
from src.timeclock.timeclock.core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    AlreadyOnBreak,
    EmployeeNotFound,
    NotClockedIn,
    NotOnBreak,
    ValidationError,
)


def t(hour: int, minute: int = 0, day: int = 2) -> datetime:
    return datetime(2026, 3, day, hour, minute, tzinfo=timezone.utc)


def test_clock_in_break_clock_out_scenario(service, attendance_repo):
    service.clock_in("emp-1", now=t(9))
    service.start_break("emp-1", now=t(12))
    after_break = service.end_break("emp-1", now=t(12, 30))
    assert after_break.total_break_minutes == 30

    rec = service.clock_out("emp-1", now=t(17))

    assert rec.status is AttendanceStatus.CLOCKED_OUT
    assert rec.total_break_minutes == 30
    assert rec.total_hours == Decimal("7.5")
    assert rec.to_dict()["totalHours"] == 7.5
    assert attendance_repo.get_for_employee_and_date("emp-1", t(9).date()) == rec


def test_clock_out_while_on_break_closes_break(service):
    service.clock_in("emp-1", now=t(9))
    service.start_break("emp-1", now=t(13))

    rec = service.clock_out("emp-1", now=t(17))

    assert len(rec.breaks) == 1
    assert rec.breaks[0].break_end == t(17)
    assert rec.breaks[0].duration_minutes == 240
    assert rec.total_hours == Decimal("4.0")


def test_clock_out_while_on_break_rejected_when_auto_close_disabled(attendance_repo, clock):
    svc = AttendanceService(attendance_repo, clock=clock, auto_close_break_on_clock_out=False)
    svc.clock_in("emp-1", now=t(9))
    svc.start_break("emp-1", now=t(13))

    with pytest.raises(AlreadyOnBreak):
        svc.clock_out("emp-1", now=t(17))

    rec = attendance_repo.get_for_employee_and_date("emp-1", t(9).date())
    assert rec.status is AttendanceStatus.ON_BREAK


def test_second_clock_in_same_day_fails_and_keeps_record(service, attendance_repo):
    first = service.clock_in("emp-1", now=t(9), location=GeoLocation(latitude=1.0, longitude=2.0))

    with pytest.raises(AlreadyClockedIn):
        service.clock_in("emp-1", now=t(10), location=GeoLocation(latitude=5.0, longitude=6.0))

    assert attendance_repo.get_for_employee_and_date("emp-1", t(9).date()) == first


def test_clock_in_again_after_clock_out_same_day_fails(service):
    service.clock_in("emp-1", now=t(9))
    service.clock_out("emp-1", now=t(12))

    with pytest.raises(AlreadyClockedIn):
        service.clock_in("emp-1", now=t(13))


def test_next_day_gets_a_new_record(service):
    first = service.clock_in("emp-1", now=t(9, day=2))
    service.clock_out("emp-1", now=t(17, day=2))

    second = service.clock_in("emp-1", now=t(9, day=3))

    assert second.attendance_id != first.attendance_id
    assert second.work_date == t(9, day=3).date()


def test_reordered_operations_fail_with_documented_errors(service):
    with pytest.raises(NotClockedIn):
        service.start_break("emp-1", now=t(8))
    with pytest.raises(NotOnBreak):
        service.end_break("emp-1", now=t(8))
    with pytest.raises(NotClockedIn):
        service.clock_out("emp-1", now=t(8))

    service.clock_in("emp-1", now=t(9))
    with pytest.raises(NotOnBreak):
        service.end_break("emp-1", now=t(10))

    service.start_break("emp-1", now=t(11))
    with pytest.raises(AlreadyOnBreak):
        service.start_break("emp-1", now=t(11, 5))

    service.clock_out("emp-1", now=t(17))
    with pytest.raises(AlreadyClockedOut):
        service.clock_out("emp-1", now=t(17, 1))
    with pytest.raises(AlreadyClockedOut):
        service.start_break("emp-1", now=t(17, 2))


def test_repeated_calls_fail_deterministically(service):
    service.clock_in("emp-1", now=t(9))
    service.start_break("emp-1", now=t(10))
    service.end_break("emp-1", now=t(10, 10))

    for minute in (11, 12, 13):
        with pytest.raises(NotOnBreak):
            service.end_break("emp-1", now=t(10, minute))


def test_unknown_or_inactive_employee_rejected(service):
    with pytest.raises(EmployeeNotFound):
        service.clock_in("nobody", now=t(9))
    with pytest.raises(EmployeeNotFound):
        service.clock_in("emp-9", now=t(9))
    with pytest.raises(EmployeeNotFound):
        service.today_status("emp-9")


def test_blank_employee_id_rejected(service):
    with pytest.raises(ValidationError):
        service.clock_in("  ", now=t(9))


def test_without_directory_any_employee_is_accepted(attendance_repo, clock):
    svc = AttendanceService(attendance_repo, clock=clock)
    rec = svc.clock_in("external-42", now=t(9))
    assert rec.employee_id == "external-42"


def test_default_now_comes_from_clock(service, clock):
    rec = service.clock_in("emp-1")
    assert rec.clock_in_time == clock.now()

    clock.advance(hours=1)
    rec = service.start_break("emp-1")
    assert rec.breaks[0].break_start == clock.now()


def test_work_date_follows_attendance_timezone(attendance_repo):
    from zoneinfo import ZoneInfo

    tz = ZoneInfo("Asia/Ho_Chi_Minh")
    clock = FixedClock(datetime(2026, 3, 2, 20, 0, tzinfo=timezone.utc), tz=tz)
    svc = AttendanceService(attendance_repo, clock=clock)

    # 20:00 UTC is 03:00 the next day in UTC+7.
    rec = svc.clock_in("emp-1")
    assert rec.work_date == datetime(2026, 3, 3).date()


def test_today_status_without_activity(service):
    status = service.today_status("emp-1", now=t(9))
    assert status.record is None
    assert status.active_break is None
    assert status.to_dict() == {"attendance": None, "activeBreak": None}


def test_today_status_while_working(service):
    service.clock_in("emp-1", now=t(9))
    service.start_break("emp-1", now=t(12))
    service.end_break("emp-1", now=t(12, 30))

    status = service.today_status("emp-1", now=t(15))

    assert status.live_working_hours == Decimal("5.5")
    assert status.active_break is None
    body = status.to_dict()
    assert body["attendance"]["currentWorkingHours"] == 5.5
    assert body["attendance"]["status"] == "CLOCKED_IN"
    assert body["activeBreak"] is None


def test_today_status_on_break_reports_running_break(service):
    service.clock_in("emp-1", now=t(9))
    service.start_break("emp-1", now=t(12))

    status = service.today_status("emp-1", now=t(12, 20))

    assert status.live_working_hours == Decimal(3)
    assert status.active_break.break_start == t(12)
    body = status.to_dict()
    assert body["activeBreak"]["currentBreakMinutes"] == 20
    assert body["attendance"]["totalBreakMinutes"] == 0


def test_today_status_after_clock_out(service):
    service.clock_in("emp-1", now=t(9))
    service.clock_out("emp-1", now=t(17))

    body = service.today_status("emp-1", now=t(20)).to_dict()
    assert body["attendance"]["totalHours"] == 8.0
    assert body["attendance"]["currentWorkingHours"] is None


def test_locations_are_stored_and_serialised(service):
    service.clock_in("emp-1", now=t(9), location=GeoLocation(latitude=10.5, longitude=106.25, accuracy=5.0))
    rec = service.clock_out("emp-1", now=t(17), location=GeoLocation(address="Client site"))

    body = rec.to_dict()
    assert body["clockInLatitude"] == 10.5
    assert body["clockInLongitude"] == 106.25
    assert body["clockInAccuracy"] == 5.0
    assert "clockInAddress" not in body
    assert body["clockOutAddress"] == "Client site"
    assert "clockOutLatitude" not in body


def test_break_ids_are_assigned_by_store(service):
    service.clock_in("emp-1", now=t(9))
    rec = service.start_break("emp-1", now=t(10))
    assert rec.breaks[0].break_id is not None

    rec = service.end_break("emp-1", now=t(10) + timedelta(minutes=5))
    rec = service.start_break("emp-1", now=t(11))
    assert len({b.break_id for b in rec.breaks}) == 2
