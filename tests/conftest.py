from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.timeclock.timeclock.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.timeclock.timeclock.attendance.service import AttendanceService
from src.timeclock.timeclock.common.datetime_utils import FixedClock
from src.timeclock.timeclock.employees.memory_employee_directory import InMemoryEmployeeDirectory
from src.timeclock.timeclock.employees.model import Employee
from src.timeclock.timeclock.reports.service import AttendanceReportService


def at(day: int, hour: int, minute: int = 0, second: int = 0) -> datetime:
    """An instant in March 2026, UTC."""
    return datetime(2026, 3, day, hour, minute, second, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return at(2, 9, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def attendance_repo() -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository()


@pytest.fixture
def directory() -> InMemoryEmployeeDirectory:
    return InMemoryEmployeeDirectory(
        [
            Employee("emp-1", "Alice Nguyen", department_id=1, department_name="Engineering"),
            Employee("emp-2", "Bao Tran", department_id=1, department_name="Engineering"),
            Employee("emp-3", "Chi Le", department_id=2, department_name="Human Resources"),
            Employee("emp-9", "Former Staff", department_id=2, department_name="Human Resources", is_active=False),
        ]
    )


@pytest.fixture
def service(attendance_repo, directory, clock) -> AttendanceService:
    return AttendanceService(attendance_repo, directory, clock=clock)


@pytest.fixture
def report_service(attendance_repo, directory, clock) -> AttendanceReportService:
    return AttendanceReportService(attendance_repo, directory, clock=clock)
