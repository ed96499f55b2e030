from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock, get_timezone
from .core.constants import DEFAULT_CONCURRENCY_MAX_RETRIES, DEFAULT_TIMEZONE
from .core.enums import StoreBackend
from .database.connection import DatabaseConnection
from .employees.mysql_employee_directory import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .reports.service import AttendanceReportService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Clock

    attendance_repo: AttendanceRepository
    employees: Optional[EmployeeDirectory]

    attendance_service: AttendanceService
    report_service: AttendanceReportService


def build_container(
    *,
    db_config: Optional[dict] = None,
    backend: StoreBackend | str = StoreBackend.MYSQL,
    timezone_name: str = DEFAULT_TIMEZONE,
    max_retries: int = DEFAULT_CONCURRENCY_MAX_RETRIES,
    auto_close_break_on_clock_out: bool = True,
    clock: Optional[Clock] = None,
    employees: Optional[EmployeeDirectory] = None,
) -> Container:
    backend = StoreBackend(backend)
    clock = clock or SystemClock(get_timezone(timezone_name))

    conn: Optional[DatabaseConnection] = None
    if backend is StoreBackend.MYSQL:
        if not db_config:
            raise ValueError("db_config is required for the mysql backend")
        conn = DatabaseConnection.from_dict(db_config)
        attendance_repo: AttendanceRepository = MySQLAttendanceRepository(conn)
        employees = employees or MySQLEmployeeDirectory(conn)
    else:
        # No directory unless one is passed in: every employee id is accepted.
        attendance_repo = InMemoryAttendanceRepository()

    attendance_service = AttendanceService(
        attendance_repo,
        employees,
        clock=clock,
        max_retries=max_retries,
        auto_close_break_on_clock_out=auto_close_break_on_clock_out,
    )
    report_service = AttendanceReportService(attendance_repo, employees, clock=clock)

    return Container(
        conn=conn,
        clock=clock,
        attendance_repo=attendance_repo,
        employees=employees,
        attendance_service=attendance_service,
        report_service=report_service,
    )
