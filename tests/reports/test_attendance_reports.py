from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from src.timeclock.timeclock.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from src.timeclock.timeclock.attendance.service import AttendanceService
from src.timeclock.timeclock.core.enums import AttendanceStatus
from src.timeclock.timeclock.core.exceptions import ValidationError
from src.timeclock.timeclock.reports.model import AdminFilters, HistoryFilters, PaginationMeta, PeriodSummary
from src.timeclock.timeclock.reports.service import AttendanceReportService


def t(month: int, day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2026, month, day, hour, minute, tzinfo=timezone.utc)


def work_day(service: AttendanceService, employee_id: str, month: int, day: int, hours: int = 8) -> None:
    service.clock_in(employee_id, now=t(month, day, 8))
    service.clock_out(employee_id, now=t(month, day, 8 + hours))


def test_period_hours_sums_closed_days(service, report_service):
    work_day(service, "emp-1", 2, 2, hours=8)
    work_day(service, "emp-1", 2, 3, hours=6)
    work_day(service, "emp-2", 2, 3, hours=9)

    summary = report_service.period_hours("emp-1", date(2026, 2, 1), date(2026, 2, 28))

    assert summary.total_hours == Decimal(14)
    assert summary.days_worked == 2
    assert summary.to_dict() == {"totalHours": 14.0, "daysWorked": 2, "averageHoursPerDay": 7.0}


def test_period_hours_with_no_records(report_service):
    summary = report_service.period_hours("emp-1", date(2026, 1, 1), date(2026, 1, 31))

    assert summary.to_dict() == {"totalHours": 0.0, "daysWorked": 0, "averageHoursPerDay": 0.0}


def test_period_hours_includes_both_endpoints(service, report_service):
    work_day(service, "emp-1", 2, 2)
    work_day(service, "emp-1", 2, 4)

    summary = report_service.period_hours("emp-1", date(2026, 2, 2), date(2026, 2, 4))

    assert summary.days_worked == 2


def test_period_hours_rejects_reversed_range(report_service):
    with pytest.raises(ValidationError):
        report_service.period_hours("emp-1", date(2026, 2, 5), date(2026, 2, 1))


def test_period_summary_rounds_only_for_display():
    summary = PeriodSummary(total_hours=Decimal("0.004") * 3, days_worked=3)

    assert summary.to_dict()["totalHours"] == 0.01
    assert summary.to_dict()["averageHoursPerDay"] == 0.0


def test_history_pagination(service, report_service):
    for day in range(1, 13):
        work_day(service, "emp-1", 2, day)

    page = report_service.history("emp-1", page=2, limit=5)

    assert [r.work_date.day for r in page.items] == [7, 6, 5, 4, 3]
    meta = page.to_dict()["meta"]
    assert meta == {
        "page": 2,
        "limit": 5,
        "total": 12,
        "totalPages": 3,
        "hasNextPage": True,
        "hasPreviousPage": True,
    }
    assert page.summary.total_days == 12
    assert page.summary.total_hours == Decimal(96)


def test_pagination_meta_edges():
    assert PaginationMeta(page=1, limit=20, total=0).total_pages == 0
    assert not PaginationMeta(page=1, limit=20, total=0).has_next_page
    last = PaginationMeta(page=3, limit=5, total=12)
    assert not last.has_next_page
    assert last.offset == 10


def test_history_month_filter_uses_current_year(service, report_service):
    work_day(service, "emp-1", 1, 30)
    work_day(service, "emp-1", 2, 2)

    page = report_service.history("emp-1", HistoryFilters(month=2))

    assert [r.work_date for r in page.items] == [date(2026, 2, 2)]


def test_history_explicit_range_wins_over_month(service, report_service):
    work_day(service, "emp-1", 1, 30)
    work_day(service, "emp-1", 2, 2)

    page = report_service.history(
        "emp-1", HistoryFilters(start_date=date(2026, 1, 1), end_date=date(2026, 1, 31), month=2)
    )

    assert [r.work_date for r in page.items] == [date(2026, 1, 30)]


def test_history_year_and_status_filters(service, report_service):
    work_day(service, "emp-1", 2, 2)
    service.clock_in("emp-1", now=t(2, 3, 8))

    open_days = report_service.history("emp-1", HistoryFilters(year=2026, status=AttendanceStatus.CLOCKED_IN))
    assert [r.work_date.day for r in open_days.items] == [3]

    assert report_service.history("emp-1", HistoryFilters(year=2025)).pagination.total == 0


@pytest.mark.parametrize(
    "filters, page, limit",
    [
        (HistoryFilters(month=13), 1, 20),
        (HistoryFilters(month=0), 1, 20),
        (HistoryFilters(start_date=date(2026, 2, 5), end_date=date(2026, 2, 1)), 1, 20),
        (None, 0, 20),
        (None, 1, 0),
        (None, 1, 101),
    ],
)
def test_history_rejects_invalid_input(report_service, filters, page, limit):
    with pytest.raises(ValidationError):
        report_service.history("emp-1", filters, page=page, limit=limit)


def test_history_reports_live_hours_separately(service, report_service, clock):
    work_day(service, "emp-1", 2, 27)
    service.clock_in("emp-1")
    clock.advance(hours=2, minutes=30)

    page = report_service.history("emp-1")

    assert page.summary.total_hours == Decimal(8)
    assert page.summary.total_days == 2
    assert page.summary.today_live_hours == Decimal("2.5")
    assert page.to_dict()["summary"] == {"totalHours": 8.0, "totalDays": 2, "todayLiveHours": 2.5}


def test_history_has_no_live_hours_after_clock_out(service, report_service, clock):
    service.clock_in("emp-1")
    clock.advance(hours=1)
    service.clock_out("emp-1")

    assert report_service.history("emp-1").summary.today_live_hours is None


def test_admin_listing_defaults_to_current_month(service, report_service):
    work_day(service, "emp-1", 2, 27)
    work_day(service, "emp-1", 3, 1)
    work_day(service, "emp-3", 3, 2)

    page = report_service.admin_listing()

    assert [(r.employee_id, r.work_date.day) for r in page.items] == [("emp-3", 2), ("emp-1", 1)]
    data = page.to_dict()["data"]
    assert data[0]["employee"]["name"] == "Chi Le"
    assert data[1]["employee"]["department"] == {"id": 1, "name": "Engineering"}


def test_admin_listing_search_and_department(service, report_service):
    for employee_id in ("emp-1", "emp-2", "emp-3"):
        work_day(service, employee_id, 3, 1)

    by_name = report_service.admin_listing(AdminFilters(search="bao"))
    assert [r.employee_id for r in by_name.items] == ["emp-2"]

    by_dept = report_service.admin_listing(AdminFilters(department_id=1))
    assert sorted(r.employee_id for r in by_dept.items) == ["emp-1", "emp-2"]

    nobody = report_service.admin_listing(AdminFilters(search="zzz"))
    assert nobody.items == ()
    assert nobody.pagination.total == 0


def test_admin_listing_for_one_employee_includes_live_hours(service, report_service, clock):
    work_day(service, "emp-2", 3, 1)
    service.clock_in("emp-1")
    clock.advance(hours=1)

    page = report_service.admin_listing(AdminFilters(employee_id="emp-1"))

    assert [r.employee_id for r in page.items] == ["emp-1"]
    assert page.summary.today_live_hours == Decimal(1)


def test_admin_listing_search_needs_directory(clock):
    reports = AttendanceReportService(InMemoryAttendanceRepository(), clock=clock)

    with pytest.raises(ValidationError):
        reports.admin_listing(AdminFilters(search="alice"))

    assert reports.admin_listing().to_dict()["data"] == []


def test_history_rejects_one_sided_range(report_service):
    with pytest.raises(ValidationError):
        report_service.history("emp-1", HistoryFilters(start_date=date(2026, 2, 1)))


def test_filters_from_query_parameters():
    filters = AdminFilters.from_query(
        {"startDate": "2026-02-01", "endDate": "2026-02-28", "status": "clocked_out", "departmentId": "2", "search": " le "}
    )

    assert filters.start_date == date(2026, 2, 1)
    assert filters.end_date == date(2026, 2, 28)
    assert filters.status is AttendanceStatus.CLOCKED_OUT
    assert filters.department_id == 2
    assert filters.search == "le"
    assert filters.employee_id is None
    assert HistoryFilters.from_query({"month": "", "year": "2026"}) == HistoryFilters(year=2026)


@pytest.mark.parametrize("params", [{"month": "march"}, {"startDate": "01/02/2026"}, {"status": "LATE"}])
def test_filters_from_query_reject_bad_values(params):
    with pytest.raises(ValidationError):
        HistoryFilters.from_query(params)


def test_blank_employee_id_is_rejected(report_service):
    with pytest.raises(ValidationError):
        report_service.period_hours("  ", date(2026, 2, 1), date(2026, 2, 28))
    with pytest.raises(ValidationError):
        report_service.history("")
