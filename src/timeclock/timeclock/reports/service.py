from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..attendance import state_machine
from ..attendance.repository import AttendanceRepository, RecordQuery
from ..common.datetime_utils import Clock, SystemClock, month_bounds, year_bounds
from ..common.validators import (
    require_date_range,
    require_limit,
    require_month,
    require_non_empty,
    require_page,
    require_year,
)
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_PAGE
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeDirectory
from .model import AdminFilters, HistoryFilters, HistoryPage, HistorySummary, PaginationMeta, PeriodSummary

logger = logging.getLogger(__name__)


class AttendanceReportService:
    """Read side: period totals, personal history, admin listing.

    Sums are taken on unrounded hours; rounding happens in `to_dict`.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: Optional[EmployeeDirectory] = None,
        *,
        clock: Optional[Clock] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._clock = clock or SystemClock()

    def _date_range(self, filters: HistoryFilters) -> tuple[Optional[date], Optional[date]]:
        month = require_month(filters.month)
        year = require_year(filters.year)

        if filters.start_date is not None or filters.end_date is not None:
            if filters.start_date is None or filters.end_date is None:
                raise ValidationError("startDate and endDate must be given together")
            return require_date_range(filters.start_date, filters.end_date)
        if month is not None:
            return month_bounds(year or self._clock.today().year, month)
        if year is not None:
            return year_bounds(year)
        return None, None

    def period_hours(self, employee_id: str, start_date: date, end_date: date) -> PeriodSummary:
        require_non_empty(employee_id, "employee_id")
        require_date_range(start_date, end_date)
        totals = self._attendance.summarize(
            RecordQuery(employee_ids=(employee_id,), start_date=start_date, end_date=end_date)
        )
        return PeriodSummary(total_hours=totals.total_hours, days_worked=totals.days)

    def _page(self, query: RecordQuery, page: int, limit: int) -> tuple[tuple, HistorySummary, PaginationMeta]:
        meta = PaginationMeta(page=require_page(page), limit=require_limit(limit), total=self._attendance.count(query))
        items = tuple(self._attendance.find(query, offset=meta.offset, limit=meta.limit))
        totals = self._attendance.summarize(query)
        return items, HistorySummary(total_hours=totals.total_hours, total_days=totals.days), meta

    def _today_live_hours(self, employee_id: str):
        now = self._clock.now()
        record = self._attendance.get_for_employee_and_date(employee_id, self._clock.work_date(now))
        if record is None or not record.is_open:
            return None
        return state_machine.live_status(record, now).working_hours

    def history(
        self,
        employee_id: str,
        filters: Optional[HistoryFilters] = None,
        *,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> HistoryPage:
        require_non_empty(employee_id, "employee_id")
        filters = filters or HistoryFilters()
        start, end = self._date_range(filters)
        query = RecordQuery(employee_ids=(employee_id,), start_date=start, end_date=end, status=filters.status)

        items, summary, meta = self._page(query, page, limit)
        summary = HistorySummary(
            total_hours=summary.total_hours,
            total_days=summary.total_days,
            today_live_hours=self._today_live_hours(employee_id),
        )
        return HistoryPage(items=items, summary=summary, pagination=meta)

    def admin_listing(
        self,
        filters: Optional[AdminFilters] = None,
        *,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> HistoryPage:
        filters = filters or AdminFilters()

        if filters.has_date_filter:
            start, end = self._date_range(filters)
        else:
            today = self._clock.today()
            start, end = month_bounds(today.year, today.month)

        employee_ids: Optional[tuple[str, ...]] = None
        if filters.search or filters.department_id is not None:
            if self._employees is None:
                raise ValidationError("Employee search is not available without an employee directory")
            employee_ids = tuple(self._employees.search_ids(search=filters.search, department_id=filters.department_id))
        if filters.employee_id:
            if employee_ids is None:
                employee_ids = (filters.employee_id,)
            else:
                employee_ids = tuple(e for e in employee_ids if e == filters.employee_id)

        query = RecordQuery(employee_ids=employee_ids, start_date=start, end_date=end, status=filters.status)
        items, summary, meta = self._page(query, page, limit)

        if filters.employee_id:
            summary = HistorySummary(
                total_hours=summary.total_hours,
                total_days=summary.total_days,
                today_live_hours=self._today_live_hours(filters.employee_id),
            )

        employees = {}
        if self._employees is not None and items:
            employees = dict(self._employees.get_many(r.employee_id for r in items))

        logger.debug("admin listing: %d of %d records (page %d)", len(items), meta.total, meta.page)
        return HistoryPage(items=items, summary=summary, pagination=meta, employees=employees)
