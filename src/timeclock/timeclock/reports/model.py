from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import parse_iso_date
from ..common.hours import round_hours
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..employees.model import Employee


def _int_param(params: Mapping[str, Any], key: str) -> Optional[int]:
    raw = params.get(key)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def _date_param(params: Mapping[str, Any], key: str) -> Optional[date]:
    raw = params.get(key)
    if raw in (None, ""):
        return None
    return raw if isinstance(raw, date) else parse_iso_date(raw)


def _status_param(params: Mapping[str, Any]) -> Optional[AttendanceStatus]:
    raw = params.get("status")
    if raw in (None, ""):
        return None
    try:
        return AttendanceStatus(str(raw).upper())
    except ValueError:
        raise ValidationError(f"Unknown status {raw!r}")


@dataclass(frozen=True)
class HistoryFilters:
    """Date filters resolve in order: explicit range, month (+year), year."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month: Optional[int] = None
    year: Optional[int] = None
    status: Optional[AttendanceStatus] = None

    @property
    def has_date_filter(self) -> bool:
        return any(v is not None for v in (self.start_date, self.end_date, self.month, self.year))

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "HistoryFilters":
        """Build from camelCase query parameters (startDate, endDate, month, year, status)."""
        return cls(
            start_date=_date_param(params, "startDate"),
            end_date=_date_param(params, "endDate"),
            month=_int_param(params, "month"),
            year=_int_param(params, "year"),
            status=_status_param(params),
        )


@dataclass(frozen=True)
class AdminFilters(HistoryFilters):
    search: Optional[str] = None
    department_id: Optional[int] = None
    employee_id: Optional[str] = None

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "AdminFilters":
        base = HistoryFilters.from_query(params)
        return cls(
            start_date=base.start_date,
            end_date=base.end_date,
            month=base.month,
            year=base.year,
            status=base.status,
            search=(params.get("search") or "").strip() or None,
            department_id=_int_param(params, "departmentId"),
            employee_id=params.get("employeeId") or None,
        )


@dataclass(frozen=True)
class PeriodSummary:
    total_hours: Decimal
    days_worked: int

    @property
    def average_hours_per_day(self) -> Decimal:
        if self.days_worked == 0:
            return Decimal(0)
        return self.total_hours / self.days_worked

    def to_dict(self) -> dict:
        return {
            "totalHours": round_hours(self.total_hours),
            "daysWorked": self.days_worked,
            "averageHoursPerDay": round_hours(self.average_hours_per_day),
        }


@dataclass(frozen=True)
class PaginationMeta:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNextPage": self.has_next_page,
            "hasPreviousPage": self.has_previous_page,
        }


@dataclass(frozen=True)
class HistorySummary:
    total_hours: Decimal
    total_days: int
    # Live hours of today's open record; not part of total_hours until clock-out.
    today_live_hours: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "totalHours": round_hours(self.total_hours),
            "totalDays": self.total_days,
            "todayLiveHours": round_hours(self.today_live_hours),
        }


@dataclass(frozen=True)
class HistoryPage:
    items: tuple[AttendanceRecord, ...]
    summary: HistorySummary
    pagination: PaginationMeta
    employees: Mapping[str, Employee] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = []
        for r in self.items:
            row = r.to_dict()
            employee = self.employees.get(r.employee_id)
            if employee is not None:
                row["employee"] = employee.to_dict()
            data.append(row)
        return {"data": data, "summary": self.summary.to_dict(), "meta": self.pagination.to_dict()}
