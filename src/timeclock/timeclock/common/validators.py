from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.constants import MAX_HISTORY_LIMIT
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def _as_int(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_page(page: int) -> int:
    page = _as_int(page, "page")
    if page < 1:
        raise ValidationError("page must be >= 1")
    return page


def require_limit(limit: int, *, max_limit: int = MAX_HISTORY_LIMIT) -> int:
    limit = _as_int(limit, "limit")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}")
    return limit


def require_month(month: Optional[int]) -> Optional[int]:
    if month is None:
        return None
    month = _as_int(month, "month")
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    return month


def require_year(year: Optional[int]) -> Optional[int]:
    if year is None:
        return None
    year = _as_int(year, "year")
    if not 1 <= year <= 9999:
        raise ValidationError("year is out of range")
    return year


def require_date_range(start: date, end: date) -> tuple[date, date]:
    if end < start:
        raise ValidationError("endDate must be >= startDate")
    return start, end
