from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def get_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (MySQL DATETIME columns come back naive)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_utc_naive(value: datetime) -> datetime:
    """Instant as a naive UTC datetime, the form we persist."""
    return ensure_aware(value).astimezone(timezone.utc).replace(tzinfo=None)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    start = date(year, month, 1)
    if month == 12:
        end = date(year, 12, 31)
    else:
        end = date(year, month + 1, 1) - timedelta(days=1)
    return start, end


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


class Clock(Protocol):
    """Time source. Injected so tests can pin "now"."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError

    def work_date(self, instant: datetime) -> date:
        """Calendar day of `instant` in the attendance timezone."""
        raise NotImplementedError


@dataclass
class SystemClock:
    tz: tzinfo = field(default=timezone.utc)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def work_date(self, instant: datetime) -> date:
        return ensure_aware(instant).astimezone(self.tz).date()


@dataclass
class FixedClock:
    """Clock frozen at a given instant; `advance` moves it forward."""

    current: datetime
    tz: tzinfo = field(default=timezone.utc)

    def __post_init__(self) -> None:
        self.current = ensure_aware(self.current)

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.work_date(self.current)

    def work_date(self, instant: datetime) -> date:
        return ensure_aware(instant).astimezone(self.tz).date()

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current

    def set(self, value: datetime) -> None:
        self.current = ensure_aware(value)
