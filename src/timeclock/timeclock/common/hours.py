from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.constants import HOURS_DECIMAL_PLACES

_MICROSECONDS_PER_HOUR = Decimal(3_600_000_000)
_ONE_MICROSECOND = timedelta(microseconds=1)


def hours_from_timedelta(delta: timedelta) -> Decimal:
    """Exact decimal hours of a timedelta (microsecond precision)."""
    return Decimal(delta // _ONE_MICROSECOND) / _MICROSECONDS_PER_HOUR


def worked_hours(start: datetime, end: datetime, break_minutes: int) -> Decimal:
    """(end - start) minus break minutes, in hours, never below zero."""
    net = (end - start) - timedelta(minutes=int(break_minutes))
    if net <= timedelta(0):
        return Decimal(0)
    return hours_from_timedelta(net)


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, rounded half-up, clamped to 0."""
    seconds = (end - start) // timedelta(seconds=1)
    if seconds <= 0:
        return 0
    return (seconds + 30) // 60


def round_hours(value: Optional[Decimal], places: int = HOURS_DECIMAL_PLACES) -> Optional[float]:
    """Presentation rounding. Never use before aggregating."""
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
