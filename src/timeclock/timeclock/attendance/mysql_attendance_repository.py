from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..common.datetime_utils import ensure_aware, to_utc_naive
from ..core.constants import STORED_HOURS_DECIMAL_PLACES
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import AttendanceRecord, BreakInterval, GeoLocation
from .repository import AttendanceRepository, DuplicateRecordError, RecordQuery, RecordTotals, StoreIntegrityError

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = """
    attendance_id, employee_id, work_date, clock_in_time, clock_out_time,
    total_break_minutes, total_hours, status,
    clock_in_latitude, clock_in_longitude, clock_in_accuracy, clock_in_address,
    clock_out_latitude, clock_out_longitude, clock_out_accuracy, clock_out_address,
    created_at, updated_at, version
"""


def _dt(value):
    return ensure_aware(value) if value is not None else None


def _float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _location_from_row(row: dict, prefix: str) -> Optional[GeoLocation]:
    loc = GeoLocation(
        latitude=_float(row.get(f"{prefix}_latitude")),
        longitude=_float(row.get(f"{prefix}_longitude")),
        accuracy=_float(row.get(f"{prefix}_accuracy")),
        address=row.get(f"{prefix}_address"),
    )
    return None if loc.is_empty else loc


def _location_params(loc: Optional[GeoLocation]) -> tuple:
    if loc is None:
        return (None, None, None, None)
    return (loc.latitude, loc.longitude, loc.accuracy, loc.address)


def _hours_param(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(Decimal(1).scaleb(-STORED_HOURS_DECIMAL_PLACES))


def _where(query: RecordQuery) -> tuple[str, list[Any]]:
    clauses = ["1=1"]
    params: list[Any] = []

    if query.employee_ids is not None:
        if not query.employee_ids:
            clauses.append("1=0")
        else:
            clauses.append(f"employee_id IN ({placeholders(len(query.employee_ids))})")
            params.extend(query.employee_ids)
    if query.start_date is not None:
        clauses.append("work_date >= %s")
        params.append(query.start_date)
    if query.end_date is not None:
        clauses.append("work_date <= %s")
        params.append(query.end_date)
    if query.status is not None:
        clauses.append("status = %s")
        params.append(query.status.value)

    return " AND ".join(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    """attendance_records + attendance_breaks.

    Uniqueness of (employee_id, work_date) and of the single open break are
    unique keys in the schema; `save` is a version-checked UPDATE that rewrites
    the break rows in the same transaction.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _break_from_row(r: dict) -> BreakInterval:
        return BreakInterval(
            break_id=int(r["break_id"]),
            break_start=ensure_aware(r["break_start"]),
            break_end=_dt(r.get("break_end")),
            duration_minutes=int(r["duration_minutes"]) if r.get("duration_minutes") is not None else None,
        )

    @staticmethod
    def _record_from_row(r: dict, breaks: Sequence[BreakInterval]) -> AttendanceRecord:
        total_hours = r.get("total_hours")
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            employee_id=str(r["employee_id"]),
            work_date=r["work_date"],
            clock_in_time=ensure_aware(r["clock_in_time"]),
            clock_out_time=_dt(r.get("clock_out_time")),
            total_break_minutes=int(r.get("total_break_minutes") or 0),
            total_hours=Decimal(total_hours) if total_hours is not None else None,
            status=AttendanceStatus(r["status"]),
            breaks=tuple(breaks),
            clock_in_location=_location_from_row(r, "clock_in"),
            clock_out_location=_location_from_row(r, "clock_out"),
            created_at=_dt(r.get("created_at")),
            updated_at=_dt(r.get("updated_at")),
            version=int(r["version"]),
        )

    def _load_breaks(self, cur, attendance_ids: Sequence[int]) -> dict[int, list[BreakInterval]]:
        out: dict[int, list[BreakInterval]] = {aid: [] for aid in attendance_ids}
        if not attendance_ids:
            return out
        cur.execute(
            f"""
            SELECT break_id, attendance_id, break_start, break_end, duration_minutes
            FROM attendance_breaks
            WHERE attendance_id IN ({placeholders(len(attendance_ids))})
            ORDER BY break_start ASC, break_id ASC
            """,
            tuple(attendance_ids),
        )
        for r in fetchall(cur):
            out[int(r["attendance_id"])].append(self._break_from_row(r))
        return out

    def _get_by_id(self, cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
        r = fetchone(cur)
        if not r:
            return None
        breaks = self._load_breaks(cur, [attendance_id])
        return self._record_from_row(r, breaks[attendance_id])

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            aid = int(r["attendance_id"])
            return self._record_from_row(r, self._load_breaks(cur, [aid])[aid])

    def _insert_break(self, cur, attendance_id: int, b: BreakInterval) -> None:
        cur.execute(
            """
            INSERT INTO attendance_breaks(attendance_id, break_start, break_end, duration_minutes)
            VALUES(%s,%s,%s,%s)
            """,
            (
                attendance_id,
                to_utc_naive(b.break_start),
                to_utc_naive(b.break_end) if b.break_end else None,
                b.duration_minutes,
            ),
        )

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, clock_in_time, clock_out_time,
                        total_break_minutes, total_hours, status,
                        clock_in_latitude, clock_in_longitude, clock_in_accuracy, clock_in_address,
                        clock_out_latitude, clock_out_longitude, clock_out_accuracy, clock_out_address,
                        created_at, updated_at, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (
                        record.employee_id,
                        record.work_date,
                        to_utc_naive(record.clock_in_time),
                        to_utc_naive(record.clock_out_time) if record.clock_out_time else None,
                        record.total_break_minutes,
                        _hours_param(record.total_hours),
                        record.status.value,
                        *_location_params(record.clock_in_location),
                        *_location_params(record.clock_out_location),
                        to_utc_naive(record.created_at or record.clock_in_time),
                        to_utc_naive(record.updated_at or record.clock_in_time),
                    ),
                )
                attendance_id = int(cur.lastrowid)
                for b in record.breaks:
                    self._insert_break(cur, attendance_id, b)
                return self._get_by_id(cur, attendance_id)
        except mysql_errors.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateRecordError(f"attendance already exists for {record.employee_id} on {record.work_date}") from e
            raise

    def save(self, record: AttendanceRecord, *, expected_version: int) -> Optional[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET clock_out_time=%s, total_break_minutes=%s, total_hours=%s, status=%s,
                        clock_out_latitude=%s, clock_out_longitude=%s, clock_out_accuracy=%s, clock_out_address=%s,
                        updated_at=%s, version=version+1
                    WHERE attendance_id=%s AND version=%s
                    """,
                    (
                        to_utc_naive(record.clock_out_time) if record.clock_out_time else None,
                        record.total_break_minutes,
                        _hours_param(record.total_hours),
                        record.status.value,
                        *_location_params(record.clock_out_location),
                        to_utc_naive(record.updated_at) if record.updated_at else None,
                        record.attendance_id,
                        int(expected_version),
                    ),
                )
                if cur.rowcount == 0:
                    logger.debug("Version check failed for attendance %s (expected %s)", record.attendance_id, expected_version)
                    return None

                # Close existing breaks before inserting, so the open-break key never sees two rows.
                for b in record.breaks:
                    if b.break_id is not None:
                        cur.execute(
                            """
                            UPDATE attendance_breaks
                            SET break_end=%s, duration_minutes=%s
                            WHERE break_id=%s AND attendance_id=%s
                            """,
                            (
                                to_utc_naive(b.break_end) if b.break_end else None,
                                b.duration_minutes,
                                b.break_id,
                                record.attendance_id,
                            ),
                        )
                for b in record.breaks:
                    if b.break_id is None:
                        self._insert_break(cur, record.attendance_id, b)

                return self._get_by_id(cur, record.attendance_id)
        except mysql_errors.IntegrityError as e:
            if is_duplicate_key(e):
                raise StoreIntegrityError(f"attendance {record.attendance_id} would have more than one active break") from e
            raise

    def find(self, query: RecordQuery, *, offset: int, limit: int) -> Sequence[AttendanceRecord]:
        where, params = _where(query)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, clock_in_time DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            rows = fetchall(cur)
            breaks = self._load_breaks(cur, [int(r["attendance_id"]) for r in rows])
            return [self._record_from_row(r, breaks[int(r["attendance_id"])]) for r in rows]

    def count(self, query: RecordQuery) -> int:
        where, params = _where(query)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def summarize(self, query: RecordQuery) -> RecordTotals:
        where, params = _where(query)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    COUNT(*) AS days,
                    COALESCE(SUM(status = %s), 0) AS closed_days,
                    COALESCE(SUM(CASE WHEN status = %s THEN total_hours END), 0) AS total_hours
                FROM attendance_records
                WHERE {where}
                """,
                tuple([AttendanceStatus.CLOCKED_OUT.value, AttendanceStatus.CLOCKED_OUT.value] + params),
            )
            r = fetchone(cur) or {}
            return RecordTotals(
                days=int(r.get("days") or 0),
                closed_days=int(r.get("closed_days") or 0),
                total_hours=Decimal(r.get("total_hours") or 0),
            )
