from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Employee
from .repository import EmployeeDirectory

_SELECT = """
    SELECT e.employee_id, e.full_name, e.department_id, e.is_active, d.department_name
    FROM employees e
    LEFT JOIN departments d ON d.department_id = e.department_id
"""


def _employee_from_row(r: dict) -> Employee:
    return Employee(
        employee_id=str(r["employee_id"]),
        full_name=r["full_name"],
        department_id=int(r["department_id"]) if r.get("department_id") is not None else None,
        department_name=r.get("department_name"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE e.employee_id=%s", (employee_id,))
            r = fetchone(cur)
            return _employee_from_row(r) if r else None

    def get_many(self, employee_ids: Iterable[str]) -> Mapping[str, Employee]:
        ids = sorted(set(employee_ids))
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE e.employee_id IN ({placeholders(len(ids))})", tuple(ids))
            return {str(r["employee_id"]): _employee_from_row(r) for r in fetchall(cur)}

    def search_ids(self, *, search: Optional[str] = None, department_id: Optional[int] = None) -> Sequence[str]:
        clauses = ["1=1"]
        params: list[object] = []

        needle = (search or "").strip()
        if needle:
            clauses.append("LOWER(e.full_name) LIKE %s")
            params.append(f"%{needle.lower()}%")
        if department_id is not None:
            clauses.append("e.department_id=%s")
            params.append(int(department_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT e.employee_id FROM employees e WHERE {where} ORDER BY e.employee_id", tuple(params))
            return [str(r["employee_id"]) for r in fetchall(cur)]
