from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from .model import Employee
from .repository import EmployeeDirectory


class InMemoryEmployeeDirectory(EmployeeDirectory):
    def __init__(self, employees: Iterable[Employee] = ()):
        self._by_id: dict[str, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def get_many(self, employee_ids: Iterable[str]) -> Mapping[str, Employee]:
        return {eid: self._by_id[eid] for eid in set(employee_ids) if eid in self._by_id}

    def search_ids(self, *, search: Optional[str] = None, department_id: Optional[int] = None) -> Sequence[str]:
        needle = (search or "").strip().lower()
        out = []
        for e in self._by_id.values():
            if needle and needle not in e.full_name.lower():
                continue
            if department_id is not None and e.department_id != department_id:
                continue
            out.append(e.employee_id)
        return sorted(out)
