from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only view of the employee directory.

    Note (DIP): attendance services depend on this interface, never on the
    directory's storage.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_many(self, employee_ids: Iterable[str]) -> Mapping[str, Employee]:
        raise NotImplementedError

    def search_ids(self, *, search: Optional[str] = None, department_id: Optional[int] = None) -> Sequence[str]:
        """IDs of employees whose name contains `search` (case-insensitive) and/or in `department_id`."""

        raise NotImplementedError
