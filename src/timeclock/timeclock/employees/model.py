from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Directory entry as seen by attendance. Plain data, no DB access."""

    employee_id: str
    full_name: str
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.employee_id,
            "name": self.full_name,
            "department": (
                {"id": self.department_id, "name": self.department_name} if self.department_id is not None else None
            ),
        }
