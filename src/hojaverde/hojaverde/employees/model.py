from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..areas.model import Area


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee, carrying its area when it has one."""

    employee_id: str
    identification: str
    first_name: str
    last_name: str
    area: Optional[Area] = None
    position: Optional[str] = None
    base_salary: Optional[Decimal] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def area_id(self) -> Optional[str]:
        return self.area.area_id if self.area else None

    @property
    def area_name(self) -> Optional[str]:
        return self.area.name if self.area else None
