from __future__ import annotations

from typing import Dict, Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Read-only employee lookups.

    Every method only returns active employees; each one carries its area.
    """

    def list_active_by_ids(self, employee_ids: Sequence[str]) -> Sequence[Employee]:
        raise NotImplementedError

    def list_active_by_area_ids(self, area_ids: Sequence[str]) -> Sequence[Employee]:
        """Sorted by last name, then first name."""

        raise NotImplementedError

    def count_active(self, area_ids: Optional[Sequence[str]] = None) -> int:
        raise NotImplementedError

    def count_active_by_area(self) -> Dict[str, int]:
        """Active employee count per area id; employees without an area are left out."""

        raise NotImplementedError
