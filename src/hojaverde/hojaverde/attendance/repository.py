from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol, Sequence, Set

from ..payroll.calculator.base import OvertimeSplit
from .model import FoodAllowance, NewAttendanceRecord, RegisteredRow


class AttendanceTransaction(Protocol):
    """Write handle for one open transaction.

    Passed explicitly to the commit engine; it is only valid inside the
    ``AttendanceRepository.transaction()`` block that produced it.
    """

    def savepoint(self, name: str) -> ContextManager[None]:
        """Undo every write made inside the block if a DomainError escapes it."""

        raise NotImplementedError

    def insert_record(self, record: NewAttendanceRecord) -> str:
        """Insert the attendance row and return its id.

        Raises ConflictError when (employee_id, work_date) already exists.
        """

        raise NotImplementedError

    def insert_food_allowance(self, attendance_id: str, food: FoodAllowance) -> None:
        raise NotImplementedError

    def insert_extra_hours(self, attendance_id: str, extra: OvertimeSplit) -> None:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def transaction(self) -> ContextManager[AttendanceTransaction]:
        """Commit when the block exits cleanly, roll back everything otherwise.

        Storage faults surface as StorageFailure.
        """

        raise NotImplementedError

    def registered_employee_ids(
        self,
        work_date: date,
        *,
        employee_ids: Optional[Sequence[str]] = None,
        area_ids: Optional[Sequence[str]] = None,
    ) -> Set[str]:
        raise NotImplementedError

    def list_for_date(
        self, work_date: date, *, area_ids: Optional[Sequence[str]] = None, active_only: bool = False
    ) -> Sequence[RegisteredRow]:
        """Sorted by area name, last name, first name.

        ``active_only`` drops records of employees deactivated since.
        """

        raise NotImplementedError

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
        area_ids: Optional[Sequence[str]] = None,
    ) -> Sequence[RegisteredRow]:
        raise NotImplementedError
