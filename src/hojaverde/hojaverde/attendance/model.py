from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import FrozenSet, Optional

from ..areas.model import Area
from ..core.constants import DEFAULT_LUNCH_MINUTES
from ..employees.model import Employee
from ..payroll.calculator.base import OvertimeSplit

MEAL_FIELDS = ("breakfast", "reinforced_breakfast", "snack1", "afternoon_snack", "dry_meal", "lunch")


@dataclass(frozen=True)
class FoodAllowance:
    """Per-day meal counters and transport subsidy attached to a record."""

    breakfast: int = 0
    reinforced_breakfast: int = 0
    snack1: int = 0
    afternoon_snack: int = 0
    dry_meal: int = 0
    lunch: int = 0
    transport: Decimal = Decimal("0")

    @property
    def meal_count(self) -> int:
        return sum(getattr(self, name) for name in MEAL_FIELDS)


# Food counts pre-filled in the registration template.
STANDARD_FOOD_ALLOWANCE = FoodAllowance(breakfast=1, snack1=1, lunch=1)


@dataclass(frozen=True)
class AttendanceEntry:
    """One structurally valid line of a bulk submission.

    ``omitted`` names the fields the caller left out entirely; they are filled
    from the employee's area by ``with_area_defaults``. A field sent as null is
    not omitted: it stays empty.
    """

    index: int
    employee_id: str
    entry_time: Optional[time] = None
    exit_time: Optional[time] = None
    lunch_minutes: Optional[int] = None
    is_vacation: bool = False
    permission_hours: Decimal = Decimal("0")
    permission_reason: Optional[str] = None
    food_allowance: FoodAllowance = field(default_factory=FoodAllowance)
    omitted: FrozenSet[str] = frozenset()

    def with_area_defaults(self, area: Optional[Area]) -> "AttendanceEntry":
        changes: dict = {}
        if "lunch_minutes" in self.omitted or self.lunch_minutes is None:
            changes["lunch_minutes"] = area.default_lunch_minutes if area else DEFAULT_LUNCH_MINUTES
        if area and not self.is_vacation:
            if "entry_time" in self.omitted:
                changes["entry_time"] = area.default_entry_time
            if "exit_time" in self.omitted:
                changes["exit_time"] = area.default_exit_time
        return replace(self, omitted=frozenset(), **changes)


@dataclass(frozen=True)
class ValidatedEntry:
    """An entry whose employee resolved to an active employee and whose defaults are applied."""

    entry: AttendanceEntry
    employee: Employee


@dataclass(frozen=True)
class NewAttendanceRecord:
    employee_id: str
    work_date: date
    entry_time: Optional[time]
    exit_time: Optional[time]
    lunch_minutes: int
    worked_hours: Decimal
    is_vacation: bool
    permission_hours: Decimal
    permission_reason: Optional[str] = None


@dataclass(frozen=True)
class RegisteredRow:
    """Read-model of a stored record joined with its employee, area and sub-records."""

    attendance_id: str
    employee_id: str
    identification: str
    first_name: str
    last_name: str
    area_id: Optional[str]
    area_name: Optional[str]
    work_date: date
    entry_time: Optional[time]
    exit_time: Optional[time]
    lunch_minutes: int
    worked_hours: Decimal
    is_vacation: bool
    permission_hours: Decimal = Decimal("0")
    permission_reason: Optional[str] = None
    food_allowance: Optional[FoodAllowance] = None
    extra_hours: Optional[OvertimeSplit] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
