"""Read side of bulk registration: pre-filled templates and completion checks.

Nothing here writes; calling any method twice gives the same answer as long
as nobody commits in between.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Union

from ..areas.model import Area
from ..areas.repository import AreaRepository
from ..common.validators import require_uuid
from ..core.constants import MAX_TEMPLATE_AREAS, NO_AREA_LABEL
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..payroll.hours import round_hours
from .model import STANDARD_FOOD_ALLOWANCE, FoodAllowance, RegisteredRow
from .repository import AttendanceRepository
from .service import coerce_date


def completion_rate(registered: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(registered * 100.0 / total, 1)


def normalize_area_ids(area_ids: Union[str, Sequence[str], None], *, required: bool) -> List[str]:
    """Accept a comma-separated string or a list; dedupe keeping order."""
    if area_ids is None or area_ids == "":
        raw: list = []
    elif isinstance(area_ids, str):
        raw = [part for part in (p.strip() for p in area_ids.split(",")) if part]
    else:
        raw = list(area_ids)

    if not raw:
        if required:
            raise ValidationError("At least one areaId is required")
        return []
    ids = list(dict.fromkeys(require_uuid(v, "areaId") for v in raw))
    if len(ids) > MAX_TEMPLATE_AREAS:
        raise ValidationError(f"At most {MAX_TEMPLATE_AREAS} areas per request")
    return ids


@dataclass(frozen=True)
class TemplateEmployee:
    employee: Employee
    has_existing_record: bool
    entry_time: time
    exit_time: time
    lunch_minutes: int
    is_vacation: bool = False
    permission_hours: Decimal = Decimal("0")
    food_allowance: FoodAllowance = STANDARD_FOOD_ALLOWANCE


@dataclass(frozen=True)
class AreaTemplate:
    area: Area
    employees: List[TemplateEmployee] = field(default_factory=list)

    @property
    def employees_count(self) -> int:
        return len(self.employees)

    @property
    def employees_with_records(self) -> int:
        return sum(1 for e in self.employees if e.has_existing_record)


@dataclass(frozen=True)
class AttendanceTemplate:
    work_date: date
    areas: List[AreaTemplate]

    @property
    def total_employees(self) -> int:
        return sum(a.employees_count for a in self.areas)

    @property
    def with_existing_records(self) -> int:
        return sum(a.employees_with_records for a in self.areas)

    @property
    def pending(self) -> int:
        return self.total_employees - self.with_existing_records


@dataclass(frozen=True)
class VerificationReport:
    work_date: date
    area_ids: List[str]
    total_employees: int
    records_by_area: "OrderedDict[str, List[RegisteredRow]]"

    @property
    def registered(self) -> int:
        return sum(len(rows) for rows in self.records_by_area.values())

    @property
    def pending(self) -> int:
        return max(self.total_employees - self.registered, 0)

    @property
    def completion_rate(self) -> float:
        return completion_rate(self.registered, self.total_employees)


@dataclass(frozen=True)
class AreaDailyStats:
    area_id: str
    area_name: str
    total_employees: int
    registered_employees: int
    vacation_count: int
    total_worked_hours: Decimal
    total_food_items: int

    @property
    def pending_employees(self) -> int:
        return max(self.total_employees - self.registered_employees, 0)

    @property
    def completion_rate(self) -> float:
        return completion_rate(self.registered_employees, self.total_employees)

    @property
    def average_worked_hours(self) -> Decimal:
        if not self.registered_employees:
            return Decimal("0.00")
        return round_hours(self.total_worked_hours / self.registered_employees)


@dataclass(frozen=True)
class DailySummary:
    work_date: date
    areas: List[AreaDailyStats]

    def _sum(self, attr: str):
        return sum((getattr(a, attr) for a in self.areas), 0)

    @property
    def total_employees(self) -> int:
        return self._sum("total_employees")

    @property
    def registered_employees(self) -> int:
        return self._sum("registered_employees")

    @property
    def pending_employees(self) -> int:
        return max(self.total_employees - self.registered_employees, 0)

    @property
    def vacation_count(self) -> int:
        return self._sum("vacation_count")

    @property
    def total_food_items(self) -> int:
        return self._sum("total_food_items")

    @property
    def total_worked_hours(self) -> Decimal:
        return round_hours(self._sum("total_worked_hours"))

    @property
    def completion_rate(self) -> float:
        return completion_rate(self.registered_employees, self.total_employees)

    @property
    def average_worked_hours(self) -> Decimal:
        if not self.registered_employees:
            return Decimal("0.00")
        return round_hours(self.total_worked_hours / self.registered_employees)


class TemplateService:
    def __init__(self, areas: AreaRepository, employees: EmployeeRepository, attendance: AttendanceRepository):
        self._areas = areas
        self._employees = employees
        self._attendance = attendance

    def build_template(self, *, work_date: Union[date, str], area_ids: Union[str, Sequence[str], None]) -> AttendanceTemplate:
        work_date = coerce_date(work_date)
        ids = normalize_area_ids(area_ids, required=True)

        areas = sorted(self._areas.get_by_ids(ids), key=lambda a: a.name)
        found = {a.area_id for a in areas}
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFoundError(f"Areas not found: {', '.join(missing)}")

        employees = self._employees.list_active_by_area_ids(ids)
        registered = self._attendance.registered_employee_ids(work_date, area_ids=ids)

        by_area: Dict[str, List[Employee]] = {a.area_id: [] for a in areas}
        for emp in employees:
            if emp.area_id in by_area:
                by_area[emp.area_id].append(emp)

        return AttendanceTemplate(
            work_date=work_date,
            areas=[
                AreaTemplate(
                    area=area,
                    employees=[
                        TemplateEmployee(
                            employee=emp,
                            has_existing_record=emp.employee_id in registered,
                            entry_time=area.default_entry_time,
                            exit_time=area.default_exit_time,
                            lunch_minutes=area.default_lunch_minutes,
                        )
                        for emp in by_area[area.area_id]
                    ],
                )
                for area in areas
            ],
        )

    def verify(self, *, work_date: Union[date, str], area_ids: Union[str, Sequence[str], None] = None) -> VerificationReport:
        work_date = coerce_date(work_date)
        ids = normalize_area_ids(area_ids, required=False)

        rows = self._attendance.list_for_date(work_date, area_ids=ids or None)
        total = self._employees.count_active(ids or None)

        grouped: "OrderedDict[str, List[RegisteredRow]]" = OrderedDict()
        for r in rows:
            grouped.setdefault(r.area_name or NO_AREA_LABEL, []).append(r)

        return VerificationReport(work_date=work_date, area_ids=ids, total_employees=total, records_by_area=grouped)

    def daily_summary(self, *, work_date: Union[date, str]) -> DailySummary:
        work_date = coerce_date(work_date)

        areas = sorted(self._areas.list_all(), key=lambda a: a.name)
        counts = self._employees.count_active_by_area()
        rows_by_area: Dict[Optional[str], List[RegisteredRow]] = {}
        for r in self._attendance.list_for_date(work_date, active_only=True):
            rows_by_area.setdefault(r.area_id, []).append(r)

        stats = []
        for area in areas:
            rows = rows_by_area.get(area.area_id, [])
            stats.append(
                AreaDailyStats(
                    area_id=area.area_id,
                    area_name=area.name,
                    total_employees=counts.get(area.area_id, 0),
                    registered_employees=len({r.employee_id for r in rows}),
                    vacation_count=sum(1 for r in rows if r.is_vacation),
                    total_worked_hours=round_hours(sum((r.worked_hours for r in rows), Decimal("0"))),
                    total_food_items=sum(r.food_allowance.meal_count for r in rows if r.food_allowance),
                )
            )
        return DailySummary(work_date=work_date, areas=stats)
