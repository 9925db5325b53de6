from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Union

from ..attendance.repository import AttendanceRepository
from ..attendance.service import coerce_date
from ..core.constants import NO_AREA_LABEL, PERIOD_END_DAY, PERIOD_START_DAY
from .hours import round_hours

ZERO = Decimal("0")


def period_bounds(reference: date) -> tuple[date, date]:
    """Payroll period containing ``reference``: the 26th through the 25th of the next month."""
    if reference.day >= PERIOD_START_DAY:
        start = reference.replace(day=PERIOD_START_DAY)
    elif reference.month == 1:
        start = date(reference.year - 1, 12, PERIOD_START_DAY)
    else:
        start = date(reference.year, reference.month - 1, PERIOD_START_DAY)

    if start.month == 12:
        end = date(start.year + 1, 1, PERIOD_END_DAY)
    else:
        end = date(start.year, start.month + 1, PERIOD_END_DAY)
    return start, end


@dataclass
class EmployeePeriodTotals:
    employee_id: str
    identification: str
    full_name: str
    area_name: str
    days_registered: int = 0
    vacation_days: int = 0
    worked_hours: Decimal = ZERO
    night_hours: Decimal = ZERO
    supplementary_hours: Decimal = ZERO
    extraordinary_hours: Decimal = ZERO
    permission_hours: Decimal = ZERO
    meals: int = 0
    transport: Decimal = ZERO


@dataclass(frozen=True)
class PeriodReport:
    start_date: date
    end_date: date
    employees: List[EmployeePeriodTotals] = field(default_factory=list)

    @property
    def total_worked_hours(self) -> Decimal:
        return round_hours(sum((e.worked_hours for e in self.employees), ZERO))

    @property
    def total_overtime_hours(self) -> Decimal:
        return round_hours(
            sum((e.night_hours + e.supplementary_hours + e.extraordinary_hours for e in self.employees), ZERO)
        )


class PeriodReportService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def build_period_report(
        self,
        *,
        reference_date: Union[date, str],
        employee_id: Optional[str] = None,
        area_ids: Optional[Sequence[str]] = None,
    ) -> PeriodReport:
        start, end = period_bounds(coerce_date(reference_date))
        rows = self._attendance.list_range(start_date=start, end_date=end, employee_id=employee_id, area_ids=area_ids)

        totals: Dict[str, EmployeePeriodTotals] = {}
        for r in rows:
            t = totals.get(r.employee_id)
            if not t:
                t = EmployeePeriodTotals(
                    employee_id=r.employee_id,
                    identification=r.identification,
                    full_name=r.full_name,
                    area_name=r.area_name or NO_AREA_LABEL,
                )
                totals[r.employee_id] = t

            t.days_registered += 1
            if r.is_vacation:
                t.vacation_days += 1
            t.worked_hours += r.worked_hours
            t.permission_hours += r.permission_hours
            if r.extra_hours:
                t.night_hours += r.extra_hours.night
                t.supplementary_hours += r.extra_hours.supplementary
                t.extraordinary_hours += r.extra_hours.extraordinary
            if r.food_allowance:
                t.meals += r.food_allowance.meal_count
                t.transport += r.food_allowance.transport

        employees = sorted(totals.values(), key=lambda t: (t.area_name, t.full_name))
        return PeriodReport(start_date=start, end_date=end, employees=employees)
