"""Validation of bulk attendance submissions.

Batch-level problems (bad date, empty or oversized batch) raise
ValidationError before any storage access. Everything that concerns a single
line becomes a ``Rejection`` value, so one bad line never stops the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..common.datetime_utils import parse_hhmm
from ..common.validators import (
    require_bool,
    require_decimal_range,
    require_int_range,
    require_max_length,
    require_uuid,
)
from ..core.constants import (
    MAX_BULK_RECORDS,
    MAX_LUNCH_MINUTES,
    MAX_MEAL_COUNT,
    MAX_MISSING_IDS_REPORTED,
    MAX_PERMISSION_HOURS,
    MAX_PERMISSION_REASON_LENGTH,
    MAX_TRANSPORT,
)
from ..core.enums import RejectionKind
from ..core.exceptions import ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import AttendanceEntry, FoodAllowance, ValidatedEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# Wire name -> FoodAllowance field.
FOOD_FIELDS = {
    "breakfast": "breakfast",
    "reinforcedBreakfast": "reinforced_breakfast",
    "snack1": "snack1",
    "afternoonSnack": "afternoon_snack",
    "dryMeal": "dry_meal",
    "lunch": "lunch",
}


@dataclass(frozen=True)
class Rejection:
    index: int
    employee_id: Optional[str]
    reason: str
    kind: RejectionKind = RejectionKind.VALIDATION
    identification: Optional[str] = None
    full_name: Optional[str] = None

    @classmethod
    def for_employee(cls, index: int, employee: Employee, reason: str, kind: RejectionKind) -> "Rejection":
        return cls(
            index=index,
            employee_id=employee.employee_id,
            reason=reason,
            kind=kind,
            identification=employee.identification,
            full_name=employee.full_name,
        )


@dataclass(frozen=True)
class BatchValidation:
    valid: List[ValidatedEntry] = field(default_factory=list)
    rejections: List[Rejection] = field(default_factory=list)
    missing_summary: Optional[str] = None


def summarize_missing(ids: Sequence[str], limit: int = MAX_MISSING_IDS_REPORTED) -> Optional[str]:
    if not ids:
        return None
    shown = ", ".join(ids[:limit])
    rest = len(ids) - limit
    suffix = f" and {rest} more" if rest > 0 else ""
    return f"Employees not found or inactive: {shown}{suffix}"


def _raw_employee_id(raw: Any) -> Optional[str]:
    if isinstance(raw, Mapping) and isinstance(raw.get("employeeId"), str):
        return raw["employeeId"]
    return None


def _optional_time(raw: Mapping, key: str):
    value = raw.get(key)
    if value is None or value == "":
        return None
    try:
        return parse_hhmm(value)
    except ValidationError:
        raise ValidationError(f"{key}: invalid time format (HH:mm)")


def _parse_food(raw: Any) -> FoodAllowance:
    if raw is None:
        return FoodAllowance()
    if not isinstance(raw, Mapping):
        raise ValidationError("foodAllowance must be an object")

    counts = {
        attr: require_int_range(raw.get(key, 0), f"foodAllowance.{key}", 0, MAX_MEAL_COUNT)
        for key, attr in FOOD_FIELDS.items()
    }
    transport = require_decimal_range(raw.get("transport", 0), "foodAllowance.transport", Decimal("0"), MAX_TRANSPORT)
    return FoodAllowance(transport=transport, **counts)


def parse_entry(index: int, raw: Any, *, require_permission_reason: bool = False) -> Union[AttendanceEntry, Rejection]:
    """Structural checks for one submitted line."""
    employee_id = _raw_employee_id(raw)
    if not isinstance(raw, Mapping):
        return Rejection(index=index, employee_id=None, reason="Record must be an object")

    try:
        employee_id = require_uuid(raw.get("employeeId"), "employeeId")
        entry_time = _optional_time(raw, "entryTime")
        exit_time = _optional_time(raw, "exitTime")

        lunch_key = "lunchDurationMinutes" if "lunchDurationMinutes" in raw else "lunchDuration"
        lunch_raw = raw.get(lunch_key)
        lunch_minutes = None
        if lunch_raw is not None:
            lunch_minutes = require_int_range(lunch_raw, lunch_key, 0, MAX_LUNCH_MINUTES)

        is_vacation = False
        if raw.get("isVacation") is not None:
            is_vacation = require_bool(raw["isVacation"], "isVacation")

        permission_hours = Decimal("0")
        if raw.get("permissionHours") is not None:
            permission_hours = require_decimal_range(
                raw["permissionHours"], "permissionHours", Decimal("0"), MAX_PERMISSION_HOURS
            )

        permission_reason = None
        if raw.get("permissionReason") not in (None, ""):
            permission_reason = require_max_length(
                raw["permissionReason"], "permissionReason", MAX_PERMISSION_REASON_LENGTH
            ).strip() or None
        if require_permission_reason and permission_hours > 0 and not permission_reason:
            raise ValidationError("permissionReason is required when permissionHours > 0")

        food = _parse_food(raw.get("foodAllowance"))
    except ValidationError as e:
        return Rejection(index=index, employee_id=employee_id, reason=str(e))

    omitted = frozenset(
        name
        for name, keys in (
            ("entry_time", ("entryTime",)),
            ("exit_time", ("exitTime",)),
            ("lunch_minutes", ("lunchDurationMinutes", "lunchDuration")),
        )
        if not any(k in raw for k in keys)
    )

    return AttendanceEntry(
        index=index,
        employee_id=employee_id,
        entry_time=entry_time,
        exit_time=exit_time,
        lunch_minutes=lunch_minutes,
        is_vacation=is_vacation,
        permission_hours=permission_hours,
        permission_reason=permission_reason,
        food_allowance=food,
        omitted=omitted,
    )


def check_schedule(entry: AttendanceEntry) -> Optional[str]:
    """Temporal rule, applied after area defaults are resolved.

    An exit earlier than the entry is an overnight shift and is accepted;
    identical entry and exit times are rejected.
    """
    if entry.is_vacation or entry.entry_time is None or entry.exit_time is None:
        return None
    if entry.entry_time == entry.exit_time:
        return "entryTime and exitTime cannot be equal"
    return None


class BatchValidator:
    def __init__(
        self,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        *,
        max_records: int = MAX_BULK_RECORDS,
        require_permission_reason: bool = False,
    ):
        self._employees = employees
        self._attendance = attendance
        self._max_records = int(max_records)
        self._require_permission_reason = bool(require_permission_reason)

    def check_batch_shape(self, records: Any) -> Sequence[Any]:
        if not isinstance(records, (list, tuple)):
            raise ValidationError("records must be a list")
        if len(records) < 1:
            raise ValidationError("At least one record is required")
        if len(records) > self._max_records:
            raise ValidationError(f"Cannot process more than {self._max_records} records at once")
        return records

    def validate(self, work_date: date, records: Any) -> BatchValidation:
        records = self.check_batch_shape(records)
        rejections: list[Rejection] = []

        # 1) structure, first occurrence of an employee wins
        parsed: list[AttendanceEntry] = []
        seen: set[str] = set()
        for index, raw in enumerate(records):
            result = parse_entry(index, raw, require_permission_reason=self._require_permission_reason)
            if isinstance(result, Rejection):
                rejections.append(result)
                continue
            if result.employee_id in seen:
                rejections.append(
                    Rejection(
                        index=index,
                        employee_id=result.employee_id,
                        reason="Duplicate employee in this batch",
                        kind=RejectionKind.CONFLICT,
                    )
                )
                continue
            seen.add(result.employee_id)
            parsed.append(result)

        if not parsed:
            return BatchValidation(rejections=sorted(rejections, key=lambda r: r.index))

        # 2) one lookup for all referenced employees
        ids = [e.employee_id for e in parsed]
        employees = {emp.employee_id: emp for emp in self._employees.list_active_by_ids(ids)}
        missing = [i for i in ids if i not in employees]
        for entry in parsed:
            if entry.employee_id not in employees:
                rejections.append(
                    Rejection(
                        index=entry.index,
                        employee_id=entry.employee_id,
                        reason="Employee not found or inactive",
                        kind=RejectionKind.NOT_FOUND,
                    )
                )

        # 3) one lookup for records already stored for this date
        found = [e for e in parsed if e.employee_id in employees]
        registered = self._attendance.registered_employee_ids(
            work_date, employee_ids=[e.employee_id for e in found]
        ) if found else set()

        valid: list[ValidatedEntry] = []
        for entry in found:
            employee = employees[entry.employee_id]
            if entry.employee_id in registered:
                rejections.append(
                    Rejection.for_employee(
                        entry.index, employee, "Already registered for this date", RejectionKind.CONFLICT
                    )
                )
                continue

            resolved = entry.with_area_defaults(employee.area)
            problem = check_schedule(resolved)
            if problem:
                rejections.append(Rejection.for_employee(entry.index, employee, problem, RejectionKind.VALIDATION))
                continue
            valid.append(ValidatedEntry(entry=resolved, employee=employee))

        if missing:
            logger.info("Bulk attendance for %s references %s unknown employees", work_date, len(missing))

        return BatchValidation(
            valid=valid,
            rejections=sorted(rejections, key=lambda r: r.index),
            missing_summary=summarize_missing(missing),
        )
