from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest

from src.hojaverde.hojaverde.attendance.model import NewAttendanceRecord
from src.hojaverde.hojaverde.attendance.validator import BatchValidator, parse_entry, summarize_missing
from src.hojaverde.hojaverde.core.enums import RejectionKind
from src.hojaverde.hojaverde.core.exceptions import ValidationError

from tests.fakes import emp_id

WORK_DATE = date(2025, 6, 10)


@pytest.fixture
def validator(employees, attendance):
    return BatchValidator(employees, attendance)


def test_batch_size_limits_checked_before_storage(validator, employees, attendance):
    with pytest.raises(ValidationError):
        validator.validate(WORK_DATE, [])
    with pytest.raises(ValidationError):
        validator.validate(WORK_DATE, [{"employeeId": emp_id(1)}] * 1001)
    with pytest.raises(ValidationError):
        validator.validate(WORK_DATE, {"employeeId": emp_id(1)})

    assert employees.lookups == 0
    assert attendance.queries == 0


def test_thousand_records_is_accepted(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(1)}] * 1000)
    assert len(result.valid) == 1
    assert len(result.rejections) == 999


def test_omitted_fields_take_area_defaults(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(6)}])

    entry = result.valid[0].entry
    assert entry.entry_time == time(7, 0)
    assert entry.exit_time == time(17, 0)
    assert entry.lunch_minutes == 45


def test_explicit_null_times_stay_empty(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(1), "entryTime": None, "exitTime": None}])

    entry = result.valid[0].entry
    assert entry.entry_time is None
    assert entry.exit_time is None
    assert entry.lunch_minutes == 30


def test_vacation_does_not_get_default_times(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(1), "isVacation": True}])

    entry = result.valid[0].entry
    assert entry.is_vacation
    assert entry.entry_time is None and entry.exit_time is None


def test_employee_without_area_keeps_given_times(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(9), "entryTime": "08:00", "exitTime": "12:00"}])

    entry = result.valid[0].entry
    assert entry.entry_time == time(8, 0)
    assert entry.lunch_minutes == 30


def test_lunch_duration_alias(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(1), "lunchDuration": 60}])
    assert result.valid[0].entry.lunch_minutes == 60


@pytest.mark.parametrize(
    "record, fragment",
    [
        ({"employeeId": "not-a-uuid"}, "employeeId"),
        ({"employeeId": emp_id(1), "entryTime": "24:00"}, "entryTime"),
        ({"employeeId": emp_id(1), "exitTime": "7"}, "exitTime"),
        ({"employeeId": emp_id(1), "lunchDurationMinutes": 181}, "lunchDurationMinutes"),
        ({"employeeId": emp_id(1), "permissionHours": 12.5}, "permissionHours"),
        ({"employeeId": emp_id(1), "permissionReason": "x" * 501}, "permissionReason"),
        ({"employeeId": emp_id(1), "isVacation": "yes"}, "isVacation"),
        ({"employeeId": emp_id(1), "foodAllowance": {"breakfast": 6}}, "foodAllowance.breakfast"),
        ({"employeeId": emp_id(1), "foodAllowance": {"lunch": True}}, "foodAllowance.lunch"),
        ({"employeeId": emp_id(1), "foodAllowance": {"transport": 50.5}}, "foodAllowance.transport"),
    ],
)
def test_structural_errors_are_rejections(record, fragment):
    result = parse_entry(3, record)
    assert result.index == 3
    assert result.kind == RejectionKind.VALIDATION
    assert fragment in result.reason


def test_non_object_record_is_rejected(validator):
    result = validator.validate(WORK_DATE, ["oops", {"employeeId": emp_id(1)}])
    assert [r.index for r in result.rejections] == [0]
    assert len(result.valid) == 1


def test_equal_entry_and_exit_rejected(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(1), "entryTime": "08:00", "exitTime": "08:00"}])
    assert not result.valid
    assert result.rejections[0].identification == "1700000001"


def test_exit_before_entry_is_overnight(validator):
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(1), "entryTime": "22:00", "exitTime": "06:00"}])
    assert len(result.valid) == 1


def test_first_duplicate_in_batch_wins(validator):
    records = [
        {"employeeId": emp_id(1), "lunchDurationMinutes": 10},
        {"employeeId": emp_id(1), "lunchDurationMinutes": 20},
    ]
    result = validator.validate(WORK_DATE, records)

    assert result.valid[0].entry.lunch_minutes == 10
    assert result.rejections[0].index == 1
    assert result.rejections[0].kind == RejectionKind.CONFLICT


def test_unknown_and_inactive_employees_not_found(validator, employees):
    unknown = emp_id(999)
    records = [{"employeeId": emp_id(1)}, {"employeeId": unknown}, {"employeeId": emp_id(10)}]
    result = validator.validate(WORK_DATE, records)

    assert len(result.valid) == 1
    assert [(r.index, r.kind) for r in result.rejections] == [(1, RejectionKind.NOT_FOUND), (2, RejectionKind.NOT_FOUND)]
    assert unknown in result.missing_summary
    assert employees.lookups == 1


def test_already_registered_rejected_with_one_query(validator, attendance):
    attendance.add(
        NewAttendanceRecord(
            employee_id=emp_id(2),
            work_date=WORK_DATE,
            entry_time=time(6, 30),
            exit_time=time(16, 0),
            lunch_minutes=30,
            worked_hours=Decimal("9.00"),
            is_vacation=False,
            permission_hours=Decimal("0"),
        )
    )
    result = validator.validate(WORK_DATE, [{"employeeId": emp_id(1)}, {"employeeId": emp_id(2)}])

    assert [v.employee.employee_id for v in result.valid] == [emp_id(1)]
    assert result.rejections[0].reason == "Already registered for this date"
    assert attendance.queries == 1


def test_permission_reason_required_only_when_configured(employees, attendance):
    record = {"employeeId": emp_id(1), "permissionHours": 2}
    assert BatchValidator(employees, attendance).validate(WORK_DATE, [record]).valid

    strict = BatchValidator(employees, attendance, require_permission_reason=True)
    result = strict.validate(WORK_DATE, [record])
    assert not result.valid
    assert "permissionReason" in result.rejections[0].reason


def test_missing_summary_lists_five_then_counts():
    ids = [f"id-{n}" for n in range(8)]
    summary = summarize_missing(ids)
    assert "id-4" in summary
    assert "id-5" not in summary
    assert summary.endswith("and 3 more")
    assert summarize_missing([]) is None
