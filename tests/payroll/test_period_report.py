from __future__ import annotations

from datetime import date

from src.hojaverde.hojaverde.core.enums import Role
from src.hojaverde.hojaverde.payroll.service import period_bounds

from tests.fakes import emp_id


def test_period_bounds():
    assert period_bounds(date(2025, 6, 10)) == (date(2025, 5, 26), date(2025, 6, 25))
    assert period_bounds(date(2025, 6, 26)) == (date(2025, 6, 26), date(2025, 7, 25))
    assert period_bounds(date(2025, 1, 5)) == (date(2024, 12, 26), date(2025, 1, 25))
    assert period_bounds(date(2025, 12, 31)) == (date(2025, 12, 26), date(2026, 1, 25))


def test_period_totals_per_employee(container):
    submit = container.bulk_attendance_service.submit
    submit(
        current_role=Role.EDITOR,
        work_date="2025-05-26",
        records=[
            {"employeeId": emp_id(1), "entryTime": "06:00", "exitTime": "17:30",
             "foodAllowance": {"breakfast": 1, "lunch": 1, "transport": 1.5}},
            {"employeeId": emp_id(2), "isVacation": True},
        ],
    )
    submit(
        current_role=Role.EDITOR,
        work_date="2025-06-25",
        records=[{"employeeId": emp_id(1), "permissionHours": 1.5, "permissionReason": "Cita médica"}],
    )
    # next period
    submit(current_role=Role.EDITOR, work_date="2025-06-26", records=[{"employeeId": emp_id(1)}])

    report = container.period_report_service.build_period_report(reference_date="2025-06-10")
    by_id = {e.employee_id: e for e in report.employees}

    first = by_id[emp_id(1)]
    assert first.days_registered == 2
    # 11h on the 26th, 9h - 1.5h permission on the 25th
    assert str(first.worked_hours) == "18.50"
    assert str(first.supplementary_hours) == "2.00"
    assert str(first.extraordinary_hours) == "1.00"
    assert str(first.permission_hours) == "1.50"
    assert first.meals == 2
    assert str(first.transport) == "1.5"

    second = by_id[emp_id(2)]
    assert second.vacation_days == 1
    assert str(second.worked_hours) == "0.00"

    assert str(report.total_worked_hours) == "18.50"
    assert str(report.total_overtime_hours) == "3.00"


def test_period_report_for_one_employee(container):
    container.bulk_attendance_service.submit(
        current_role=Role.EDITOR,
        work_date="2025-06-01",
        records=[{"employeeId": emp_id(1)}, {"employeeId": emp_id(2)}],
    )
    report = container.period_report_service.build_period_report(reference_date="2025-06-01", employee_id=emp_id(2))
    assert [e.employee_id for e in report.employees] == [emp_id(2)]
