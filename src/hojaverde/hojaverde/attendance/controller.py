from __future__ import annotations

import csv
import io
from decimal import Decimal
from functools import wraps
from typing import Optional

from flask import Flask, current_app, g, jsonify, request

from ..common.datetime_utils import format_hhmm, now_local
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, StorageFailure, ValidationError
from ..payroll.service import PeriodReport
from .model import FoodAllowance, RegisteredRow
from .service import EDITOR_ROLES, BulkCommitResult
from .template_service import AttendanceTemplate, DailySummary, VerificationReport, normalize_area_ids


def _num(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


def _percent(value: float) -> str:
    return f"{value:.1f}%"


def _food_to_dict(food: Optional[FoodAllowance]) -> Optional[dict]:
    if food is None:
        return None
    return {
        "breakfast": food.breakfast,
        "reinforcedBreakfast": food.reinforced_breakfast,
        "snack1": food.snack1,
        "afternoonSnack": food.afternoon_snack,
        "dryMeal": food.dry_meal,
        "lunch": food.lunch,
        "transport": _num(food.transport),
    }


def bulk_result_to_dict(result: BulkCommitResult, *, max_errors: int) -> dict:
    return {
        "date": result.work_date.isoformat(),
        "processed": result.processed,
        "errors": result.errors,
        "totalRequested": result.total_requested,
        "successRate": _percent(result.success_rate),
        "timeElapsed": f"{result.elapsed_seconds:.3f}s",
        "processedRecords": [
            {
                "employeeId": c.employee_id,
                "identification": c.identification,
                "fullName": c.full_name,
                "area": c.area_name,
                "workedHours": _num(c.worked_hours),
                "status": c.status.value,
            }
            for c in result.committed
        ],
        "errorList": [
            {
                "index": r.index,
                "employeeId": r.employee_id,
                "identification": r.identification,
                "fullName": r.full_name,
                "kind": r.kind.value,
                "error": r.reason,
            }
            for r in result.rejected[:max_errors]
        ],
        "totalErrors": result.errors,
        "missingEmployees": result.missing_summary,
    }


def template_to_dict(template: AttendanceTemplate) -> dict:
    areas = []
    for at in template.areas:
        area = at.area
        areas.append(
            {
                "areaId": area.area_id,
                "areaName": area.name,
                "defaultEntryTime": format_hhmm(area.default_entry_time),
                "defaultExitTime": format_hhmm(area.default_exit_time),
                "defaultLunchDuration": area.default_lunch_minutes,
                "defaultWorkingHours": area.default_working_hours,
                "employees": [
                    {
                        "employeeId": te.employee.employee_id,
                        "identification": te.employee.identification,
                        "fullName": te.employee.full_name,
                        "firstName": te.employee.first_name,
                        "lastName": te.employee.last_name,
                        "position": te.employee.position,
                        "baseSalary": _num(te.employee.base_salary) if te.employee.base_salary is not None else None,
                        "hasExistingRecord": te.has_existing_record,
                        "defaultValues": {
                            "entryTime": format_hhmm(te.entry_time),
                            "exitTime": format_hhmm(te.exit_time),
                            "lunchDuration": te.lunch_minutes,
                            "isVacation": te.is_vacation,
                            "permissionHours": _num(te.permission_hours),
                            "permissionReason": "",
                            "foodAllowance": _food_to_dict(te.food_allowance),
                        },
                    }
                    for te in at.employees
                ],
                "employeesCount": at.employees_count,
                "employeesWithRecords": at.employees_with_records,
            }
        )
    return {"date": template.work_date.isoformat(), "areas": areas}


def _row_to_dict(r: RegisteredRow) -> dict:
    extra = None
    if r.extra_hours:
        extra = {
            "nightHours": _num(r.extra_hours.night),
            "supplementaryHours": _num(r.extra_hours.supplementary),
            "extraordinaryHours": _num(r.extra_hours.extraordinary),
        }
    return {
        "employeeId": r.employee_id,
        "identification": r.identification,
        "fullName": r.full_name,
        "entryTime": format_hhmm(r.entry_time),
        "exitTime": format_hhmm(r.exit_time),
        "lunchDuration": r.lunch_minutes,
        "workedHours": _num(r.worked_hours),
        "isVacation": r.is_vacation,
        "permissionHours": _num(r.permission_hours),
        "permissionReason": r.permission_reason,
        "foodAllowance": _food_to_dict(r.food_allowance),
        "extraHours": extra,
        "createdAt": r.created_at.isoformat() if r.created_at else None,
    }


def verification_to_dict(report: VerificationReport) -> dict:
    return {
        "date": report.work_date.isoformat(),
        "summary": {
            "totalEmployees": report.total_employees,
            "registered": report.registered,
            "pending": report.pending,
            "completionRate": _percent(report.completion_rate),
        },
        "recordsByArea": {name: [_row_to_dict(r) for r in rows] for name, rows in report.records_by_area.items()},
        "areaStats": [{"area": name, "registeredCount": len(rows)} for name, rows in report.records_by_area.items()],
    }


def daily_summary_to_dict(summary: DailySummary) -> dict:
    return {
        "date": summary.work_date.isoformat(),
        "summary": {
            "totalEmployees": summary.total_employees,
            "registeredEmployees": summary.registered_employees,
            "pendingEmployees": summary.pending_employees,
            "completionRate": _percent(summary.completion_rate),
            "vacationCount": summary.vacation_count,
            "totalWorkedHours": _num(summary.total_worked_hours),
            "averageWorkedHours": _num(summary.average_worked_hours),
            "totalFoodItems": summary.total_food_items,
        },
        "areaStats": [
            {
                "areaId": a.area_id,
                "areaName": a.area_name,
                "totalEmployees": a.total_employees,
                "registeredEmployees": a.registered_employees,
                "pendingEmployees": a.pending_employees,
                "completionRate": _percent(a.completion_rate),
                "vacationCount": a.vacation_count,
                "totalWorkedHours": _num(a.total_worked_hours),
                "averageWorkedHours": _num(a.average_worked_hours),
                "totalFoodItems": a.total_food_items,
            }
            for a in summary.areas
        ],
    }


def period_report_rows(report: PeriodReport) -> list[dict]:
    return [
        {
            "employeeId": e.employee_id,
            "identification": e.identification,
            "fullName": e.full_name,
            "area": e.area_name,
            "daysRegistered": e.days_registered,
            "vacationDays": e.vacation_days,
            "workedHours": _num(e.worked_hours),
            "nightHours": _num(e.night_hours),
            "supplementaryHours": _num(e.supplementary_hours),
            "extraordinaryHours": _num(e.extraordinary_hours),
            "permissionHours": _num(e.permission_hours),
            "meals": e.meals,
            "transport": _num(e.transport),
        }
        for e in report.employees
    ]


def register(app: Flask, container: Container) -> None:
    def _fail(message: str, status: int, **extra):
        return jsonify({"success": False, "message": message, **extra}), status

    def login_required(view):
        """Role context comes from the upstream auth layer as trusted headers."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            user_id = request.headers.get("X-User-Id")
            role = request.headers.get("X-User-Role", "").strip().upper()
            if not user_id or role not in {r.value for r in Role}:
                return _fail("Authentication required", 401)
            g.user_id = user_id
            g.role = Role(role)
            return view(*args, **kwargs)

        return wrapper

    def editor_required(view):
        @login_required
        @wraps(view)
        def wrapper(*args, **kwargs):
            if g.role not in EDITOR_ROLES:
                return _fail("Access denied: ADMIN or EDITOR role required", 403)
            return view(*args, **kwargs)

        return wrapper

    def _reference_date() -> str:
        return request.args.get("date") or now_local().date().isoformat()

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    @editor_required
    def bulk_create():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _fail("Request body must be a JSON object", 400)

        try:
            result = container.bulk_attendance_service.submit(
                current_role=g.role,
                work_date=data.get("date"),
                records=data.get("records"),
            )
        except AuthorizationError as e:
            return _fail(str(e), 403)
        except ValidationError as e:
            return _fail(str(e), 400)
        except StorageFailure as e:
            elapsed = e.elapsed_seconds or 0.0
            return _fail(
                "Internal error while saving attendance records; nothing was saved",
                500,
                timeElapsed=f"{elapsed:.3f}s",
            )

        payload = bulk_result_to_dict(result, max_errors=current_app.config["MAX_REPORTED_ERRORS"])
        message = f"{result.processed} records saved"
        if result.errors:
            message += f", {result.errors} rejected"
        return jsonify({"success": True, "message": message, "data": payload}), 201

    @app.route("/api/attendance/template", methods=["GET"], endpoint="attendance_template")
    @editor_required
    def get_template():
        try:
            template = container.template_service.build_template(
                work_date=request.args.get("date", ""),
                area_ids=request.args.get("areaIds"),
            )
        except ValidationError as e:
            return _fail(str(e), 400)
        except NotFoundError as e:
            return _fail(str(e), 404)

        pending = template.pending
        return jsonify(
            {
                "success": True,
                "data": template_to_dict(template),
                "meta": {
                    "totalAreas": len(template.areas),
                    "totalEmployees": template.total_employees,
                    "employeesWithExistingRecords": template.with_existing_records,
                    "employeesPendingRegistration": pending,
                    "date": template.work_date.isoformat(),
                    "message": f"Template ready for {pending} pending employees in {len(template.areas)} area(s)",
                },
            }
        )

    @app.route("/api/attendance/verify", methods=["GET"], endpoint="attendance_verify")
    @editor_required
    def verify():
        try:
            report = container.template_service.verify(
                work_date=request.args.get("date", ""),
                area_ids=request.args.get("areaIds"),
            )
        except ValidationError as e:
            return _fail(str(e), 400)

        return jsonify(
            {
                "success": True,
                "data": verification_to_dict(report),
                "meta": {
                    "hasFilters": bool(report.area_ids),
                    "filteredAreas": report.area_ids,
                    "totalRecordsFound": report.registered,
                },
            }
        )

    @app.route("/api/attendance/daily-summary", methods=["GET"], endpoint="attendance_daily_summary")
    @editor_required
    def daily_summary():
        try:
            summary = container.template_service.daily_summary(work_date=request.args.get("date", ""))
        except ValidationError as e:
            return _fail(str(e), 400)
        return jsonify({"success": True, "data": daily_summary_to_dict(summary)})

    def _period_report():
        area_ids = normalize_area_ids(request.args.get("areaIds"), required=False)
        return container.period_report_service.build_period_report(
            reference_date=_reference_date(),
            employee_id=request.args.get("employeeId") or None,
            area_ids=area_ids or None,
        )

    @app.route("/api/attendance/period-summary", methods=["GET"], endpoint="attendance_period_summary")
    @login_required
    def period_summary():
        try:
            report = _period_report()
        except ValidationError as e:
            return _fail(str(e), 400)

        return jsonify(
            {
                "success": True,
                "data": {
                    "startDate": report.start_date.isoformat(),
                    "endDate": report.end_date.isoformat(),
                    "totalWorkedHours": _num(report.total_worked_hours),
                    "totalOvertimeHours": _num(report.total_overtime_hours),
                    "employees": period_report_rows(report),
                },
            }
        )

    @app.route("/api/attendance/period-summary/export", methods=["GET"], endpoint="attendance_period_export")
    @editor_required
    def period_summary_export():
        try:
            report = _period_report()
        except ValidationError as e:
            return _fail(str(e), 400)

        rows = period_report_rows(report)
        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=[
                "employeeId",
                "identification",
                "fullName",
                "area",
                "daysRegistered",
                "vacationDays",
                "workedHours",
                "nightHours",
                "supplementaryHours",
                "extraordinaryHours",
                "permissionHours",
                "meals",
                "transport",
            ],
        )
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        filename = f"period_{report.start_date.isoformat()}_{report.end_date.isoformat()}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
