from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .areas.mysql_area_repository import MySQLAreaRepository
from .areas.repository import AreaRepository
from .attendance.engine import BulkCommitEngine
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import BulkAttendanceService
from .attendance.template_service import TemplateService
from .attendance.validator import BatchValidator
from .core.constants import DEFAULT_WORKING_HOURS, MAX_BULK_RECORDS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .payroll.calculator.standard_calculator import TwoTierOvertimeClassifier
from .payroll.service import PeriodReportService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    areas_repo: AreaRepository
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository

    bulk_attendance_service: BulkAttendanceService
    template_service: TemplateService
    period_report_service: PeriodReportService


def wire_services(
    *,
    areas_repo: AreaRepository,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
    max_bulk_records: int = MAX_BULK_RECORDS,
    default_working_hours: int = DEFAULT_WORKING_HOURS,
    require_permission_reason: bool = False,
) -> Container:
    """Build services on top of any repository implementation (MySQL or in-memory)."""
    validator = BatchValidator(
        employees_repo,
        attendance_repo,
        max_records=max_bulk_records,
        require_permission_reason=require_permission_reason,
    )
    engine = BulkCommitEngine(classifier=TwoTierOvertimeClassifier(default_working_hours=default_working_hours))

    return Container(
        conn=conn,
        areas_repo=areas_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        bulk_attendance_service=BulkAttendanceService(
            attendance_repo, employees_repo, validator=validator, engine=engine
        ),
        template_service=TemplateService(areas_repo, employees_repo, attendance_repo),
        period_report_service=PeriodReportService(attendance_repo),
    )


def build_container(*, db_config: dict, settings: object = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return wire_services(
        conn=conn,
        areas_repo=MySQLAreaRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(
            conn, lock_wait_timeout=getattr(settings, "LOCK_WAIT_TIMEOUT", None)
        ),
        max_bulk_records=int(getattr(settings, "MAX_BULK_RECORDS", MAX_BULK_RECORDS)),
        default_working_hours=int(getattr(settings, "DEFAULT_WORKING_HOURS", DEFAULT_WORKING_HOURS)),
        require_permission_reason=bool(getattr(settings, "REQUIRE_PERMISSION_REASON", False)),
    )
