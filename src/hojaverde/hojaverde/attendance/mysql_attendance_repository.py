from __future__ import annotations

import re
import uuid
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional, Sequence, Set

import mysql.connector

from ..core.exceptions import ConflictError, DomainError, StorageFailure
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, in_clause, is_duplicate_key, normalize_mysql_time
from ..payroll.calculator.base import OvertimeSplit
from .model import FoodAllowance, NewAttendanceRecord, RegisteredRow
from .repository import AttendanceRepository, AttendanceTransaction

_SAVEPOINT_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_SELECT_ROWS = """
    SELECT
        ar.attendance_id, ar.employee_id, ar.work_date, ar.entry_time, ar.exit_time,
        ar.lunch_minutes, ar.worked_hours, ar.is_vacation, ar.permission_hours,
        ar.permission_reason, ar.created_at,
        e.identification, e.first_name, e.last_name,
        a.area_id, a.name AS area_name,
        fa.attendance_id AS fa_attendance_id,
        fa.breakfast, fa.reinforced_breakfast, fa.snack1, fa.afternoon_snack,
        fa.dry_meal, fa.lunch, fa.transport,
        eh.attendance_id AS eh_attendance_id,
        eh.night_hours, eh.supplementary_hours, eh.extraordinary_hours
    FROM attendance_records ar
    JOIN employees e ON e.employee_id = ar.employee_id
    LEFT JOIN areas a ON a.area_id = e.area_id
    LEFT JOIN food_allowances fa ON fa.attendance_id = ar.attendance_id
    LEFT JOIN extra_hours eh ON eh.attendance_id = ar.attendance_id
"""


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _row_to_registered(r: dict) -> RegisteredRow:
    food = None
    if r.get("fa_attendance_id"):
        food = FoodAllowance(
            breakfast=int(r["breakfast"]),
            reinforced_breakfast=int(r["reinforced_breakfast"]),
            snack1=int(r["snack1"]),
            afternoon_snack=int(r["afternoon_snack"]),
            dry_meal=int(r["dry_meal"]),
            lunch=int(r["lunch"]),
            transport=_dec(r["transport"]),
        )
    extra = None
    if r.get("eh_attendance_id"):
        extra = OvertimeSplit(
            night=_dec(r["night_hours"]),
            supplementary=_dec(r["supplementary_hours"]),
            extraordinary=_dec(r["extraordinary_hours"]),
        )
    return RegisteredRow(
        attendance_id=r["attendance_id"],
        employee_id=r["employee_id"],
        identification=r["identification"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        area_id=r.get("area_id"),
        area_name=r.get("area_name"),
        work_date=r["work_date"],
        entry_time=normalize_mysql_time(r.get("entry_time")),
        exit_time=normalize_mysql_time(r.get("exit_time")),
        lunch_minutes=int(r.get("lunch_minutes") or 0),
        worked_hours=_dec(r.get("worked_hours")),
        is_vacation=bool(r.get("is_vacation")),
        permission_hours=_dec(r.get("permission_hours")),
        permission_reason=r.get("permission_reason"),
        food_allowance=food,
        extra_hours=extra,
        created_at=r.get("created_at"),
    )


class MySQLAttendanceTransaction(AttendanceTransaction):
    def __init__(self, cur):
        self._cur = cur

    @contextmanager
    def savepoint(self, name: str) -> Iterator[None]:
        if not _SAVEPOINT_NAME.match(name):
            raise ValueError(f"Invalid savepoint name: {name!r}")
        self._cur.execute(f"SAVEPOINT {name}")
        try:
            yield
        except DomainError:
            # Any other error kills the whole transaction anyway.
            self._cur.execute(f"ROLLBACK TO SAVEPOINT {name}")
            raise
        self._cur.execute(f"RELEASE SAVEPOINT {name}")

    def insert_record(self, record: NewAttendanceRecord) -> str:
        attendance_id = str(uuid.uuid4())
        try:
            self._cur.execute(
                """
                INSERT INTO attendance_records(
                    attendance_id, employee_id, work_date, entry_time, exit_time, lunch_minutes,
                    worked_hours, is_vacation, permission_hours, permission_reason
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    attendance_id,
                    record.employee_id,
                    record.work_date,
                    record.entry_time,
                    record.exit_time,
                    int(record.lunch_minutes),
                    record.worked_hours,
                    1 if record.is_vacation else 0,
                    record.permission_hours,
                    record.permission_reason,
                ),
            )
        except mysql.connector.Error as exc:
            if is_duplicate_key(exc):
                raise ConflictError("Attendance already registered for this date") from exc
            raise
        return attendance_id

    def insert_food_allowance(self, attendance_id: str, food: FoodAllowance) -> None:
        self._cur.execute(
            """
            INSERT INTO food_allowances(
                food_allowance_id, attendance_id, breakfast, reinforced_breakfast, snack1,
                afternoon_snack, dry_meal, lunch, transport
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                str(uuid.uuid4()),
                attendance_id,
                food.breakfast,
                food.reinforced_breakfast,
                food.snack1,
                food.afternoon_snack,
                food.dry_meal,
                food.lunch,
                food.transport,
            ),
        )

    def insert_extra_hours(self, attendance_id: str, extra: OvertimeSplit) -> None:
        self._cur.execute(
            """
            INSERT INTO extra_hours(
                extra_hours_id, attendance_id, night_hours, supplementary_hours, extraordinary_hours
            )
            VALUES(%s,%s,%s,%s,%s)
            """,
            (str(uuid.uuid4()), attendance_id, extra.night, extra.supplementary, extra.extraordinary),
        )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, lock_wait_timeout: Optional[int] = None):
        self._conn_factory = conn_factory
        self._lock_wait_timeout = lock_wait_timeout

    @contextmanager
    def transaction(self) -> Iterator[AttendanceTransaction]:
        try:
            with db_transaction(self._conn_factory, lock_wait_timeout=self._lock_wait_timeout) as (_, cur):
                yield MySQLAttendanceTransaction(cur)
        except mysql.connector.Error as exc:
            raise StorageFailure(f"Attendance transaction failed: {exc}") from exc

    def registered_employee_ids(
        self,
        work_date: date,
        *,
        employee_ids: Optional[Sequence[str]] = None,
        area_ids: Optional[Sequence[str]] = None,
    ) -> Set[str]:
        clauses = ["ar.work_date=%s"]
        params: list[object] = [work_date]
        if employee_ids is not None:
            if not employee_ids:
                return set()
            clauses.append(f"ar.employee_id IN ({in_clause(employee_ids)})")
            params.extend(employee_ids)
        if area_ids:
            clauses.append(f"e.area_id IN ({in_clause(area_ids)})")
            params.extend(area_ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.employee_id
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id
                WHERE {where}
                """,
                tuple(params),
            )
            return {r["employee_id"] for r in fetchall(cur)}

    def list_for_date(
        self, work_date: date, *, area_ids: Optional[Sequence[str]] = None, active_only: bool = False
    ) -> Sequence[RegisteredRow]:
        clauses = ["ar.work_date=%s"]
        params: list[object] = [work_date]
        if active_only:
            clauses.append("e.is_active=1")
        if area_ids:
            clauses.append(f"e.area_id IN ({in_clause(area_ids)})")
            params.extend(area_ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT_ROWS}
                WHERE {where}
                ORDER BY a.name ASC, e.last_name ASC, e.first_name ASC
                """,
                tuple(params),
            )
            return [_row_to_registered(r) for r in fetchall(cur)]

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
        area_ids: Optional[Sequence[str]] = None,
    ) -> Sequence[RegisteredRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("ar.employee_id=%s")
            params.append(employee_id)
        if area_ids:
            clauses.append(f"e.area_id IN ({in_clause(area_ids)})")
            params.extend(area_ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT_ROWS}
                WHERE {where}
                ORDER BY ar.work_date ASC, e.last_name ASC, e.first_name ASC
                """,
                tuple(params),
            )
            return [_row_to_registered(r) for r in fetchall(cur)]
