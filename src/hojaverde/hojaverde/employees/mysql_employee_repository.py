from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..areas.mysql_area_repository import row_to_area
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Employee
from .repository import EmployeeRepository

_SELECT = """
    SELECT
        e.employee_id, e.identification, e.first_name, e.last_name,
        e.position, e.base_salary, e.is_active,
        a.area_id AS a_area_id, a.name AS a_name,
        a.default_entry_time AS a_default_entry_time,
        a.default_exit_time AS a_default_exit_time,
        a.default_lunch_minutes AS a_default_lunch_minutes,
        a.default_working_hours AS a_default_working_hours
    FROM employees e
    LEFT JOIN areas a ON a.area_id = e.area_id
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=r["employee_id"],
        identification=r["identification"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        area=row_to_area(r, prefix="a_") if r.get("a_area_id") else None,
        position=r.get("position"),
        base_salary=r.get("base_salary"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_by_ids(self, employee_ids: Sequence[str]) -> Sequence[Employee]:
        ids = list(dict.fromkeys(employee_ids))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE e.is_active=1 AND e.employee_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def list_active_by_area_ids(self, area_ids: Sequence[str]) -> Sequence[Employee]:
        if not area_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE e.is_active=1 AND e.area_id IN ({in_clause(area_ids)})
                ORDER BY e.last_name ASC, e.first_name ASC
                """,
                tuple(area_ids),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def count_active(self, area_ids: Optional[Sequence[str]] = None) -> int:
        sql = "SELECT COUNT(*) AS total FROM employees WHERE is_active=1"
        params: tuple = ()
        if area_ids:
            sql += f" AND area_id IN ({in_clause(area_ids)})"
            params = tuple(area_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def count_active_by_area(self) -> Dict[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT area_id, COUNT(*) AS total
                FROM employees
                WHERE is_active=1 AND area_id IS NOT NULL
                GROUP BY area_id
                """
            )
            return {r["area_id"]: int(r["total"]) for r in fetchall(cur)}
