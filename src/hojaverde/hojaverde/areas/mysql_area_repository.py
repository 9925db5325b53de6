from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause, normalize_mysql_time
from .model import Area
from .repository import AreaRepository

_COLUMNS = """
    area_id, name, default_entry_time, default_exit_time,
    default_lunch_minutes, default_working_hours
"""


def row_to_area(r: dict, prefix: str = "") -> Area:
    return Area(
        area_id=r[f"{prefix}area_id"],
        name=r[f"{prefix}name"],
        default_entry_time=normalize_mysql_time(r[f"{prefix}default_entry_time"]),
        default_exit_time=normalize_mysql_time(r[f"{prefix}default_exit_time"]),
        default_lunch_minutes=int(r.get(f"{prefix}default_lunch_minutes") or 0),
        default_working_hours=int(r.get(f"{prefix}default_working_hours") or 0),
    )


class MySQLAreaRepository(AreaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_ids(self, area_ids: Sequence[str]) -> Sequence[Area]:
        if not area_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM areas WHERE area_id IN ({in_clause(area_ids)}) ORDER BY name",
                tuple(area_ids),
            )
            return [row_to_area(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Area]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM areas ORDER BY name")
            return [row_to_area(r) for r in fetchall(cur)]
