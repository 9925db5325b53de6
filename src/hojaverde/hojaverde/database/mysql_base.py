from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageFailure
from .connection import DatabaseConnection


@contextmanager
def _cursor(conn_factory: DatabaseConnection, *, dictionary: bool):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One short read/write unit: commit on success, rollback on error.

    Connector errors surface as StorageFailure so callers see one fault type
    for reads and writes.
    """
    try:
        with _cursor(conn_factory, dictionary=dictionary) as pair:
            yield pair
    except mysql.connector.Error as exc:
        raise StorageFailure(f"Database query failed: {exc}") from exc


@contextmanager
def db_transaction(conn_factory: DatabaseConnection, *, lock_wait_timeout: Optional[int] = None):
    """Explicit multi-statement transaction.

    Rolls back on any BaseException, including cancellation of the calling
    request, so a batch is never half-committed.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)
        try:
            if lock_wait_timeout:
                cur.execute("SET SESSION innodb_lock_wait_timeout = %s", (int(lock_wait_timeout),))
            conn.start_transaction()
            try:
                yield conn, cur
            except BaseException:
                conn.rollback()
                raise
            conn.commit()
        finally:
            cur.close()
    finally:
        conn.close()


def is_duplicate_key(exc: BaseException) -> bool:
    return isinstance(exc, mysql.connector.IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholder list for an IN (...) filter; callers pass the values as params."""
    return ", ".join(["%s"] * len(values))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60, second=total_seconds % 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
