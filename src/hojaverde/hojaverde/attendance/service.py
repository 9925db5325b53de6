from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, List, Optional, Union

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, StorageFailure
from ..employees.repository import EmployeeRepository
from .engine import BulkCommitEngine, CommittedRecord
from .repository import AttendanceRepository
from .validator import BatchValidator, Rejection

logger = logging.getLogger(__name__)

EDITOR_ROLES = (Role.ADMIN, Role.EDITOR)


def ensure_editor(current_role: Union[Role, str, None]) -> Role:
    try:
        role = Role(current_role)
    except ValueError:
        raise AuthorizationError("Access denied")
    if role not in EDITOR_ROLES:
        raise AuthorizationError("Only ADMIN or EDITOR can register attendance")
    return role


def coerce_date(value: Union[date, str]) -> date:
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


@dataclass(frozen=True)
class BulkCommitResult:
    work_date: date
    total_requested: int
    committed: List[CommittedRecord] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    missing_summary: Optional[str] = None

    @property
    def processed(self) -> int:
        return len(self.committed)

    @property
    def errors(self) -> int:
        return len(self.rejected)

    @property
    def success_rate(self) -> float:
        """Percentage of requested records that were stored, one decimal."""
        if not self.total_requested:
            return 0.0
        return round(self.processed * 100.0 / self.total_requested, 1)


class BulkAttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        validator: Optional[BatchValidator] = None,
        engine: Optional[BulkCommitEngine] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._attendance = attendance
        self._validator = validator or BatchValidator(employees, attendance)
        self._engine = engine or BulkCommitEngine()
        self._clock = clock

    def submit(self, *, current_role: Union[Role, str, None], work_date: Union[date, str], records: Any) -> BulkCommitResult:
        """Validate and store one date of attendance for many employees.

        Records that fail validation or hit an existing (employee, date) pair
        are reported back; the rest are committed together. A storage fault
        rolls back the whole batch and raises StorageFailure.
        """
        ensure_editor(current_role)
        work_date = coerce_date(work_date)
        started = self._clock()

        try:
            validation = self._validator.validate(work_date, records)
            total = len(records)
            logger.info(
                "Bulk attendance %s: %s requested, %s passed validation", work_date, total, len(validation.valid)
            )

            committed: list[CommittedRecord] = []
            rejected = list(validation.rejections)
            if validation.valid:
                with self._attendance.transaction() as tx:
                    outcome = self._engine.commit(tx, work_date=work_date, entries=validation.valid)
                committed = outcome.committed
                rejected.extend(outcome.rejected)
        except StorageFailure as e:
            elapsed = self._clock() - started
            logger.exception("Bulk attendance %s failed after %.3fs", work_date, elapsed)
            raise StorageFailure(str(e), elapsed_seconds=elapsed) from e

        elapsed = self._clock() - started
        result = BulkCommitResult(
            work_date=work_date,
            total_requested=total,
            committed=committed,
            rejected=sorted(rejected, key=lambda r: r.index),
            elapsed_seconds=elapsed,
            missing_summary=validation.missing_summary,
        )
        logger.info(
            "Bulk attendance %s: %s committed, %s rejected in %.3fs",
            work_date,
            result.processed,
            result.errors,
            elapsed,
        )
        return result
