from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from ..core.enums import RecordStatus, RejectionKind
from ..core.exceptions import ConflictError
from ..payroll.calculator.base import OvertimeClassifier, OvertimeSplit
from ..payroll.calculator.standard_calculator import TwoTierOvertimeClassifier
from ..payroll.hours import compute_worked_hours, round_hours
from .model import NewAttendanceRecord, ValidatedEntry
from .repository import AttendanceTransaction
from .validator import Rejection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommittedRecord:
    employee_id: str
    identification: str
    full_name: str
    area_name: Optional[str]
    worked_hours: Decimal
    status: RecordStatus = RecordStatus.CREATED


@dataclass(frozen=True)
class CommitOutcome:
    committed: List[CommittedRecord] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)


class BulkCommitEngine:
    """Writes validated entries through an open transaction handle.

    Each entry gets its own savepoint: a duplicate key on insert undoes only
    that entry and is reported as a rejection. Any other error propagates and
    takes the whole transaction down with it.
    """

    def __init__(self, *, classifier: Optional[OvertimeClassifier] = None):
        self._classifier = classifier or TwoTierOvertimeClassifier()

    def compute(self, item: ValidatedEntry) -> tuple[Decimal, OvertimeSplit]:
        entry = item.entry
        if entry.is_vacation:
            return Decimal("0.00"), OvertimeSplit()

        worked = compute_worked_hours(
            entry.entry_time,
            entry.exit_time,
            lunch_minutes=entry.lunch_minutes or 0,
            permission_hours=entry.permission_hours,
        )
        area = item.employee.area
        standard = area.default_working_hours if area else None
        extra = self._classifier.classify(worked, standard).rounded()
        return round_hours(worked), extra

    def commit(
        self,
        tx: AttendanceTransaction,
        *,
        work_date: date,
        entries: Sequence[ValidatedEntry],
    ) -> CommitOutcome:
        outcome = CommitOutcome()

        for item in entries:
            entry, employee = item.entry, item.employee
            worked, extra = self.compute(item)
            record = NewAttendanceRecord(
                employee_id=employee.employee_id,
                work_date=work_date,
                entry_time=entry.entry_time,
                exit_time=entry.exit_time,
                lunch_minutes=int(entry.lunch_minutes or 0),
                worked_hours=worked,
                is_vacation=entry.is_vacation,
                permission_hours=round_hours(entry.permission_hours),
                permission_reason=entry.permission_reason,
            )

            try:
                with tx.savepoint(f"rec_{entry.index}"):
                    attendance_id = tx.insert_record(record)
                    tx.insert_food_allowance(attendance_id, entry.food_allowance)
                    if extra.has_overtime:
                        tx.insert_extra_hours(attendance_id, extra)
            except ConflictError as e:
                logger.info("Skipping %s on %s: %s", employee.employee_id, work_date, e)
                outcome.rejected.append(
                    Rejection.for_employee(entry.index, employee, str(e), RejectionKind.CONFLICT)
                )
                continue

            outcome.committed.append(
                CommittedRecord(
                    employee_id=employee.employee_id,
                    identification=employee.identification,
                    full_name=employee.full_name,
                    area_name=employee.area_name,
                    worked_hours=worked,
                )
            )

        return outcome
