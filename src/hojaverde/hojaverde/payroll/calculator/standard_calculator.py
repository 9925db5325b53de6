from __future__ import annotations

from typing import Optional

from ...core.constants import DEFAULT_WORKING_HOURS, SUPPLEMENTARY_CAP_HOURS
from ..hours import as_decimal
from .base import Number, OvertimeClassifier, OvertimeSplit


class TwoTierOvertimeClassifier(OvertimeClassifier):
    """Standard rule: hours past the standard day, first 2 supplementary, rest extraordinary.

    Night hours are always 0: the split only looks at day length, not at the
    clock time the hours were worked, and does not know about weekends or
    holidays. Pay surcharges (night 25%, supplementary 50%, extraordinary
    100%) are applied downstream by payroll, not here.
    """

    def __init__(
        self,
        *,
        default_working_hours: Number = DEFAULT_WORKING_HOURS,
        supplementary_cap: Number = SUPPLEMENTARY_CAP_HOURS,
    ):
        self._default_working_hours = as_decimal(default_working_hours)
        self._cap = as_decimal(supplementary_cap)

    def classify(self, worked_hours: Number, standard_daily_hours: Optional[Number] = None) -> OvertimeSplit:
        standard = as_decimal(standard_daily_hours) if standard_daily_hours else self._default_working_hours
        worked = as_decimal(worked_hours)

        if worked <= standard:
            return OvertimeSplit()

        extra = worked - standard
        if extra <= self._cap:
            return OvertimeSplit(supplementary=extra)
        return OvertimeSplit(supplementary=self._cap, extraordinary=extra - self._cap)


def classify_overtime(worked_hours: Number, standard_daily_hours: Optional[Number] = None) -> OvertimeSplit:
    return TwoTierOvertimeClassifier().classify(worked_hours, standard_daily_hours)
