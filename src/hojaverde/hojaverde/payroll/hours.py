"""Worked-hours arithmetic on wall-clock pairs.

Values stay exact (Decimal built from whole minutes) until they are stored or
reported; ``round_hours`` is the single place where 2dp rounding happens.
"""

from __future__ import annotations

from datetime import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..common.datetime_utils import minutes_of_day, parse_hhmm

MINUTES_PER_DAY = 24 * 60
TWO_PLACES = Decimal("0.01")

TimeLike = Union[time, str, None]


def as_decimal(value: Union[Decimal, int, float, str, None]) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_time(value: TimeLike) -> Optional[time]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    return parse_hhmm(value)


def elapsed_minutes(entry: time, exit_: time) -> int:
    """Minutes from entry to exit; an exit before the entry is an overnight shift."""
    minutes = minutes_of_day(exit_) - minutes_of_day(entry)
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes


def compute_worked_hours(
    entry_time: TimeLike,
    exit_time: TimeLike,
    lunch_minutes: int = 0,
    permission_hours: Union[Decimal, int, float, None] = 0,
) -> Decimal:
    """Hours worked net of lunch and permission time, never below 0.

    Returns 0 when either time is missing (vacation or permission-only days).
    """
    entry = _as_time(entry_time)
    exit_ = _as_time(exit_time)
    if entry is None or exit_ is None:
        return Decimal("0")

    net_minutes = elapsed_minutes(entry, exit_) - int(lunch_minutes or 0)
    hours = Decimal(net_minutes) / Decimal(60) - as_decimal(permission_hours)
    return max(hours, Decimal("0"))


def round_hours(value: Union[Decimal, int, float]) -> Decimal:
    return as_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
