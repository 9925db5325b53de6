from datetime import time
from decimal import Decimal

import pytest

from src.hojaverde.hojaverde.core.exceptions import ValidationError
from src.hojaverde.hojaverde.payroll.hours import compute_worked_hours, elapsed_minutes, round_hours


def test_worked_hours_subtracts_lunch():
    assert compute_worked_hours("07:00", "16:00", 30) == Decimal("8.5")
    assert compute_worked_hours("06:30", "16:00", 30) == Decimal("9")


def test_permission_reduces_worked_hours():
    assert compute_worked_hours("07:00", "16:00", 30, Decimal("2")) == Decimal("6.5")
    assert compute_worked_hours(time(6, 30), time(16, 0), 30, 2) == Decimal("7")


def test_overnight_shift_wraps_midnight():
    assert elapsed_minutes(time(22, 0), time(6, 0)) == 8 * 60
    assert compute_worked_hours("22:00", "06:00", 0) == Decimal("8")


def test_missing_time_gives_zero():
    assert compute_worked_hours(None, "16:00", 30) == Decimal("0")
    assert compute_worked_hours("06:30", None, 30) == Decimal("0")
    assert compute_worked_hours("", "", 0) == Decimal("0")


def test_never_negative():
    assert compute_worked_hours("08:00", "09:00", 30, 4) == Decimal("0")


def test_no_rounding_until_asked():
    # 07:00-15:20 minus 30 min lunch = 470 minutes
    worked = compute_worked_hours("07:00", "15:20", 30)
    assert worked == Decimal(470) / Decimal(60)
    assert round_hours(worked) == Decimal("7.83")


def test_round_hours_half_up():
    assert round_hours(Decimal("8.125")) == Decimal("8.13")
    assert round_hours(7) == Decimal("7.00")


def test_invalid_time_string_raises():
    with pytest.raises(ValidationError):
        compute_worked_hours("25:00", "16:00", 30)
