from decimal import Decimal

from src.hojaverde.hojaverde.payroll.calculator.base import OvertimeSplit
from src.hojaverde.hojaverde.payroll.calculator.standard_calculator import (
    TwoTierOvertimeClassifier,
    classify_overtime,
)


def test_no_overtime_within_standard_day():
    assert classify_overtime(Decimal("8"), 8) == OvertimeSplit()
    assert not classify_overtime(Decimal("7.5"), 8).has_overtime


def test_first_two_extra_hours_are_supplementary():
    split = classify_overtime(Decimal("10"), 8)
    assert split.supplementary == Decimal("2")
    assert split.extraordinary == Decimal("0")
    assert split.night == Decimal("0")


def test_hours_past_cap_are_extraordinary():
    split = classify_overtime(Decimal("11"), 8)
    assert split.supplementary == Decimal("2")
    assert split.extraordinary == Decimal("1")


def test_missing_standard_falls_back_to_default():
    assert classify_overtime(Decimal("9"), None).supplementary == Decimal("1")
    assert classify_overtime(Decimal("9"), 0).supplementary == Decimal("1")


def test_custom_default_working_hours():
    classifier = TwoTierOvertimeClassifier(default_working_hours=6)
    split = classifier.classify(Decimal("9.5"))
    assert split.supplementary == Decimal("2")
    assert split.extraordinary == Decimal("1.5")


def test_night_is_always_zero():
    # 22:00-06:00 with no lunch: all 8 hours are at night, still classified by length only
    assert classify_overtime(Decimal("8"), 8).night == Decimal("0")
    assert classify_overtime(Decimal("12"), 8).night == Decimal("0")


def test_rounded_split():
    split = OvertimeSplit(supplementary=Decimal(100) / Decimal(60)).rounded()
    assert split.supplementary == Decimal("1.67")
