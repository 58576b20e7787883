from datetime import date

import pytest

from domain import ShiftClass

MONDAY = date(2025, 1, 6)
SUNDAY = date(2025, 1, 5)


@pytest.mark.parametrize("start,end,night", [
    ("22:00", "02:00", True),
    ("15:00", "23:30", True),
    ("04:30", "12:00", True),
    ("21:30", "22:10", True),
    ("18:00", "08:00", True),
    ("08:00", "17:00", False),
    ("05:00", "13:00", False),
    ("13:00", "22:00", False),
])
def test_is_night(classifier, make_day, start, end, night):
    assert classifier.is_night(make_day(start, end, work_date=MONDAY)) is night


def test_weekday_default(classifier, make_day):
    assert classifier.classify(make_day("08:00", "17:00", work_date=MONDAY)) is ShiftClass.WEEKDAY


def test_sunday(classifier, make_day):
    assert classifier.classify(make_day("06:00", "14:00", work_date=SUNDAY)) is ShiftClass.SUNDAY


def test_night_wins_over_sunday(classifier, make_day):
    day = make_day("15:00", "23:30", work_date=SUNDAY)
    assert classifier.classify(day) is ShiftClass.NIGHT


def test_night_wins_over_holiday(classifier, make_day):
    day = make_day("20:00", "23:00", work_date=MONDAY, is_holiday=True)
    assert classifier.classify(day) is ShiftClass.NIGHT


def test_holiday_only_when_otherwise_weekday(classifier, make_day):
    assert classifier.classify(make_day("06:00", "16:00", work_date=MONDAY, is_holiday=True)) is ShiftClass.HOLIDAY
    assert classifier.classify(make_day("06:00", "16:00", work_date=SUNDAY, is_holiday=True)) is ShiftClass.SUNDAY


def test_saturday_is_a_weekday(classifier, make_day):
    saturday = date(2025, 1, 4)
    assert classifier.classify(make_day("06:00", "14:00", work_date=saturday)) is ShiftClass.WEEKDAY


def test_custom_night_window(make_day):
    from datetime import time
    from services import ShiftClassifier

    late = ShiftClassifier(night_start=time(23, 0), night_end=time(4, 0))
    assert late.is_night(make_day("15:00", "22:30", work_date=MONDAY)) is False
    assert late.is_night(make_day("04:00", "12:00", work_date=MONDAY)) is False
    assert late.is_night(make_day("15:00", "23:30", work_date=MONDAY)) is True
