from datetime import date, time

import pytest

from domain import RateTable, WorkDay
from services import RateEngine, ReportBuilder, ShiftClassifier, WorkHoursCalculator

MONDAY = date(2025, 1, 6)
TUESDAY = date(2025, 1, 7)
SUNDAY = date(2025, 1, 5)


def _t(hhmm):
    if hhmm is None:
        return None
    hh, mm = hhmm.split(":")
    return time(int(hh), int(mm))


@pytest.fixture
def make_day():
    def _make(
        start="08:00",
        end="17:00",
        break_start=None,
        break_end=None,
        work_date=TUESDAY,
        role="normal",
        company="ACME",
        is_holiday=False,
    ) -> WorkDay:
        return WorkDay(
            work_date=work_date,
            company=company,
            role=role,
            clock_in=_t(start),
            clock_out=_t(end),
            break_start=_t(break_start),
            break_end=_t(break_end),
            is_holiday=is_holiday,
        )
    return _make


@pytest.fixture
def calculator():
    return WorkHoursCalculator()


@pytest.fixture
def classifier(calculator):
    return ShiftClassifier(calculator)


@pytest.fixture
def rates():
    return RateTable()


@pytest.fixture
def engine(rates):
    return RateEngine(rates)


@pytest.fixture
def builder(engine):
    return ReportBuilder(engine)
