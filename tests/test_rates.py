from datetime import date

import pytest

from domain import RateTable, ShiftClass
from errors import UnknownRole
from services import RateEngine

MONDAY = date(2025, 1, 6)
SUNDAY = date(2025, 1, 5)


def test_weekday_with_one_hour_overtime(engine, make_day):
    b = engine.price(make_day("08:00", "18:00", "12:00", "13:00", work_date=MONDAY))

    assert b.shift_class is ShiftClass.WEEKDAY
    assert (b.hours_worked, b.overtime_hours) == (9.0, 1.0)

    assert b.provider.daily_rate == 100.0
    assert b.provider.overtime_pay == 20.0
    assert b.provider.meal_allowance == 33.0
    assert b.provider.transport_allowance == 18.0
    assert b.provider.total == 171.0

    assert b.company.billing_rate == 190.0
    assert b.company.differential == 50.0
    assert b.company.billing_overtime == 35.625
    assert b.company.revenue == 225.625
    assert b.company.cost == 120.0


def test_short_day_gets_no_allowances(engine, make_day):
    pay = engine.provider_pay(make_day("08:00", "14:00", role="conferente"))
    assert pay.daily_rate == 110.0
    assert pay.meal_allowance == 0.0
    assert pay.transport_allowance == 0.0
    assert pay.total == 110.0


def test_exactly_eight_hours_earns_allowances(engine, make_day):
    pay = engine.provider_pay(make_day("08:00", "16:00"))
    assert pay.overtime_pay == 0.0
    assert (pay.meal_allowance, pay.transport_allowance) == (33.0, 18.0)


def test_second_meal_after_four_overtime_hours(engine, make_day):
    exactly_four = engine.provider_pay(make_day("06:00", "18:00"))
    assert exactly_four.meal_allowance == 33.0

    over_four = engine.price(make_day("18:00", "08:00", role="fiscal", work_date=MONDAY))
    assert over_four.overtime_hours == 6.0
    assert over_four.provider.meal_allowance == 66.0
    assert over_four.provider.total == 130.0 + 120.0 + 66.0 + 18.0


def test_night_overtime_differential(engine, make_day):
    b = engine.price(make_day("18:00", "08:00", role="fiscal", work_date=MONDAY))
    assert b.shift_class is ShiftClass.NIGHT
    assert b.company.billing_overtime == pytest.approx(6 * 23.75 * 1.7)
    assert b.company.revenue == pytest.approx(230.0 + 242.25)
    assert b.company.cost == 250.0


@pytest.mark.parametrize("work_date,is_holiday,expected_pct", [
    (SUNDAY, False, 100.0),
    (MONDAY, True, 120.0),
    (MONDAY, False, 50.0),
])
def test_day_type_differentials(engine, make_day, work_date, is_holiday, expected_pct):
    day = make_day("06:00", "16:00", work_date=work_date, is_holiday=is_holiday)
    billing = engine.company_billing(day)
    assert billing.differential == expected_pct
    assert billing.billing_overtime == pytest.approx(2 * 23.75 * (1 + expected_pct / 100))


def test_company_billing_accepts_explicit_class(engine, make_day):
    day = make_day("06:00", "16:00", work_date=MONDAY)
    assert engine.company_billing(day, ShiftClass.HOLIDAY).differential == 120.0


def test_allowances_are_not_company_cost(engine, make_day):
    b = engine.price(make_day("06:00", "20:00"))
    assert b.provider.meal_allowance > 0
    assert b.company.cost == b.provider.daily_rate + b.provider.overtime_pay
    assert b.company.cost < b.provider.total


def test_unknown_role_has_no_fallback(engine, make_day):
    with pytest.raises(UnknownRole) as exc_info:
        engine.price(make_day(role="gerente"))
    assert exc_info.value.role == "gerente"
    assert exc_info.value.field == "role"


def test_price_ignores_stale_cached_hours(engine, make_day):
    day = make_day("08:00", "12:00")
    day.hours_worked = 14.0
    day.overtime_hours = 6.0

    b = engine.price(day)
    assert b.overtime_hours == 0.0
    assert b.provider.meal_allowance == 0.0


def test_pricing_is_idempotent(engine, make_day):
    day = make_day("18:00", "08:00", "23:30", "00:15", work_date=SUNDAY)
    assert engine.price(day) == engine.price(day)


def test_new_rate_table_applies_immediately(make_day):
    day = make_day("08:00", "19:00")
    before = RateEngine(RateTable()).price(day)
    after = RateEngine(RateTable(overtime_rate=30.0, meal_allowance=40.0)).price(day)

    assert before.provider.overtime_pay == 60.0
    assert after.provider.overtime_pay == 90.0
    assert after.provider.meal_allowance == 40.0
    assert after.company.cost == 100.0 + 90.0


def test_rate_table_is_read_only(rates):
    with pytest.raises(TypeError):
        rates.provider_daily_rates["normal"] = 1.0


def test_rate_table_requires_every_differential():
    with pytest.raises(ValueError):
        RateTable(differentials={"NIGHT": 70, "SUNDAY": 100})


def test_rate_table_is_hashable():
    assert hash(RateTable()) == hash(RateTable())
    cache = {RateTable(): "default"}
    assert cache[RateTable()] == "default"
    assert RateTable(overtime_rate=25.0) not in cache
