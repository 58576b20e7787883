# services.py
from __future__ import annotations
import logging
import math
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Iterable, Sequence

from domain import (
    CompanyBilling,
    DayBreakdown,
    ProviderPay,
    RateTable,
    ReportTotals,
    ShiftClass,
    Span,
    StatementLine,
    WorkDay,
)
from errors import EngineError, InvalidTimeRange

logger = logging.getLogger(__name__)

SUNDAY = 6  # date.weekday()


def resolve_span(work_date: date, start: time, end: time) -> Span:
    """Anchors two clock times on ``work_date``.

    When ``end`` is not later than ``start`` the interval crosses midnight and
    the end instant is moved to the next calendar day (``rolled=True``).
    """
    t0 = datetime.combine(work_date, start)
    t1 = datetime.combine(work_date, end)
    if t1 <= t0:
        return Span(t0, t1 + timedelta(days=1), rolled=True)
    return Span(t0, t1)


class WorkHoursCalculator:
    """Business rules for calculating worked hours and overtime."""
    def __init__(self, daily_threshold: float = 8.0):
        self.daily_threshold = daily_threshold

    def shift_span(self, day: WorkDay) -> Span:
        _require(day.work_date, "work_date")
        _require(day.clock_in, "clock_in")
        _require(day.clock_out, "clock_out")
        return resolve_span(day.work_date, day.clock_in, day.clock_out)

    def calculate_hours_worked(
        self,
        work_date: date,
        clock_in: time,
        clock_out: time,
        break_start: time | None = None,
        break_end: time | None = None,
    ) -> float:
        """Returns worked hours. Supports overnight shifts and overnight breaks."""
        _require(work_date, "work_date")
        _require(clock_in, "clock_in")
        _require(clock_out, "clock_out")
        if (break_start is None) != (break_end is None):
            missing = "break_end" if break_end is None else "break_start"
            raise InvalidTimeRange(f"{missing} is required when a break is given", field=missing)

        total = resolve_span(work_date, clock_in, clock_out).hours
        if break_start is not None:
            total -= resolve_span(work_date, break_start, break_end).hours
        return max(0.0, total)

    def calculate_daily_overtime(self, hours_worked: float) -> float:
        """Overtime above the daily threshold."""
        return max(0.0, hours_worked - self.daily_threshold)

    def hours_for(self, day: WorkDay) -> tuple[float, float]:
        """(hours_worked, overtime_hours) recomputed from the raw fields."""
        hours = self.calculate_hours_worked(
            day.work_date, day.clock_in, day.clock_out, day.break_start, day.break_end
        )
        return hours, self.calculate_daily_overtime(hours)

    def complete_shift(self, shift: WorkDay) -> WorkDay:
        """Returns a copy of the shift with hours worked and overtime filled in."""
        hours, overtime = self.hours_for(shift)
        return replace(shift, hours_worked=hours, overtime_hours=overtime)

    def refresh(self, shifts: Iterable[WorkDay]) -> list[WorkDay]:
        done = []
        for index, s in enumerate(shifts):
            try:
                done.append(self.complete_shift(s))
            except EngineError as exc:
                exc.index = index
                raise
        return done


def _require(value, field: str) -> None:
    if value is None or value == "":
        raise InvalidTimeRange(f"{field} is required", field=field)


class ShiftClassifier:
    """Picks the day type of a shift: night, then Sunday, then holiday."""

    def __init__(
        self,
        calculator: WorkHoursCalculator | None = None,
        night_start: time = time(22, 0),
        night_end: time = time(5, 0),
    ):
        self._calculator = calculator or WorkHoursCalculator()
        self.night_start = night_start
        self.night_end = night_end

    def night_windows(self, day: date) -> tuple[tuple[datetime, datetime], ...]:
        """The two night intervals belonging to calendar day ``day``."""
        midnight = datetime.combine(day, time.min)
        return (
            (midnight, datetime.combine(day, self.night_end)),
            (datetime.combine(day, self.night_start), midnight + timedelta(days=1)),
        )

    def is_night(self, day: WorkDay) -> bool:
        span = self._calculator.shift_span(day)
        current = span.start.date()
        while current <= span.end.date():
            if any(span.overlaps(start, end) for start, end in self.night_windows(current)):
                return True
            current += timedelta(days=1)
        return False

    def classify(self, day: WorkDay) -> ShiftClass:
        if self.is_night(day):
            return ShiftClass.NIGHT
        if day.work_date.weekday() == SUNDAY:
            return ShiftClass.SUNDAY
        if day.is_holiday:
            return ShiftClass.HOLIDAY
        return ShiftClass.WEEKDAY


class RateEngine:
    """Turns a shift into provider pay and company billing.

    Hours and classification are always recomputed from the raw record, so a
    new rate table or an edited record is reflected on the next call.
    """

    def __init__(
        self,
        rates: RateTable | None = None,
        calculator: WorkHoursCalculator | None = None,
        classifier: ShiftClassifier | None = None,
    ):
        self.rates = rates or RateTable()
        self.calculator = calculator or WorkHoursCalculator(self.rates.daily_threshold)
        self.classifier = classifier or ShiftClassifier(self.calculator)

    def provider_pay(self, day: WorkDay) -> ProviderPay:
        hours, overtime = self.calculator.hours_for(day)
        return self._provider_pay(day.role, hours, overtime)

    def company_billing(self, day: WorkDay, shift_class: ShiftClass | None = None) -> CompanyBilling:
        if shift_class is None:
            shift_class = self.classifier.classify(day)
        _, overtime = self.calculator.hours_for(day)
        return self._company_billing(day.role, overtime, shift_class)

    def price(self, day: WorkDay) -> DayBreakdown:
        hours, overtime = self.calculator.hours_for(day)
        shift_class = self.classifier.classify(day)
        breakdown = DayBreakdown(
            day=day,
            hours_worked=hours,
            overtime_hours=overtime,
            shift_class=shift_class,
            provider=self._provider_pay(day.role, hours, overtime),
            company=self._company_billing(day.role, overtime, shift_class),
        )
        logger.debug(
            "priced %s %s (%s): %.2fh, %.2fh overtime",
            day.work_date, day.role, shift_class.value, hours, overtime,
        )
        return breakdown

    def _provider_pay(self, role: str, hours: float, overtime: float) -> ProviderPay:
        r = self.rates
        meal = 0.0
        transport = 0.0
        if hours >= r.daily_threshold:
            meal += r.meal_allowance
            transport += r.transport_allowance
        if overtime > r.second_meal_threshold:
            meal += r.meal_allowance  # second meal
        return ProviderPay(
            daily_rate=r.provider_rate(role),
            overtime_pay=overtime * r.overtime_rate,
            meal_allowance=meal,
            transport_allowance=transport,
        )

    def _company_billing(self, role: str, overtime: float, shift_class: ShiftClass) -> CompanyBilling:
        r = self.rates
        differential = r.differential(shift_class)
        # allowances are not booked as company cost
        cost = r.provider_rate(role) + overtime * r.overtime_rate
        return CompanyBilling(
            billing_rate=r.billing_rate(role),
            billing_overtime=overtime * r.base_hourly_rate * (1 + differential / 100),
            differential=differential,
            cost=cost,
        )


def finite_or_zero(value) -> float:
    """Adjustment inputs: anything non-numeric or non-finite counts as zero."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class ReportBuilder:
    """Pay statement rows and profit report totals over a record collection."""

    def __init__(self, engine: RateEngine | None = None):
        self.engine = engine or RateEngine()

    def price_all(self, days: Sequence[WorkDay]) -> list[DayBreakdown]:
        priced = []
        for index, day in enumerate(days):
            try:
                priced.append(self.engine.price(day))
            except EngineError as exc:
                exc.index = index
                logger.warning("rejected record #%d (%s): %s", index, exc.field, exc)
                raise
        return priced

    def pay_statement(self, days: Sequence[WorkDay]) -> list[StatementLine]:
        return [
            StatementLine(
                work_date=b.day.work_date,
                company=b.day.company,
                role=b.day.role,
                time_range=b.day.time_range,
                hours_worked=b.hours_worked,
                overtime_hours=b.overtime_hours,
                daily_rate=b.provider.daily_rate,
                overtime_pay=b.provider.overtime_pay,
                meal_allowance=b.provider.meal_allowance,
                transport_allowance=b.provider.transport_allowance,
                total=b.provider.total,
            )
            for b in self.price_all(days)
        ]

    def build_report(
        self,
        days: Sequence[WorkDay],
        other_monthly_costs=0.0,
        additional_deductions=0.0,
    ) -> ReportTotals:
        priced = self.price_all(days)
        # fsum keeps the totals independent of record order
        totals = ReportTotals(
            company_daily_revenue=math.fsum(b.company.billing_rate for b in priced),
            company_overtime_revenue=math.fsum(b.company.billing_overtime for b in priced),
            provider_daily_total=math.fsum(b.provider.daily_rate for b in priced),
            provider_overtime_total=math.fsum(b.provider.overtime_pay for b in priced),
            provider_meal_total=math.fsum(b.provider.meal_allowance for b in priced),
            provider_transport_total=math.fsum(b.provider.transport_allowance for b in priced),
            other_monthly_costs=finite_or_zero(other_monthly_costs),
            additional_deductions=finite_or_zero(additional_deductions),
            record_count=len(priced),
        )
        logger.info(
            "report over %d records: revenue %.2f, cost %.2f, profit %.2f",
            totals.record_count, totals.company_revenue_total,
            totals.company_cost_total, totals.net_profit,
        )
        return totals
