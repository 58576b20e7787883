# domain.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from errors import UnknownRole

ROLE_NORMAL = "normal"
ROLE_CHECKER = "conferente"
ROLE_INSPECTOR = "fiscal"


class ShiftClass(str, Enum):
    """Day type used to pick the overtime billing differential."""

    NIGHT = "NIGHT"
    SUNDAY = "SUNDAY"
    HOLIDAY = "HOLIDAY"
    WEEKDAY = "WEEKDAY"


@dataclass
class WorkDay:
    """Represents a single worked shift."""
    work_date: date
    company: str
    role: str
    clock_in: time
    clock_out: time
    break_start: time | None = None
    break_end: time | None = None
    is_holiday: bool = False
    # cached for display, refreshed by WorkHoursCalculator.complete_shift
    hours_worked: float = 0.0
    overtime_hours: float = 0.0
    record_id: int | None = None

    @property
    def time_range(self) -> str:
        """'HH:MM - HH:MM' label used in statements."""
        return f"{self.clock_in.strftime('%H:%M')} - {self.clock_out.strftime('%H:%M')}"


@dataclass(frozen=True)
class Span:
    """Absolute interval built from a nominal date and two clock times."""
    start: datetime
    end: datetime
    rolled: bool = False

    @property
    def hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600.0

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RateTable:
    """Money parameters for one calculation run. Read-only once built."""
    provider_daily_rates: Mapping[str, float] = field(default_factory=lambda: _frozen({
        ROLE_NORMAL: 100.0,
        ROLE_CHECKER: 110.0,
        ROLE_INSPECTOR: 130.0,
    }))
    billing_daily_rates: Mapping[str, float] = field(default_factory=lambda: _frozen({
        ROLE_NORMAL: 190.0,
        ROLE_CHECKER: 190.0,
        ROLE_INSPECTOR: 230.0,
    }))
    overtime_rate: float = 20.0
    base_hourly_rate: float = 23.75
    meal_allowance: float = 33.0
    transport_allowance: float = 18.0
    differentials: Mapping[ShiftClass, float] = field(default_factory=lambda: _frozen({
        ShiftClass.NIGHT: 70.0,
        ShiftClass.SUNDAY: 100.0,
        ShiftClass.HOLIDAY: 120.0,
        ShiftClass.WEEKDAY: 50.0,
    }))
    daily_threshold: float = 8.0
    second_meal_threshold: float = 4.0

    def __post_init__(self):
        object.__setattr__(self, "provider_daily_rates", _frozen(self.provider_daily_rates))
        object.__setattr__(self, "billing_daily_rates", _frozen(self.billing_daily_rates))
        object.__setattr__(
            self, "differentials", _frozen({ShiftClass(k): v for k, v in self.differentials.items()})
        )
        missing = set(ShiftClass) - set(self.differentials)
        if missing:
            raise ValueError(f"differentials missing for: {sorted(m.value for m in missing)}")

    def __hash__(self) -> int:
        return hash((
            tuple(sorted(self.provider_daily_rates.items())),
            tuple(sorted(self.billing_daily_rates.items())),
            self.overtime_rate,
            self.base_hourly_rate,
            self.meal_allowance,
            self.transport_allowance,
            tuple(sorted(self.differentials.items())),
            self.daily_threshold,
            self.second_meal_threshold,
        ))

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(self.provider_daily_rates)

    def provider_rate(self, role: str) -> float:
        try:
            return float(self.provider_daily_rates[role])
        except KeyError:
            raise UnknownRole(role) from None

    def billing_rate(self, role: str) -> float:
        try:
            return float(self.billing_daily_rates[role])
        except KeyError:
            raise UnknownRole(role) from None

    def differential(self, shift_class: ShiftClass) -> float:
        return float(self.differentials[shift_class])


@dataclass(frozen=True)
class ProviderPay:
    """What the provider earns for one day."""
    daily_rate: float
    overtime_pay: float
    meal_allowance: float
    transport_allowance: float

    @property
    def total(self) -> float:
        return self.daily_rate + self.overtime_pay + self.meal_allowance + self.transport_allowance


@dataclass(frozen=True)
class CompanyBilling:
    """What the company bills the client for one day, and what the day costs it."""
    billing_rate: float
    billing_overtime: float
    differential: float
    cost: float

    @property
    def revenue(self) -> float:
        return self.billing_rate + self.billing_overtime


@dataclass(frozen=True)
class DayBreakdown:
    day: WorkDay
    hours_worked: float
    overtime_hours: float
    shift_class: ShiftClass
    provider: ProviderPay
    company: CompanyBilling


@dataclass(frozen=True)
class StatementLine:
    """One row of the provider pay statement."""
    work_date: date
    company: str
    role: str
    time_range: str
    hours_worked: float
    overtime_hours: float
    daily_rate: float
    overtime_pay: float
    meal_allowance: float
    transport_allowance: float
    total: float


@dataclass(frozen=True)
class ReportTotals:
    """Profit report aggregate. Recomputed on demand, never stored."""
    company_daily_revenue: float = 0.0
    company_overtime_revenue: float = 0.0
    provider_daily_total: float = 0.0
    provider_overtime_total: float = 0.0
    provider_meal_total: float = 0.0
    provider_transport_total: float = 0.0
    other_monthly_costs: float = 0.0
    additional_deductions: float = 0.0
    record_count: int = 0

    @property
    def company_revenue_total(self) -> float:
        return self.company_daily_revenue + self.company_overtime_revenue

    @property
    def provider_pay_total(self) -> float:
        return (
            self.provider_daily_total
            + self.provider_overtime_total
            + self.provider_meal_total
            + self.provider_transport_total
        )

    @property
    def provider_cost_total(self) -> float:
        """Provider pay the company books as cost: daily rates plus overtime."""
        return self.provider_daily_total + self.provider_overtime_total

    @property
    def company_cost_total(self) -> float:
        return self.provider_cost_total + self.other_monthly_costs + self.additional_deductions

    @property
    def net_profit(self) -> float:
        return self.company_revenue_total - self.company_cost_total
