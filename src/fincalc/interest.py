"""Simple interest, compound interest and certificate-of-deposit engines."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .config import SIMPLE_INTEREST_DAY_COUNT, Frequency
from .periods import effective_annual_rate, periods_per_year, rate_per_period

logger = logging.getLogger(__name__)


# ── Simple interest ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SimpleInterestYear:
    year: int
    interest: float
    cumulative_interest: float
    total_amount: float


@dataclass(frozen=True)
class SimpleInterestResult:
    principal: float
    interest: float
    total_amount: float
    yearly: list[SimpleInterestYear]


def simple_interest(principal: float, annual_rate_percent: float, years: float) -> SimpleInterestResult:
    """I = P * r * t, with a year-by-year breakdown (the last year may be partial)."""
    if principal <= 0 or years <= 0:
        return SimpleInterestResult(max(0.0, principal), 0.0, max(0.0, principal), [])

    rate = annual_rate_percent / 100
    interest = principal * rate * years

    yearly: list[SimpleInterestYear] = []
    for year in range(1, math.ceil(years) + 1):
        elapsed = min(float(year), years)
        cumulative = principal * rate * elapsed
        previous = yearly[-1].cumulative_interest if yearly else 0.0
        yearly.append(SimpleInterestYear(year, cumulative - previous, cumulative, principal + cumulative))

    return SimpleInterestResult(principal, interest, principal + interest, yearly)


@dataclass(frozen=True)
class Prepayment:
    on: date
    amount: float


@dataclass(frozen=True)
class SimpleRateChange:
    on: date
    new_annual_rate_percent: float


@dataclass(frozen=True)
class InterestSegment:
    start: date
    end: date
    days: int
    balance: float
    annual_rate_percent: float
    interest: float


@dataclass(frozen=True)
class AdvancedSimpleInterestResult:
    total_interest: float
    total_prepaid: float
    final_balance: float
    segments: list[InterestSegment] = field(default_factory=list)


def advanced_simple_interest(
    principal: float,
    annual_rate_percent: float,
    start_date: date,
    end_date: date,
    prepayments: tuple[Prepayment, ...] = (),
    rate_changes: tuple[SimpleRateChange, ...] = (),
) -> AdvancedSimpleInterestResult:
    """Simple interest on a balance that changes at dated events (actual/365).

    Events are applied in date order. Interest for each segment is accrued on
    the balance and rate in force during that segment; nothing is compounded.
    On a shared date the rate change and the prepayment both take effect
    before the next segment starts. Events outside [start, end) are ignored
    and a prepayment never takes the balance below zero.
    """
    if principal <= 0 or end_date <= start_date:
        return AdvancedSimpleInterestResult(0.0, 0.0, max(0.0, principal))

    events: dict[date, tuple[list[SimpleRateChange], list[Prepayment]]] = {}
    for change in rate_changes:
        if start_date <= change.on < end_date:
            events.setdefault(change.on, ([], []))[0].append(change)
    for prepayment in prepayments:
        if start_date <= prepayment.on < end_date:
            events.setdefault(prepayment.on, ([], []))[1].append(prepayment)

    balance = principal
    rate = annual_rate_percent
    cursor = start_date
    total_interest = 0.0
    total_prepaid = 0.0
    segments: list[InterestSegment] = []

    def accrue(until: date) -> None:
        nonlocal total_interest
        days = (until - cursor).days
        if days <= 0:
            return
        interest = balance * rate / 100 * days / SIMPLE_INTEREST_DAY_COUNT
        total_interest += interest
        segments.append(InterestSegment(cursor, until, days, balance, rate, interest))

    for when in sorted(events):
        accrue(when)
        cursor = when
        changes, payments = events[when]
        for change in changes:
            rate = change.new_annual_rate_percent
        for payment in payments:
            applied = min(payment.amount, balance)
            balance -= applied
            total_prepaid += applied
        logger.debug("Re-based on %s: balance %.2f at %.4f%%", when, balance, rate)

    accrue(end_date)
    return AdvancedSimpleInterestResult(total_interest, total_prepaid, balance, segments)


# ── Compound interest ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CompoundingPeriod:
    period: int
    opening_balance: float
    interest: float
    closing_balance: float


@dataclass(frozen=True)
class CompoundYear:
    year: int
    opening_balance: float
    interest: float
    closing_balance: float


@dataclass(frozen=True)
class CompoundInterestResult:
    principal: float
    final_amount: float
    total_interest: float
    effective_annual_rate: float   # percent
    yearly: list[CompoundYear]


def apy(annual_rate_percent: float, frequency: Frequency) -> float:
    """(1 + r/n)^n - 1 as a percent; independent of principal and term."""
    return effective_annual_rate(annual_rate_percent, frequency)


def compounding_schedule(
    principal: float,
    annual_rate_percent: float,
    years: float,
    frequency: Frequency = "annual",
) -> list[CompoundingPeriod]:
    """One row per compounding period; each balance comes from the closed form.

    A fractional term ends with a partial period that closes on the exact
    final amount.
    """
    if principal <= 0 or years <= 0:
        return []
    r = rate_per_period(annual_rate_percent, frequency)
    exact = years * periods_per_year(frequency)
    n = math.ceil(exact - 1e-9)

    rows = []
    for k in range(1, n + 1):
        opening = principal * (1 + r) ** (k - 1)
        closing = principal * (1 + r) ** min(k, exact)
        rows.append(CompoundingPeriod(k, opening, closing - opening, closing))
    return rows


def compound_interest(
    principal: float,
    annual_rate_percent: float,
    years: float,
    frequency: Frequency = "annual",
) -> CompoundInterestResult:
    """A = P * (1 + r/n)^(n*t), with per-period rows re-aggregated into years."""
    eff = effective_annual_rate(annual_rate_percent, frequency)
    if principal <= 0 or years <= 0:
        return CompoundInterestResult(max(0.0, principal), max(0.0, principal), 0.0, eff, [])

    ppy = periods_per_year(frequency)
    r = rate_per_period(annual_rate_percent, frequency)
    final = principal * (1 + r) ** (ppy * years)

    yearly: list[CompoundYear] = []
    for row in compounding_schedule(principal, annual_rate_percent, years, frequency):
        year = (row.period - 1) // ppy + 1
        if yearly and yearly[-1].year == year:
            current = yearly[-1]
            yearly[-1] = CompoundYear(
                year, current.opening_balance, current.interest + row.interest, row.closing_balance
            )
        else:
            yearly.append(CompoundYear(year, row.opening_balance, row.interest, row.closing_balance))

    return CompoundInterestResult(principal, final, final - principal, eff, yearly)


# ── Certificate of deposit ────────────────────────────────────────────────────

@dataclass(frozen=True)
class CDMonth:
    month: int
    year: int
    interest_earned: float       # this month
    total_interest: float
    balance: float


@dataclass(frozen=True)
class CDResult:
    deposit: float
    final_balance: float
    total_interest: float
    apy: float                   # percent
    tax_amount: float
    after_tax_balance: float
    real_value: float            # final balance in today's money
    schedule: list[CDMonth]


def calculate_cd(
    deposit: float,
    annual_rate_percent: float,
    term_months: int,
    frequency: Frequency = "monthly",
    tax_rate_percent: float = 0.0,
    inflation_rate_percent: float = 0.0,
    inflation_years: Optional[float] = None,
) -> CDResult:
    """Compound growth of a deposit with tax on interest and inflation adjustment.

    The monthly schedule samples the closed form at every month end whatever
    the compounding frequency. *inflation_years* defaults to the term.
    """
    cd_apy = apy(annual_rate_percent, frequency)
    if deposit <= 0 or term_months <= 0:
        return CDResult(max(0.0, deposit), max(0.0, deposit), 0.0, cd_apy, 0.0, max(0.0, deposit), max(0.0, deposit), [])

    ppy = periods_per_year(frequency)
    r = rate_per_period(annual_rate_percent, frequency)
    years = term_months / 12

    schedule: list[CDMonth] = []
    previous = deposit
    for month in range(1, term_months + 1):
        balance = deposit * (1 + r) ** (ppy * month / 12)
        schedule.append(CDMonth(month, math.ceil(month / 12), balance - previous, balance - deposit, balance))
        previous = balance

    final = deposit * (1 + r) ** (ppy * years)
    interest = final - deposit
    tax = interest * tax_rate_percent / 100
    horizon = years if inflation_years is None else inflation_years
    real = final / (1 + inflation_rate_percent / 100) ** horizon

    return CDResult(deposit, final, interest, cd_apy, tax, final - tax, real, schedule)
