"""Discounted cash-flow metrics: IRR, NPV, MIRR and payback period.

Cash flows are per period starting at period 0 (usually the negative
initial outlay). Rates go in and come out as percentages.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from dateutil.relativedelta import relativedelta

from .config import MAX_ITERATIONS, NPV_TOLERANCE, RATE_CEILING, RATE_FLOOR
from .solvers import newton_raphson

logger = logging.getLogger(__name__)

DEFAULT_FINANCE_RATE = 10.0


@dataclass(frozen=True)
class IRRResult:
    irr: float                          # percent
    npv_at_irr: float
    iterations: int
    converged: bool
    mirr: Optional[float] = None        # percent
    payback_period: Optional[float] = None


@dataclass(frozen=True)
class CashFlowItem:
    period: int
    date: Optional[date]
    cash_flow: float
    cumulative: float
    discounted_cash_flow: float
    npv: float                          # running total of discounted flows


def npv(cash_flows: Sequence[float], discount_rate_percent: float) -> float:
    rate = discount_rate_percent / 100
    return sum(cf / (1 + rate) ** t for t, cf in enumerate(cash_flows))


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    return sum(-t * cf / (1 + rate) ** (t + 1) for t, cf in enumerate(cash_flows) if t > 0)


def mirr(
    cash_flows: Sequence[float],
    finance_rate_percent: float,
    reinvestment_rate_percent: float,
) -> float:
    """Modified IRR (percent): outflows discounted at the finance rate,
    inflows compounded forward at the reinvestment rate."""
    n = len(cash_flows) - 1
    if n < 1:
        return 0.0
    finance = finance_rate_percent / 100
    reinvest = reinvestment_rate_percent / 100

    pv_negative = sum(cf / (1 + finance) ** t for t, cf in enumerate(cash_flows) if cf < 0)
    fv_positive = sum(cf * (1 + reinvest) ** (n - t) for t, cf in enumerate(cash_flows) if cf >= 0)
    if pv_negative == 0 or fv_positive == 0:
        return 0.0
    return ((fv_positive / abs(pv_negative)) ** (1 / n) - 1) * 100


def payback_period(cash_flows: Sequence[float]) -> Optional[float]:
    """Periods until cumulative cash flow turns non-negative, interpolated
    within the recovering period. None if never recovered."""
    cumulative = 0.0
    for t, cf in enumerate(cash_flows):
        previous = cumulative
        cumulative += cf
        if cumulative >= 0:
            if t == 0:
                return 0.0
            return t - 1 + abs(previous) / cf
    return None


def irr(
    cash_flows: Sequence[float],
    initial_guess: float = 0.1,
    finance_rate_percent: float = DEFAULT_FINANCE_RATE,
) -> IRRResult:
    """IRR by Newton-Raphson on NPV(r) = 0.

    Without both an inflow and an outflow there is no rate to find; the
    result then reports ``converged=False`` with an IRR of 0.
    """
    flows = list(cash_flows)
    payback = payback_period(flows)
    if len(flows) < 2 or not any(cf > 0 for cf in flows) or not any(cf < 0 for cf in flows):
        return IRRResult(0.0, 0.0, 0, False, payback_period=payback)

    result = newton_raphson(
        lambda r: npv(flows, r * 100),
        lambda r: _npv_derivative(flows, r),
        initial_guess,
        tolerance=NPV_TOLERANCE,
        max_iterations=MAX_ITERATIONS,
        lower=RATE_FLOOR,
        upper=RATE_CEILING,
    )
    rate_percent = result.value * 100
    if not result.converged:
        logger.warning("IRR did not converge; best estimate %.4f%%", rate_percent)
        return IRRResult(rate_percent, npv(flows, rate_percent), result.iterations, False, payback_period=payback)

    return IRRResult(
        irr=rate_percent,
        npv_at_irr=npv(flows, rate_percent),
        iterations=result.iterations,
        converged=True,
        mirr=mirr(flows, finance_rate_percent, rate_percent),
        payback_period=payback,
    )


def cash_flow_schedule(
    cash_flows: Sequence[float],
    discount_rate_percent: float,
    start_date: Optional[date] = None,
) -> list[CashFlowItem]:
    """Cumulative and discounted values per period; periods are years when dated."""
    rate = discount_rate_percent / 100
    cumulative = 0.0
    running_npv = 0.0
    items = []
    for period, cf in enumerate(cash_flows):
        cumulative += cf
        discounted = cf / (1 + rate) ** period
        running_npv += discounted
        items.append(
            CashFlowItem(
                period=period,
                date=start_date + relativedelta(years=period) if start_date else None,
                cash_flow=cf,
                cumulative=cumulative,
                discounted_cash_flow=discounted,
                npv=running_npv,
            )
        )
    return items


@dataclass(frozen=True)
class NPVPoint:
    rate: float                         # percent
    npv: float


def npv_sensitivity(
    cash_flows: Sequence[float],
    min_rate_percent: float = 0.0,
    max_rate_percent: float = 50.0,
    steps: int = 20,
) -> list[NPVPoint]:
    """NPV at *steps* evenly spaced discount rates, both ends included."""
    if steps <= 0:
        return []
    if steps == 1:
        return [NPVPoint(min_rate_percent, npv(cash_flows, min_rate_percent))]
    step = (max_rate_percent - min_rate_percent) / (steps - 1)
    points = []
    for i in range(steps):
        rate = min_rate_percent + i * step
        points.append(NPVPoint(rate, npv(cash_flows, rate)))
    return points


# ── Project wrappers ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProjectIRR:
    cash_flows: list[float]
    result: IRRResult
    schedule: list[CashFlowItem]        # discounted at the IRR
    total_return: float                 # undiscounted sum of all flows
    real_irr: Optional[float] = None    # percent, inflation-adjusted
    after_tax_irr: Optional[float] = None


def _after_tax(amount: float, tax_rate_percent: float) -> float:
    # Only gains are taxed
    if amount > 0 and tax_rate_percent > 0:
        return amount * (1 - tax_rate_percent / 100)
    return amount


def _project(flows: list[float]) -> ProjectIRR:
    result = irr(flows)
    return ProjectIRR(flows, result, cash_flow_schedule(flows, result.irr), sum(flows))


def investment_irr(
    initial_investment: float,
    periodic_returns: Sequence[float],
    inflation_rate_percent: float = 0.0,
    tax_rate_percent: float = 0.0,
) -> ProjectIRR:
    """IRR of an outlay followed by *periodic_returns*.

    With inflation the real IRR is (1 + irr) / (1 + inflation) - 1. With a tax
    rate the positive returns are taxed and the IRR is solved again.
    """
    flows = [-initial_investment, *periodic_returns]
    nominal = irr(flows)

    real = None
    if inflation_rate_percent > 0:
        real = ((1 + nominal.irr / 100) / (1 + inflation_rate_percent / 100) - 1) * 100

    after_tax = None
    if tax_rate_percent > 0:
        taxed = [-initial_investment, *(_after_tax(r, tax_rate_percent) for r in periodic_returns)]
        after_tax = irr(taxed).irr

    return ProjectIRR(
        flows, nominal, cash_flow_schedule(flows, nominal.irr), sum(flows),
        real_irr=real, after_tax_irr=after_tax,
    )


def real_estate_irr(
    purchase_price: float,
    down_payment: float,
    annual_rent: float,
    annual_expenses: float,
    appreciation_rate_percent: float,
    years: int,
    inflation_rate_percent: float = 0.0,
    tax_rate_percent: float = 0.0,
) -> ProjectIRR:
    """IRR on the down payment of a held and sold property.

    Rent and expenses grow with inflation from year 2; positive net income is
    taxed. The last year adds the sale equity: appreciated value less the
    original loan, which is assumed never paid down.
    """
    flows = [-down_payment]
    growth = 1 + inflation_rate_percent / 100
    for year in range(1, years + 1):
        factor = growth ** (year - 1)
        flows.append(_after_tax(annual_rent * factor - annual_expenses * factor, tax_rate_percent))

    if years > 0:
        sale_value = purchase_price * (1 + appreciation_rate_percent / 100) ** years
        flows[-1] += sale_value - (purchase_price - down_payment)
    return _project(flows)


def business_project_irr(
    initial_investment: float,
    revenues: Sequence[float],
    costs: Sequence[float],
    terminal_value: float = 0.0,
    tax_rate_percent: float = 0.0,
) -> ProjectIRR:
    """IRR of yearly revenue less cost, taxed when profitable, plus a terminal
    value in the final year. The shorter of the two lists is padded with zeros."""
    years = max(len(revenues), len(costs))
    flows = [-initial_investment]
    for i in range(years):
        revenue = revenues[i] if i < len(revenues) else 0.0
        cost = costs[i] if i < len(costs) else 0.0
        flows.append(_after_tax(revenue - cost, tax_rate_percent))

    if terminal_value > 0 and years > 0:
        flows[-1] += terminal_value
    return _project(flows)
