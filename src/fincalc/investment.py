"""Investment growth engines: lumpsum, SIP, combined, step-up SIP and goal planning.

Lumpsum growth compounds annually. SIP contributions are an ordinary annuity:
one contribution at the end of every month, compounded monthly at annual/12.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from .config import InvestmentKind
from .periods import monthly_rate


@dataclass(frozen=True)
class InvestmentResult:
    kind: InvestmentKind
    total_investment: float
    total_returns: float
    future_value: float
    cagr: float                           # percent
    real_value: Optional[float] = None    # inflation-adjusted, when an inflation rate is given
    after_tax_value: Optional[float] = None


@dataclass(frozen=True)
class YearlyBreakdown:
    year: int
    yearly_investment: float
    total_investment: float
    interest_earned: float
    total_interest: float
    balance: float


@dataclass(frozen=True)
class GoalPlan:
    target_amount: float
    current_savings_future_value: float
    shortfall: float
    required_monthly_investment: float
    total_investment: float


def cagr(initial: float, final: float, years: float) -> float:
    """Compound annual growth rate as a percent; 0 when undefined."""
    if initial <= 0 or years <= 0 or final < 0:
        return 0.0
    return ((final / initial) ** (1 / years) - 1) * 100


def _months(years: float) -> int:
    return max(0, round(years * 12))


def _lumpsum_value(principal: float, annual_rate_percent: float, years: float) -> float:
    return principal * (1 + annual_rate_percent / 100) ** years


def _sip_value(monthly_investment: float, annual_rate_percent: float, months: int) -> float:
    i = monthly_rate(annual_rate_percent)
    if i == 0:
        return monthly_investment * months
    return monthly_investment * ((1 + i) ** months - 1) / i


def _result(
    kind: InvestmentKind,
    invested: float,
    future_value: float,
    years: float,
    inflation_rate_percent: Optional[float],
    tax_rate_percent: Optional[float],
) -> InvestmentResult:
    returns = future_value - invested

    real_value = None
    if inflation_rate_percent:
        real_value = future_value / (1 + inflation_rate_percent / 100) ** years

    after_tax = None
    if tax_rate_percent:
        after_tax = future_value - max(0.0, returns) * tax_rate_percent / 100

    return InvestmentResult(
        kind=kind,
        total_investment=invested,
        total_returns=returns,
        future_value=future_value,
        cagr=cagr(invested, future_value, years),
        real_value=real_value,
        after_tax_value=after_tax,
    )


def lumpsum(
    principal: float,
    annual_rate_percent: float,
    years: float,
    inflation_rate_percent: Optional[float] = None,
    tax_rate_percent: Optional[float] = None,
) -> InvestmentResult:
    """FV = P * (1 + r)^t."""
    if principal <= 0 or years <= 0:
        return _result("lumpsum", max(0.0, principal), max(0.0, principal), 0.0, None, None)
    fv = _lumpsum_value(principal, annual_rate_percent, years)
    return _result("lumpsum", principal, fv, years, inflation_rate_percent, tax_rate_percent)


def sip(
    monthly_investment: float,
    annual_rate_percent: float,
    years: float,
    inflation_rate_percent: Optional[float] = None,
    tax_rate_percent: Optional[float] = None,
) -> InvestmentResult:
    """FV = M * ((1 + i)^n - 1) / i with i = annual/12 and n = months."""
    n = _months(years)
    if monthly_investment <= 0 or n == 0:
        return _result("sip", 0.0, 0.0, 0.0, None, None)
    fv = _sip_value(monthly_investment, annual_rate_percent, n)
    return _result("sip", monthly_investment * n, fv, years, inflation_rate_percent, tax_rate_percent)


def combined(
    initial_investment: float,
    monthly_investment: float,
    annual_rate_percent: float,
    years: float,
    inflation_rate_percent: Optional[float] = None,
    tax_rate_percent: Optional[float] = None,
) -> InvestmentResult:
    """Lumpsum leg plus SIP leg, each grown by its own formula."""
    n = _months(years)
    initial = max(0.0, initial_investment)
    monthly = max(0.0, monthly_investment)
    if years <= 0 or (initial == 0 and (monthly == 0 or n == 0)):
        return _result("combined", initial, initial, 0.0, None, None)
    fv = _lumpsum_value(initial, annual_rate_percent, years) + _sip_value(monthly, annual_rate_percent, n)
    return _result("combined", initial + monthly * n, fv, years, inflation_rate_percent, tax_rate_percent)


def _step_up_years(
    initial_monthly: float, annual_rate_percent: float, years: int, step_up_percent: float
) -> Iterator[tuple[float, float]]:
    """Yield (contribution, balance at year end) per year, re-applying the SIP formula."""
    i = monthly_rate(annual_rate_percent)
    growth = (1 + i) ** 12
    balance = 0.0
    contribution = initial_monthly
    for year in range(1, years + 1):
        balance = balance * growth + _sip_value(contribution, annual_rate_percent, 12)
        yield contribution, balance
        contribution *= 1 + step_up_percent / 100


def step_up_sip(
    initial_monthly_investment: float,
    annual_rate_percent: float,
    years: int,
    step_up_percent: float,
    inflation_rate_percent: Optional[float] = None,
    tax_rate_percent: Optional[float] = None,
) -> InvestmentResult:
    """SIP whose contribution rises by *step_up_percent* at every anniversary."""
    if initial_monthly_investment <= 0 or years <= 0:
        return _result("stepup", 0.0, 0.0, 0.0, None, None)

    invested = 0.0
    balance = 0.0
    for contribution, balance in _step_up_years(initial_monthly_investment, annual_rate_percent, years, step_up_percent):
        invested += contribution * 12
    return _result("stepup", invested, balance, years, inflation_rate_percent, tax_rate_percent)


def goal_required_sip(
    target_amount: float,
    current_savings: float,
    annual_rate_percent: float,
    years: float,
) -> GoalPlan:
    """Monthly contribution that reaches *target_amount*, net of what current savings grow to.

    Closed-form inverse of the SIP formula (it is linear in the payment). When
    savings alone reach the target the requirement is 0.
    """
    n = _months(years)
    savings_fv = _lumpsum_value(max(0.0, current_savings), annual_rate_percent, max(0.0, years))
    shortfall = target_amount - savings_fv

    if shortfall <= 0 or n == 0:
        return GoalPlan(target_amount, savings_fv, max(0.0, shortfall), 0.0, max(0.0, current_savings))

    required = shortfall / _sip_value(1.0, annual_rate_percent, n)
    return GoalPlan(target_amount, savings_fv, shortfall, required, max(0.0, current_savings) + required * n)


def yearly_breakdown(
    kind: InvestmentKind,
    annual_rate_percent: float,
    years: int,
    principal: float = 0.0,
    monthly_investment: float = 0.0,
    step_up_percent: float = 0.0,
) -> list[YearlyBreakdown]:
    """Year-end balances for any engine.

    Balances are re-derived from the closed form at each year boundary; only
    step-up SIP is simulated month by month.
    """
    if years <= 0:
        return []

    rows: list[YearlyBreakdown] = []
    invested = 0.0
    previous_balance = 0.0

    if kind == "stepup":
        i = monthly_rate(annual_rate_percent)
        balance = 0.0
        contribution = monthly_investment
        for year in range(1, years + 1):
            start = balance
            for _ in range(12):
                balance = balance * (1 + i) + contribution
            invested += contribution * 12
            interest = balance - start - contribution * 12
            total_interest = balance - invested
            rows.append(YearlyBreakdown(year, contribution * 12, invested, interest, total_interest, balance))
            contribution *= 1 + step_up_percent / 100
        return rows

    for year in range(1, years + 1):
        if kind == "lumpsum":
            balance = _lumpsum_value(principal, annual_rate_percent, year)
            added = principal if year == 1 else 0.0
        elif kind == "sip":
            balance = _sip_value(monthly_investment, annual_rate_percent, year * 12)
            added = monthly_investment * 12
        elif kind == "combined":
            balance = (_lumpsum_value(principal, annual_rate_percent, year)
                       + _sip_value(monthly_investment, annual_rate_percent, year * 12))
            added = monthly_investment * 12 + (principal if year == 1 else 0.0)
        else:
            raise ValueError(f"Unknown investment kind '{kind}'. Valid values: lumpsum, sip, combined, stepup")

        invested += added
        interest = balance - previous_balance - added
        rows.append(YearlyBreakdown(year, added, invested, interest, balance - invested, balance))
        previous_balance = balance

    return rows
