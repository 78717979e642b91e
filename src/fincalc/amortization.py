"""Loan amortization engine.

A loan is a fold over monthly periods. Rate changes and extra payments are
immutable event lists consumed in a single forward pass; nothing is patched
in place, so any change in input means rebuilding the whole schedule.

Degenerate loans (principal <= 0 or term <= 0) produce an empty schedule and
a zeroed summary instead of raising.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

from .config import BALANCE_EPSILON, ExtraPaymentKind, PrepaymentMode
from .periods import add_months, monthly_rate
from .solvers import SolverResult, newton_raphson

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtraPayment:
    amount: float
    kind: ExtraPaymentKind = "monthly"
    start_month: int = 1  # 1-based

    def amount_for(self, period: int) -> float:
        if self.kind == "monthly":
            return self.amount if period >= self.start_month else 0.0
        return self.amount if period == self.start_month else 0.0


@dataclass(frozen=True)
class RateChange:
    effective_month: int  # 1-based; applies to interest from this period on
    new_annual_rate_percent: float


@dataclass(frozen=True)
class LoanParameters:
    principal: float
    annual_rate_percent: float
    term_months: int
    start_date: Optional[date] = None
    extra_payments: tuple[ExtraPayment, ...] = field(default_factory=tuple)
    rate_changes: tuple[RateChange, ...] = field(default_factory=tuple)
    # reduce_tenure keeps the payment and ends early; reduce_emi keeps the term
    prepayment_mode: PrepaymentMode = "reduce_tenure"

    def __post_init__(self) -> None:
        # Accept any iterable but store tuples so the record stays immutable
        object.__setattr__(self, "extra_payments", tuple(self.extra_payments))
        object.__setattr__(self, "rate_changes", tuple(self.rate_changes))


@dataclass(frozen=True)
class AmortizationRow:
    period: int
    date: Optional[date]
    opening_balance: float
    payment: float               # principal + interest actually paid this period
    principal_component: float   # includes any extra payment applied
    interest_component: float
    extra_payment: float
    ending_balance: float
    cumulative_interest: float
    cumulative_principal: float
    annual_rate_percent: float


@dataclass(frozen=True)
class LoanSummary:
    # Inputs echoed back
    principal: float
    annual_rate_percent: float
    term_months: int
    # Outputs
    monthly_payment: float         # initial scheduled payment (EMI)
    final_payment: float
    first_month_interest: float
    total_interest: float
    total_principal: float
    total_paid: float
    number_of_payments: int
    payoff_date: Optional[date]
    interest_saved: float          # versus the same loan without extra payments
    months_saved: int
    effective_annual_rate: float   # APR, percent


def compute_payment(principal: float, annual_rate_percent: float, months: int) -> float:
    """Return the level monthly payment (EMI) that amortizes *principal* over *months*.

    Uses the standard reducing-balance formula:
        EMI = P * r * (1 + r)^n / ((1 + r)^n - 1)

    Special case: if the rate is zero, EMI = P / n.
    Returns 0.0 when principal or months is not positive.
    """
    if months <= 0 or principal <= 0:
        return 0.0

    r = monthly_rate(annual_rate_percent)
    if r == 0:
        return principal / months

    factor = (1 + r) ** months
    return principal * r * factor / (factor - 1)


def _rate_schedule(changes: tuple[RateChange, ...]) -> dict[int, float]:
    # Stable sort: for several changes in one month the last one listed wins
    by_month: dict[int, float] = {}
    for change in sorted(changes, key=lambda c: c.effective_month):
        by_month[change.effective_month] = change.new_annual_rate_percent
    return by_month


def build_schedule(params: LoanParameters) -> list[AmortizationRow]:
    """Build the month-by-month schedule, stopping early once the balance is repaid."""
    if params.principal <= 0 or params.term_months <= 0:
        return []
    return _amortize(params, compute_payment(params.principal, params.annual_rate_percent, params.term_months))


def build_fixed_payment_schedule(
    principal: float,
    annual_rate_percent: float,
    monthly_payment: float,
    start_date: Optional[date] = None,
    extra_payments: tuple[ExtraPayment, ...] = (),
) -> list[AmortizationRow]:
    """Schedule for a loan repaid at a fixed *monthly_payment* until cleared.

    The term is whatever :func:`loan_term_for_payment` says it takes; the last
    row pays only what remains. Empty when the payment never covers the interest.
    """
    term = loan_term_for_payment(principal, annual_rate_percent, monthly_payment)
    if not term:
        if term is None:
            logger.warning("Payment %.2f does not cover the monthly interest", monthly_payment)
        return []
    params = LoanParameters(principal, annual_rate_percent, term, start_date, extra_payments)
    return _amortize(params, monthly_payment)


def _amortize(params: LoanParameters, payment: float) -> list[AmortizationRow]:
    term = params.term_months
    rate_changes = _rate_schedule(params.rate_changes)
    annual = params.annual_rate_percent
    r = monthly_rate(annual)

    rows: list[AmortizationRow] = []
    balance = params.principal
    cumulative_interest = 0.0
    cumulative_principal = 0.0

    for period in range(1, term + 1):
        new_rate = rate_changes.get(period)
        if new_rate is not None and new_rate != annual:
            # Rate reset: re-amortize the outstanding balance over the remaining nominal term
            annual = new_rate
            r = monthly_rate(annual)
            payment = compute_payment(balance, annual, term - period + 1)
            logger.debug("Rate reset to %.4f%% at period %d, payment now %.2f", annual, period, payment)

        opening = balance
        interest = opening * r
        scheduled_principal = payment - interest
        extra = sum(e.amount_for(period) for e in params.extra_payments)

        if period == term:
            # Final nominal period clears whatever remains
            principal_paid = opening
        else:
            principal_paid = min(scheduled_principal + extra, opening)

        extra_applied = max(0.0, min(extra, principal_paid - min(scheduled_principal, principal_paid)))

        balance = opening - principal_paid
        if balance <= BALANCE_EPSILON:
            balance = 0.0

        cumulative_interest += interest
        cumulative_principal += principal_paid

        rows.append(
            AmortizationRow(
                period=period,
                date=add_months(params.start_date, period) if params.start_date else None,
                opening_balance=opening,
                payment=principal_paid + interest,
                principal_component=principal_paid,
                interest_component=interest,
                extra_payment=extra_applied,
                ending_balance=balance,
                cumulative_interest=cumulative_interest,
                cumulative_principal=cumulative_principal,
                annual_rate_percent=annual,
            )
        )
        if balance == 0.0:
            break
        if extra_applied > 0 and params.prepayment_mode == "reduce_emi":
            payment = compute_payment(balance, annual, term - period)
            logger.debug("Prepayment at period %d, payment now %.2f", period, payment)

    return rows


def compute_loan_summary(params: LoanParameters, fees: float = 0.0) -> LoanSummary:
    """Compute the loan summary, including savings from any extra payments."""
    schedule = build_schedule(params)
    if not schedule:
        return LoanSummary(
            principal=params.principal,
            annual_rate_percent=params.annual_rate_percent,
            term_months=params.term_months,
            monthly_payment=0.0,
            final_payment=0.0,
            first_month_interest=0.0,
            total_interest=0.0,
            total_principal=0.0,
            total_paid=0.0,
            number_of_payments=0,
            payoff_date=None,
            interest_saved=0.0,
            months_saved=0,
            effective_annual_rate=0.0,
        )

    last = schedule[-1]
    if params.extra_payments:
        baseline = build_schedule(replace(params, extra_payments=()))
        interest_saved = baseline[-1].cumulative_interest - last.cumulative_interest
        months_saved = len(baseline) - len(schedule)
    else:
        interest_saved = 0.0
        months_saved = 0

    apr = compute_apr(params.principal, params.annual_rate_percent, params.term_months, fees)

    return LoanSummary(
        principal=params.principal,
        annual_rate_percent=params.annual_rate_percent,
        term_months=params.term_months,
        monthly_payment=compute_payment(params.principal, params.annual_rate_percent, params.term_months),
        final_payment=last.payment,
        first_month_interest=schedule[0].interest_component,
        total_interest=last.cumulative_interest,
        total_principal=last.cumulative_principal,
        total_paid=last.cumulative_interest + last.cumulative_principal,
        number_of_payments=len(schedule),
        payoff_date=last.date,
        interest_saved=interest_saved,
        months_saved=months_saved,
        effective_annual_rate=apr.value,
    )


def loan_term_for_payment(
    principal: float,
    annual_rate_percent: float,
    monthly_payment: float,
) -> Optional[int]:
    """Months needed to repay *principal* with a fixed *monthly_payment*.

    n = -log(1 - r*P/A) / log(1 + r), rounded up to a whole month.
    Returns None when the payment never covers the monthly interest.
    """
    if principal <= 0:
        return 0
    if monthly_payment <= 0:
        return None

    r = monthly_rate(annual_rate_percent)
    if r == 0:
        return math.ceil(principal / monthly_payment - 1e-9)
    if monthly_payment <= principal * r:
        return None

    n = -math.log(1 - r * principal / monthly_payment) / math.log(1 + r)
    return math.ceil(n - 1e-9)


def compute_apr(
    principal: float,
    annual_rate_percent: float,
    months: int,
    fees: float = 0.0,
) -> SolverResult:
    """Compute APR via Newton-Raphson on the amount actually financed.

    The payment is set on the full principal; APR is the monthly rate r that
    solves PMT * (1 - (1+r)^-n) / r = principal - fees, annualised (r * 12 * 100).
    Without fees the APR is the nominal rate.
    """
    if principal <= 0 or months <= 0:
        return SolverResult(0.0, False, 0)
    if fees <= 0:
        return SolverResult(annual_rate_percent, True, 0)

    amount_financed = principal - fees
    if amount_financed <= 0:
        return SolverResult(0.0, False, 0)

    pmt = compute_payment(principal, annual_rate_percent, months)
    n = months

    def f(r: float) -> float:
        return pmt * (1 - (1 + r) ** -n) / r - amount_financed

    def df(r: float) -> float:
        return pmt * (n * r * (1 + r) ** (-n - 1) - 1 + (1 + r) ** -n) / (r * r)

    guess = monthly_rate(annual_rate_percent) or 0.001
    result = newton_raphson(f, df, guess, tolerance=1e-7, lower=1e-9)
    return SolverResult(result.value * 12 * 100, result.converged, result.iterations)
