"""Refinance comparison: current loan versus a replacement loan."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .amortization import LoanParameters, build_schedule, compute_payment


@dataclass(frozen=True)
class RefinanceInput:
    current_balance: float
    current_rate_percent: float
    current_remaining_years: int
    new_loan_amount: float
    new_rate_percent: float
    new_term_years: int
    closing_costs: float = 0.0


@dataclass(frozen=True)
class RefinanceYear:
    year: int
    month: int
    current_balance: float
    new_balance: float
    cumulative_savings: float    # starts at -closing_costs


@dataclass(frozen=True)
class RefinanceResult:
    current_payment: float
    new_payment: float
    monthly_savings: float
    current_total_interest: float
    new_total_interest: float
    interest_savings: float
    total_cost_current: float
    total_cost_new: float        # includes closing costs
    net_lifetime_savings: float
    break_even_months: Optional[int]
    projections: list[RefinanceYear]


def break_even_months(closing_costs: float, monthly_savings: float) -> Optional[int]:
    """Whole months until savings repay the closing costs; None if they never do."""
    if monthly_savings <= 0:
        return None
    if closing_costs <= 0:
        return 0
    return math.ceil(closing_costs / monthly_savings)


def compare_refinance(inp: RefinanceInput) -> RefinanceResult:
    n_current = inp.current_remaining_years * 12
    n_new = inp.new_term_years * 12

    current_payment = compute_payment(inp.current_balance, inp.current_rate_percent, n_current)
    new_payment = compute_payment(inp.new_loan_amount, inp.new_rate_percent, n_new)
    savings = current_payment - new_payment

    current_rows = build_schedule(LoanParameters(inp.current_balance, inp.current_rate_percent, n_current))
    new_rows = build_schedule(LoanParameters(inp.new_loan_amount, inp.new_rate_percent, n_new))

    current_interest = current_rows[-1].cumulative_interest if current_rows else 0.0
    new_interest = new_rows[-1].cumulative_interest if new_rows else 0.0
    total_current = sum(r.payment for r in current_rows)
    total_new = sum(r.payment for r in new_rows) + inp.closing_costs

    projections: list[RefinanceYear] = []
    cumulative = -inp.closing_costs
    for month in range(1, max(n_current, n_new) + 1):
        paid_current = current_rows[month - 1].payment if month <= len(current_rows) else 0.0
        paid_new = new_rows[month - 1].payment if month <= len(new_rows) else 0.0
        cumulative += paid_current - paid_new
        if month % 12 == 0:
            projections.append(
                RefinanceYear(
                    year=month // 12,
                    month=month,
                    current_balance=current_rows[month - 1].ending_balance if month <= len(current_rows) else 0.0,
                    new_balance=new_rows[month - 1].ending_balance if month <= len(new_rows) else 0.0,
                    cumulative_savings=cumulative,
                )
            )

    return RefinanceResult(
        current_payment=current_payment,
        new_payment=new_payment,
        monthly_savings=savings,
        current_total_interest=current_interest,
        new_total_interest=new_interest,
        interest_savings=current_interest - new_interest,
        total_cost_current=total_current,
        total_cost_new=total_new,
        net_lifetime_savings=total_current - total_new,
        break_even_months=break_even_months(inp.closing_costs, savings),
        projections=projections,
    )
