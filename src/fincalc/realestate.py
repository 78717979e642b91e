"""Rental property analysis: monthly operating picture, return metrics and a
year-by-year hold projection ending in a sale."""
from __future__ import annotations

from dataclasses import dataclass

from .amortization import LoanParameters, build_schedule, compute_payment
from .config import (
    FIFTY_PERCENT_RULE_BAND,
    LAND_VALUE_RATIO,
    ONE_PERCENT_RULE_MIN,
    RESIDENTIAL_DEPRECIATION_YEARS,
)


@dataclass(frozen=True)
class RentalInput:
    purchase_price: float
    down_payment: float
    interest_rate_percent: float
    loan_term_years: int
    closing_costs: float = 0.0
    rehab_costs: float = 0.0
    # Monthly income
    gross_rent: float = 0.0
    other_income: float = 0.0
    vacancy_rate_percent: float = 0.0
    # Monthly expenses
    property_tax: float = 0.0
    insurance: float = 0.0
    hoa_fees: float = 0.0
    maintenance_percent: float = 0.0    # of gross rent
    management_percent: float = 0.0     # of gross rent
    other_expenses: float = 0.0
    # Growth assumptions (annual percent)
    appreciation_rate_percent: float = 0.0
    rent_increase_percent: float = 0.0
    expense_increase_percent: float = 0.0
    selling_costs_percent: float = 0.0
    holding_years: int = 5


@dataclass(frozen=True)
class MonthlyOperations:
    potential_gross_income: float
    vacancy_loss: float
    effective_gross_income: float
    mortgage: float
    maintenance: float
    management: float
    operating_expenses: float   # excluding mortgage
    total_expenses: float       # including mortgage
    noi: float
    cash_flow: float


@dataclass(frozen=True)
class RentalYear:
    year: int
    property_value: float
    loan_balance: float
    equity: float
    effective_income: float
    total_expenses: float
    cash_flow: float
    cash_on_cash: float         # percent
    roi: float                  # percent; cash flow + principal paid + appreciation


@dataclass(frozen=True)
class RuleCheck:
    passes: bool
    ratio: float                # percent


@dataclass(frozen=True)
class RentalResult:
    loan_amount: float
    total_cash_invested: float
    monthly: MonthlyOperations
    cap_rate: float             # percent
    cash_on_cash: float         # percent
    gross_rent_multiplier: float
    dscr: float
    break_even_occupancy: float # percent
    operating_expense_ratio: float  # percent
    annual_depreciation: float
    one_percent_rule: RuleCheck
    fifty_percent_rule: RuleCheck
    projections: list[RentalYear]
    net_sale_proceeds: float
    total_profit: float
    total_roi: float            # percent
    annualized_roi: float       # percent


def _pct(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100 if denominator else 0.0


def one_percent_rule(monthly_rent: float, purchase_price: float) -> RuleCheck:
    """Monthly rent should be at least 1% of the purchase price."""
    ratio = monthly_rent * 100 / purchase_price if purchase_price else 0.0
    return RuleCheck(ratio >= ONE_PERCENT_RULE_MIN, ratio)


def fifty_percent_rule(monthly_expenses: float, monthly_income: float) -> RuleCheck:
    """Operating expenses, vacancy included, should be about half of gross income.

    Passes inside the 40-60% band; no income never passes.
    """
    if monthly_income <= 0:
        return RuleCheck(False, 0.0)
    ratio = monthly_expenses * 100 / monthly_income
    low, high = FIFTY_PERCENT_RULE_BAND
    return RuleCheck(low <= ratio <= high, ratio)


def analyze_rental(inp: RentalInput) -> RentalResult:
    loan_amount = max(0.0, inp.purchase_price - inp.down_payment)
    term_months = inp.loan_term_years * 12
    mortgage = compute_payment(loan_amount, inp.interest_rate_percent, term_months)

    pgi = inp.gross_rent + inp.other_income
    vacancy = pgi * inp.vacancy_rate_percent / 100
    egi = pgi - vacancy
    maintenance = inp.gross_rent * inp.maintenance_percent / 100
    management = inp.gross_rent * inp.management_percent / 100
    operating = (inp.property_tax + inp.insurance + inp.hoa_fees
                 + maintenance + management + inp.other_expenses)
    total_expenses = operating + mortgage
    noi = egi - operating
    cash_flow = egi - total_expenses

    monthly = MonthlyOperations(
        potential_gross_income=pgi,
        vacancy_loss=vacancy,
        effective_gross_income=egi,
        mortgage=mortgage,
        maintenance=maintenance,
        management=management,
        operating_expenses=operating,
        total_expenses=total_expenses,
        noi=noi,
        cash_flow=cash_flow,
    )

    invested = inp.down_payment + inp.closing_costs + inp.rehab_costs
    depreciable = inp.purchase_price * (1 - LAND_VALUE_RATIO) + inp.rehab_costs

    # Projection
    schedule = build_schedule(LoanParameters(loan_amount, inp.interest_rate_percent, term_months))
    value = inp.purchase_price + inp.rehab_costs
    rent = inp.gross_rent
    other_income = inp.other_income
    monthly_operating = operating
    balance = loan_amount
    total_cash_flow = 0.0
    projections: list[RentalYear] = []

    for year in range(1, inp.holding_years + 1):
        appreciation = value * inp.appreciation_rate_percent / 100
        value += appreciation
        rent *= 1 + inp.rent_increase_percent / 100
        other_income *= 1 + inp.rent_increase_percent / 100
        monthly_operating *= 1 + inp.expense_increase_percent / 100

        potential = (rent + other_income) * 12
        effective = potential * (1 - inp.vacancy_rate_percent / 100)
        # Debt service stops once the loan is retired
        year_rows = schedule[(year - 1) * 12:year * 12]
        expenses = monthly_operating * 12 + sum(r.payment for r in year_rows)
        year_cash_flow = effective - expenses
        total_cash_flow += year_cash_flow

        principal_paid = sum(r.principal_component for r in year_rows)
        if year_rows:
            balance = year_rows[-1].ending_balance
        elif schedule:
            balance = 0.0

        projections.append(
            RentalYear(
                year=year,
                property_value=value,
                loan_balance=balance,
                equity=value - balance,
                effective_income=effective,
                total_expenses=expenses,
                cash_flow=year_cash_flow,
                cash_on_cash=_pct(year_cash_flow, invested),
                roi=_pct(year_cash_flow + principal_paid + appreciation, invested),
            )
        )

    if projections:
        final = projections[-1]
        net_sale = final.property_value * (1 - inp.selling_costs_percent / 100) - final.loan_balance
        profit = total_cash_flow + net_sale - invested
        total_roi = _pct(profit, invested)
        growth = 1 + total_roi / 100
        annualized = (growth ** (1 / inp.holding_years) - 1) * 100 if growth > 0 else -100.0
    else:
        net_sale = profit = total_roi = annualized = 0.0

    return RentalResult(
        loan_amount=loan_amount,
        total_cash_invested=invested,
        monthly=monthly,
        cap_rate=_pct(noi * 12, inp.purchase_price),
        cash_on_cash=_pct(cash_flow * 12, invested),
        gross_rent_multiplier=inp.purchase_price / (inp.gross_rent * 12) if inp.gross_rent else 0.0,
        dscr=noi / mortgage if mortgage > 0 else 0.0,
        break_even_occupancy=_pct(total_expenses, pgi),
        operating_expense_ratio=_pct(operating, egi),
        annual_depreciation=depreciable / RESIDENTIAL_DEPRECIATION_YEARS,
        one_percent_rule=one_percent_rule(inp.gross_rent, inp.purchase_price),
        fifty_percent_rule=fifty_percent_rule(operating + vacancy, pgi),
        projections=projections,
        net_sale_proceeds=net_sale,
        total_profit=profit,
        total_roi=total_roi,
        annualized_roi=annualized,
    )
