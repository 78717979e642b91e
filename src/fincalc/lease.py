"""Auto lease payment: depreciation fee plus rent charge, with sales tax."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import MONEY_FACTOR_APR_DIVISOR


@dataclass(frozen=True)
class LeaseInput:
    negotiated_price: float
    residual_value: float
    term_months: int
    money_factor: float = 0.0
    apr_percent: Optional[float] = None   # overrides money_factor when given
    down_payment: float = 0.0
    trade_in_value: float = 0.0
    fees: float = 0.0
    fees_upfront: bool = True
    sales_tax_percent: float = 0.0
    tax_monthly: bool = True              # False taxes the negotiated price upfront


@dataclass(frozen=True)
class LeaseResult:
    gross_cap_cost: float
    adjusted_cap_cost: float
    money_factor: float
    depreciation_fee: float
    rent_charge: float
    base_monthly_payment: float
    monthly_tax: float
    upfront_tax: float
    monthly_payment: float
    finance_charge: float       # rent charge over the whole term
    total_lease_cost: float


def money_factor_from_apr(apr_percent: float) -> float:
    return apr_percent / MONEY_FACTOR_APR_DIVISOR


def apr_from_money_factor(money_factor: float) -> float:
    return money_factor * MONEY_FACTOR_APR_DIVISOR


def calculate_lease(inp: LeaseInput) -> LeaseResult:
    gross = inp.negotiated_price + (0.0 if inp.fees_upfront else inp.fees)
    adjusted = gross - inp.down_payment - inp.trade_in_value
    mf = money_factor_from_apr(inp.apr_percent) if inp.apr_percent is not None else inp.money_factor

    if inp.term_months <= 0:
        return LeaseResult(gross, adjusted, mf, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    depreciation = (adjusted - inp.residual_value) / inp.term_months
    rent = (adjusted + inp.residual_value) * mf
    base = depreciation + rent

    if inp.tax_monthly:
        monthly_tax, upfront_tax = base * inp.sales_tax_percent / 100, 0.0
    else:
        monthly_tax, upfront_tax = 0.0, inp.negotiated_price * inp.sales_tax_percent / 100

    monthly = base + monthly_tax
    total = (monthly * inp.term_months + inp.down_payment + inp.trade_in_value
             + (inp.fees if inp.fees_upfront else 0.0) + upfront_tax)

    return LeaseResult(
        gross_cap_cost=gross,
        adjusted_cap_cost=adjusted,
        money_factor=mf,
        depreciation_fee=depreciation,
        rent_charge=rent,
        base_monthly_payment=base,
        monthly_tax=monthly_tax,
        upfront_tax=upfront_tax,
        monthly_payment=monthly,
        finance_charge=rent * inp.term_months,
        total_lease_cost=total,
    )
