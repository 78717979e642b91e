"""Government-backed mortgage programmes layered on the amortization engine.

FHA: upfront MIP is financed into the loan; annual MIP is recomputed once per
loan year from the balance outstanding at the start of that year.
VA: a one-off funding fee (by purpose, down-payment band and prior use) is
financed into the loan; disabled veterans are exempt.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .amortization import AmortizationRow, LoanParameters, build_schedule, compute_payment
from .config import (
    FHA_ANNUAL_MIP_RATE,
    FHA_UPFRONT_MIP_RATE,
    VA_FIRST_USE_LOW_DOWN_FEE,
    VA_FIVE_PCT_DOWN_FEE,
    VA_IRRRL_FEE,
    VA_SUBSEQUENT_USE_LOW_DOWN_FEE,
    VA_TEN_PCT_DOWN_FEE,
    VALoanPurpose,
)


@dataclass(frozen=True)
class Escrow:
    """Monthly non-loan housing costs collected with the payment."""
    property_tax: float = 0.0
    home_insurance: float = 0.0
    hoa_fees: float = 0.0

    @property
    def monthly_total(self) -> float:
        return self.property_tax + self.home_insurance + self.hoa_fees


@dataclass(frozen=True)
class FHARow:
    loan: AmortizationRow
    mip: float
    total_payment: float  # P&I + MIP + escrow


@dataclass(frozen=True)
class FHAResult:
    base_loan_amount: float
    financed_upfront_mip: float
    total_loan_amount: float
    monthly_principal_and_interest: float
    monthly_mip: float              # first month
    monthly_escrow: float
    total_monthly_payment: float    # first month
    total_interest: float
    total_mip_paid: float
    total_escrow_paid: float
    schedule: list[FHARow]


@dataclass(frozen=True)
class VAResult:
    funding_fee_rate: float         # percent
    funding_fee_amount: float
    total_loan_amount: float
    monthly_principal_and_interest: float
    monthly_escrow: float
    total_monthly_payment: float
    total_interest: float
    schedule: list[AmortizationRow]


def calculate_fha(
    home_price: float,
    down_payment: float,
    annual_rate_percent: float,
    term_years: int,
    escrow: Escrow = Escrow(),
    upfront_mip_rate: float = FHA_UPFRONT_MIP_RATE,
    annual_mip_rate: float = FHA_ANNUAL_MIP_RATE,
    start_date: Optional[date] = None,
) -> FHAResult:
    base_loan = home_price - down_payment
    upfront_mip = max(0.0, base_loan) * upfront_mip_rate / 100
    total_loan = base_loan + upfront_mip
    months = term_years * 12

    schedule = build_schedule(LoanParameters(total_loan, annual_rate_percent, months, start_date))

    rows: list[FHARow] = []
    monthly_mip = 0.0
    balance_at_year_start = total_loan
    for row in schedule:
        if (row.period - 1) % 12 == 0:
            monthly_mip = balance_at_year_start * annual_mip_rate / 100 / 12
        rows.append(FHARow(row, monthly_mip, row.payment + monthly_mip + escrow.monthly_total))
        if row.period % 12 == 0:
            balance_at_year_start = row.ending_balance

    pi = compute_payment(total_loan, annual_rate_percent, months)
    first_mip = rows[0].mip if rows else 0.0
    return FHAResult(
        base_loan_amount=base_loan,
        financed_upfront_mip=upfront_mip,
        total_loan_amount=total_loan if schedule else 0.0,
        monthly_principal_and_interest=pi,
        monthly_mip=first_mip,
        monthly_escrow=escrow.monthly_total,
        total_monthly_payment=pi + first_mip + escrow.monthly_total,
        total_interest=schedule[-1].cumulative_interest if schedule else 0.0,
        total_mip_paid=sum(r.mip for r in rows),
        total_escrow_paid=escrow.monthly_total * len(rows),
        schedule=rows,
    )


def va_funding_fee_rate(
    down_payment_percent: float,
    purpose: VALoanPurpose,
    first_use: bool,
    disabled: bool,
) -> float:
    """Funding fee as a percent of the base loan."""
    if disabled:
        return 0.0
    if purpose == "irrrl":
        return VA_IRRRL_FEE
    low_down = VA_FIRST_USE_LOW_DOWN_FEE if first_use else VA_SUBSEQUENT_USE_LOW_DOWN_FEE
    if purpose == "cash-out" or down_payment_percent < 5:
        return low_down
    if down_payment_percent < 10:
        return VA_FIVE_PCT_DOWN_FEE
    return VA_TEN_PCT_DOWN_FEE


def calculate_va(
    home_price: float,
    down_payment: float,
    annual_rate_percent: float,
    term_years: int,
    purpose: VALoanPurpose = "purchase",
    first_use: bool = True,
    disabled: bool = False,
    escrow: Escrow = Escrow(),
    start_date: Optional[date] = None,
) -> VAResult:
    base_loan = home_price - down_payment
    down_pct = down_payment / home_price * 100 if home_price > 0 else 0.0
    fee_rate = va_funding_fee_rate(down_pct, purpose, first_use, disabled)
    fee = max(0.0, base_loan) * fee_rate / 100
    total_loan = base_loan + fee

    if total_loan <= 0:
        return VAResult(fee_rate, fee, 0.0, 0.0, escrow.monthly_total, escrow.monthly_total, 0.0, [])

    months = term_years * 12
    schedule = build_schedule(LoanParameters(total_loan, annual_rate_percent, months, start_date))
    pi = compute_payment(total_loan, annual_rate_percent, months)
    return VAResult(
        funding_fee_rate=fee_rate,
        funding_fee_amount=fee,
        total_loan_amount=total_loan,
        monthly_principal_and_interest=pi,
        monthly_escrow=escrow.monthly_total,
        total_monthly_payment=pi + escrow.monthly_total,
        total_interest=schedule[-1].cumulative_interest if schedule else 0.0,
        schedule=schedule,
    )
