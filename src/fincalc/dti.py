"""Debt-to-income ratios, loan qualification and debt payoff ordering."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from .config import (
    CONVENTIONAL_BACK_END_MAX,
    CONVENTIONAL_FRONT_END_MAX,
    DTI_HEALTH_BANDS,
    FHA_BACK_END_MAX,
    FHA_FRONT_END_MAX,
    VA_BACK_END_MAX,
    HealthStatus,
)

DebtType = Literal["housing", "auto", "student", "credit", "personal", "other"]


@dataclass(frozen=True)
class IncomeSources:
    primary: float = 0.0
    secondary: float = 0.0
    bonus: float = 0.0
    rental: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return self.primary + self.secondary + self.bonus + self.rental + self.other


@dataclass(frozen=True)
class HousingCosts:
    mortgage_or_rent: float = 0.0
    property_tax: float = 0.0
    home_insurance: float = 0.0
    hoa_fees: float = 0.0

    @property
    def total(self) -> float:
        return self.mortgage_or_rent + self.property_tax + self.home_insurance + self.hoa_fees


@dataclass(frozen=True)
class Debt:
    name: str
    monthly_payment: float
    type: DebtType = "other"
    balance: Optional[float] = None
    interest_rate_percent: Optional[float] = None


@dataclass(frozen=True)
class Qualification:
    conventional: bool
    fha: bool
    va: bool


@dataclass(frozen=True)
class DTIResult:
    front_end_ratio: float       # percent
    back_end_ratio: float        # percent
    total_monthly_income: float
    total_housing_costs: float
    total_monthly_debts: float   # housing + other debts
    qualification: Qualification
    health_status: HealthStatus


def ratio(amount: float, income: float) -> float:
    """amount / income as a percent; 0 when there is no income."""
    if income == 0:
        return 0.0
    return amount * 100 / income


def check_qualification(front_end: float, back_end: float) -> Qualification:
    return Qualification(
        conventional=front_end <= CONVENTIONAL_FRONT_END_MAX and back_end <= CONVENTIONAL_BACK_END_MAX,
        fha=front_end <= FHA_FRONT_END_MAX and back_end <= FHA_BACK_END_MAX,
        va=back_end <= VA_BACK_END_MAX,  # no front-end limit
    )


def health_status(back_end: float) -> HealthStatus:
    for upper, status in DTI_HEALTH_BANDS:
        if back_end <= upper:
            return status
    return "high-risk"


def dti_from_totals(income: float, housing: float, other_debts: float) -> DTIResult:
    front = ratio(housing, income)
    back = ratio(housing + other_debts, income)
    return DTIResult(
        front_end_ratio=front,
        back_end_ratio=back,
        total_monthly_income=income,
        total_housing_costs=housing,
        total_monthly_debts=housing + other_debts,
        qualification=check_qualification(front, back),
        health_status=health_status(back),
    )


def calculate_dti(income: IncomeSources, housing: HousingCosts, debts: Sequence[Debt] = ()) -> DTIResult:
    """Front-end = housing / income, back-end = (housing + non-housing debts) / income.

    Debts typed as housing are already counted in *housing* and are skipped.
    """
    other = sum(d.monthly_payment for d in debts if d.type != "housing")
    return dti_from_totals(income.total, housing.total, other)


def what_if(
    current: DTIResult,
    income_increase: float = 0.0,
    debt_reduction: float = 0.0,
    housing_reduction: float = 0.0,
) -> DTIResult:
    """Recompute the ratios after adjusting the current totals.

    *debt_reduction* lowers total debts directly; *housing_reduction* lowers
    housing and, through it, total debts.
    """
    income = current.total_monthly_income + income_increase
    housing = current.total_housing_costs - housing_reduction
    other = current.total_monthly_debts - current.total_housing_costs - debt_reduction
    return dti_from_totals(income, housing, other)


def avalanche_order(debts: Sequence[Debt]) -> list[Debt]:
    """Highest interest rate first; debts without a rate are left out."""
    return sorted(
        (d for d in debts if d.interest_rate_percent is not None),
        key=lambda d: d.interest_rate_percent,
        reverse=True,
    )


def snowball_order(debts: Sequence[Debt]) -> list[Debt]:
    """Smallest balance first; debts without a balance are left out."""
    return sorted((d for d in debts if d.balance is not None), key=lambda d: d.balance)
