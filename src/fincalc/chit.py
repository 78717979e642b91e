"""Chit fund estimate from an average auction bid.

Each month the winning bidder forgoes the bid amount; after the foreman's
commission the remainder is shared out as a dividend to every member. No
auction happens in the first and last months.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChitMonth:
    month: int
    contribution: float
    dividend: float
    net_payable: float


@dataclass(frozen=True)
class ChitResult:
    chit_value: float
    months: int
    monthly_contribution: float
    commission: float
    total_dividend: float
    net_payable: float
    return_percent: float
    schedule: list[ChitMonth]


def calculate_chit(
    chit_value: float,
    months: int,
    commission_percent: float,
    average_bid_percent: float,
) -> ChitResult:
    if chit_value <= 0 or months <= 0:
        return ChitResult(max(0.0, chit_value), max(0, months), 0.0, 0.0, 0.0, 0.0, 0.0, [])

    contribution = chit_value / months
    commission = chit_value * commission_percent / 100
    bid = chit_value * average_bid_percent / 100
    dividend = max(0.0, bid - commission) / months

    schedule = []
    for month in range(1, months + 1):
        paid_dividend = 0.0 if month in (1, months) else dividend
        schedule.append(ChitMonth(month, contribution, paid_dividend, contribution - paid_dividend))

    net = sum(m.net_payable for m in schedule)
    return ChitResult(
        chit_value=chit_value,
        months=months,
        monthly_contribution=contribution,
        commission=commission,
        total_dividend=sum(m.dividend for m in schedule),
        net_payable=net,
        return_percent=(chit_value - net) / net * 100 if net else 0.0,
        schedule=schedule,
    )
