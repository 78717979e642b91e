"""Bond valuation: price from yield, yield from price, duration and convexity.

Coupon dates are laid out calendar-wise from the settlement date; the period
count is the smallest whole number of periods reaching the maturity date. The
final cash flow (last coupon plus face) is dated on the maturity itself.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config import (
    BOND_FREQUENCIES,
    DAYS_PER_YEAR,
    MAX_ITERATIONS,
    PRICE_TOLERANCE,
    RATE_FLOOR,
    RATE_CEILING,
    CashFlowKind,
    Frequency,
)
from .periods import advance, periods_until
from .solvers import newton_raphson

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BondParameters:
    face_value: float
    coupon_rate_percent: float
    settlement_date: date
    maturity_date: date
    frequency: int = 2
    market_yield_percent: Optional[float] = None
    target_price: Optional[float] = None

    @property
    def frequency_name(self) -> Frequency:
        try:
            return BOND_FREQUENCIES[self.frequency]
        except KeyError:
            raise ValueError(
                f"Unsupported coupon frequency {self.frequency}. "
                f"Valid values: {', '.join(str(f) for f in BOND_FREQUENCIES)}"
            ) from None

    @property
    def coupon_payment(self) -> float:
        return self.face_value * self.coupon_rate_percent / 100 / self.frequency

    @property
    def periods_to_maturity(self) -> int:
        return periods_until(self.settlement_date, self.maturity_date, self.frequency_name)

    @property
    def years_to_maturity(self) -> float:
        return (self.maturity_date - self.settlement_date).days / DAYS_PER_YEAR


@dataclass(frozen=True)
class BondCashFlow:
    period: int
    date: date
    cash_flow: float
    present_value: float
    kind: CashFlowKind


@dataclass(frozen=True)
class BondResult:
    price: float
    ytm_percent: float
    current_yield: float          # percent
    total_coupons: float
    total_return: float           # coupons + face - price
    macaulay_duration: float      # years
    modified_duration: float
    convexity: float
    pv_face: float
    pv_coupons: float
    years_to_maturity: float
    periods: int
    schedule: list[BondCashFlow]
    converged: bool = True
    iterations: int = 0


@dataclass(frozen=True)
class PullToParPoint:
    years_elapsed: int
    periods_remaining: int
    price: float


def _empty_result(params: BondParameters) -> BondResult:
    return BondResult(
        price=0.0,
        ytm_percent=0.0,
        current_yield=0.0,
        total_coupons=0.0,
        total_return=0.0,
        macaulay_duration=0.0,
        modified_duration=0.0,
        convexity=0.0,
        pv_face=0.0,
        pv_coupons=0.0,
        years_to_maturity=max(0.0, params.years_to_maturity),
        periods=0,
        schedule=[],
        converged=False,
    )


def _flows(coupon: float, face: float, n: int) -> list[float]:
    return [coupon + (face if k == n else 0.0) for k in range(1, n + 1)]


def _price(flows: list[float], y: float) -> float:
    return sum(cf / (1 + y) ** k for k, cf in enumerate(flows, start=1))


def _price_derivative(flows: list[float], y: float) -> float:
    return sum(-k * cf / (1 + y) ** (k + 1) for k, cf in enumerate(flows, start=1))


def _analyze(params: BondParameters, periodic_yield: float, converged: bool = True,
             iterations: int = 0, reported_price: Optional[float] = None) -> BondResult:
    freq = params.frequency
    freq_name = params.frequency_name
    n = params.periods_to_maturity
    coupon = params.coupon_payment
    face = params.face_value
    y = periodic_yield

    flows = _flows(coupon, face, n)
    price = _price(flows, y)

    schedule: list[BondCashFlow] = []
    weighted_time = 0.0
    weighted_convexity = 0.0
    for k, cf in enumerate(flows, start=1):
        pv = cf / (1 + y) ** k
        t = k / freq
        weighted_time += t * pv
        weighted_convexity += pv * (t * t + t / freq)
        if k < n:
            kind: CashFlowKind = "Coupon"
            when = advance(params.settlement_date, k, freq_name)
        else:
            kind = "Total" if coupon > 0 else "Principal"
            when = params.maturity_date
        schedule.append(BondCashFlow(k, when, cf, pv, kind))

    macaulay = weighted_time / price if price else 0.0
    pv_face = face / (1 + y) ** n
    total_coupons = coupon * n
    shown_price = price if reported_price is None else reported_price

    return BondResult(
        price=shown_price,
        ytm_percent=y * freq * 100,
        current_yield=coupon * freq / shown_price * 100 if shown_price else 0.0,
        total_coupons=total_coupons,
        total_return=total_coupons + face - shown_price,
        macaulay_duration=macaulay,
        modified_duration=macaulay / (1 + y),
        convexity=weighted_convexity / price / (1 + y) ** 2 if price else 0.0,
        pv_face=pv_face,
        pv_coupons=price - pv_face,
        years_to_maturity=params.years_to_maturity,
        periods=n,
        schedule=schedule,
        converged=converged,
        iterations=iterations,
    )


def price_bond(params: BondParameters, yield_percent: Optional[float] = None) -> BondResult:
    """Price mode: discount every cash flow at the periodic market yield."""
    ytm = params.market_yield_percent if yield_percent is None else yield_percent
    if ytm is None:
        raise ValueError("A market yield is required to price a bond")
    if params.face_value <= 0 or params.periods_to_maturity < 1:
        return _empty_result(params)
    return _analyze(params, ytm / 100 / params.frequency)


def solve_yield(params: BondParameters, target_price: Optional[float] = None) -> BondResult:
    """Yield mode: Newton-Raphson on the periodic yield, starting at the coupon rate.

    Iteration stops once |price(y) - target| < PRICE_TOLERANCE, after
    MAX_ITERATIONS, or on a zero derivative; in the last two cases the best
    estimate is reported with ``converged=False``. Analytics are computed at
    the solved yield while ``price`` echoes the target.
    """
    target = params.target_price if target_price is None else target_price
    if target is None:
        raise ValueError("A target price is required to solve for yield")
    if params.face_value <= 0 or params.periods_to_maturity < 1 or target <= 0:
        return _empty_result(params)

    flows = _flows(params.coupon_payment, params.face_value, params.periods_to_maturity)
    result = newton_raphson(
        lambda y: _price(flows, y) - target,
        lambda y: _price_derivative(flows, y),
        params.coupon_rate_percent / 100 / params.frequency,
        tolerance=PRICE_TOLERANCE,
        max_iterations=MAX_ITERATIONS,
        lower=RATE_FLOOR,
        upper=RATE_CEILING,
    )
    if not result.converged:
        logger.warning("Yield search stopped after %d iterations without converging", result.iterations)
    return _analyze(params, result.value, result.converged, result.iterations, reported_price=target)


def analyze_bond(params: BondParameters) -> BondResult:
    """Dispatch on whichever of market yield / target price is set (yield wins)."""
    if params.market_yield_percent is not None:
        return price_bond(params)
    if params.target_price is not None:
        return solve_yield(params)
    raise ValueError("Either market_yield_percent or target_price must be provided")


def pull_to_par(params: BondParameters, yield_percent: float) -> list[PullToParPoint]:
    """Price at each anniversary of settlement, holding the yield constant, down to par at maturity."""
    if params.face_value <= 0:
        return []
    n = params.periods_to_maturity
    if n < 1:
        return []

    freq = params.frequency
    y = yield_percent / 100 / freq
    coupon = params.coupon_payment

    points = []
    years = 0
    while True:
        remaining = max(0, n - years * freq)
        price = _price(_flows(coupon, params.face_value, remaining), y) if remaining else params.face_value
        points.append(PullToParPoint(years, remaining, price))
        if remaining == 0:
            break
        years += 1
    return points
