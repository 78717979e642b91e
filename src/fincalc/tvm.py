"""Time-value-of-money solver.

Every mode solves the same identity for a different unknown:

    FV = PV * (1+r)^n + PMT * ((1+r)^n - 1) / r * (1 + r*t)

where r is the periodic rate, n the number of periods and t is 1 for
payments at the beginning of each period, 0 at the end. All amounts share
one sign convention: PV and PMT are amounts put in (or, when negative, taken
out) and FV is the resulting balance. A loan is therefore PV > 0, PMT < 0,
FV = 0.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Sequence

from .config import (
    DEFAULT_FREQUENCY,
    DEFAULT_TIMING,
    MAX_ITERATIONS,
    RATE_CEILING,
    RATE_FLOOR,
    VALUE_TOLERANCE,
    ZERO_RATE_EPSILON,
    Frequency,
    PaymentTiming,
    TVMMode,
)
from .periods import advance, effective_annual_rate, periods_per_year, rate_per_period
from .solvers import bisect, newton_raphson

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TVMInput:
    present_value: float = 0.0
    future_value: float = 0.0
    payment: float = 0.0
    annual_rate_percent: float = 0.0
    periods: float = 0.0
    compounding_frequency: Frequency = DEFAULT_FREQUENCY
    payment_timing: PaymentTiming = DEFAULT_TIMING

    @property
    def periodic_rate(self) -> float:
        return rate_per_period(self.annual_rate_percent, self.compounding_frequency)

    @property
    def timing_flag(self) -> int:
        return 1 if self.payment_timing == "begin" else 0


@dataclass(frozen=True)
class TVMResult:
    value: float
    total_investment: float
    total_interest: float
    effective_rate: float          # percent, nominal rate annualised by compounding
    converged: bool = True
    iterations: int = 0


@dataclass(frozen=True)
class TVMScheduleRow:
    period: int
    date: Optional[date]
    payment: float
    interest: float
    balance: float
    cumulative_interest: float
    cumulative_payment: float


@dataclass(frozen=True)
class ScenarioDifference:
    name: str
    absolute: float
    percentage: Optional[float]  # None when the baseline value is zero


def _annuity_factor(r: float, n: float, timing_flag: int) -> float:
    """FV of one unit paid each period: ((1+r)^n - 1)/r * (1 + r*t)."""
    if r == 0:
        return n
    return ((1 + r) ** n - 1) / r * (1 + r * timing_flag)


def _future_value(pv: float, pmt: float, r: float, n: float, timing_flag: int) -> float:
    if abs(r) < ZERO_RATE_EPSILON:
        return pv + pmt * n
    return pv * (1 + r) ** n + pmt * _annuity_factor(r, n, timing_flag)


def _effective(inp: TVMInput, annual_rate_percent: Optional[float] = None) -> float:
    rate = inp.annual_rate_percent if annual_rate_percent is None else annual_rate_percent
    return effective_annual_rate(rate, inp.compounding_frequency)


def solve_fv(inp: TVMInput) -> TVMResult:
    r, n = inp.periodic_rate, inp.periods
    fv = _future_value(inp.present_value, inp.payment, r, n, inp.timing_flag)
    invested = inp.present_value + inp.payment * n
    return TVMResult(fv, invested, fv - invested, _effective(inp))


def solve_pv(inp: TVMInput) -> TVMResult:
    r, n = inp.periodic_rate, inp.periods
    annuity = inp.payment * _annuity_factor(r, n, inp.timing_flag)
    pv = (inp.future_value - annuity) / (1 + r) ** n
    invested = pv + inp.payment * n
    return TVMResult(pv, invested, inp.future_value - invested, _effective(inp))


def solve_pmt(inp: TVMInput) -> TVMResult:
    r, n = inp.periodic_rate, inp.periods
    if n <= 0:
        return TVMResult(0.0, inp.present_value, 0.0, _effective(inp), converged=False)
    factor = _annuity_factor(r, n, inp.timing_flag)
    pmt = (inp.future_value - inp.present_value * (1 + r) ** n) / factor
    invested = inp.present_value + pmt * n
    return TVMResult(pmt, invested, inp.future_value - invested, _effective(inp))


def solve_periods(inp: TVMInput) -> TVMResult:
    """Real-valued period count; callers ceil it for a whole-period schedule.

    An unreachable target (wrong signs, payment that never moves the balance
    toward FV) yields 0 with ``converged=False``.
    """
    pv, fv, pmt, r = inp.present_value, inp.future_value, inp.payment, inp.periodic_rate
    n: Optional[float] = None

    if r == 0:
        if pmt != 0:
            n = (fv - pv) / pmt
    else:
        # FV = (PV + a) * (1+r)^n - a   with a = PMT * (1 + r*t) / r
        a = pmt * (1 + r * inp.timing_flag) / r
        num, den = fv + a, pv + a
        if den != 0 and num / den > 0:
            n = math.log(num / den) / math.log(1 + r)

    if n is None or n < 0:
        logger.debug("Period count unreachable for %r", inp)
        return TVMResult(0.0, pv, 0.0, _effective(inp), converged=False)

    invested = pv + pmt * n
    return TVMResult(n, invested, fv - invested, _effective(inp))


def solve_rate(inp: TVMInput) -> TVMResult:
    """Annual rate (percent) that makes FV(rate) hit the target FV.

    Newton-Raphson on the periodic rate, falling back to bisection over
    [RATE_FLOOR, RATE_CEILING]; the two share one iteration budget. Convergence
    is judged on the value: |FV(rate) - target| < VALUE_TOLERANCE.
    """
    pv, fv, pmt, n, t = inp.present_value, inp.future_value, inp.payment, inp.periods, inp.timing_flag
    ppy = periods_per_year(inp.compounding_frequency)
    invested = pv + pmt * n

    if n <= 0:
        return TVMResult(0.0, invested, fv - invested, _effective(inp, 0.0), converged=False)

    tolerance = VALUE_TOLERANCE
    if abs(invested - fv) < tolerance:
        return TVMResult(0.0, invested, fv - invested, _effective(inp, 0.0))

    def f(r: float) -> float:
        try:
            return _future_value(pv, pmt, r, n, t) - fv
        except OverflowError:
            return math.inf if pv + pmt > 0 else -math.inf

    def df(r: float) -> float:
        g = 1 + r
        d_pv = pv * n * g ** (n - 1)
        if abs(r) < ZERO_RATE_EPSILON:
            return d_pv + pmt * (n * (n - 1) / 2 + n * t)
        term1 = (g ** n - 1) / r
        term2 = (n * g ** (n - 1) * r - g ** n + 1) / (r * r)
        return d_pv + pmt * (term2 * (1 + r * t) + term1 * t)

    budget = MAX_ITERATIONS // 2
    result = newton_raphson(
        f, df, 0.1 / ppy,
        tolerance=tolerance, max_iterations=budget, lower=RATE_FLOOR, upper=RATE_CEILING,
    )
    used = result.iterations
    if not result.converged:
        fallback = bisect(f, RATE_FLOOR, RATE_CEILING, tolerance=tolerance, max_iterations=budget)
        if fallback is not None:
            used += fallback.iterations
            result = fallback
        else:
            logger.warning("Rate search found no sign change; returning best estimate")

    annual = result.value * ppy * 100
    return TVMResult(
        annual, invested, fv - invested, _effective(inp, annual),
        converged=result.converged, iterations=used,
    )


_SOLVERS = {
    "FV": solve_fv,
    "PV": solve_pv,
    "PMT": solve_pmt,
    "N": solve_periods,
    "IY": solve_rate,
}


def solve(inp: TVMInput, mode: TVMMode) -> TVMResult:
    try:
        solver = _SOLVERS[mode]
    except KeyError:
        raise ValueError(
            f"Unknown calculation mode '{mode}'. Valid values: {', '.join(_SOLVERS)}"
        ) from None
    return solver(inp)


def _fill_unknown(inp: TVMInput, mode: TVMMode) -> Optional[TVMInput]:
    result = solve(inp, mode)
    if mode == "PV":
        return replace(inp, present_value=result.value)
    if mode == "PMT":
        return replace(inp, payment=result.value)
    if mode == "N":
        if not result.converged:
            return None
        return replace(inp, periods=float(math.ceil(result.value - 1e-9)))
    if mode == "IY":
        return replace(inp, annual_rate_percent=result.value)
    return inp


def cash_flow_schedule(
    inp: TVMInput,
    mode: TVMMode,
    start_date: Optional[date] = None,
) -> list[TVMScheduleRow]:
    """Period-by-period balance for the solved scenario.

    Covers whole periods (a fractional count is rounded up); for an integer
    count the final balance equals the solved FV.
    """
    solved = _fill_unknown(inp, mode)
    if solved is None:
        return []

    n = math.ceil(solved.periods - 1e-9)
    r = solved.periodic_rate
    pmt = solved.payment
    begin = solved.payment_timing == "begin"

    rows: list[TVMScheduleRow] = []
    balance = solved.present_value
    cumulative_interest = 0.0
    cumulative_payment = 0.0

    for period in range(1, n + 1):
        if begin:
            balance += pmt
            interest = balance * r
            balance += interest
        else:
            interest = balance * r
            balance += interest + pmt

        cumulative_interest += interest
        cumulative_payment += pmt
        rows.append(
            TVMScheduleRow(
                period=period,
                date=advance(start_date, period, solved.compounding_frequency) if start_date else None,
                payment=pmt,
                interest=interest,
                balance=balance,
                cumulative_interest=cumulative_interest,
                cumulative_payment=cumulative_payment,
            )
        )
    return rows


def compare_scenarios(scenarios: Sequence[tuple[str, TVMResult]]) -> list[ScenarioDifference]:
    """Difference of each scenario's value against the first one."""
    if len(scenarios) < 2:
        return []
    base = scenarios[0][1].value
    diffs = []
    for name, result in scenarios[1:]:
        absolute = result.value - base
        diffs.append(ScenarioDifference(name, absolute, absolute / base * 100 if base else None))
    return diffs
