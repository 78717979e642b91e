"""Root finding shared by the TVM, bond, APR and IRR engines.

Solvers never raise on numeric trouble. They return a :class:`SolverResult`
whose ``converged`` flag tells the caller whether ``value`` met the tolerance
or is only the best estimate reached before the iteration cap.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from .config import MAX_ITERATIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverResult:
    value: float
    converged: bool
    iterations: int


def newton_raphson(
    f: Callable[[float], float],
    df: Callable[[float], float],
    x0: float,
    *,
    tolerance: float,
    max_iterations: int = MAX_ITERATIONS,
    lower: Optional[float] = None,
    upper: Optional[float] = None,
) -> SolverResult:
    """Find x with |f(x)| < tolerance starting from *x0*.

    Iterates x -= f(x)/f'(x), clamping each step into [lower, upper] when given.
    Stops immediately if the derivative is exactly zero or non-finite. On
    failure the x with the smallest |f(x)| seen is returned.
    """
    x = x0
    best_x, best_err = x0, math.inf

    for i in range(1, max_iterations + 1):
        try:
            fx = f(x)
        except (OverflowError, ZeroDivisionError):
            logger.debug("Newton-Raphson: f undefined at x=%r, stopping", x)
            return SolverResult(best_x, False, i)

        if not math.isfinite(fx):
            return SolverResult(best_x, False, i)
        if abs(fx) < best_err:
            best_x, best_err = x, abs(fx)
        if abs(fx) < tolerance:
            return SolverResult(x, True, i)

        try:
            slope = df(x)
        except (OverflowError, ZeroDivisionError):
            return SolverResult(best_x, False, i)
        if slope == 0 or not math.isfinite(slope):
            logger.warning("Newton-Raphson: zero derivative at x=%r, returning current guess", x)
            return SolverResult(best_x, False, i)

        x = x - fx / slope
        if lower is not None and x < lower:
            x = lower
        if upper is not None and x > upper:
            x = upper

    logger.warning(
        "Newton-Raphson did not converge in %d iterations (best |f|=%.3g)",
        max_iterations, best_err,
    )
    return SolverResult(best_x, False, max_iterations)


def bisect(
    f: Callable[[float], float],
    lo: float,
    hi: float,
    *,
    tolerance: float,
    max_iterations: int = MAX_ITERATIONS,
) -> Optional[SolverResult]:
    """Bisection on [lo, hi]; returns None when f does not change sign there."""
    f_lo, f_hi = f(lo), f(hi)
    if f_lo == 0:
        return SolverResult(lo, True, 0)
    if f_hi == 0:
        return SolverResult(hi, True, 0)
    if (f_lo > 0) == (f_hi > 0):
        return None

    mid = (lo + hi) / 2
    for i in range(1, max_iterations + 1):
        mid = (lo + hi) / 2
        f_mid = f(mid)
        if abs(f_mid) < tolerance:
            return SolverResult(mid, True, i)
        if (f_mid > 0) == (f_lo > 0):
            lo, f_lo = mid, f_mid
        else:
            hi = mid
    return SolverResult(mid, False, max_iterations)
