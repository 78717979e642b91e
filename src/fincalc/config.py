"""Application-wide constants and configuration defaults.

All tuneable defaults live here so there is a single place to adjust them.
"""
from __future__ import annotations

from typing import Literal

# ── Type aliases ──────────────────────────────────────────────────────────────

Frequency = Literal["daily", "monthly", "quarterly", "semiannual", "annual"]
PaymentTiming = Literal["begin", "end"]
TVMMode = Literal["FV", "PV", "PMT", "N", "IY"]
ExtraPaymentKind = Literal["monthly", "lump"]
PrepaymentMode = Literal["reduce_tenure", "reduce_emi"]
CashFlowKind = Literal["Coupon", "Principal", "Total"]
InvestmentKind = Literal["lumpsum", "sip", "combined", "stepup"]
VALoanPurpose = Literal["purchase", "cash-out", "irrrl"]
HealthStatus = Literal["excellent", "good", "moderate", "risky", "high-risk"]

# ── Compounding frequencies ───────────────────────────────────────────────────

PERIODS_PER_YEAR: dict[str, int] = {
    "daily": 365,
    "monthly": 12,
    "quarterly": 4,
    "semiannual": 2,
    "annual": 1,
}

# Months spanned by one period, for calendar-based date arithmetic
MONTHS_PER_PERIOD: dict[str, int] = {
    "monthly": 1,
    "quarterly": 3,
    "semiannual": 6,
    "annual": 12,
}

# Coupon frequency (payments per year) → frequency name
BOND_FREQUENCIES: dict[int, Frequency] = {
    1: "annual",
    2: "semiannual",
    4: "quarterly",
    12: "monthly",
}

DEFAULT_FREQUENCY: Frequency = "monthly"
DEFAULT_TIMING: PaymentTiming = "end"

# ── Numeric solver parameters ─────────────────────────────────────────────────

MAX_ITERATIONS: int = 100
PRICE_TOLERANCE: float = 1e-5     # |price(guess) - target| for YTM
VALUE_TOLERANCE: float = 1e-5     # |FV(rate) - target| for I/Y
NPV_TOLERANCE: float = 1e-5
RATE_FLOOR: float = -0.99         # periodic rates never go below this during iteration
RATE_CEILING: float = 10.0
ZERO_RATE_EPSILON: float = 1e-7

# Balance at or below this is treated as fully repaid
BALANCE_EPSILON: float = 1e-6

# ── Calendar conventions ──────────────────────────────────────────────────────

DAYS_PER_YEAR: float = 365.25     # informational years-to-maturity
SIMPLE_INTEREST_DAY_COUNT: int = 365

# ── DTI thresholds (percent) ──────────────────────────────────────────────────

CONVENTIONAL_FRONT_END_MAX = 28.0
CONVENTIONAL_BACK_END_MAX = 36.0
FHA_FRONT_END_MAX = 31.0
FHA_BACK_END_MAX = 43.0
VA_BACK_END_MAX = 41.0

# Upper bound (inclusive) of each health band, ordered
DTI_HEALTH_BANDS: tuple[tuple[float, HealthStatus], ...] = (
    (33.0, "excellent"),
    (36.0, "good"),
    (43.0, "moderate"),
    (50.0, "risky"),
)

# ── Mortgage programme defaults (percent) ─────────────────────────────────────

FHA_UPFRONT_MIP_RATE = 1.75
FHA_ANNUAL_MIP_RATE = 0.55

VA_IRRRL_FEE = 0.5
VA_FIRST_USE_LOW_DOWN_FEE = 2.15
VA_SUBSEQUENT_USE_LOW_DOWN_FEE = 3.3
VA_FIVE_PCT_DOWN_FEE = 1.5
VA_TEN_PCT_DOWN_FEE = 1.25

# ── Rental property assumptions ───────────────────────────────────────────────

RESIDENTIAL_DEPRECIATION_YEARS = 27.5
LAND_VALUE_RATIO = 0.20

# Screening rules: rent as % of price, and operating expenses as % of gross income
ONE_PERCENT_RULE_MIN = 1.0
FIFTY_PERCENT_RULE_BAND = (40.0, 60.0)

# ── Lease conventions ─────────────────────────────────────────────────────────

MONEY_FACTOR_APR_DIVISOR = 2400.0
