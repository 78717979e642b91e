"""Sales tax, property tax and GST. Amounts are rounded to cents."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TaxResult:
    base_amount: float
    tax_amount: float
    total_amount: float


@dataclass(frozen=True)
class GSTResult:
    base_amount: float
    gst_rate_percent: float
    cgst: float
    sgst: float
    igst: float
    total_gst: float
    final_amount: float
    inter_state: bool


def sales_tax(amount: float, rate_percent: float) -> TaxResult:
    tax = amount * rate_percent / 100
    return TaxResult(round(amount, 2), round(tax, 2), round(amount + tax, 2))


def property_tax(assessed_value: float, rate_percent: float) -> TaxResult:
    tax = assessed_value * rate_percent / 100
    return TaxResult(round(assessed_value, 2), round(tax, 2), round(assessed_value + tax, 2))


def gst(amount: float, rate_percent: float, inter_state: bool = False, inclusive: bool = False) -> GSTResult:
    """GST on *amount*, or extracted from it when *inclusive*.

    Intra-state tax is split equally into CGST and SGST; inter-state tax is
    charged entirely as IGST.
    """
    if inclusive:
        base = amount / (1 + rate_percent / 100)
        total_gst = amount - base
    else:
        base = amount
        total_gst = amount * rate_percent / 100

    if inter_state:
        cgst = sgst = 0.0
        igst = total_gst
    else:
        cgst = sgst = total_gst / 2
        igst = 0.0

    return GSTResult(
        base_amount=round(base, 2),
        gst_rate_percent=rate_percent,
        cgst=round(cgst, 2),
        sgst=round(sgst, 2),
        igst=round(igst, 2),
        total_gst=round(total_gst, 2),
        final_amount=round(base + total_gst, 2),
        inter_state=inter_state,
    )
