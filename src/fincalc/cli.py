"""Command-line front end: one click sub-command per calculator.

Every sub-command builds the engine input from its options, runs the engine
once and renders the result with rich. Schedules can be written to CSV with
``--csv PATH``. Bad option values are reported on stderr with exit code 1.
"""
from __future__ import annotations

import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from .amortization import (
    AmortizationRow,
    ExtraPayment,
    LoanParameters,
    RateChange,
    build_schedule,
    compute_loan_summary,
)
from .bond import BondParameters, analyze_bond, pull_to_par
from .chit import calculate_chit
from .config import BOND_FREQUENCIES, DEFAULT_FREQUENCY, PERIODS_PER_YEAR
from .dti import dti_from_totals
from .export import write_csv
from .interest import (
    Prepayment,
    SimpleRateChange,
    advanced_simple_interest,
    calculate_cd,
    compound_interest,
    simple_interest,
)
from .investment import combined, goal_required_sip, lumpsum, sip, step_up_sip, yearly_breakdown
from .irr import cash_flow_schedule as irr_schedule, irr, npv, npv_sensitivity
from .lease import LeaseInput, calculate_lease
from .mortgage import Escrow, calculate_fha, calculate_va
from .realestate import RentalInput, analyze_rental
from .refinance import RefinanceInput, compare_refinance
from .tax import gst, property_tax, sales_tax
from .tvm import TVMInput, cash_flow_schedule, solve

console = Console()
err_console = Console(stderr=True, style="bold red")

FREQUENCY_CHOICE = click.Choice(list(PERIODS_PER_YEAR))
DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])

# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _fmt_money(value: float) -> str:
    return f"{value:,.2f}"


def _fmt_pct(value: float) -> str:
    return f"{value:.4f}%"


def _fmt_months(n: int) -> str:
    years, months = divmod(n, 12)
    if months == 0:
        return f"{n} months ({years} years)"
    return f"{n} months ({years}y {months}m)"


def _fmt_date(value: Optional[date]) -> str:
    return value.isoformat() if value else "-"


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value else None


def _pass_fail(flag: bool) -> str:
    return "[green]pass[/green]" if flag else "[red]fail[/red]"


def _panel(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold green]{title}[/bold green]", expand=False))


def _summary(rows: Sequence[tuple[str, str]]) -> None:
    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    for name, value in rows:
        t.add_row(name, value)
    console.print(t)


def _table(title: str, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    t = Table(title=title, box=box.MINIMAL_HEAVY_HEAD)
    for col in columns:
        t.add_column(col, justify="right")
    for row in rows:
        t.add_row(*row)
    console.print(t)


def _fail(message: str) -> None:
    err_console.print(message)
    sys.exit(1)


def _export(path: Optional[Path], rows: Sequence) -> None:
    if path is None:
        return
    write_csv(path, rows)
    console.print(f"[green]Wrote {len(rows)} rows to {path}[/green]")


def _split_pair(raw: str, option: str) -> tuple[str, str]:
    key, sep, value = raw.partition(":")
    if not sep or not key or not value:
        raise click.BadParameter(f"expected KEY:VALUE, got '{raw}'", param_hint=option)
    return key.strip(), value.strip()


def _month_pairs(raw_values: Sequence[str], option: str) -> list[tuple[int, float]]:
    pairs = []
    for raw in raw_values:
        key, value = _split_pair(raw, option)
        try:
            pairs.append((int(key), float(value)))
        except ValueError:
            raise click.BadParameter(f"expected MONTH:NUMBER, got '{raw}'", param_hint=option) from None
    return pairs


def _date_pairs(raw_values: Sequence[str], option: str) -> list[tuple[date, float]]:
    pairs = []
    for raw in raw_values:
        key, value = _split_pair(raw, option)
        try:
            pairs.append((date.fromisoformat(key), float(value)))
        except ValueError:
            raise click.BadParameter(f"expected YYYY-MM-DD:NUMBER, got '{raw}'", param_hint=option) from None
    return pairs


def _display_amortization(schedule: Sequence[AmortizationRow]) -> None:
    _table(
        "Amortization Schedule",
        ("Period", "Date", "Opening Bal.", "Payment", "Principal", "Interest", "Extra", "Closing Bal."),
        [
            (
                str(r.period),
                _fmt_date(r.date),
                _fmt_money(r.opening_balance),
                _fmt_money(r.payment),
                _fmt_money(r.principal_component),
                _fmt_money(r.interest_component),
                _fmt_money(r.extra_payment),
                _fmt_money(r.ending_balance),
            )
            for r in schedule
        ],
    )


# ──────────────────────────────────────────────────────────────────────────────
# Click group
# ──────────────────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log solver and engine details to stderr")
def main(verbose: bool) -> None:
    """Financial calculators: loans, TVM, bonds, interest, investments and ratios."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


csv_option = click.option(
    "--csv", "csv_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="Write the schedule to this CSV file",
)

# ──────────────────────────────────────────────────────────────────────────────
# Loans
# ──────────────────────────────────────────────────────────────────────────────

@main.command()
@click.option("--principal", type=float, required=True)
@click.option("--rate", type=float, required=True, help="Annual interest rate in percent")
@click.option("--months", type=int, required=True, help="Loan term in months")
@click.option("--start", type=DATE_TYPE, default=None, help="Loan start date (YYYY-MM-DD)")
@click.option("--extra", type=float, default=0.0, help="Recurring extra payment each month")
@click.option("--extra-from", type=int, default=1, show_default=True, help="First month of the recurring extra payment")
@click.option("--lump", multiple=True, help="One-time extra payment MONTH:AMOUNT (repeatable)")
@click.option("--rate-change", multiple=True, help="Rate reset MONTH:RATE (repeatable)")
@click.option("--reduce-emi", is_flag=True, help="Prepayments lower the payment instead of the term")
@click.option("--fees", type=float, default=0.0, help="Upfront fees, used for the APR")
@click.option("--schedule", "show_schedule", is_flag=True, help="Print the full schedule")
@csv_option
def loan(
    principal: float,
    rate: float,
    months: int,
    start: Optional[datetime],
    extra: float,
    extra_from: int,
    lump: tuple[str, ...],
    rate_change: tuple[str, ...],
    reduce_emi: bool,
    fees: float,
    show_schedule: bool,
    csv_path: Optional[Path],
) -> None:
    """Amortized loan with optional extra payments and rate resets."""
    extras = [ExtraPayment(amount, "lump", month) for month, amount in _month_pairs(lump, "--lump")]
    if extra > 0:
        extras.append(ExtraPayment(extra, "monthly", extra_from))
    changes = [RateChange(month, new_rate) for month, new_rate in _month_pairs(rate_change, "--rate-change")]

    mode = "reduce_emi" if reduce_emi else "reduce_tenure"
    params = LoanParameters(principal, rate, months, _as_date(start), extras, changes, mode)
    summary = compute_loan_summary(params, fees)
    schedule = build_schedule(params)

    if not schedule:
        _fail("Principal and term must both be positive.")

    _panel("Loan Summary")
    rows = [
        ("Monthly payment", _fmt_money(summary.monthly_payment)),
        ("Final payment", _fmt_money(summary.final_payment)),
        ("First month interest", _fmt_money(summary.first_month_interest)),
        ("Total interest", _fmt_money(summary.total_interest)),
        ("Total paid", _fmt_money(summary.total_paid)),
        ("Payments", _fmt_months(summary.number_of_payments)),
        ("Payoff date", _fmt_date(summary.payoff_date)),
        ("APR", _fmt_pct(summary.effective_annual_rate)),
    ]
    if extras:
        rows.append(("Interest saved", _fmt_money(summary.interest_saved)))
        rows.append(("Months saved", str(summary.months_saved)))
    _summary(rows)

    if show_schedule:
        _display_amortization(schedule)
    _export(csv_path, schedule)


def _escrow_options(func):
    func = click.option("--property-tax", type=float, default=0.0, help="Monthly property tax")(func)
    func = click.option("--insurance", type=float, default=0.0, help="Monthly home insurance")(func)
    func = click.option("--hoa", type=float, default=0.0, help="Monthly HOA fees")(func)
    return func


@main.command()
@click.option("--price", type=float, required=True, help="Home price")
@click.option("--down", type=float, required=True, help="Down payment amount")
@click.option("--rate", type=float, required=True)
@click.option("--years", type=int, default=30, show_default=True)
@_escrow_options
@csv_option
def fha(price: float, down: float, rate: float, years: int, property_tax: float,
        insurance: float, hoa: float, csv_path: Optional[Path]) -> None:
    """FHA mortgage with financed upfront MIP and annual MIP."""
    result = calculate_fha(price, down, rate, years, Escrow(property_tax, insurance, hoa))
    _panel("FHA Loan")
    _summary([
        ("Base loan", _fmt_money(result.base_loan_amount)),
        ("Upfront MIP (financed)", _fmt_money(result.financed_upfront_mip)),
        ("Total loan", _fmt_money(result.total_loan_amount)),
        ("Principal & interest", _fmt_money(result.monthly_principal_and_interest)),
        ("Monthly MIP", _fmt_money(result.monthly_mip)),
        ("Escrow", _fmt_money(result.monthly_escrow)),
        ("Total monthly payment", _fmt_money(result.total_monthly_payment)),
        ("Total interest", _fmt_money(result.total_interest)),
        ("Total MIP", _fmt_money(result.total_mip_paid)),
    ])
    _export(csv_path, result.schedule)


@main.command()
@click.option("--price", type=float, required=True, help="Home price")
@click.option("--down", type=float, default=0.0, help="Down payment amount")
@click.option("--rate", type=float, required=True)
@click.option("--years", type=int, default=30, show_default=True)
@click.option("--purpose", type=click.Choice(["purchase", "cash-out", "irrrl"]), default="purchase", show_default=True)
@click.option("--subsequent-use", is_flag=True, help="Veteran has used the VA benefit before")
@click.option("--disabled", is_flag=True, help="Exempt from the funding fee")
@_escrow_options
@csv_option
def va(price: float, down: float, rate: float, years: int, purpose: str, subsequent_use: bool,
       disabled: bool, property_tax: float, insurance: float, hoa: float, csv_path: Optional[Path]) -> None:
    """VA mortgage with financed funding fee."""
    result = calculate_va(
        price, down, rate, years, purpose, not subsequent_use, disabled,  # type: ignore[arg-type]
        Escrow(property_tax, insurance, hoa),
    )
    _panel("VA Loan")
    _summary([
        ("Funding fee rate", _fmt_pct(result.funding_fee_rate)),
        ("Funding fee", _fmt_money(result.funding_fee_amount)),
        ("Total loan", _fmt_money(result.total_loan_amount)),
        ("Principal & interest", _fmt_money(result.monthly_principal_and_interest)),
        ("Escrow", _fmt_money(result.monthly_escrow)),
        ("Total monthly payment", _fmt_money(result.total_monthly_payment)),
        ("Total interest", _fmt_money(result.total_interest)),
    ])
    _export(csv_path, result.schedule)


# ──────────────────────────────────────────────────────────────────────────────
# Time value of money
# ──────────────────────────────────────────────────────────────────────────────

@main.command()
@click.option("--mode", type=click.Choice(["FV", "PV", "PMT", "N", "IY"], case_sensitive=False), required=True,
              help="Which value to solve for")
@click.option("--pv", type=float, default=0.0, help="Present value")
@click.option("--fv", type=float, default=0.0, help="Future value")
@click.option("--pmt", type=float, default=0.0, help="Payment per period")
@click.option("--rate", type=float, default=0.0, help="Annual rate in percent")
@click.option("--periods", type=float, default=0.0, help="Number of periods")
@click.option("--frequency", type=FREQUENCY_CHOICE, default=DEFAULT_FREQUENCY, show_default=True)
@click.option("--timing", type=click.Choice(["begin", "end"]), default="end", show_default=True)
@click.option("--schedule", "show_schedule", is_flag=True, help="Print the period-by-period balance")
@csv_option
def tvm(mode: str, pv: float, fv: float, pmt: float, rate: float, periods: float, frequency: str,
        timing: str, show_schedule: bool, csv_path: Optional[Path]) -> None:
    """Solve the time-value-of-money identity for one unknown."""
    mode = mode.upper()
    inp = TVMInput(pv, fv, pmt, rate, periods, frequency, timing)  # type: ignore[arg-type]
    result = solve(inp, mode)  # type: ignore[arg-type]

    labels = {"FV": "Future value", "PV": "Present value", "PMT": "Payment", "N": "Periods", "IY": "Annual rate"}
    value = _fmt_pct(result.value) if mode == "IY" else (
        f"{result.value:.4f}" if mode == "N" else _fmt_money(result.value)
    )
    _panel(f"TVM — solve for {mode}")
    rows = [
        (labels[mode], value),
        ("Total investment", _fmt_money(result.total_investment)),
        ("Total interest", _fmt_money(result.total_interest)),
        ("Effective annual rate", _fmt_pct(result.effective_rate)),
    ]
    if not result.converged:
        rows.append(("Converged", "[yellow]no (best estimate)[/yellow]"))
    _summary(rows)

    schedule = cash_flow_schedule(inp, mode) if (show_schedule or csv_path) else []  # type: ignore[arg-type]
    if show_schedule:
        _table(
            "Cash Flow Schedule",
            ("Period", "Payment", "Interest", "Balance"),
            [(str(r.period), _fmt_money(r.payment), _fmt_money(r.interest), _fmt_money(r.balance)) for r in schedule],
        )
    _export(csv_path, schedule)


# ──────────────────────────────────────────────────────────────────────────────
# Bonds
# ──────────────────────────────────────────────────────────────────────────────

@main.command()
@click.option("--face", type=float, default=1000.0, show_default=True)
@click.option("--coupon", type=float, required=True, help="Annual coupon rate in percent")
@click.option("--settlement", type=DATE_TYPE, required=True)
@click.option("--maturity", type=DATE_TYPE, required=True)
@click.option("--frequency", type=click.Choice([str(f) for f in BOND_FREQUENCIES]), default="2", show_default=True,
              help="Coupons per year")
@click.option("--yield", "market_yield", type=float, default=None, help="Market yield in percent (price mode)")
@click.option("--price", "target_price", type=float, default=None, help="Market price (yield mode)")
@click.option("--pull-to-par", "show_pull", is_flag=True, help="Print the price path to maturity")
@csv_option
def bond(face: float, coupon: float, settlement: datetime, maturity: datetime, frequency: str,
         market_yield: Optional[float], target_price: Optional[float], show_pull: bool,
         csv_path: Optional[Path]) -> None:
    """Bond price from yield, or yield to maturity from price."""
    params = BondParameters(
        face, coupon, settlement.date(), maturity.date(), int(frequency), market_yield, target_price
    )
    try:
        result = analyze_bond(params)
    except ValueError as exc:
        _fail(f"Parameter error: {exc}")
        return

    if result.periods == 0:
        _fail("Maturity must be after settlement and face value positive.")

    _panel("Bond Valuation")
    rows = [
        ("Price", _fmt_money(result.price)),
        ("Yield to maturity", _fmt_pct(result.ytm_percent)),
        ("Current yield", _fmt_pct(result.current_yield)),
        ("Macaulay duration (years)", f"{result.macaulay_duration:.4f}"),
        ("Modified duration", f"{result.modified_duration:.4f}"),
        ("Convexity", f"{result.convexity:.4f}"),
        ("Total coupons", _fmt_money(result.total_coupons)),
        ("Total return", _fmt_money(result.total_return)),
        ("Years to maturity", f"{result.years_to_maturity:.2f}"),
        ("Periods", str(result.periods)),
    ]
    if not result.converged:
        rows.append(("Converged", "[yellow]no (best estimate)[/yellow]"))
    _summary(rows)

    if show_pull:
        _table(
            "Pull to Par",
            ("Years elapsed", "Periods left", "Price"),
            [(str(p.years_elapsed), str(p.periods_remaining), _fmt_money(p.price))
             for p in pull_to_par(params, result.ytm_percent)],
        )
    _export(csv_path, result.schedule)


# ──────────────────────────────────────────────────────────────────────────────
# Interest
# ──────────────────────────────────────────────────────────────────────────────

@main.command()
@click.option("--principal", type=float, required=True)
@click.option("--rate", type=float, required=True)
@click.option("--years", type=float, required=True)
@click.option("--frequency", type=FREQUENCY_CHOICE, default="annual", show_default=True)
@csv_option
def compound(principal: float, rate: float, years: float, frequency: str, csv_path: Optional[Path]) -> None:
    """Compound interest with a yearly breakdown."""
    result = compound_interest(principal, rate, years, frequency)  # type: ignore[arg-type]
    _panel("Compound Interest")
    _summary([
        ("Final amount", _fmt_money(result.final_amount)),
        ("Total interest", _fmt_money(result.total_interest)),
        ("Effective annual rate", _fmt_pct(result.effective_annual_rate)),
    ])
    _table(
        "Yearly Breakdown",
        ("Year", "Opening", "Interest", "Closing"),
        [(str(y.year), _fmt_money(y.opening_balance), _fmt_money(y.interest), _fmt_money(y.closing_balance))
         for y in result.yearly],
    )
    _export(csv_path, result.yearly)


@main.command()
@click.option("--principal", type=float, required=True)
@click.option("--rate", type=float, required=True)
@click.option("--years", type=float, default=None, help="Term in years (basic mode)")
@click.option("--start", type=DATE_TYPE, default=None, help="Start date (dated mode)")
@click.option("--end", type=DATE_TYPE, default=None, help="End date (dated mode)")
@click.option("--prepay", multiple=True, help="Prepayment YYYY-MM-DD:AMOUNT (repeatable)")
@click.option("--rate-change", multiple=True, help="Rate change YYYY-MM-DD:RATE (repeatable)")
@csv_option
def simple(principal: float, rate: float, years: Optional[float], start: Optional[datetime],
           end: Optional[datetime], prepay: tuple[str, ...], rate_change: tuple[str, ...],
           csv_path: Optional[Path]) -> None:
    """Simple interest, either over a term or between dates with prepayments."""
    if start is not None and end is not None:
        result = advanced_simple_interest(
            principal, rate, start.date(), end.date(),
            tuple(Prepayment(d, a) for d, a in _date_pairs(prepay, "--prepay")),
            tuple(SimpleRateChange(d, r) for d, r in _date_pairs(rate_change, "--rate-change")),
        )
        _panel("Simple Interest (dated)")
        _summary([
            ("Total interest", _fmt_money(result.total_interest)),
            ("Total prepaid", _fmt_money(result.total_prepaid)),
            ("Final balance", _fmt_money(result.final_balance)),
        ])
        _table(
            "Segments",
            ("From", "To", "Days", "Balance", "Rate", "Interest"),
            [(s.start.isoformat(), s.end.isoformat(), str(s.days), _fmt_money(s.balance),
              _fmt_pct(s.annual_rate_percent), _fmt_money(s.interest)) for s in result.segments],
        )
        _export(csv_path, result.segments)
        return

    if years is None:
        _fail("Provide --years, or both --start and --end.")
        return

    basic = simple_interest(principal, rate, years)
    _panel("Simple Interest")
    _summary([
        ("Interest", _fmt_money(basic.interest)),
        ("Total amount", _fmt_money(basic.total_amount)),
    ])
    _export(csv_path, basic.yearly)


@main.command()
@click.option("--deposit", type=float, required=True)
@click.option("--rate", type=float, required=True)
@click.option("--months", type=int, required=True, help="Term in months")
@click.option("--frequency", type=FREQUENCY_CHOICE, default="monthly", show_default=True)
@click.option("--tax", type=float, default=0.0, help="Tax rate on interest, percent")
@click.option("--inflation", type=float, default=0.0, help="Annual inflation, percent")
@csv_option
def cd(deposit: float, rate: float, months: int, frequency: str, tax: float, inflation: float,
       csv_path: Optional[Path]) -> None:
    """Certificate of deposit growth, APY, tax and real value."""
    result = calculate_cd(deposit, rate, months, frequency, tax, inflation)  # type: ignore[arg-type]
    _panel("Certificate of Deposit")
    _summary([
        ("Final balance", _fmt_money(result.final_balance)),
        ("Total interest", _fmt_money(result.total_interest)),
        ("APY", _fmt_pct(result.apy)),
        ("Tax on interest", _fmt_money(result.tax_amount)),
        ("After-tax balance", _fmt_money(result.after_tax_balance)),
        ("Real value", _fmt_money(result.real_value)),
    ])
    _export(csv_path, result.schedule)


# ──────────────────────────────────────────────────────────────────────────────
# Investments
# ──────────────────────────────────────────────────────────────────────────────

@main.command()
@click.option("--kind", type=click.Choice(["lumpsum", "sip", "combined", "stepup"]), required=True)
@click.option("--principal", type=float, default=0.0, help="One-time investment")
@click.option("--monthly", type=float, default=0.0, help="Monthly contribution")
@click.option("--rate", type=float, required=True, help="Expected annual return, percent")
@click.option("--years", type=int, required=True)
@click.option("--step-up", type=float, default=0.0, help="Yearly contribution increase, percent")
@click.option("--inflation", type=float, default=None)
@click.option("--tax", type=float, default=None, help="Tax on returns, percent")
@csv_option
def invest(kind: str, principal: float, monthly: float, rate: float, years: int, step_up: float,
           inflation: Optional[float], tax: Optional[float], csv_path: Optional[Path]) -> None:
    """Investment growth for lumpsum, SIP, combined or step-up SIP."""
    if kind == "lumpsum":
        result = lumpsum(principal, rate, years, inflation, tax)
    elif kind == "sip":
        result = sip(monthly, rate, years, inflation, tax)
    elif kind == "combined":
        result = combined(principal, monthly, rate, years, inflation, tax)
    else:
        result = step_up_sip(monthly, rate, years, step_up, inflation, tax)

    _panel(f"Investment — {kind}")
    rows = [
        ("Total invested", _fmt_money(result.total_investment)),
        ("Total returns", _fmt_money(result.total_returns)),
        ("Future value", _fmt_money(result.future_value)),
        ("CAGR", _fmt_pct(result.cagr)),
    ]
    if result.real_value is not None:
        rows.append(("Real value", _fmt_money(result.real_value)))
    if result.after_tax_value is not None:
        rows.append(("After-tax value", _fmt_money(result.after_tax_value)))
    _summary(rows)

    breakdown = yearly_breakdown(kind, rate, years, principal, monthly, step_up)  # type: ignore[arg-type]
    _table(
        "Yearly Breakdown",
        ("Year", "Invested", "Interest", "Balance"),
        [(str(y.year), _fmt_money(y.total_investment), _fmt_money(y.interest_earned), _fmt_money(y.balance))
         for y in breakdown],
    )
    _export(csv_path, breakdown)


@main.command()
@click.option("--target", type=float, required=True, help="Goal amount")
@click.option("--savings", type=float, default=0.0, help="Current savings")
@click.option("--rate", type=float, required=True)
@click.option("--years", type=float, required=True)
def goal(target: float, savings: float, rate: float, years: float) -> None:
    """Monthly contribution needed to reach a savings goal."""
    plan = goal_required_sip(target, savings, rate, years)
    _panel("Goal Planner")
    _summary([
        ("Savings grow to", _fmt_money(plan.current_savings_future_value)),
        ("Shortfall", _fmt_money(plan.shortfall)),
        ("Required monthly investment", _fmt_money(plan.required_monthly_investment)),
        ("Total to invest", _fmt_money(plan.total_investment)),
    ])


@main.command(name="irr")
@click.argument("cash_flows", type=float, nargs=-1, required=True)
@click.option("--discount-rate", type=float, default=10.0, show_default=True, help="Rate for NPV, percent")
@click.option("--finance-rate", type=float, default=10.0, show_default=True, help="Finance rate for MIRR, percent")
@click.option("--sensitivity", "show_sensitivity", is_flag=True, help="Print NPV at discount rates from 0% to 50%")
@csv_option
def irr_command(cash_flows: tuple[float, ...], discount_rate: float, finance_rate: float,
                show_sensitivity: bool, csv_path: Optional[Path]) -> None:
    """IRR, MIRR, NPV and payback for CASH_FLOWS (period 0 first)."""
    result = irr(cash_flows, finance_rate_percent=finance_rate)
    _panel("Internal Rate of Return")
    rows = [
        ("IRR", _fmt_pct(result.irr) if result.converged else "[yellow]not found[/yellow]"),
        ("MIRR", _fmt_pct(result.mirr) if result.mirr is not None else "-"),
        (f"NPV @ {discount_rate}%", _fmt_money(npv(cash_flows, discount_rate))),
        ("Payback (periods)", f"{result.payback_period:.2f}" if result.payback_period is not None else "never"),
    ]
    _summary(rows)
    if show_sensitivity:
        _table("NPV Sensitivity", ("Rate", "NPV"),
               [(_fmt_pct(p.rate), _fmt_money(p.npv)) for p in npv_sensitivity(cash_flows)])
    _export(csv_path, irr_schedule(cash_flows, discount_rate))


# ──────────────────────────────────────────────────────────────────────────────
# Ratios
# ──────────────────────────────────────────────────────────────────────────────

@main.command()
@click.option("--income", type=float, required=True, help="Gross monthly income")
@click.option("--housing", type=float, required=True, help="Monthly housing costs")
@click.option("--debts", type=float, default=0.0, help="Other monthly debt payments")
def dti(income: float, housing: float, debts: float) -> None:
    """Front-end and back-end debt-to-income ratios."""
    result = dti_from_totals(income, housing, debts)

    def yes_no(flag: bool) -> str:
        return "[green]yes[/green]" if flag else "[red]no[/red]"

    _panel("Debt-to-Income")
    _summary([
        ("Front-end ratio", _fmt_pct(result.front_end_ratio)),
        ("Back-end ratio", _fmt_pct(result.back_end_ratio)),
        ("Health", result.health_status),
        ("Conventional", yes_no(result.qualification.conventional)),
        ("FHA", yes_no(result.qualification.fha)),
        ("VA", yes_no(result.qualification.va)),
    ])


@main.command()
@click.option("--balance", type=float, required=True, help="Current loan balance")
@click.option("--rate", type=float, required=True, help="Current rate, percent")
@click.option("--years", type=int, required=True, help="Remaining term in years")
@click.option("--new-amount", type=float, default=None, help="New loan amount (defaults to the balance)")
@click.option("--new-rate", type=float, required=True)
@click.option("--new-years", type=int, required=True)
@click.option("--closing-costs", type=float, default=0.0)
@csv_option
def refinance(balance: float, rate: float, years: int, new_amount: Optional[float], new_rate: float,
              new_years: int, closing_costs: float, csv_path: Optional[Path]) -> None:
    """Compare the current loan with a refinance."""
    result = compare_refinance(RefinanceInput(
        balance, rate, years, balance if new_amount is None else new_amount, new_rate, new_years, closing_costs
    ))
    _panel("Refinance")
    _summary([
        ("Current payment", _fmt_money(result.current_payment)),
        ("New payment", _fmt_money(result.new_payment)),
        ("Monthly savings", _fmt_money(result.monthly_savings)),
        ("Interest savings", _fmt_money(result.interest_savings)),
        ("Net lifetime savings", _fmt_money(result.net_lifetime_savings)),
        ("Break-even", _fmt_months(result.break_even_months)
         if result.break_even_months is not None else "[yellow]not recoverable[/yellow]"),
    ])
    _export(csv_path, result.projections)


@main.command()
@click.option("--price", type=float, required=True, help="Purchase price")
@click.option("--down", type=float, required=True, help="Down payment")
@click.option("--rate", type=float, required=True)
@click.option("--years", type=int, default=30, show_default=True, help="Loan term")
@click.option("--rent", type=float, required=True, help="Monthly gross rent")
@click.option("--closing-costs", type=float, default=0.0)
@click.option("--rehab", type=float, default=0.0)
@click.option("--vacancy", type=float, default=0.0, help="Vacancy rate, percent")
@click.option("--expenses", type=float, default=0.0, help="Other monthly operating expenses")
@click.option("--property-tax", type=float, default=0.0, help="Monthly property tax")
@click.option("--insurance", type=float, default=0.0, help="Monthly insurance")
@click.option("--appreciation", type=float, default=0.0, help="Annual appreciation, percent")
@click.option("--hold", type=int, default=5, show_default=True, help="Holding period in years")
@csv_option
def rental(price: float, down: float, rate: float, years: int, rent: float, closing_costs: float,
           rehab: float, vacancy: float, expenses: float, property_tax: float, insurance: float,
           appreciation: float, hold: int, csv_path: Optional[Path]) -> None:
    """Rental property cash flow and return metrics."""
    result = analyze_rental(RentalInput(
        purchase_price=price,
        down_payment=down,
        interest_rate_percent=rate,
        loan_term_years=years,
        closing_costs=closing_costs,
        rehab_costs=rehab,
        gross_rent=rent,
        vacancy_rate_percent=vacancy,
        property_tax=property_tax,
        insurance=insurance,
        other_expenses=expenses,
        appreciation_rate_percent=appreciation,
        holding_years=hold,
    ))
    _panel("Rental Property")
    _summary([
        ("Monthly NOI", _fmt_money(result.monthly.noi)),
        ("Monthly cash flow", _fmt_money(result.monthly.cash_flow)),
        ("Cap rate", _fmt_pct(result.cap_rate)),
        ("Cash-on-cash", _fmt_pct(result.cash_on_cash)),
        ("DSCR", f"{result.dscr:.2f}"),
        ("Gross rent multiplier", f"{result.gross_rent_multiplier:.2f}"),
        ("Break-even occupancy", _fmt_pct(result.break_even_occupancy)),
        ("1% rule", f"{_fmt_pct(result.one_percent_rule.ratio)} {_pass_fail(result.one_percent_rule.passes)}"),
        ("50% rule", f"{_fmt_pct(result.fifty_percent_rule.ratio)} {_pass_fail(result.fifty_percent_rule.passes)}"),
        ("Total ROI", _fmt_pct(result.total_roi)),
        ("Annualized ROI", _fmt_pct(result.annualized_roi)),
    ])
    _export(csv_path, result.projections)


@main.command()
@click.option("--price", type=float, required=True, help="Negotiated price")
@click.option("--residual", type=float, required=True, help="Residual value")
@click.option("--months", type=int, default=36, show_default=True)
@click.option("--money-factor", type=float, default=0.0)
@click.option("--apr", type=float, default=None, help="APR in percent, overrides the money factor")
@click.option("--down", type=float, default=0.0)
@click.option("--trade-in", type=float, default=0.0)
@click.option("--fees", type=float, default=0.0)
@click.option("--capitalize-fees", is_flag=True, help="Roll fees into the capitalized cost")
@click.option("--tax", type=float, default=0.0, help="Sales tax, percent")
@click.option("--upfront-tax", is_flag=True, help="Tax the price upfront instead of each payment")
def lease(price: float, residual: float, months: int, money_factor: float, apr: Optional[float],
          down: float, trade_in: float, fees: float, capitalize_fees: bool, tax: float, upfront_tax: bool) -> None:
    """Auto lease payment."""
    result = calculate_lease(LeaseInput(
        price, residual, months, money_factor, apr, down, trade_in, fees,
        not capitalize_fees, tax, not upfront_tax,
    ))
    _panel("Auto Lease")
    _summary([
        ("Depreciation fee", _fmt_money(result.depreciation_fee)),
        ("Rent charge", _fmt_money(result.rent_charge)),
        ("Monthly tax", _fmt_money(result.monthly_tax)),
        ("Monthly payment", _fmt_money(result.monthly_payment)),
        ("Upfront tax", _fmt_money(result.upfront_tax)),
        ("Total lease cost", _fmt_money(result.total_lease_cost)),
    ])


@main.command()
@click.option("--value", type=float, required=True, help="Chit value")
@click.option("--months", type=int, required=True)
@click.option("--commission", type=float, default=5.0, show_default=True, help="Foreman commission, percent")
@click.option("--bid", type=float, default=20.0, show_default=True, help="Average auction bid, percent")
@csv_option
def chit(value: float, months: int, commission: float, bid: float, csv_path: Optional[Path]) -> None:
    """Chit fund dividends and effective return."""
    result = calculate_chit(value, months, commission, bid)
    _panel("Chit Fund")
    _summary([
        ("Monthly contribution", _fmt_money(result.monthly_contribution)),
        ("Total dividend", _fmt_money(result.total_dividend)),
        ("Net payable", _fmt_money(result.net_payable)),
        ("Return", _fmt_pct(result.return_percent)),
    ])
    _export(csv_path, result.schedule)


@main.command(name="tax")
@click.option("--kind", type=click.Choice(["sales", "property", "gst"]), required=True)
@click.option("--amount", type=float, required=True)
@click.option("--rate", type=float, required=True)
@click.option("--inter-state", is_flag=True, help="GST: charge IGST instead of CGST + SGST")
@click.option("--inclusive", is_flag=True, help="GST: amount already includes tax")
def tax_command(kind: str, amount: float, rate: float, inter_state: bool, inclusive: bool) -> None:
    """Sales tax, property tax or GST."""
    if kind == "gst":
        result = gst(amount, rate, inter_state, inclusive)
        _panel("GST")
        _summary([
            ("Base amount", _fmt_money(result.base_amount)),
            ("CGST", _fmt_money(result.cgst)),
            ("SGST", _fmt_money(result.sgst)),
            ("IGST", _fmt_money(result.igst)),
            ("Total GST", _fmt_money(result.total_gst)),
            ("Final amount", _fmt_money(result.final_amount)),
        ])
        return

    basic = sales_tax(amount, rate) if kind == "sales" else property_tax(amount, rate)
    _panel(f"{kind.capitalize()} Tax")
    _summary([
        ("Base amount", _fmt_money(basic.base_amount)),
        ("Tax", _fmt_money(basic.tax_amount)),
        ("Total", _fmt_money(basic.total_amount)),
    ])
