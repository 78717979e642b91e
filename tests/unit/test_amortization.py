"""Unit tests for amortization.py — payment, schedule, summary, APR."""
from datetime import date

import pytest

from fincalc.amortization import (
    ExtraPayment,
    LoanParameters,
    RateChange,
    build_fixed_payment_schedule,
    build_schedule,
    compute_apr,
    compute_loan_summary,
    compute_payment,
    loan_term_for_payment,
)


def _params(**kwargs) -> LoanParameters:
    defaults = dict(principal=200000.0, annual_rate_percent=5.0, term_months=360)
    defaults.update(kwargs)
    return LoanParameters(**defaults)


class TestComputePayment:
    @pytest.mark.parametrize("principal,rate,months,expected", [
        (200000.0, 5.0, 360, 1073.64),
        (100000.0, 3.5, 240, 579.96),
        (500000.0, 5.0, 360, 2684.11),
    ])
    def test_standard_cases(self, principal, rate, months, expected):
        assert compute_payment(principal, rate, months) == pytest.approx(expected, abs=0.005)

    def test_zero_interest(self):
        assert compute_payment(120000.0, 0.0, 120) == 1000.0

    def test_single_month(self):
        # 1000 * 1.01 = 1010
        assert compute_payment(1000.0, 12.0, 1) == pytest.approx(1010.0)

    @pytest.mark.parametrize("principal,months", [(0.0, 360), (-5.0, 360), (1000.0, 0)])
    def test_degenerate_inputs(self, principal, months):
        assert compute_payment(principal, 5.0, months) == 0.0


class TestBuildSchedule:
    def test_row_count(self):
        assert len(build_schedule(_params())) == 360

    def test_first_period_interest(self):
        row = build_schedule(_params())[0]
        assert row.period == 1
        assert row.opening_balance == 200000.0
        # 200000 * 0.05 / 12 = 833.33
        assert row.interest_component == pytest.approx(833.33, abs=0.005)

    def test_final_balance_is_zero(self):
        assert build_schedule(_params())[-1].ending_balance == 0.0

    def test_principal_sums_to_loan(self):
        schedule = build_schedule(_params())
        assert sum(r.principal_component for r in schedule) == pytest.approx(200000.0, abs=1e-6)
        assert schedule[-1].cumulative_principal == pytest.approx(200000.0, abs=1e-6)

    def test_balance_is_monotonic(self):
        balances = [r.ending_balance for r in build_schedule(_params())]
        for earlier, later in zip(balances, balances[1:]):
            assert earlier >= later, "Balance should never increase"

    def test_opening_equals_previous_closing(self):
        schedule = build_schedule(_params(term_months=24))
        for prev, row in zip(schedule, schedule[1:]):
            assert row.opening_balance == prev.ending_balance

    def test_payment_components_sum(self):
        for row in build_schedule(_params(term_months=60)):
            assert row.payment == pytest.approx(row.principal_component + row.interest_component)

    def test_cumulative_interest(self):
        schedule = build_schedule(_params(term_months=60))
        assert schedule[-1].cumulative_interest == pytest.approx(sum(r.interest_component for r in schedule))

    def test_zero_rate(self):
        schedule = build_schedule(_params(principal=12000.0, annual_rate_percent=0.0, term_months=12))
        assert all(r.payment == pytest.approx(1000.0) for r in schedule)
        assert schedule[-1].cumulative_interest == 0.0

    @pytest.mark.parametrize("principal,months", [(0.0, 360), (-100.0, 360), (1000.0, 0)])
    def test_degenerate_loan_is_empty(self, principal, months):
        assert build_schedule(_params(principal=principal, term_months=months)) == []

    def test_dates_follow_start_date(self):
        schedule = build_schedule(_params(term_months=3, start_date=date(2024, 1, 31)))
        assert [r.date for r in schedule] == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]

    def test_no_dates_without_start(self):
        assert build_schedule(_params(term_months=3))[0].date is None


class TestRateChanges:
    def test_same_rate_change_is_idempotent(self):
        baseline = build_schedule(_params())
        changed = build_schedule(_params(rate_changes=[RateChange(100, 5.0)]))
        assert changed == baseline

    def test_rate_increase_reamortizes(self):
        baseline = build_schedule(_params())
        schedule = build_schedule(_params(rate_changes=[RateChange(13, 7.0)]))
        assert schedule[11].annual_rate_percent == 5.0
        assert schedule[12].annual_rate_percent == 7.0
        assert schedule[12].payment > baseline[12].payment
        assert len(schedule) == 360
        assert schedule[-1].ending_balance == 0.0

    def test_interest_uses_new_rate_from_effective_month(self):
        schedule = build_schedule(_params(rate_changes=[RateChange(2, 6.0)]))
        row = schedule[1]
        assert row.interest_component == pytest.approx(row.opening_balance * 0.06 / 12)

    def test_later_change_in_same_month_wins(self):
        schedule = build_schedule(_params(rate_changes=[RateChange(5, 6.0), RateChange(5, 4.0)]))
        assert schedule[4].annual_rate_percent == 4.0

    def test_changes_applied_in_month_order(self):
        schedule = build_schedule(_params(rate_changes=[RateChange(24, 4.0), RateChange(12, 6.0)]))
        assert schedule[11].annual_rate_percent == 6.0
        assert schedule[23].annual_rate_percent == 4.0

    def test_change_beyond_term_is_ignored(self):
        assert build_schedule(_params(rate_changes=[RateChange(400, 9.0)])) == build_schedule(_params())


class TestExtraPayments:
    def test_recurring_extra_shortens_loan(self):
        schedule = build_schedule(_params(extra_payments=[ExtraPayment(200.0)]))
        assert len(schedule) < 360
        assert schedule[-1].ending_balance == 0.0
        assert sum(r.principal_component for r in schedule) == pytest.approx(200000.0, abs=1e-6)

    def test_recurring_extra_starts_at_start_month(self):
        schedule = build_schedule(_params(extra_payments=[ExtraPayment(100.0, "monthly", 6)]))
        assert schedule[4].extra_payment == 0.0
        assert schedule[5].extra_payment == pytest.approx(100.0)

    def test_lump_sum_applied_once(self):
        schedule = build_schedule(_params(extra_payments=[ExtraPayment(10000.0, "lump", 12)]))
        assert schedule[11].extra_payment == pytest.approx(10000.0)
        assert schedule[10].extra_payment == 0.0
        assert schedule[12].extra_payment == 0.0

    def test_lump_larger_than_balance_is_capped(self):
        schedule = build_schedule(_params(principal=5000.0, term_months=12,
                                          extra_payments=[ExtraPayment(1_000_000.0, "lump", 2)]))
        assert len(schedule) == 2
        assert schedule[-1].ending_balance == 0.0
        assert schedule[-1].principal_component == pytest.approx(schedule[-1].opening_balance)

    def test_lump_beyond_payoff_is_ignored(self):
        baseline = build_schedule(_params())
        assert build_schedule(_params(extra_payments=[ExtraPayment(500.0, "lump", 500)])) == baseline


class TestPrepaymentModes:
    LUMP = [ExtraPayment(3000.0, "lump", 6)]

    def test_reduce_tenure_keeps_payment(self):
        schedule = build_schedule(_params(principal=12000.0, annual_rate_percent=0.0, term_months=12,
                                          extra_payments=self.LUMP))
        assert len(schedule) == 9
        assert schedule[6].payment == pytest.approx(1000.0)

    def test_reduce_emi_keeps_term(self):
        schedule = build_schedule(_params(principal=12000.0, annual_rate_percent=0.0, term_months=12,
                                          extra_payments=self.LUMP, prepayment_mode="reduce_emi"))
        assert len(schedule) == 12
        assert schedule[5].ending_balance == pytest.approx(3000.0)
        assert [r.payment for r in schedule[6:]] == pytest.approx([500.0] * 6)
        assert schedule[-1].ending_balance == 0.0

    def test_reduce_emi_reamortizes_remaining_term(self):
        schedule = build_schedule(_params(extra_payments=[ExtraPayment(50000.0, "lump", 12)],
                                          prepayment_mode="reduce_emi"))
        assert len(schedule) == 360
        expected = compute_payment(schedule[11].ending_balance, 5.0, 348)
        assert schedule[12].payment == pytest.approx(expected)
        assert schedule[12].payment < schedule[10].payment
        assert schedule[-1].ending_balance == 0.0

    def test_reduce_emi_saves_interest_but_not_months(self):
        summary = compute_loan_summary(_params(extra_payments=[ExtraPayment(50000.0, "lump", 12)],
                                               prepayment_mode="reduce_emi"))
        assert summary.interest_saved > 0
        assert summary.months_saved == 0


class TestFixedPaymentSchedule:
    def test_zero_rate_last_payment_is_remainder(self):
        schedule = build_fixed_payment_schedule(10000.0, 0.0, 300.0)
        assert len(schedule) == 34
        assert schedule[0].payment == 300.0
        assert schedule[-1].payment == pytest.approx(100.0)
        assert schedule[-1].ending_balance == 0.0

    def test_term_follows_payment(self):
        schedule = build_fixed_payment_schedule(200000.0, 5.0, 1500.0, start_date=date(2024, 1, 1))
        assert len(schedule) == loan_term_for_payment(200000.0, 5.0, 1500.0)
        assert all(r.payment == pytest.approx(1500.0) for r in schedule[:-1])
        assert schedule[-1].payment <= 1500.0
        assert schedule[-1].ending_balance == 0.0
        assert schedule[0].date == date(2024, 2, 1)

    def test_payment_below_interest_is_empty(self):
        assert build_fixed_payment_schedule(200000.0, 5.0, 800.0) == []

    def test_nothing_to_repay(self):
        assert build_fixed_payment_schedule(0.0, 5.0, 800.0) == []


class TestLoanSummary:
    def test_standard_summary(self):
        summary = compute_loan_summary(_params(start_date=date(2024, 1, 1)))
        assert summary.monthly_payment == pytest.approx(1073.64, abs=0.005)
        assert summary.first_month_interest == pytest.approx(833.33, abs=0.005)
        assert summary.number_of_payments == 360
        assert summary.payoff_date == date(2054, 1, 1)
        assert summary.total_paid == pytest.approx(summary.total_principal + summary.total_interest)
        assert summary.interest_saved == 0.0
        assert summary.months_saved == 0

    def test_savings_from_extra_payments(self):
        summary = compute_loan_summary(_params(extra_payments=[ExtraPayment(200.0)]))
        assert summary.interest_saved > 0
        assert summary.months_saved > 0
        assert summary.number_of_payments == 360 - summary.months_saved

    def test_degenerate_summary_is_zeroed(self):
        summary = compute_loan_summary(_params(principal=0.0))
        assert summary.monthly_payment == 0.0
        assert summary.total_interest == 0.0
        assert summary.number_of_payments == 0
        assert summary.payoff_date is None

    def test_zero_rate_total_interest(self):
        summary = compute_loan_summary(_params(principal=36000.0, annual_rate_percent=0.0, term_months=36))
        assert summary.monthly_payment == 1000.0
        assert summary.total_interest == 0.0


class TestLoanTermForPayment:
    def test_recovers_term(self):
        payment = compute_payment(200000.0, 5.0, 360)
        assert loan_term_for_payment(200000.0, 5.0, payment) == 360

    def test_payment_below_interest(self):
        assert loan_term_for_payment(200000.0, 5.0, 800.0) is None

    def test_zero_rate(self):
        assert loan_term_for_payment(10000.0, 0.0, 300.0) == 34


class TestAPR:
    def test_no_fees_is_nominal(self):
        result = compute_apr(200000.0, 5.0, 360)
        assert result.value == 5.0
        assert result.converged

    def test_fees_raise_apr(self):
        result = compute_apr(200000.0, 5.0, 360, fees=4000.0)
        assert result.converged
        assert result.value > 5.0
        assert result.value < 5.5

    def test_degenerate_loan(self):
        assert not compute_apr(0.0, 5.0, 360).converged
