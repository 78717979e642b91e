"""Unit tests for interest.py — simple, dated simple, compound and CD."""
from datetime import date

import pytest

from fincalc.interest import (
    Prepayment,
    SimpleRateChange,
    advanced_simple_interest,
    apy,
    calculate_cd,
    compound_interest,
    compounding_schedule,
    simple_interest,
)

START = date(2024, 1, 1)
END = date(2025, 1, 1)


class TestSimpleInterest:
    def test_basic(self):
        result = simple_interest(10000.0, 5.0, 3)
        assert result.interest == pytest.approx(1500.0)
        assert result.total_amount == pytest.approx(11500.0)

    def test_partial_final_year(self):
        result = simple_interest(10000.0, 5.0, 2.5)
        assert len(result.yearly) == 3
        assert result.yearly[-1].interest == pytest.approx(250.0)
        assert result.yearly[-1].cumulative_interest == pytest.approx(result.interest)

    def test_yearly_interest_is_flat(self):
        rows = simple_interest(8000.0, 6.0, 4).yearly
        assert all(r.interest == pytest.approx(480.0) for r in rows)

    @pytest.mark.parametrize("principal,years", [(0.0, 5), (1000.0, 0)])
    def test_degenerate(self, principal, years):
        result = simple_interest(principal, 5.0, years)
        assert result.interest == 0.0
        assert result.yearly == []


class TestAdvancedSimpleInterest:
    def test_no_events(self):
        # 2024 is a leap year: 366 days on an actual/365 basis
        result = advanced_simple_interest(10000.0, 10.0, START, END)
        assert result.total_interest == pytest.approx(10000.0 * 0.10 * 366 / 365)
        assert len(result.segments) == 1

    def test_prepayment_splits_segments(self):
        result = advanced_simple_interest(10000.0, 10.0, START, END,
                                          prepayments=(Prepayment(date(2024, 7, 1), 5000.0),))
        assert [s.days for s in result.segments] == [182, 184]
        assert result.total_interest == pytest.approx(750.685, abs=1e-3)
        assert result.total_prepaid == 5000.0
        assert result.final_balance == 5000.0

    def test_rate_change(self):
        result = advanced_simple_interest(10000.0, 10.0, START, END,
                                          rate_changes=(SimpleRateChange(date(2024, 7, 1), 5.0),))
        assert result.segments[1].annual_rate_percent == 5.0
        expected = 10000.0 * 0.10 * 182 / 365 + 10000.0 * 0.05 * 184 / 365
        assert result.total_interest == pytest.approx(expected)

    def test_same_day_events_both_apply(self):
        on = date(2024, 7, 1)
        result = advanced_simple_interest(10000.0, 10.0, START, END,
                                          prepayments=(Prepayment(on, 4000.0),),
                                          rate_changes=(SimpleRateChange(on, 8.0),))
        second = result.segments[1]
        assert second.balance == 6000.0
        assert second.annual_rate_percent == 8.0

    def test_events_applied_in_date_order(self):
        result = advanced_simple_interest(10000.0, 10.0, START, END,
                                          prepayments=(Prepayment(date(2024, 10, 1), 1000.0),
                                                       Prepayment(date(2024, 4, 1), 2000.0)))
        assert [s.balance for s in result.segments] == [10000.0, 8000.0, 7000.0]

    def test_prepayment_capped_at_balance(self):
        result = advanced_simple_interest(1000.0, 10.0, START, END,
                                          prepayments=(Prepayment(date(2024, 3, 1), 5000.0),))
        assert result.final_balance == 0.0
        assert result.total_prepaid == 1000.0

    def test_events_outside_window_ignored(self):
        baseline = advanced_simple_interest(10000.0, 10.0, START, END)
        result = advanced_simple_interest(10000.0, 10.0, START, END,
                                          prepayments=(Prepayment(date(2023, 6, 1), 500.0),
                                                       Prepayment(END, 500.0)))
        assert result.total_interest == pytest.approx(baseline.total_interest)
        assert result.total_prepaid == 0.0

    def test_end_before_start(self):
        result = advanced_simple_interest(10000.0, 10.0, END, START)
        assert result.total_interest == 0.0
        assert result.segments == []


class TestCompoundInterest:
    def test_annual(self):
        result = compound_interest(10000.0, 5.0, 5)
        assert result.final_amount == pytest.approx(12762.82, abs=0.005)
        assert result.total_interest == pytest.approx(2762.82, abs=0.005)

    def test_more_frequent_compounding_earns_more(self):
        annual = compound_interest(10000.0, 5.0, 5, "annual").final_amount
        monthly = compound_interest(10000.0, 5.0, 5, "monthly").final_amount
        daily = compound_interest(10000.0, 5.0, 5, "daily").final_amount
        assert annual < monthly < daily

    def test_yearly_rows_aggregate_periods(self):
        result = compound_interest(10000.0, 6.0, 3, "quarterly")
        assert len(result.yearly) == 3
        assert result.yearly[0].closing_balance == pytest.approx(10000.0 * 1.015 ** 4)
        assert result.yearly[-1].closing_balance == pytest.approx(result.final_amount)
        assert sum(y.interest for y in result.yearly) == pytest.approx(result.total_interest)

    def test_fractional_term_closes_on_final_amount(self):
        result = compound_interest(10000.0, 5.0, 2.5, "annual")
        assert result.final_amount == pytest.approx(11297.26, abs=0.005)
        assert len(result.yearly) == 3
        assert result.yearly[1].closing_balance == pytest.approx(11025.0)
        assert result.yearly[-1].closing_balance == pytest.approx(result.final_amount)
        assert sum(y.interest for y in result.yearly) == pytest.approx(result.total_interest)

    def test_schedule_row_count(self):
        assert len(compounding_schedule(1000.0, 4.0, 2, "monthly")) == 24

    def test_effective_rate_reported(self):
        assert compound_interest(1000.0, 5.0, 1, "monthly").effective_annual_rate == pytest.approx(5.116190, abs=1e-6)

    def test_degenerate(self):
        result = compound_interest(0.0, 5.0, 5)
        assert result.final_amount == 0.0
        assert result.yearly == []


class TestAPY:
    def test_monthly(self):
        assert apy(5.0, "monthly") == pytest.approx(5.116190, abs=1e-6)

    def test_annual_equals_nominal(self):
        assert apy(4.25, "annual") == pytest.approx(4.25)


class TestCD:
    def test_five_year_monthly(self):
        result = calculate_cd(10000.0, 5.0, 60)
        assert result.final_balance == pytest.approx(12833.59, abs=0.005)
        assert result.apy == pytest.approx(5.11619, abs=1e-5)
        assert len(result.schedule) == 60
        assert result.schedule[-1].balance == pytest.approx(result.final_balance)
        assert result.schedule[-1].year == 5

    def test_tax_and_inflation(self):
        result = calculate_cd(10000.0, 5.0, 12, "annual", tax_rate_percent=20.0, inflation_rate_percent=2.0)
        assert result.total_interest == pytest.approx(500.0)
        assert result.tax_amount == pytest.approx(100.0)
        assert result.after_tax_balance == pytest.approx(10400.0)
        assert result.real_value == pytest.approx(10500.0 / 1.02)

    def test_inflation_horizon_override(self):
        result = calculate_cd(10000.0, 5.0, 12, "annual", inflation_rate_percent=2.0, inflation_years=2)
        assert result.real_value == pytest.approx(10500.0 / 1.02 ** 2)

    def test_monthly_interest_sums_to_total(self):
        result = calculate_cd(5000.0, 4.0, 18, "quarterly")
        assert sum(m.interest_earned for m in result.schedule) == pytest.approx(result.total_interest)

    def test_degenerate(self):
        result = calculate_cd(10000.0, 5.0, 0)
        assert result.final_balance == 10000.0
        assert result.schedule == []
