"""Unit tests for investment.py."""
import pytest

from fincalc.investment import (
    cagr,
    combined,
    goal_required_sip,
    lumpsum,
    sip,
    step_up_sip,
    yearly_breakdown,
)

SIP_FACTOR_10Y_12PCT = (1.01 ** 120 - 1) / 0.01


class TestCAGR:
    def test_doubling_in_one_year(self):
        assert cagr(100.0, 200.0, 1) == pytest.approx(100.0)

    def test_multi_year(self):
        assert cagr(1000.0, 1000.0 * 1.08 ** 5, 5) == pytest.approx(8.0)

    @pytest.mark.parametrize("initial,final,years", [(0.0, 100.0, 5), (100.0, 200.0, 0), (100.0, -1.0, 5)])
    def test_undefined(self, initial, final, years):
        assert cagr(initial, final, years) == 0.0


class TestLumpsum:
    def test_annual_compounding(self):
        result = lumpsum(100000.0, 12.0, 10)
        assert result.future_value == pytest.approx(310584.82, abs=0.01)
        assert result.total_returns == pytest.approx(result.future_value - 100000.0)
        assert result.cagr == pytest.approx(12.0)

    def test_inflation_and_tax(self):
        result = lumpsum(1000.0, 10.0, 1, inflation_rate_percent=5.0, tax_rate_percent=10.0)
        assert result.real_value == pytest.approx(1100.0 / 1.05)
        assert result.after_tax_value == pytest.approx(1090.0)

    def test_optional_fields_absent_by_default(self):
        result = lumpsum(1000.0, 10.0, 1)
        assert result.real_value is None
        assert result.after_tax_value is None

    def test_degenerate(self):
        result = lumpsum(0.0, 10.0, 5)
        assert result.future_value == 0.0
        assert result.cagr == 0.0


class TestSIP:
    def test_ordinary_annuity(self):
        result = sip(5000.0, 12.0, 10)
        assert result.total_investment == pytest.approx(600000.0)
        assert result.future_value == pytest.approx(5000.0 * SIP_FACTOR_10Y_12PCT)

    def test_zero_rate(self):
        assert sip(1000.0, 0.0, 2).future_value == pytest.approx(24000.0)

    def test_no_contribution(self):
        assert sip(0.0, 12.0, 10).future_value == 0.0


class TestCombined:
    def test_sum_of_legs(self):
        result = combined(100000.0, 5000.0, 12.0, 10)
        expected = lumpsum(100000.0, 12.0, 10).future_value + sip(5000.0, 12.0, 10).future_value
        assert result.future_value == pytest.approx(expected)
        assert result.total_investment == pytest.approx(700000.0)

    def test_lumpsum_only(self):
        assert combined(1000.0, 0.0, 10.0, 2).future_value == pytest.approx(1210.0)


class TestStepUpSIP:
    def test_zero_step_up_matches_sip(self):
        assert step_up_sip(5000.0, 12.0, 10, 0.0).future_value == pytest.approx(sip(5000.0, 12.0, 10).future_value)

    def test_step_up_invests_more(self):
        result = step_up_sip(1000.0, 10.0, 3, 10.0)
        assert result.total_investment == pytest.approx(12000.0 + 13200.0 + 14520.0)
        assert result.future_value > sip(1000.0, 10.0, 3).future_value


class TestGoalPlanning:
    def test_required_sip_reaches_target(self):
        plan = goal_required_sip(1_000_000.0, 0.0, 12.0, 10)
        assert plan.required_monthly_investment == pytest.approx(1_000_000.0 / SIP_FACTOR_10Y_12PCT)
        assert sip(plan.required_monthly_investment, 12.0, 10).future_value == pytest.approx(1_000_000.0)

    def test_current_savings_reduce_requirement(self):
        without = goal_required_sip(1_000_000.0, 0.0, 12.0, 10)
        with_savings = goal_required_sip(1_000_000.0, 100000.0, 12.0, 10)
        assert with_savings.current_savings_future_value == pytest.approx(lumpsum(100000.0, 12.0, 10).future_value)
        assert with_savings.required_monthly_investment < without.required_monthly_investment

    def test_savings_already_sufficient(self):
        plan = goal_required_sip(1000.0, 1000.0, 5.0, 3)
        assert plan.required_monthly_investment == 0.0
        assert plan.shortfall == 0.0


class TestYearlyBreakdown:
    def test_lumpsum_rows(self):
        rows = yearly_breakdown("lumpsum", 10.0, 3, principal=1000.0)
        assert [round(r.balance, 2) for r in rows] == [1100.0, 1210.0, 1331.0]
        assert rows[0].interest_earned == pytest.approx(100.0)
        assert rows[1].yearly_investment == 0.0

    def test_sip_final_row_matches_engine(self):
        rows = yearly_breakdown("sip", 12.0, 10, monthly_investment=5000.0)
        assert rows[-1].balance == pytest.approx(sip(5000.0, 12.0, 10).future_value)
        assert rows[-1].total_investment == pytest.approx(600000.0)

    def test_step_up_final_row_matches_engine(self):
        rows = yearly_breakdown("stepup", 10.0, 5, monthly_investment=1000.0, step_up_percent=10.0)
        assert rows[-1].balance == pytest.approx(step_up_sip(1000.0, 10.0, 5, 10.0).future_value)

    def test_interest_sums_to_total(self):
        rows = yearly_breakdown("combined", 8.0, 6, principal=5000.0, monthly_investment=200.0)
        assert sum(r.interest_earned for r in rows) == pytest.approx(rows[-1].total_interest)

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown investment kind"):
            yearly_breakdown("annuity", 8.0, 5)

    def test_no_years(self):
        assert yearly_breakdown("sip", 8.0, 0) == []
