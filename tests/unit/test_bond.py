"""Unit tests for bond.py — pricing, yield solving and risk measures."""
from datetime import date

import pytest

from fincalc.bond import BondParameters, analyze_bond, price_bond, pull_to_par, solve_yield

SETTLEMENT = date(2024, 1, 15)
MATURITY = date(2034, 1, 15)


def _bond(**kwargs) -> BondParameters:
    defaults = dict(
        face_value=1000.0,
        coupon_rate_percent=5.0,
        settlement_date=SETTLEMENT,
        maturity_date=MATURITY,
        frequency=2,
    )
    defaults.update(kwargs)
    return BondParameters(**defaults)


class TestPriceMode:
    def test_premium_bond(self):
        result = price_bond(_bond(market_yield_percent=4.0))
        assert result.price > 1000.0
        # 25 * a(20, 2%) + 1000 / 1.02^20
        assert result.price == pytest.approx(1081.76, abs=0.01)

    def test_par_bond(self):
        assert price_bond(_bond(market_yield_percent=5.0)).price == pytest.approx(1000.0, abs=1e-9)

    def test_discount_bond(self):
        assert price_bond(_bond(market_yield_percent=6.0)).price < 1000.0

    def test_period_count(self):
        result = price_bond(_bond(market_yield_percent=4.0))
        assert result.periods == 20
        assert len(result.schedule) == 20

    def test_cash_flow_classification(self):
        schedule = price_bond(_bond(market_yield_percent=4.0)).schedule
        assert {cf.kind for cf in schedule[:-1]} == {"Coupon"}
        assert schedule[-1].kind == "Total"
        assert schedule[-1].cash_flow == pytest.approx(1025.0)
        assert schedule[-1].date == MATURITY
        assert schedule[0].date == date(2024, 7, 15)

    def test_zero_coupon_final_flow_is_principal(self):
        schedule = price_bond(_bond(coupon_rate_percent=0.0, market_yield_percent=4.0)).schedule
        assert schedule[-1].kind == "Principal"
        assert all(cf.cash_flow == 0.0 for cf in schedule[:-1])

    def test_present_values_sum_to_price(self):
        result = price_bond(_bond(market_yield_percent=4.5))
        assert sum(cf.present_value for cf in result.schedule) == pytest.approx(result.price)
        assert result.pv_face + result.pv_coupons == pytest.approx(result.price)

    def test_yield_measures(self):
        result = price_bond(_bond(market_yield_percent=4.0))
        assert result.ytm_percent == pytest.approx(4.0)
        assert result.current_yield == pytest.approx(50.0 / result.price * 100)
        assert result.total_coupons == pytest.approx(500.0)
        assert result.total_return == pytest.approx(500.0 + 1000.0 - result.price)

    def test_explicit_yield_overrides_params(self):
        assert price_bond(_bond(market_yield_percent=4.0), 5.0).price == pytest.approx(1000.0)

    def test_missing_yield(self):
        with pytest.raises(ValueError, match="market yield"):
            price_bond(_bond())


class TestDurationAndConvexity:
    def test_zero_coupon_duration_equals_maturity(self):
        result = price_bond(_bond(coupon_rate_percent=0.0, market_yield_percent=4.0))
        assert result.macaulay_duration == pytest.approx(10.0)
        assert result.modified_duration == pytest.approx(10.0 / 1.02)

    def test_coupon_bond_duration_shorter_than_maturity(self):
        result = price_bond(_bond(market_yield_percent=4.0))
        assert 0 < result.macaulay_duration < 10.0
        assert result.modified_duration < result.macaulay_duration

    def test_convexity_positive(self):
        assert price_bond(_bond(market_yield_percent=4.0)).convexity > 0


class TestYieldMode:
    @pytest.mark.parametrize("ytm", [0.1, 1.0, 4.0, 5.0, 8.5, 12.0, 20.0])
    def test_price_yield_round_trip(self, ytm):
        params = _bond()
        price = price_bond(params, ytm).price
        result = solve_yield(params, price)
        assert result.converged
        assert result.ytm_percent == pytest.approx(ytm, abs=1e-4)

    @pytest.mark.parametrize("frequency", [1, 4, 12])
    def test_round_trip_other_frequencies(self, frequency):
        params = _bond(frequency=frequency)
        price = price_bond(params, 6.5).price
        assert solve_yield(params, price).ytm_percent == pytest.approx(6.5, abs=1e-4)

    def test_zero_coupon_round_trip(self):
        params = _bond(coupon_rate_percent=0.0)
        price = price_bond(params, 3.0).price
        assert solve_yield(params, price).ytm_percent == pytest.approx(3.0, abs=1e-4)

    def test_price_echoes_target(self):
        result = solve_yield(_bond(target_price=950.0))
        assert result.price == 950.0
        assert result.ytm_percent > 5.0
        assert result.iterations <= 100

    def test_missing_target(self):
        with pytest.raises(ValueError, match="target price"):
            solve_yield(_bond())


class TestDispatchAndEdges:
    def test_yield_takes_precedence(self):
        result = analyze_bond(_bond(market_yield_percent=5.0, target_price=900.0))
        assert result.price == pytest.approx(1000.0)

    def test_target_price_dispatch(self):
        assert analyze_bond(_bond(target_price=1000.0)).ytm_percent == pytest.approx(5.0, abs=1e-4)

    def test_neither_given(self):
        with pytest.raises(ValueError):
            analyze_bond(_bond())

    def test_unsupported_frequency(self):
        with pytest.raises(ValueError, match="Unsupported coupon frequency"):
            price_bond(_bond(frequency=3, market_yield_percent=4.0))

    def test_maturity_not_after_settlement(self):
        result = price_bond(_bond(maturity_date=SETTLEMENT, market_yield_percent=4.0))
        assert result.periods == 0
        assert result.schedule == []
        assert result.price == 0.0

    def test_years_to_maturity_is_informational(self):
        result = price_bond(_bond(market_yield_percent=4.0))
        assert result.years_to_maturity == pytest.approx(3653 / 365.25)


class TestPullToPar:
    def test_path_ends_at_par(self):
        params = _bond()
        path = pull_to_par(params, 4.0)
        assert len(path) == 11
        assert path[0].price == pytest.approx(price_bond(params, 4.0).price)
        assert path[-1].price == 1000.0
        assert path[-1].periods_remaining == 0

    def test_premium_declines_toward_par(self):
        prices = [p.price for p in pull_to_par(_bond(), 4.0)]
        for earlier, later in zip(prices, prices[1:]):
            assert earlier > later
