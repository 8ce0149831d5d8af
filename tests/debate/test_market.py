"""Tests for arborvote.debate.market.

Tests cover:
- Initialization reference values and the reserve invariant
- Approval bounds
- Fixed-product trading, fees, and the collapsed curve at 100% approval
"""

from __future__ import annotations

import pytest

from arborvote.core.exceptions import InitialApprovalOutOfBounds, ValidationException
from arborvote.debate.constants import DebateConstants
from arborvote.debate.market import (
    approval,
    buy,
    ceil_div,
    collect_fees,
    init_market,
    quote_buy,
    round_half_up_div,
)
from arborvote.debate.models import Market


# ============================================================================
# Initialization
# ============================================================================


class TestInitMarket:
    """Tests for init_market."""

    @pytest.mark.parametrize(
        "approval_pct,pro,con,const",
        [
            (50, 5, 5, 25),
            (80, 2, 8, 16),
            (100, 0, 10, 0),
        ],
    )
    def test_reference_values(self, approval_pct, pro, con, const):
        market = init_market(approval_pct)
        assert (market.pro, market.con, market.const) == (pro, con, const)
        assert market.vote == 10
        assert market.fees == 0

    def test_formula_holds_across_range(self):
        for p in range(50, 101):
            market = init_market(p)
            expected_con = (p * 10 * 2 + 100) // 200
            assert market.con == expected_con
            assert market.pro == 10 - expected_con
            assert market.pro + market.con == market.vote
            assert market.pro * market.con == market.const

    def test_halves_round_up(self):
        # 55% of 10 is 5.5, 85% is 8.5
        assert init_market(55).con == 6
        assert init_market(85).con == 9

    def test_below_lower_bound(self):
        with pytest.raises(InitialApprovalOutOfBounds) as exc_info:
            init_market(49)
        assert exc_info.value.bound == 50
        assert exc_info.value.actual == 49

    def test_above_upper_bound(self):
        with pytest.raises(InitialApprovalOutOfBounds) as exc_info:
            init_market(101)
        assert exc_info.value.bound == 100
        assert exc_info.value.actual == 101

    def test_custom_liquidity(self):
        market = init_market(80, liquidity=1000)
        assert (market.pro, market.con, market.vote) == (200, 800, 1000)


class TestRounding:
    def test_round_half_up_div(self):
        assert round_half_up_div(800, 100) == 8
        assert round_half_up_div(550, 100) == 6
        assert round_half_up_div(540, 100) == 5

    def test_ceil_div(self):
        assert ceil_div(16, 18) == 1
        assert ceil_div(16, 8) == 2
        assert ceil_div(0, 5) == 0


# ============================================================================
# Approval
# ============================================================================


class TestApproval:
    def test_matches_requested_percentage(self):
        assert approval(init_market(80)) == 8 * DebateConstants.PRECISION // 10
        assert approval(init_market(50)) == DebateConstants.PRECISION // 2

    def test_empty_market(self):
        assert approval(Market()) == 0


# ============================================================================
# Trading
# ============================================================================


class TestQuoteBuy:
    """Tests for quote_buy."""

    def test_buy_pro(self):
        market = init_market(80)
        quote = quote_buy(market, 10, pro=True)

        assert quote.fee == 0
        assert quote.net == 10
        # con grows to 18, pro shrinks to ceil(16 / 18) = 1
        assert quote.con_after == 18
        assert quote.pro_after == 1
        assert quote.shares == 11
        assert quote.const_after == 16

    def test_buy_con(self):
        market = init_market(80)
        quote = quote_buy(market, 10, pro=False)

        assert quote.pro_after == 12
        assert quote.con_after == 2
        assert quote.shares == 16

    def test_fee_is_floored_percentage(self):
        quote = quote_buy(init_market(50), 40, pro=True)
        assert quote.fee == 2
        assert quote.net == 38

    def test_does_not_mutate(self):
        market = init_market(50)
        quote_buy(market, 40, pro=True)
        assert market == init_market(50)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_rejects_non_positive_amount(self, amount):
        with pytest.raises(ValidationException):
            quote_buy(init_market(50), amount, pro=True)

    def test_product_never_drops_below_const(self):
        market = init_market(60)
        for amount in (1, 7, 19, 20, 100):
            quote = quote_buy(market, amount, pro=True)
            assert quote.pro_after * quote.con_after >= market.const


class TestBuy:
    """Tests for buy."""

    def test_updates_reserves_and_fees(self):
        market = init_market(50)
        quote = buy(market, 40, pro=True)

        assert market.pro == quote.pro_after
        assert market.con == quote.con_after
        assert market.const == 25
        assert market.vote == 10 + 38
        assert market.fees == 2

    def test_buying_pro_raises_approval(self):
        market = init_market(50)
        before = approval(market)
        buy(market, 20, pro=True)
        assert approval(market) > before

    def test_buying_con_lowers_approval(self):
        market = init_market(50)
        before = approval(market)
        buy(market, 20, pro=False)
        assert approval(market) < before

    def test_collapsed_curve_buy_pro(self):
        market = init_market(100)
        quote = buy(market, 10, pro=True)

        assert quote.shares == 10
        assert (market.pro, market.con) == (0, 20)
        assert market.const == 0

    def test_collapsed_curve_reestablishes(self):
        market = init_market(100)
        quote = buy(market, 10, pro=False)

        assert quote.shares == 10
        assert (market.pro, market.con) == (10, 10)
        assert market.const == 100

    def test_deterministic(self):
        first, second = init_market(70), init_market(70)
        for amount, pro in [(30, True), (15, False), (60, True)]:
            buy(first, amount, pro)
            buy(second, amount, pro)
        assert first == second


class TestCollectFees:
    def test_drains_fees(self):
        market = init_market(50)
        buy(market, 100, pro=True)
        assert collect_fees(market) == 5
        assert market.fees == 0
        assert collect_fees(market) == 0
