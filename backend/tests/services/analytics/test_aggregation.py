# backend/tests/services/analytics/test_aggregation.py
"""
Unit tests for account rollups and the portfolio summary.

Test Coverage:
- classify_risk: Volatility buckets
- merge_series: Date union, forward fill, late-starting histories
- rollup: Consolidation, allocation, ROI, trend, sorting, FX conversion
- summarize_portfolio: Totals, currency distribution, flow totals, empty portfolio
"""

import math
from datetime import date
from decimal import Decimal

import pytest

from app.services.analytics.aggregation import (
    classify_risk,
    merge_series,
    rollup,
    summarize_portfolio,
)
from app.services.analytics.types import (
    AccountSeries,
    BalancePoint,
    PortfolioSummary,
    RiskLevel,
    TrendDirection,
)
from app.services.exceptions import FXConversionError
from app.utils.fx_conversion import CurrencyConverter
from tests.factories import make_series


def _account(account_id, values, flows=None, currency="COP", children=None, name=None):
    return AccountSeries(
        account_id=account_id,
        name=name or f"Account {account_id}",
        currency=currency,
        points=make_series(values, flows),
        children=children or [],
    )


# =============================================================================
# RISK BUCKETS
# =============================================================================

class TestClassifyRisk:
    """Tests for classify_risk."""

    @pytest.mark.parametrize("volatility,expected", [
        (0.0, RiskLevel.LOW),
        (8.0, RiskLevel.LOW),
        (8.01, RiskLevel.MEDIUM),
        (15.0, RiskLevel.MEDIUM),
        (15.5, RiskLevel.HIGH),
        (30.0, RiskLevel.HIGH),
        (30.01, RiskLevel.VERY_HIGH),
    ])
    def test_thresholds(self, volatility, expected):
        assert classify_risk(volatility) == expected

    def test_labels(self):
        assert RiskLevel.VERY_HIGH.value == "muy alto"
        assert RiskLevel.LOW.value == "bajo"


# =============================================================================
# MERGE SERIES
# =============================================================================

class TestMergeSeries:
    """Tests for merge_series."""

    def test_forward_fill_and_late_start(self):
        """A history starting later enters with its first value as flow."""
        first = [
            BalancePoint(date(2024, 1, 1), 100.0),
            BalancePoint(date(2024, 1, 2), 110.0),
        ]
        second = [
            BalancePoint(date(2024, 1, 2), 50.0),
            BalancePoint(date(2024, 1, 3), 60.0, flow=5.0),
        ]

        merged = merge_series([first, second])

        assert [p.date for p in merged] == [
            date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3),
        ]
        assert [p.value for p in merged] == [100.0, 160.0, 170.0]
        assert [p.flow for p in merged] == [0.0, 50.0, 5.0]

    def test_same_start_keeps_flows(self):
        first = make_series([100.0, 120.0], flows=[100.0, 10.0])
        second = make_series([50.0, 55.0])

        merged = merge_series([first, second])

        assert [p.value for p in merged] == [150.0, 175.0]
        assert [p.flow for p in merged] == [100.0, 10.0]

    def test_empty_histories(self):
        assert merge_series([]) == []
        assert merge_series([[], []]) == []


# =============================================================================
# ROLLUP
# =============================================================================

class TestRollup:
    """Tests for rollup."""

    def test_parent_absorbs_child(self, parent_with_child):
        """Parent 300 + child 200 = 500."""
        result = rollup([parent_with_child])

        assert len(result) == 1
        parent = result[0]
        child = parent.children[0]

        assert parent.current_value == 500.0
        assert parent.start_value == 430.0
        assert parent.net_flow == 0.0
        assert parent.invested_capital == 430.0
        assert parent.gain == 70.0
        assert parent.roi == 16.28

        assert child.current_value == 200.0
        assert child.gain == 20.0
        assert child.roi == 11.11

    def test_allocation_of_single_parent(self, parent_with_child):
        parent = rollup([parent_with_child])[0]

        assert parent.allocation == 100.0
        assert parent.own_allocation == 60.0
        assert parent.children[0].allocation == 40.0

    def test_allocation_invariant(self, parent_with_child):
        """own_allocation + Σ children allocation == allocation."""
        other = _account(3, [240.0, 250.0])

        result = rollup([parent_with_child, other])

        total = sum(r.allocation for r in result)
        assert total == pytest.approx(100.0, abs=0.02)

        for r in result:
            children_share = sum(c.allocation for c in r.children)
            assert r.own_allocation + children_share == pytest.approx(r.allocation, abs=0.02)

        parent = result[0]
        assert parent.allocation == 66.67
        assert parent.own_allocation == 40.0
        assert parent.children[0].allocation == 26.67
        assert result[1].allocation == 33.33

    def test_sorted_by_value_descending(self):
        small = _account(1, [10.0, 10.0])
        large = _account(2, [1000.0, 1000.0])
        medium = _account(3, [100.0, 100.0])

        result = rollup([small, large, medium])

        assert [r.account_id for r in result] == [2, 3, 1]

    def test_children_sorted_by_value_descending(self):
        parent = _account(1, [10.0, 10.0], children=[
            _account(2, [5.0, 5.0]),
            _account(3, [50.0, 50.0]),
        ])

        result = rollup([parent])

        assert [c.account_id for c in result[0].children] == [3, 2]

    def test_roi_uses_gross_positive_flow(self):
        """
        Invested capital is start + contributions, withdrawals not netted.

        Netting flows would give 10 / 110 = 9.09% instead.
        """
        account = _account(1, [100.0, 150.0, 120.0], flows=[0.0, 50.0, -40.0])

        result = rollup([account])[0]

        assert result.net_flow == 10.0
        assert result.invested_capital == 150.0
        assert result.gain == 10.0
        assert result.roi == 6.67
        assert result.roi != pytest.approx(9.09, abs=0.01)

    def test_first_point_flow_is_part_of_start_value(self):
        account = _account(1, [100.0, 110.0], flows=[100.0, 0.0])

        result = rollup([account])[0]

        assert result.net_flow == 0.0
        assert result.gain == 10.0
        assert result.invested_capital == 100.0

    def test_volatility_is_unweighted_mean(self):
        """Parent volatility averages its own and its children's."""
        volatile_child = _account(2, [100.0, 110.0, 95.0, 105.0, 100.0])
        parent = _account(1, [1000.0, 1000.0, 1000.0], children=[volatile_child])

        result = rollup([parent])[0]
        child = result.children[0]

        assert result.metrics.volatility == 0.0
        assert child.volatility > 0
        assert result.volatility == pytest.approx(child.volatility / 2, abs=0.01)
        assert result.risk_level == classify_risk(result.volatility)

    def test_win_rate_uses_own_series(self, parent_with_child):
        parent = rollup([parent_with_child])[0]

        assert parent.win_rate == 100.0

    def test_trend_up_for_growing_account(self):
        account = _account(1, [100.0, 101.0, 102.0, 103.0])

        result = rollup([account])[0]

        assert result.trend == TrendDirection.UP
        assert [p.days for p in result.projections] == [90, 180, 365]
        assert result.projections[0].value > result.current_value

    def test_trend_down_for_declining_account(self):
        account = _account(1, [103.0, 102.0, 101.0, 100.0])

        result = rollup([account])[0]

        assert result.trend == TrendDirection.DOWN
        assert result.projections[0].value < result.current_value

    def test_account_without_history(self):
        result = rollup([_account(1, [])])[0]

        assert result.current_value == 0.0
        assert result.roi == 0.0
        assert result.allocation == 0.0
        assert result.own_allocation == 0.0
        assert [p.value for p in result.projections] == [0.0, 0.0, 0.0]

    def test_negative_values_do_not_raise(self):
        """Overdrawn balances give zero ROI and no allocation share."""
        account = _account(1, [-100.0, -50.0, -200.0, 10.0, -5.0])

        result = rollup([account])[0]

        assert result.current_value == Decimal("-5.00")
        assert result.roi == 0.0
        assert result.allocation == 0.0
        assert result.max_drawdown <= 0
        assert all(math.isfinite(p.value) for p in result.projections)

    def test_fast_growth_over_long_horizons(self):
        """40% per period compounded over 3000 days stays finite."""
        account = _account(1, [100.0 * 1.4 ** i for i in range(11)])

        result = rollup([account], horizons=(90, 3000))[0]

        assert result.trend == TrendDirection.UP
        assert [p.days for p in result.projections] == [90, 3000]
        assert all(math.isfinite(p.value) for p in result.projections)

    def test_money_fields_are_decimal_cents(self, parent_with_child):
        parent = rollup([parent_with_child])[0]

        for amount in (
                parent.current_value,
                parent.current_value_native,
                parent.start_value,
                parent.net_flow,
                parent.invested_capital,
                parent.gain,
        ):
            assert isinstance(amount, Decimal)
            assert amount.as_tuple().exponent == -2

        assert parent.gain == Decimal("70.00")

    def test_empty_portfolio(self):
        assert rollup([]) == []


class TestRollupCurrencies:
    """Tests for multi-currency rollups."""

    def test_usd_child_is_converted(self):
        usd_child = _account(2, [100.0, 100.0], currency="USD")
        parent = _account(1, [1_000_000.0, 1_000_000.0], children=[usd_child])
        converter = CurrencyConverter.for_usd_rate(4000)

        result = rollup([parent], converter)[0]

        assert result.current_value == 1_400_000.0
        assert result.current_value_native == 1_000_000.0
        assert result.children[0].current_value == 400_000.0
        assert result.children[0].current_value_native == 100.0
        assert result.children[0].allocation == pytest.approx(28.57)

    def test_same_currency_child_counts_in_native_total(self, parent_with_child):
        result = rollup([parent_with_child], CurrencyConverter())[0]

        assert result.current_value_native == 500.0

    def test_unknown_currency_raises(self):
        account = _account(1, [100.0, 100.0], currency="EUR")

        with pytest.raises(FXConversionError) as exc_info:
            rollup([account], CurrencyConverter.for_usd_rate(4000))

        assert exc_info.value.base_currency == "EUR"


# =============================================================================
# PORTFOLIO SUMMARY
# =============================================================================

class TestSummarizePortfolio:
    """Tests for summarize_portfolio."""

    def test_totals(self, parent_with_child):
        accounts = [parent_with_child, _account(3, [240.0, 250.0])]
        rollups = rollup(accounts)

        summary = summarize_portfolio(accounts, rollups)

        assert summary.total_value == 750.0
        assert summary.start_value == 670.0
        assert summary.net_flow == 0.0
        assert summary.invested_capital == 670.0
        assert summary.gain == 80.0
        assert summary.roi == 11.94
        assert summary.currency_distribution == {"COP": 750.0}
        assert [p.days for p in summary.projections] == [90, 180, 365]

    def test_currency_distribution(self):
        accounts = [
            _account(1, [1000.0, 1000.0]),
            _account(2, [1.0, 1.0], currency="USD"),
        ]
        converter = CurrencyConverter.for_usd_rate(4000)
        rollups = rollup(accounts, converter)

        summary = summarize_portfolio(accounts, rollups, converter)

        assert summary.currency_distribution == {"COP": 1000.0, "USD": 4000.0}
        assert summary.total_value == 5000.0

    def test_volatility_is_mean_of_top_level(self):
        accounts = [
            _account(1, [100.0, 110.0, 95.0, 105.0]),
            _account(2, [100.0, 100.0, 100.0]),
        ]
        rollups = rollup(accounts)

        summary = summarize_portfolio(accounts, rollups)

        expected = (rollups[0].volatility + rollups[1].volatility) / 2
        assert summary.volatility == pytest.approx(expected, abs=0.01)
        assert summary.risk_level == classify_risk(summary.volatility)

    def test_flow_totals(self):
        """Dated 30 Jan to 1 Feb: +50 on 31 Jan, -20 on 1 Feb."""
        account = AccountSeries(
            account_id=1,
            name="Savings",
            currency="COP",
            points=make_series(
                [100.0, 150.0, 130.0],
                flows=[100.0, 50.0, -20.0],
                start=date(2024, 1, 30),
            ),
        )
        rollups = rollup([account])

        summary = summarize_portfolio([account], rollups, as_of=date(2024, 1, 31))

        assert summary.total_contributions == Decimal("50.00")
        assert summary.total_withdrawals == Decimal("20.00")
        assert summary.monthly_contributions == Decimal("50.00")
        assert summary.monthly_withdrawals == Decimal("0.00")
        assert summary.total_contributions - summary.total_withdrawals == summary.net_flow

    def test_monthly_totals_default_to_latest_month(self):
        account = _account(1, [100.0, 150.0, 130.0], flows=[0.0, 50.0, -20.0])
        late = AccountSeries(
            account_id=2,
            name="Late",
            currency="COP",
            points=make_series([10.0, 15.0], flows=[0.0, 5.0], start=date(2024, 2, 10)),
        )
        accounts = [account, late]

        summary = summarize_portfolio(accounts, rollup(accounts))

        assert summary.total_contributions == Decimal("55.00")
        assert summary.total_withdrawals == Decimal("20.00")
        assert summary.monthly_contributions == Decimal("5.00")
        assert summary.monthly_withdrawals == Decimal("0.00")
        assert summary.net_flow == Decimal("35.00")

    def test_flow_totals_are_converted(self):
        usd_child = _account(2, [10.0, 12.0], flows=[0.0, 1.0], currency="USD")
        parent = _account(1, [1000.0, 1000.0], children=[usd_child])
        converter = CurrencyConverter.for_usd_rate(4000)

        summary = summarize_portfolio([parent], rollup([parent], converter), converter)

        assert summary.total_contributions == Decimal("4000.00")
        assert summary.total_withdrawals == Decimal("0.00")

    def test_money_fields_are_decimal(self, parent_with_child):
        summary = summarize_portfolio([parent_with_child], rollup([parent_with_child]))

        assert isinstance(summary.total_value, Decimal)
        assert isinstance(summary.total_contributions, Decimal)
        assert summary.currency_distribution == {"COP": Decimal("500.00")}
        assert isinstance(summary.roi, float)

    def test_empty_portfolio(self):
        assert summarize_portfolio([], []) == PortfolioSummary()
