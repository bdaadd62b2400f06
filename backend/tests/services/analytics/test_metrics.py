# backend/tests/services/analytics/test_metrics.py
"""
Unit tests for return and risk metrics.

These tests verify the pure calculation logic with values that can be
checked by hand.

Test Coverage:
- calculate_period_returns: Flow adjustment, skipped bases, outlier filter
- calculate_volatility: Annualized population standard deviation
- calculate_sharpe_ratio: Annualized excess return over volatility
- calculate_max_drawdown: Synthetic return index
- annualize_mean_return: Annualized mean
- calculate_win_rate: Share of up-periods
- compute_metrics: Combined calculation and degenerate input
"""

import math

import pytest

from app.services.analytics.metrics import (
    annualize_mean_return,
    calculate_max_drawdown,
    calculate_period_returns,
    calculate_sharpe_ratio,
    calculate_volatility,
    calculate_win_rate,
    compute_metrics,
)
from app.services.analytics.types import ReturnMetrics
from tests.factories import make_series


# =============================================================================
# PERIOD RETURNS
# =============================================================================

class TestPeriodReturns:
    """Tests for calculate_period_returns."""

    def test_simple_returns(self):
        """Returns without flows are plain relative changes."""
        returns = calculate_period_returns(make_series([100.0, 105.0, 103.0]))

        assert len(returns) == 2
        assert returns[0] == pytest.approx(0.05)
        assert returns[1] == pytest.approx(103 / 105 - 1)

    def test_flow_is_added_to_the_base(self):
        """A contribution is capital at risk, not a gain."""
        # base = 100 + 50 = 150; r = (160 - 150) / 150
        returns = calculate_period_returns(make_series([100.0, 160.0], flows=[0.0, 50.0]))

        assert returns == [pytest.approx(10 / 150)]

    def test_withdrawal_is_not_a_loss(self):
        """Removing money shrinks the base, not the return."""
        returns = calculate_period_returns(make_series([100.0, 50.0], flows=[0.0, -50.0]))

        assert returns == [pytest.approx(0.0)]

    def test_non_positive_base_is_skipped(self):
        """Periods starting from zero capital carry no return."""
        returns = calculate_period_returns(make_series([0.0, 100.0, 110.0]))

        assert returns == [pytest.approx(0.1)]

    def test_outlier_threshold_is_inclusive(self):
        """A return of exactly 50% is discarded."""
        returns = calculate_period_returns(make_series([100.0, 150.0]))

        assert returns == []

    def test_large_drop_is_discarded(self):
        """A -60% period is treated as a data anomaly."""
        returns = calculate_period_returns(make_series([100.0, 40.0, 41.0]))

        assert returns == [pytest.approx(0.025)]

    def test_insufficient_data(self):
        """Fewer than two points have no returns."""
        assert calculate_period_returns(make_series([100.0])) == []
        assert calculate_period_returns([]) == []


# =============================================================================
# VOLATILITY
# =============================================================================

class TestVolatility:
    """Tests for calculate_volatility."""

    def test_known_value(self):
        """±1% alternating returns: std 0.01, annualized with sqrt(252)."""
        volatility = calculate_volatility([0.01, -0.01])

        assert volatility == pytest.approx(0.01 * math.sqrt(252) * 100)

    def test_single_return_has_zero_volatility(self):
        """Population variance of one sample is zero."""
        assert calculate_volatility([0.02]) == 0.0

    def test_constant_returns(self):
        """Identical returns have no dispersion."""
        assert calculate_volatility([0.01, 0.01, 0.01]) == pytest.approx(0.0)

    def test_empty_returns(self):
        assert calculate_volatility([]) == 0.0


# =============================================================================
# SHARPE RATIO
# =============================================================================

class TestSharpeRatio:
    """Tests for calculate_sharpe_ratio."""

    def test_zero_volatility_gives_zero(self):
        assert calculate_sharpe_ratio([0.01, 0.01], volatility=0.0) == 0.0

    def test_known_value(self):
        """Mean excess return annualized over volatility as a decimal."""
        returns = [0.01, -0.01]
        volatility = calculate_volatility(returns)

        sharpe = calculate_sharpe_ratio(returns, volatility, risk_free_rate=0.05)

        expected = (-0.05 / 252) * 252 / (volatility / 100)
        assert sharpe == pytest.approx(expected)
        assert sharpe < 0

    def test_custom_risk_free_rate(self):
        """A zero risk-free rate leaves only the mean return."""
        returns = [0.02, 0.0]
        volatility = calculate_volatility(returns)

        sharpe = calculate_sharpe_ratio(returns, volatility, risk_free_rate=0.0)

        assert sharpe == pytest.approx(0.01 * 252 / (volatility / 100))


# =============================================================================
# MAX DRAWDOWN
# =============================================================================

class TestMaxDrawdown:
    """Tests for calculate_max_drawdown."""

    def test_known_drawdown(self):
        """Index 100 → 110 → 88 → 92.4: worst decline is -20%."""
        assert calculate_max_drawdown([0.1, -0.2, 0.05]) == pytest.approx(-20.0)

    def test_monotonic_growth_has_no_drawdown(self):
        assert calculate_max_drawdown([0.01, 0.02, 0.03]) == 0.0

    def test_drawdown_is_never_positive(self):
        assert calculate_max_drawdown([-0.1, 0.3, -0.05]) <= 0

    def test_empty_returns(self):
        assert calculate_max_drawdown([]) == 0.0

    def test_withdrawals_do_not_create_drawdown(self):
        """Balances fall but the return index stays flat."""
        series = make_series([1000.0, 600.0, 300.0], flows=[0.0, -400.0, -300.0])

        returns = calculate_period_returns(series)

        assert calculate_max_drawdown(returns) == pytest.approx(0.0)


# =============================================================================
# AVERAGE RETURN AND WIN RATE
# =============================================================================

class TestAverageReturn:
    """Tests for annualize_mean_return."""

    def test_known_value(self):
        """0.1% per period over 252 periods is 25.2%."""
        assert annualize_mean_return([0.001]) == pytest.approx(25.2)

    def test_empty_returns(self):
        assert annualize_mean_return([]) == 0.0


class TestWinRate:
    """Tests for calculate_win_rate."""

    def test_mixed_series(self):
        """Two of three pairs went up."""
        assert calculate_win_rate(make_series([100.0, 110.0, 105.0, 120.0])) == 66.67

    def test_flat_series_has_no_wins(self):
        assert calculate_win_rate(make_series([100.0, 100.0, 100.0])) == 0.0

    def test_insufficient_data(self):
        assert calculate_win_rate(make_series([100.0])) == 0.0
        assert calculate_win_rate([]) == 0.0


# =============================================================================
# COMBINED METRICS
# =============================================================================

class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_empty_and_single_point_give_zeros(self):
        assert compute_metrics([]) == ReturnMetrics()
        assert compute_metrics(make_series([100.0])) == ReturnMetrics()

    def test_all_returns_filtered_gives_zeros(self):
        """Only outliers and zero bases: nothing to measure."""
        series = make_series([0.0, 100.0, 200.0])

        assert compute_metrics(series) == ReturnMetrics()

    def test_values_are_rounded(self):
        metrics = compute_metrics(make_series([100.0, 101.0, 100.5, 102.0]))

        for value in (metrics.volatility, metrics.sharpe, metrics.max_drawdown, metrics.avg_return):
            assert value == round(value, 2)

    def test_metrics_ignore_value_scale(self):
        """Multiplying every balance by a constant leaves metrics unchanged."""
        values = [100.0, 101.0, 100.5, 102.0, 101.2]

        small = compute_metrics(make_series(values))
        large = compute_metrics(make_series([v * 1000 for v in values]))

        assert small == large

    def test_outlier_does_not_affect_volatility(self):
        """A +60% jump is excluded from the return sample."""
        series = make_series([100.0, 101.0, 161.6, 163.216])

        with_filter = compute_metrics(series)
        unfiltered = calculate_volatility(
            calculate_period_returns(series, outlier_threshold=10.0)
        )

        assert with_filter.volatility == 0.0
        assert unfiltered > 50

    def test_steady_growth(self):
        """Constant +1% per period: positive return, no risk."""
        series = make_series([100.0, 101.0, 102.01, 103.0301])

        metrics = compute_metrics(series)

        assert metrics.volatility == 0.0
        assert metrics.sharpe == 0.0
        assert metrics.max_drawdown == 0.0
        assert metrics.avg_return == pytest.approx(252.0)

    @pytest.mark.parametrize("values,flows", [
        ([-100.0, -50.0, -200.0, 10.0, -5.0], None),
        ([100.0, 50.0, 20.0], [0.0, -150.0, -60.0]),
        ([100.0, 150.0, 90.0, 130.0], [0.0, 50.0, -60.0, 40.0]),
        ([0.0, 0.0, 0.0, 0.0], None),
        ([100.0, 0.0, 0.0, 50.0], [0.0, 0.0, 50.0, 0.0]),
        ([100.0, 80.0, 60.0, 80.0, 100.0], None),
    ], ids=[
        "negative-values",
        "all-negative-bases",
        "mixed-sign-flows",
        "zeros",
        "zero-then-deposit",
        "v-shape",
    ])
    def test_awkward_series_are_handled(self, values, flows):
        metrics = compute_metrics(make_series(values, flows))

        assert isinstance(metrics, ReturnMetrics)
        for value in (metrics.volatility, metrics.sharpe, metrics.max_drawdown, metrics.avg_return):
            assert math.isfinite(value)
        assert metrics.max_drawdown <= 0
        assert metrics.volatility >= 0

    def test_v_shape_drawdown(self):
        """-20% then -25% leaves the index at 60: a 40% drawdown."""
        metrics = compute_metrics(make_series([100.0, 80.0, 60.0, 80.0, 100.0]))

        assert metrics.max_drawdown == pytest.approx(-40.0)
        assert metrics.volatility > 0

    def test_only_non_positive_bases_give_zeros(self):
        series = make_series([100.0, 50.0, 20.0], flows=[0.0, -150.0, -60.0])

        assert compute_metrics(series) == ReturnMetrics()
