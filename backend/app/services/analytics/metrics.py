# backend/app/services/analytics/metrics.py
"""
Return and risk metrics for the Analytics Service.

This module contains pure functions that turn a balance series into
risk-adjusted performance metrics:
- Period returns: Flow-adjusted return of each consecutive pair
- Volatility: Annualized population standard deviation of period returns
- Sharpe Ratio: Annualized excess return per unit of volatility
- Max Drawdown: Worst decline of a synthetic cumulative-return index
- Average Return: Annualized mean period return
- Win Rate: Share of periods where the balance increased

All functions are stateless and total: degenerate input (empty series,
single point, non-positive bases) yields zeros, never an exception.

Formulas:
    base_i = V_{i-1} + CF_i
    r_i    = (V_i - base_i) / base_i          (skipped when base_i <= 0,
                                               discarded when |r_i| >= 0.5)

    Volatility (annualized, %) = sqrt(mean((r - mean(r))^2)) * sqrt(252) * 100

    Sharpe = mean(r - Rf/252) * 252 / (Volatility / 100)

    Max Drawdown (%) = min((I_t - peak_t) / peak_t * 100),  I_0 = 100, I_t = I_{t-1} * (1 + r_t)

    Average Return (%) = mean(r) * 252 * 100
"""

import logging
import math

from app.services.analytics.types import BalancePoint, ReturnMetrics
from app.services.constants import (
    TRADING_DAYS_PER_YEAR,
    DEFAULT_RISK_FREE_RATE,
    OUTLIER_RETURN_THRESHOLD,
    DRAWDOWN_INDEX_BASE,
    METRIC_DECIMALS,
    MIN_VOLATILITY,
)

logger = logging.getLogger(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _mean(values: list[float]) -> float:
    """Arithmetic mean, 0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def calculate_period_returns(
        series: list[BalancePoint],
        outlier_threshold: float = OUTLIER_RETURN_THRESHOLD,
) -> list[float]:
    """
    Calculate flow-adjusted period returns of a balance series.

    The capital at risk during period i is the previous balance plus the
    cash injected or removed during period i:

        base_i = V_{i-1} + CF_i
        r_i = (V_i - base_i) / base_i

    Periods with a non-positive base are skipped. Returns with
    |r_i| >= outlier_threshold are treated as data anomalies and discarded.

    Args:
        series: Balance points in ascending date order
        outlier_threshold: Absolute return at which a period is discarded

    Returns:
        List of period returns as decimals (0.01 = 1%), possibly empty
    """
    if len(series) < 2:
        return []

    returns: list[float] = []
    skipped = 0
    outliers = 0

    for i in range(1, len(series)):
        base = series[i - 1].value + series[i].flow

        if base <= 0:
            skipped += 1
            continue

        period_return = (series[i].value - base) / base

        if abs(period_return) >= outlier_threshold:
            outliers += 1
            continue

        returns.append(period_return)

    if skipped or outliers:
        logger.debug(
            f"Period returns: kept {len(returns)}, skipped {skipped} non-positive bases, "
            f"discarded {outliers} outliers"
        )

    return returns


# =============================================================================
# INDIVIDUAL METRICS
# =============================================================================

def calculate_volatility(
        returns: list[float],
        periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """
    Calculate annualized volatility in percent.

    Uses the population variance (divide by n), so a single return
    has zero volatility.

    Args:
        returns: Period returns as decimals
        periods_per_year: Annualization constant

    Returns:
        Annualized volatility (%), 0 for an empty sample
    """
    if not returns:
        return 0.0

    avg = _mean(returns)
    variance = _mean([(r - avg) ** 2 for r in returns])

    return math.sqrt(variance) * math.sqrt(periods_per_year) * 100


def calculate_sharpe_ratio(
        returns: list[float],
        volatility: float,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """
    Calculate the annualized Sharpe ratio.

    Formula: Sharpe = mean(r - Rf_period) * periods_per_year / (volatility / 100)

    Args:
        returns: Period returns as decimals
        volatility: Annualized volatility in percent
        risk_free_rate: Annual risk-free rate as decimal
        periods_per_year: Annualization constant

    Returns:
        Sharpe ratio, or 0 when volatility is (numerically) zero or there
        are no returns
    """
    if not returns or volatility <= MIN_VOLATILITY:
        return 0.0

    risk_free_period = risk_free_rate / periods_per_year
    avg_excess = _mean([r - risk_free_period for r in returns])

    return (avg_excess * periods_per_year) / (volatility / 100)


def calculate_max_drawdown(
        returns: list[float],
        base: float = DRAWDOWN_INDEX_BASE,
) -> float:
    """
    Calculate the maximum drawdown of a synthetic cumulative-return index.

    The index starts at `base` and compounds each period return in order.
    Measuring drawdown on the index rather than on raw balances keeps
    withdrawals from showing up as losses.

    Args:
        returns: Period returns as decimals, in chronological order
        base: Starting level of the index

    Returns:
        Most negative drawdown in percent (<= 0), 0 for no returns
    """
    cumulative = base
    peak = base
    max_drawdown = 0.0

    for r in returns:
        cumulative *= (1 + r)
        if cumulative > peak:
            peak = cumulative

        # Outlier filtering keeps |r| < 0.5, so the index stays positive
        drawdown = (cumulative - peak) / peak * 100
        if drawdown < max_drawdown:
            max_drawdown = drawdown

    return max_drawdown


def annualize_mean_return(
        returns: list[float],
        periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """
    Annualize the mean period return.

    Formula: mean(r) * periods_per_year * 100

    Returns:
        Annualized average return in percent, 0 for no returns
    """
    return _mean(returns) * periods_per_year * 100


def calculate_win_rate(series: list[BalancePoint]) -> float:
    """
    Calculate the share of consecutive periods where the balance increased.

    Args:
        series: Balance points in ascending date order

    Returns:
        Win rate in percent (rounded to 2 decimals), 0 for fewer than 2 points
    """
    if len(series) < 2:
        return 0.0

    pairs = len(series) - 1
    wins = sum(
        1 for i in range(1, len(series))
        if series[i].value > series[i - 1].value
    )

    return round(wins / pairs * 100, METRIC_DECIMALS)


# =============================================================================
# COMBINED METRICS
# =============================================================================

def compute_metrics(
        series: list[BalancePoint],
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> ReturnMetrics:
    """
    Compute all return metrics of a balance series.

    Internal computation uses full float precision; every output is
    rounded to 2 decimals.

    Args:
        series: Balance points in ascending date order
        risk_free_rate: Annual risk-free rate as decimal

    Returns:
        ReturnMetrics; all zeros when fewer than 2 points are given or
        no period return survives filtering
    """
    if len(series) < 2:
        return ReturnMetrics()

    returns = calculate_period_returns(series)

    if not returns:
        return ReturnMetrics()

    volatility = calculate_volatility(returns)
    sharpe = calculate_sharpe_ratio(returns, volatility, risk_free_rate)
    max_drawdown = calculate_max_drawdown(returns)
    avg_return = annualize_mean_return(returns)

    return ReturnMetrics(
        volatility=round(volatility, METRIC_DECIMALS),
        sharpe=round(sharpe, METRIC_DECIMALS),
        max_drawdown=round(max_drawdown, METRIC_DECIMALS),
        avg_return=round(avg_return, METRIC_DECIMALS),
    )
