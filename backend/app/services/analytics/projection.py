# backend/app/services/analytics/projection.py
"""
Value projections for the Analytics Service.

Two interchangeable extrapolation strategies:
- Linear trend: Ordinary least squares over the series index
- Compound growth: Geometric extrapolation of the annualized average return

Strategy selection (project):
    g = avg_return / 100 / 365
    if g > 0 and volatility < 50:  V_end * (1 + g)^days
    else:                          V_end + slope * days

Compounding is reserved for stable, positive performers so that volatile or
declining series do not produce runaway estimates.

Formulas (OLS over x = 0..n-1):
    slope     = (n·Σxy - Σx·Σy) / (n·Σx² - (Σx)²)
    intercept = (Σy - slope·Σx) / n
    ŷ(days)   = slope · (n - 1 + days) + intercept
"""

import logging
import math
import sys

from app.services.analytics.types import Projection, ReturnMetrics
from app.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    COMPOUND_VOLATILITY_CEILING,
    METRIC_DECIMALS,
    PROJECTION_HORIZONS,
)

logger = logging.getLogger(__name__)

_LOG_FLOAT_MAX = math.log(sys.float_info.max)


# =============================================================================
# LINEAR TREND
# =============================================================================

def project_linear(values: list[float], days_ahead: float) -> float:
    """
    Extrapolate a value series with an ordinary-least-squares line.

    The series occupies indices 0..n-1; the fitted line is evaluated at
    n - 1 + days_ahead, so days_ahead=0 is the fitted value of the last point.

    Args:
        values: Observed values in chronological order
        days_ahead: Periods beyond the last observation (may be negative)

    Returns:
        Projected value. The last value when fewer than 2 points are given
        (0 for an empty series).
    """
    if len(values) < 2:
        return values[-1] if values else 0.0

    n = len(values)
    xs = range(n)

    sum_x = sum(xs)
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in zip(xs, values))
    sum_x2 = sum(x * x for x in xs)

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return values[-1]

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    return slope * (n - 1 + days_ahead) + intercept


def linear_trend_delta(values: list[float]) -> float:
    """
    Per-period change implied by the OLS trend.

    Evaluated as a one-period forward difference of project_linear, which
    equals the fitted slope (0 for fewer than 2 points).
    """
    return project_linear(values, 0) - project_linear(values, -1)


# =============================================================================
# COMPOUND GROWTH
# =============================================================================

def daily_growth_rate(avg_return: float) -> float:
    """
    Convert an annualized average return (%) into a daily growth rate.

    Example:
        >>> daily_growth_rate(36.5)
        0.001
    """
    return avg_return / 100 / CALENDAR_DAYS_PER_YEAR


def compound_exceeds_float_range(end_value: float, growth_rate: float, days: int) -> bool:
    """
    Check whether V_end * (1 + g)^days is too large to represent as a float.

    Compared in log space, one factor of e below the float maximum:
        days * ln(1 + g) + ln|V_end| >= ln(float_max) - 1
    """
    if end_value == 0:
        return False
    exponent = days * math.log1p(growth_rate) + math.log(abs(end_value))
    return exponent >= _LOG_FLOAT_MAX - 1


def project_compound(end_value: float, growth_rate: float, days: int) -> float:
    """
    Compound end_value at growth_rate per period for the given days.

    Formula: V_end * (1 + g)^days, evaluated as exp(days * ln(1 + g) + ln|V_end|)

    Callers check compound_exceeds_float_range first; math.exp raises
    OverflowError past the float range.
    """
    if end_value == 0:
        return 0.0
    magnitude = math.exp(days * math.log1p(growth_rate) + math.log(abs(end_value)))
    return math.copysign(magnitude, end_value)


# =============================================================================
# STRATEGY SELECTION
# =============================================================================

def project(
        end_value: float,
        growth_rate: float,
        volatility: float,
        trend_delta: float,
        days: int,
) -> float:
    """
    Project a value forward, choosing compound or linear extrapolation.

    Args:
        end_value: Current (last observed) value
        growth_rate: Daily growth rate (see daily_growth_rate)
        volatility: Annualized volatility in percent
        trend_delta: Per-period change of the linear trend
        days: Horizon in days

    Returns:
        Projected value at the horizon. Compounding that would leave the
        float range falls back to the linear trend, so the result is finite.
    """
    if growth_rate > 0 and volatility < COMPOUND_VOLATILITY_CEILING:
        if not compound_exceeds_float_range(end_value, growth_rate, days):
            return project_compound(end_value, growth_rate, days)
        logger.debug(
            f"Compound projection over {days} days exceeds float range, using linear trend"
        )

    return end_value + trend_delta * days


def project_horizons(
        values: list[float],
        metrics: ReturnMetrics,
        end_value: float | None = None,
        volatility: float | None = None,
        horizons: tuple[int, ...] = PROJECTION_HORIZONS,
) -> list[Projection]:
    """
    Project a series over several horizons.

    Args:
        values: Observed values used for the linear trend
        metrics: Metrics of the same series (avg_return drives compounding)
        end_value: Value to project from (defaults to the last value)
        volatility: Volatility used for strategy selection
                    (defaults to metrics.volatility)
        horizons: Horizons in days

    Returns:
        One Projection per horizon, in the given order
    """
    if end_value is None:
        end_value = values[-1] if values else 0.0
    if volatility is None:
        volatility = metrics.volatility

    growth = daily_growth_rate(metrics.avg_return)
    delta = linear_trend_delta(values)

    if growth > 0 and volatility < COMPOUND_VOLATILITY_CEILING:
        logger.debug(f"Projection: compound strategy (g={growth:.6f}, vol={volatility})")
    else:
        logger.debug(f"Projection: linear strategy (delta={delta:.4f}, vol={volatility})")

    return [
        Projection(
            days=days,
            value=round(project(end_value, growth, volatility, delta, days), METRIC_DECIMALS),
        )
        for days in horizons
    ]
