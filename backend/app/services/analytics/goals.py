# backend/app/services/analytics/goals.py
"""
Savings goal progress for the Analytics Service.

Formulas:
    progress_pct   = min(current / target * 100, 100)   (0 for target <= 0)
    remaining      = max(target - current, 0)
    days_to_target = ceil(ln(target / current) / ln(1 + g))   if g > 0
                     ceil(remaining / delta)                  elif delta > 0
                     None                                     otherwise

Where g is the daily compound growth rate of the backing series and delta
its per-period linear trend.
"""

import math

from app.services.analytics.types import GoalProgress
from app.services.constants import METRIC_DECIMALS


def goal_progress(
        target_amount: float,
        current_amount: float,
        daily_growth_rate: float = 0.0,
        daily_trend_delta: float = 0.0,
) -> GoalProgress:
    """
    Measure how far an amount is from a savings target.

    Args:
        target_amount: Goal amount (same unit as current_amount)
        current_amount: Amount saved so far
        daily_growth_rate: Daily compound growth rate of the backing series
        daily_trend_delta: Daily change of the backing series' linear trend

    Returns:
        GoalProgress. days_to_target is 0 when completed and None when the
        series is not growing.
    """
    if target_amount <= 0:
        progress = 0.0
    else:
        progress = min(current_amount / target_amount * 100, 100.0)

    remaining = max(target_amount - current_amount, 0.0)
    is_completed = current_amount >= target_amount

    days_to_target: int | None
    if is_completed:
        days_to_target = 0
    elif daily_growth_rate > 0 and current_amount > 0:
        days_to_target = math.ceil(
            math.log(target_amount / current_amount) / math.log(1 + daily_growth_rate)
        )
    elif daily_trend_delta > 0:
        days_to_target = math.ceil(remaining / daily_trend_delta)
    else:
        days_to_target = None

    return GoalProgress(
        target_amount=round(target_amount, METRIC_DECIMALS),
        current_amount=round(current_amount, METRIC_DECIMALS),
        progress_pct=round(max(progress, 0.0), METRIC_DECIMALS),
        remaining=round(remaining, METRIC_DECIMALS),
        is_completed=is_completed,
        days_to_target=days_to_target,
    )
