# backend/app/services/analytics/types.py
"""
Data types for the Analytics Service.

This module defines the data structures used throughout the analytics
calculations. Series values are plain floats in the account's currency (or in
the common unit once converted). Monetary results of rollups and summaries
are Decimal, quantized to cents; statistics stay float. Percentages are
expressed as percent (12.5 = 12.5%), matching what the dashboard renders.

Architecture:
    - BalancePoint: One reporting period of an account (value + external flow)
    - AccountSeries: An account's history plus its sub-accounts
    - ReturnMetrics: Volatility, Sharpe, drawdown and average return
    - Projection: Extrapolated value at a forward horizon
    - AccountRollup: Consolidated parent + sub-account view
    - PortfolioSummary: Portfolio-level totals
    - GoalProgress: Savings-goal tracking
    - SeriesAnalysis, PortfolioAnalysis: AnalyticsService results

All result types are recomputed on every call; nothing here is cached.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0.00")


class RiskLevel(str, Enum):
    """
    Categorical risk bucket derived from annualized volatility.

    Attributes:
        LOW: volatility <= 8
        MEDIUM: 8 < volatility <= 15
        HIGH: 15 < volatility <= 30
        VERY_HIGH: volatility > 30
    """
    LOW = "bajo"
    MEDIUM = "medio"
    HIGH = "alto"
    VERY_HIGH = "muy alto"


class TrendDirection(str, Enum):
    """Direction of the 90-day projection relative to the current value."""
    UP = "up"
    DOWN = "down"


# =============================================================================
# INPUT TYPES
# =============================================================================

@dataclass
class BalancePoint:
    """
    A single reporting period of an account.

    Attributes:
        date: The period date (unique and ascending within a series)
        value: Balance at the end of the period
        flow: Net external cash movement during the period.
              Positive = contribution/transfer in, negative = withdrawal/transfer out
    """
    date: date
    value: float
    flow: float = 0.0


@dataclass
class AccountSeries:
    """
    An account's balance history together with its sub-accounts.

    Attributes:
        account_id: Identifier of the account
        name: Display name
        currency: Native currency code (e.g. "COP", "USD")
        points: Ascending-date balance series in the native currency
        children: Sub-accounts (one level deep)
    """
    account_id: int | str
    name: str
    currency: str
    points: list[BalancePoint] = field(default_factory=list)
    children: list["AccountSeries"] = field(default_factory=list)


# =============================================================================
# METRICS
# =============================================================================

@dataclass(frozen=True)
class ReturnMetrics:
    """
    Risk-adjusted performance metrics of a balance series.

    All values are rounded to 2 decimals.

    Attributes:
        volatility: Annualized standard deviation of period returns (%)
        sharpe: Annualized excess return over annualized volatility
        max_drawdown: Worst peak-to-trough decline of the return index (%, <= 0)
        avg_return: Annualized mean period return (%)
    """
    volatility: float = 0.0
    sharpe: float = 0.0
    max_drawdown: float = 0.0
    avg_return: float = 0.0


@dataclass(frozen=True)
class Projection:
    """
    Point estimate of a value at a forward horizon.

    Attributes:
        days: Horizon in periods ahead of the last observation
        value: Projected value
    """
    days: int
    value: float


# =============================================================================
# AGGREGATION RESULTS
# =============================================================================

@dataclass
class AccountRollup:
    """
    Consolidated view of an account and its sub-accounts.

    Monetary fields (Decimal) are in the common unit except
    current_value_native.

    Attributes:
        account_id: Identifier of the account
        name: Display name
        currency: Native currency of the account
        current_value: Consolidated current value (account + sub-accounts)
        current_value_native: Account + same-currency sub-accounts, native currency
        start_value: Consolidated first value of every history
        net_flow: Consolidated net external flow after the first period
        invested_capital: start_value + gross positive flow
        gain: current_value - start_value - net_flow
        roi: gain / invested_capital * 100 (0 when nothing was invested)
        volatility: Unweighted mean volatility of the account and sub-accounts
        sharpe: Sharpe ratio of the merged consolidated series
        max_drawdown: Max drawdown of the merged consolidated series
        avg_return: Annualized return of the merged consolidated series
        risk_level: Bucket for the consolidated volatility
        win_rate: Share of up-periods in the account's own series (%)
        trend: Whether the 90-day projection is above the current value
        projections: Consolidated projections for the standard horizons
        allocation: Share of the total portfolio (%)
        own_allocation: Share of the total held directly by this account (%)
        metrics: Metrics of the account's own series
        children: Rollups of the sub-accounts
    """
    account_id: int | str
    name: str
    currency: str
    current_value: Decimal = ZERO
    current_value_native: Decimal = ZERO
    start_value: Decimal = ZERO
    net_flow: Decimal = ZERO
    invested_capital: Decimal = ZERO
    gain: Decimal = ZERO
    roi: float = 0.0
    volatility: float = 0.0
    sharpe: float = 0.0
    max_drawdown: float = 0.0
    avg_return: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW
    win_rate: float = 0.0
    trend: TrendDirection = TrendDirection.DOWN
    projections: list[Projection] = field(default_factory=list)
    allocation: float = 0.0
    own_allocation: float = 0.0
    metrics: ReturnMetrics = field(default_factory=ReturnMetrics)
    children: list["AccountRollup"] = field(default_factory=list)


@dataclass
class PortfolioSummary:
    """
    Portfolio-level totals across all top-level rollups (common unit).

    Flow totals satisfy total_contributions - total_withdrawals == net_flow.

    Attributes:
        total_value: Sum of consolidated current values
        start_value: Sum of consolidated start values
        net_flow: Sum of consolidated net external flows
        invested_capital: Sum of invested capital
        gain: total_value - start_value - net_flow
        roi: gain / invested_capital * 100 (0 when nothing was invested)
        volatility: Unweighted mean of the top-level volatilities
        risk_level: Bucket for the portfolio volatility
        metrics: Metrics of the merged portfolio series
        projections: Projections of the merged portfolio series
        currency_distribution: Consolidated value per account currency
        total_contributions: Gross inflows after the first point of each history
        total_withdrawals: Gross outflows (positive amount), same periods
        monthly_contributions: Inflows in the calendar month of as_of
        monthly_withdrawals: Outflows in the calendar month of as_of
    """
    total_value: Decimal = ZERO
    start_value: Decimal = ZERO
    net_flow: Decimal = ZERO
    invested_capital: Decimal = ZERO
    gain: Decimal = ZERO
    roi: float = 0.0
    volatility: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW
    metrics: ReturnMetrics = field(default_factory=ReturnMetrics)
    projections: list[Projection] = field(default_factory=list)
    currency_distribution: dict[str, Decimal] = field(default_factory=dict)
    total_contributions: Decimal = ZERO
    total_withdrawals: Decimal = ZERO
    monthly_contributions: Decimal = ZERO
    monthly_withdrawals: Decimal = ZERO


# =============================================================================
# GOALS
# =============================================================================

@dataclass(frozen=True)
class GoalProgress:
    """
    Progress of a savings goal.

    Attributes:
        target_amount: Amount the goal aims for
        current_amount: Amount saved so far
        progress_pct: current / target * 100, capped at 100
        remaining: Amount still missing (>= 0)
        is_completed: True once current >= target
        days_to_target: Estimated days until the target is reached,
                        0 when completed, None when the trend never reaches it
    """
    target_amount: float
    current_amount: float
    progress_pct: float
    remaining: float
    is_completed: bool
    days_to_target: int | None = None


# =============================================================================
# SERVICE RESULTS
# =============================================================================

@dataclass
class SeriesAnalysis:
    """
    Analysis of a single balance series.

    Attributes:
        metrics: Volatility, Sharpe, drawdown and average return
        win_rate: Share of up-periods (%)
        risk_level: Bucket for the series volatility
        trend: Whether the 90-day projection is above the last value
        projections: Projections for the requested horizons
    """
    metrics: ReturnMetrics = field(default_factory=ReturnMetrics)
    win_rate: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW
    trend: TrendDirection = TrendDirection.DOWN
    projections: list[Projection] = field(default_factory=list)


@dataclass
class PortfolioAnalysis:
    """
    Rollups of every top-level account plus the portfolio summary.

    Attributes:
        accounts: Rollups sorted by consolidated value, descending
        summary: Portfolio-level totals
        currency: Common unit every monetary figure is expressed in
    """
    accounts: list[AccountRollup] = field(default_factory=list)
    summary: PortfolioSummary = field(default_factory=PortfolioSummary)
    currency: str = "COP"
