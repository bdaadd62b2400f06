# backend/app/services/analytics/__init__.py
"""
Analytics Service Package.

This package provides account and portfolio analytics:
- Risk metrics (Volatility, Sharpe, Max Drawdown, Avg return, Win rate)
- Projections (Linear trend, Compound growth)
- Consolidation (Parent + sub-account rollups, allocation, portfolio summary)
- Savings goal progress

Architecture:
    analytics/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Data classes for inputs and results
    ├── series.py                # Ledger rows → BalancePoint series
    ├── metrics.py               # Period returns and risk metrics
    ├── projection.py            # Linear / compound projections
    ├── aggregation.py           # Rollups and portfolio summary
    ├── goals.py                 # Savings goal progress
    └── service.py               # AnalyticsService (orchestrator)

Usage:
    from app.services.analytics import AnalyticsService, BalancePoint

    service = AnalyticsService()
    analysis = service.analyze_series([
        BalancePoint(date(2024, 1, 1), 100.0),
        BalancePoint(date(2024, 1, 2), 102.0),
    ])
    print(f"Volatility: {analysis.metrics.volatility}")

Data Flow:
    Ledger rows (LedgerEntry)
        ↓  build_balance_series
    BalancePoint series per account
        ↓
    ┌─────────────────────────────────────────┐
    │           AnalyticsService              │
    │  ┌─────────────┐  ┌─────────────────┐   │
    │  │ Metrics     │  │ Projection      │   │
    │  │ • Volatility│  │ • Linear (OLS)  │   │
    │  │ • Sharpe    │  │ • Compound      │   │
    │  │ • Drawdown  │  └─────────────────┘   │
    │  └─────────────┘                        │
    │  ┌───────────────────────────────────┐  │
    │  │ Aggregation                       │  │
    │  │ • Rollups  • Allocation  • Summary│  │
    │  └───────────────────────────────────┘  │
    └─────────────────────────────────────────┘
        ↓
    SeriesAnalysis / PortfolioAnalysis
"""

from app.services.analytics.aggregation import (
    classify_risk,
    merge_series,
    rollup,
    summarize_portfolio,
)
from app.services.analytics.goals import goal_progress
from app.services.analytics.metrics import (
    annualize_mean_return,
    calculate_max_drawdown,
    calculate_period_returns,
    calculate_sharpe_ratio,
    calculate_volatility,
    calculate_win_rate,
    compute_metrics,
)
from app.services.analytics.projection import (
    daily_growth_rate,
    linear_trend_delta,
    project,
    project_compound,
    project_horizons,
    project_linear,
)
from app.services.analytics.series import LedgerEntry, build_balance_series, signed_flow
# Main service
from app.services.analytics.service import AnalyticsService, validate_series
# Types
from app.services.analytics.types import (
    # Input types
    BalancePoint,
    AccountSeries,
    # Result types
    ReturnMetrics,
    Projection,
    AccountRollup,
    PortfolioSummary,
    GoalProgress,
    SeriesAnalysis,
    PortfolioAnalysis,
    RiskLevel,
    TrendDirection,
)

__all__ = [
    # Main service
    "AnalyticsService",
    "validate_series",

    # Input types
    "BalancePoint",
    "AccountSeries",
    "LedgerEntry",

    # Result types
    "ReturnMetrics",
    "Projection",
    "AccountRollup",
    "PortfolioSummary",
    "GoalProgress",
    "SeriesAnalysis",
    "PortfolioAnalysis",
    "RiskLevel",
    "TrendDirection",

    # Individual functions (for testing)
    "build_balance_series",
    "signed_flow",
    "calculate_period_returns",
    "calculate_volatility",
    "calculate_sharpe_ratio",
    "calculate_max_drawdown",
    "annualize_mean_return",
    "calculate_win_rate",
    "compute_metrics",
    "project_linear",
    "linear_trend_delta",
    "daily_growth_rate",
    "project_compound",
    "project",
    "project_horizons",
    "classify_risk",
    "merge_series",
    "rollup",
    "summarize_portfolio",
    "goal_progress",
]
