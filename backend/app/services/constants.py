# backend/app/services/constants.py
"""
Centralized constants for the portfolio analytics services.

This module provides a single source of truth for all business constants
used across the application. Centralizing these values:

1. Prevents inconsistencies from duplicate definitions
2. Makes it easy to tune parameters without touching algorithm bodies
3. Documents the meaning and units of each constant

Usage:
    from app.services.constants import (
        TRADING_DAYS_PER_YEAR,
        DEFAULT_RISK_FREE_RATE,
        OUTLIER_RETURN_THRESHOLD,
    )
"""

from decimal import Decimal


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Annualization constant for per-period returns and volatility
# Applied to every asset class, including ones that trade every calendar day
TRADING_DAYS_PER_YEAR: int = 252

# Calendar days in a year
# Used to turn an annualized return into a daily growth rate for projections
CALENDAR_DAYS_PER_YEAR: int = 365


# =============================================================================
# RISK-FREE RATE
# =============================================================================

# Annual risk-free rate for the Sharpe ratio (5% = 0.05)
DEFAULT_RISK_FREE_RATE: float = 0.05


# =============================================================================
# RETURN SAMPLE FILTERING
# =============================================================================

# Per-period returns with |r| >= this value are treated as data anomalies
# (e.g. a missed flow entry) and excluded from the return sample
OUTLIER_RETURN_THRESHOLD: float = 0.5

# Starting level of the synthetic cumulative-return index used for drawdown
DRAWDOWN_INDEX_BASE: float = 100.0

# Volatility (%) at or below this is numerical noise; Sharpe is reported as 0
MIN_VOLATILITY: float = 1e-9


# =============================================================================
# PRESENTATION
# =============================================================================

# Decimal places for every metric returned to callers
METRIC_DECIMALS: int = 2

# Monetary results are quantized to cents (ROUND_HALF_UP)
MONEY_QUANTUM: Decimal = Decimal("0.01")


# =============================================================================
# PROJECTION SETTINGS
# =============================================================================

# Standard projection horizons in days (quarterly, semi-annual, annual)
PROJECTION_HORIZONS: tuple[int, ...] = (90, 180, 365)

# Horizon used to decide the trend direction of a rollup
TREND_HORIZON_DAYS: int = 90

# Compound extrapolation is only used below this annualized volatility (%)
COMPOUND_VOLATILITY_CEILING: float = 50.0

# Largest horizon (in days, either direction) accepted by the API
MAX_PROJECTION_DAYS: int = 3650


# =============================================================================
# RISK BUCKETS
# =============================================================================

# Annualized volatility (%) lower bounds, checked from highest to lowest.
# A volatility strictly greater than the bound falls into the bucket.
RISK_LEVEL_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (30.0, "muy alto"),
    (15.0, "alto"),
    (8.0, "medio"),
)


# =============================================================================
# CURRENCY SETTINGS
# =============================================================================

# Common unit for portfolio-level rollups
BASE_CURRENCY: str = "COP"

# Fallback USD→COP rate when no stored exchange rate is available
DEFAULT_USD_TO_COP_RATE: float = 3000.0


# =============================================================================
# LEDGER TRANSACTION TYPES
# =============================================================================

# Transaction types that bring money into an account from outside
INFLOW_TRANSACTION_TYPES: frozenset[str] = frozenset({
    "initial_balance",
    "contribution",
    "income",
    "transfer_in",
})

# Transaction types that take money out of an account
OUTFLOW_TRANSACTION_TYPES: frozenset[str] = frozenset({
    "withdrawal",
    "expense",
    "fee",
    "transfer_out",
})

# Transfer types, subject to the internal-reallocation exclusion
TRANSFER_TRANSACTION_TYPES: frozenset[str] = frozenset({
    "transfer_in",
    "transfer_out",
})


# =============================================================================
# RATE LIMITING
# =============================================================================

# Default limit applied to every endpoint without an explicit limit
RATE_LIMIT_DEFAULT: str = "100/minute"

# Health checks are cheap and polled by load balancers
RATE_LIMIT_HEALTH: str = "300/minute"

# Analytics endpoints run the full metrics/projection pipeline per request
RATE_LIMIT_ANALYTICS: str = "30/minute"
