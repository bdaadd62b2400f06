# backend/app/schemas/analytics.py
"""
Pydantic schemas for the Analytics API.

These schemas define the request/response formats for:
- Series metrics (Volatility, Sharpe, Max Drawdown, Avg return, Win rate)
- Linear projections of plain value lists
- Portfolio rollups (parent + sub-accounts) and portfolio summary
- Savings goal progress

Design decisions:
- Series travel in the request body; the API stores nothing
- Numbers are plain JSON floats, already rounded to 2 decimals
- Percentages are in percent form (12.5 = 12.5%)
- Point dates must be strictly ascending (422 otherwise)
- Projection horizons are integers within ±MAX_PROJECTION_DAYS
- Input amounts must be finite (NaN and Infinity are rejected with 422)
"""

import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, field_validator

from app.services.analytics.types import RiskLevel, TrendDirection
from app.services.constants import MAX_PROJECTION_DAYS, PROJECTION_HORIZONS

Horizon = Annotated[int, Field(ge=-MAX_PROJECTION_DAYS, le=MAX_PROJECTION_DAYS)]


def _check_ascending(points: list["BalancePointSchema"]) -> list["BalancePointSchema"]:
    """Reject series whose dates are not strictly ascending."""
    for prev, cur in zip(points, points[1:]):
        if cur.date <= prev.date:
            raise ValueError(
                f"Point dates must be strictly ascending: {cur.date} follows {prev.date}"
            )
    return points


def _normalize_currency(v: str) -> str:
    return v.strip().upper()


# =============================================================================
# SHARED SCHEMAS
# =============================================================================

class BalancePointSchema(BaseModel):
    """One reporting period of an account."""

    model_config = ConfigDict(from_attributes=True)

    date: datetime.date = Field(..., description="Period date")
    value: FiniteFloat = Field(..., description="Balance at the end of the period")
    flow: FiniteFloat = Field(
        0.0,
        description="Net external cash movement (+ contribution, - withdrawal)"
    )


class ReturnMetricsResponse(BaseModel):
    """Risk-adjusted metrics of a series (all rounded to 2 decimals)."""

    model_config = ConfigDict(from_attributes=True)

    volatility: float = Field(..., description="Annualized volatility (%)")
    sharpe: float = Field(..., description="Annualized Sharpe ratio")
    max_drawdown: float = Field(..., description="Max drawdown of the return index (%, <= 0)")
    avg_return: float = Field(..., description="Annualized mean period return (%)")


class ProjectionResponse(BaseModel):
    """Projected value at a horizon."""

    model_config = ConfigDict(from_attributes=True)

    days: int
    value: float


# =============================================================================
# METRICS
# =============================================================================

class MetricsRequest(BaseModel):
    """Series to analyze."""

    points: list[BalancePointSchema] = Field(
        ...,
        description="Balance points in strictly ascending date order"
    )

    @field_validator("points")
    @classmethod
    def points_ascending(cls, v: list[BalancePointSchema]) -> list[BalancePointSchema]:
        return _check_ascending(v)


class MetricsResponse(BaseModel):
    """Metrics, win rate and projections of a series."""

    model_config = ConfigDict(from_attributes=True)

    metrics: ReturnMetricsResponse
    win_rate: float = Field(..., description="Share of up-periods (%)")
    risk_level: RiskLevel
    trend: TrendDirection
    projections: list[ProjectionResponse]


# =============================================================================
# PROJECTION
# =============================================================================

class ProjectionRequest(BaseModel):
    """Plain value list to extrapolate linearly."""

    values: list[FiniteFloat] = Field(..., description="Observed values, oldest first")
    days: list[Horizon] = Field(
        default_factory=lambda: list(PROJECTION_HORIZONS),
        min_length=1,
        description="Horizons in periods beyond the last value"
    )


class ProjectionListResponse(BaseModel):
    """Linear projections per requested horizon."""

    projections: list[ProjectionResponse]


# =============================================================================
# PORTFOLIO
# =============================================================================

class AccountSeriesSchema(BaseModel):
    """An account's history together with its sub-accounts."""

    account_id: int | str
    name: str = Field(..., min_length=1, max_length=200)
    currency: str = Field("COP", min_length=3, max_length=3)
    points: list[BalancePointSchema] = Field(default_factory=list)
    children: list["AccountSeriesSchema"] = Field(default_factory=list)

    @field_validator("currency")
    @classmethod
    def currency_upper(cls, v: str) -> str:
        return _normalize_currency(v)

    @field_validator("points")
    @classmethod
    def points_ascending(cls, v: list[BalancePointSchema]) -> list[BalancePointSchema]:
        return _check_ascending(v)


class PortfolioRequest(BaseModel):
    """Accounts to roll up, with an optional USD→COP rate and reference date."""

    accounts: list[AccountSeriesSchema] = Field(default_factory=list)
    usd_to_cop_rate: FiniteFloat | None = Field(
        None,
        gt=0,
        description="USD→COP rate (configured default when omitted)"
    )
    as_of: datetime.date | None = Field(
        None,
        description="Reference date for monthly flow totals (latest series date when omitted)"
    )


class AccountRollupResponse(BaseModel):
    """Consolidated view of an account and its sub-accounts."""

    model_config = ConfigDict(from_attributes=True)

    account_id: int | str
    name: str
    currency: str
    current_value: float
    current_value_native: float
    start_value: float
    net_flow: float
    invested_capital: float
    gain: float
    roi: float
    volatility: float
    sharpe: float
    max_drawdown: float
    avg_return: float
    risk_level: RiskLevel
    win_rate: float
    trend: TrendDirection
    projections: list[ProjectionResponse]
    allocation: float = Field(..., description="Share of the total portfolio (%)")
    own_allocation: float = Field(
        ...,
        description="Share of the total held directly by this account (%)"
    )
    metrics: ReturnMetricsResponse = Field(..., description="Metrics of the account's own series")
    children: list["AccountRollupResponse"] = Field(default_factory=list)


class PortfolioSummaryResponse(BaseModel):
    """Portfolio-level totals."""

    model_config = ConfigDict(from_attributes=True)

    total_value: float
    start_value: float
    net_flow: float
    invested_capital: float
    gain: float
    roi: float
    volatility: float
    risk_level: RiskLevel
    metrics: ReturnMetricsResponse
    projections: list[ProjectionResponse]
    currency_distribution: dict[str, float]
    total_contributions: float = Field(..., description="Gross inflows after each history's first point")
    total_withdrawals: float = Field(..., description="Gross outflows, as a positive amount")
    monthly_contributions: float = Field(..., description="Inflows in the month of as_of")
    monthly_withdrawals: float = Field(..., description="Outflows in the month of as_of")


class PortfolioResponse(BaseModel):
    """Rollups plus summary, all in the common unit."""

    model_config = ConfigDict(from_attributes=True)

    currency: str = Field(..., description="Common unit of every monetary figure")
    accounts: list[AccountRollupResponse]
    summary: PortfolioSummaryResponse


# =============================================================================
# GOALS
# =============================================================================

class GoalProgressRequest(BaseModel):
    """Savings goal, optionally backed by the account series funding it."""

    target_amount: FiniteFloat = Field(..., gt=0)
    current_amount: FiniteFloat | None = Field(
        None,
        ge=0,
        description="Amount saved so far (last point value when omitted)"
    )
    points: list[BalancePointSchema] = Field(
        default_factory=list,
        description="Series used to estimate the days to target"
    )

    @field_validator("points")
    @classmethod
    def points_ascending(cls, v: list[BalancePointSchema]) -> list[BalancePointSchema]:
        return _check_ascending(v)


class GoalProgressResponse(BaseModel):
    """Progress toward a savings goal."""

    model_config = ConfigDict(from_attributes=True)

    target_amount: float
    current_amount: float
    progress_pct: float
    remaining: float
    is_completed: bool
    days_to_target: int | None = Field(
        None,
        description="Estimated days to target (null when the series is not growing)"
    )
