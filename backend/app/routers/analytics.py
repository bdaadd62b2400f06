# backend/app/routers/analytics.py
"""
Analytics endpoints.

Stateless computations over series supplied in the request body:
- POST /analytics/metrics         - Metrics, win rate, projections of one series
- POST /analytics/projection      - Linear projections of a plain value list
- POST /analytics/portfolio       - Account rollups + portfolio summary
- POST /analytics/goals/progress  - Savings goal progress

Nothing is stored: the caller owns the series and sends them on each call.
Service errors (ValidationError, FXConversionError) are mapped to HTTP
responses by the global handlers in main.py.
"""

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_analytics_service
from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS
from app.schemas.analytics import (
    AccountSeriesSchema,
    BalancePointSchema,
    GoalProgressRequest,
    GoalProgressResponse,
    MetricsRequest,
    MetricsResponse,
    PortfolioRequest,
    PortfolioResponse,
    ProjectionListResponse,
    ProjectionRequest,
    ProjectionResponse,
)
from app.services.analytics import AccountSeries, AnalyticsService, BalancePoint
from app.services.constants import METRIC_DECIMALS

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


# =============================================================================
# MAPPER FUNCTIONS (Pydantic Schemas -> Internal Types)
# =============================================================================

def _to_points(points: list[BalancePointSchema]) -> list[BalancePoint]:
    """Map request points to internal BalancePoints."""
    return [BalancePoint(date=p.date, value=p.value, flow=p.flow) for p in points]


def _to_account_series(account: AccountSeriesSchema) -> AccountSeries:
    """Map a request account (and its sub-accounts) to AccountSeries."""
    return AccountSeries(
        account_id=account.account_id,
        name=account.name,
        currency=account.currency,
        points=_to_points(account.points),
        children=[_to_account_series(child) for child in account.children],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/metrics",
    response_model=MetricsResponse,
    summary="Compute metrics of a balance series",
    response_description="Volatility, Sharpe, drawdown, average return, win rate and projections"
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def compute_series_metrics(
        request: Request,  # Required for rate limiting
        body: MetricsRequest,
        service: AnalyticsService = Depends(get_analytics_service),
) -> MetricsResponse:
    """
    Compute risk metrics and projections for one account series.

    - **volatility**: Annualized standard deviation of period returns (%)
    - **sharpe**: Annualized excess return over volatility
    - **max_drawdown**: Worst decline of the return index (%, <= 0)
    - **avg_return**: Annualized mean period return (%)
    - **projections**: 90, 180 and 365 days ahead

    Fewer than 2 points yield zero metrics.
    """
    analysis = service.analyze_series(_to_points(body.points))
    return MetricsResponse.model_validate(analysis)


@router.post(
    "/projection",
    response_model=ProjectionListResponse,
    summary="Project a value list linearly",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def project_values(
        request: Request,  # Required for rate limiting
        body: ProjectionRequest,
        service: AnalyticsService = Depends(get_analytics_service),
) -> ProjectionListResponse:
    """
    Extrapolate values with an ordinary-least-squares line.

    Each horizon is measured from the last value: `days=0` is the fitted
    value of the last point, negative horizons look back.
    """
    projections = [
        ProjectionResponse(
            days=days,
            value=round(service.project_values(body.values, days), METRIC_DECIMALS),
        )
        for days in body.days
    ]
    return ProjectionListResponse(projections=projections)


@router.post(
    "/portfolio",
    response_model=PortfolioResponse,
    summary="Roll up accounts into a portfolio view",
    response_description="Consolidated accounts (largest first) and portfolio summary"
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def analyze_portfolio(
        request: Request,  # Required for rate limiting
        body: PortfolioRequest,
        service: AnalyticsService = Depends(get_analytics_service),
) -> PortfolioResponse:
    """
    Consolidate every account with its sub-accounts.

    Amounts are converted to the common unit (COP) before being added;
    `usd_to_cop_rate` overrides the configured fallback rate.
    Monthly contribution and withdrawal totals refer to the month of
    `as_of` (the latest series date when omitted).

    Raises **400** if an account uses a currency with no known rate.
    """
    analysis = service.analyze_portfolio(
        [_to_account_series(a) for a in body.accounts],
        usd_to_cop_rate=body.usd_to_cop_rate,
        as_of=body.as_of,
    )
    return PortfolioResponse.model_validate(analysis)


@router.post(
    "/goals/progress",
    response_model=GoalProgressResponse,
    summary="Progress toward a savings goal",
)
@limiter.limit(RATE_LIMIT_ANALYTICS)
def get_goal_progress(
        request: Request,  # Required for rate limiting
        body: GoalProgressRequest,
        service: AnalyticsService = Depends(get_analytics_service),
) -> GoalProgressResponse:
    """
    Measure progress toward `target_amount`.

    When `points` are given, their growth drives the days-to-target
    estimate and the last value stands in for a missing `current_amount`.
    """
    progress = service.goal_progress(
        body.target_amount,
        points=_to_points(body.points),
        current_amount=body.current_amount,
    )
    return GoalProgressResponse.model_validate(progress)
