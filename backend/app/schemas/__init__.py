# backend/app/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

- analytics: Series metrics, projections, portfolio rollups, goal progress
- errors: Error response formats

Usage:
    from app.schemas import MetricsRequest, MetricsResponse
    from app.schemas import PortfolioRequest, PortfolioResponse
    from app.schemas import ErrorDetail
"""

from app.schemas.analytics import (
    # Shared
    BalancePointSchema,
    ReturnMetricsResponse,
    ProjectionResponse,
    # Metrics
    MetricsRequest,
    MetricsResponse,
    # Projection
    ProjectionRequest,
    ProjectionListResponse,
    # Portfolio
    AccountSeriesSchema,
    PortfolioRequest,
    AccountRollupResponse,
    PortfolioSummaryResponse,
    PortfolioResponse,
    # Goals
    GoalProgressRequest,
    GoalProgressResponse,
)
from app.schemas.errors import ErrorDetail, ValidationErrorDetail

__all__ = [
    # Shared
    "BalancePointSchema",
    "ReturnMetricsResponse",
    "ProjectionResponse",
    # Metrics
    "MetricsRequest",
    "MetricsResponse",
    # Projection
    "ProjectionRequest",
    "ProjectionListResponse",
    # Portfolio
    "AccountSeriesSchema",
    "PortfolioRequest",
    "AccountRollupResponse",
    "PortfolioSummaryResponse",
    "PortfolioResponse",
    # Goals
    "GoalProgressRequest",
    "GoalProgressResponse",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
]
