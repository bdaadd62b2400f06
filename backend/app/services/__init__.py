# backend/app/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive their inputs as plain data (no storage access)
- Are easily testable via dependency injection

Usage:
    from app.services import ServiceError, FXConversionError
    from app.services.analytics import AnalyticsService

The package root exports exceptions only; utilities such as
app.utils.fx_conversion depend on it and are in turn used by analytics.

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and limits
    └── analytics/                   # Analytics engine
        ├── service.py               # Main analytics orchestrator
        ├── types.py                 # Analytics data types
        ├── series.py                # Ledger rows → balance series
        ├── metrics.py               # Risk metrics (Volatility, Sharpe, Drawdown)
        ├── projection.py            # Linear / compound projections
        ├── aggregation.py           # Rollups and portfolio summary
        └── goals.py                 # Savings goal progress
"""

# Exceptions
from app.services.exceptions import (
    ServiceError,
    ValidationError,
    FXRateError,
    FXConversionError,
)

__all__ = [
    # Exceptions
    "ServiceError",
    "ValidationError",
    "FXRateError",
    "FXConversionError",
]
