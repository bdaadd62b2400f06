# backend/app/dependencies.py
"""
Dependency injection module for FastAPI services.

Provides singleton service instances shared across all requests. Services
are lazily initialized on first use to avoid import-time side effects, and
tests can swap them through `app.dependency_overrides`.

Usage in routers:
    from app.dependencies import get_analytics_service

    @router.post("/metrics")
    def compute_metrics(
        service: AnalyticsService = Depends(get_analytics_service),
    ):
        ...
"""

import logging
from functools import lru_cache

from app.config import settings
from app.services.analytics.service import AnalyticsService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# @lru_cache returns the same instance on every call

@lru_cache(maxsize=1)
def get_analytics_service() -> AnalyticsService:
    """
    Get the singleton AnalyticsService instance.

    The service is stateless; the singleton only avoids rebuilding it (and
    re-reading the currency settings) on every request.
    """
    logger.debug("Initializing singleton AnalyticsService")
    return AnalyticsService(
        base_currency=settings.base_currency,
        default_usd_rate=settings.default_usd_to_cop_rate,
    )
