# backend/app/routers/__init__.py
"""
API routers for the Portfolio Analytics service.

- analytics: Series metrics, projections, portfolio rollups, goal progress
"""

from app.routers.analytics import router as analytics_router

__all__ = [
    "analytics_router",
]
