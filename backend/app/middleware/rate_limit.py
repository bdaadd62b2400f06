# backend/app/middleware/rate_limit.py
"""
Rate limiting for the analytics API.

Analytics requests are CPU-bound (every call recomputes metrics from the
series it receives), so clients are throttled per IP address with slowapi.

Limits live in app/services/constants.py:
    RATE_LIMIT_DEFAULT     - Applied to every route
    RATE_LIMIT_ANALYTICS   - Metric, projection and portfolio computations
    RATE_LIMIT_HEALTH      - Health checks

The limiter is disabled when RATE_LIMIT_ENABLED=false (used by the test
suite). Storage is in-memory, suitable for a single instance.

Usage:
    from app.middleware.rate_limit import limiter, RATE_LIMIT_ANALYTICS

    @router.post("/metrics")
    @limiter.limit(RATE_LIMIT_ANALYTICS)
    def compute(request: Request, body: MetricsRequest):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import settings
from app.services.constants import (
    RATE_LIMIT_ANALYTICS,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
)

logger = logging.getLogger(__name__)

# Seconds a throttled client is told to wait
RETRY_AFTER_SECONDS = 60


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(
        request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    429 response in the same shape as every other API error.

    Includes a Retry-After header.
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_ANALYTICS",
]
