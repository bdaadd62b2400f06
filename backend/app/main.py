# backend/app/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers middleware (CORS, rate limiting, correlation IDs)
- Registers global exception handlers
- Registers the analytics router
- Defines global endpoints (health checks)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

from app.config import settings
from app.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_HEALTH,
)
from app.routers import analytics_router
from app.schemas.errors import ErrorDetail, ValidationErrorDetail
from app.services.exceptions import (
    ServiceError,
    ValidationError,
    FXConversionError,
)
from app.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Risk metrics, projections and consolidated views for personal portfolios",
    version="0.1.0",
    debug=settings.debug,
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================
# Origins are configured via CORS_ORIGINS environment variable

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

# slowapi reads the limiter from app state
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service-layer exceptions carry no HTTP knowledge; these handlers turn
# them into ErrorDetail bodies. The most specific class wins.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _service_error_response(
        status_code: int,
        exc: ServiceError,
        details: dict | None = None,
) -> JSONResponse:
    """ErrorDetail body named after the exception class."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details=details,
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Invalid series or arguments caught by the service (400)."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return _service_error_response(
        400, exc, {"field": exc.field} if exc.field else None
    )


@app.exception_handler(FXConversionError)
async def fx_conversion_error_handler(request: Request, exc: FXConversionError) -> JSONResponse:
    """Amounts that cannot be converted to the common unit (400)."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    details = None
    if exc.base_currency:
        details = {"base_currency": exc.base_currency, "quote_currency": exc.quote_currency}
    return _service_error_response(400, exc, details)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Any other service failure (500)."""
    logger.error(f"Service error on {request.method} {request.url.path}: {exc}")
    return _service_error_response(500, exc)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert {"detail": "..."} bodies (including routing 404s) to ErrorDetail."""
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        422: "ValidationError",
        429: "RateLimitError",
        500: "InternalServerError",
    }

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_types.get(exc.status_code, "HTTPError"),
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request validation failures (422) in ValidationErrorDetail format."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(details=errors).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(analytics_router)  # /analytics/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """API root - returns basic application info."""
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request):
    """
    Liveness check.

    The service has no external dependencies (series arrive in the request
    body), so being able to answer means being healthy.
    """
    return {
        "status": "healthy",
        "environment": settings.environment,
        "base_currency": settings.base_currency,
    }
