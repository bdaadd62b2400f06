# backend/app/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

Every request gets an ID, taken from the first header present:
1. X-Correlation-ID
2. X-Request-ID
3. A freshly generated UUID4

The ID is stored in the request context (so every log line carries it)
and echoed back in the X-Correlation-ID response header.

Usage:
    app.add_middleware(CorrelationIdMiddleware)

    curl -H "X-Correlation-ID: trace-42" -X POST http://localhost:8000/analytics/metrics ...
    # < X-Correlation-ID: trace-42
"""

import logging
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.utils.context import set_correlation_id, clear_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


def resolve_correlation_id(request: Request) -> str:
    """Correlation ID from the request headers, or a new UUID4."""
    for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to each request and its response."""

    async def dispatch(
            self,
            request: Request,
            call_next: Callable[[Request], Response],
    ) -> Response:
        correlation_id = resolve_correlation_id(request)
        set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()
