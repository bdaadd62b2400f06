# backend/app/utils/context.py
"""
Request context for the Portfolio Analytics service.

Holds the correlation ID of the request being served so that every log
record emitted while handling it can be traced back. Uses contextvars, so
values follow async/await calls and never leak between concurrent requests.

Usage:
    from app.utils.context import get_correlation_id, set_correlation_id

    # In middleware
    set_correlation_id("abc-123")

    # Anywhere while handling the request
    correlation_id = get_correlation_id()  # "abc-123"
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the current request, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID at the start of a request."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Reset the correlation ID once the request is finished."""
    _correlation_id_var.set(None)
