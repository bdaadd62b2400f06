# backend/app/schemas/errors.py
"""
Pydantic schemas for error responses.

Every error leaving the API has the same shape, built by the global
exception handlers in main.py:

    {"error": "FXConversionError", "message": "...", "details": {...}}
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error body (400, 429, 500)."""

    error: str = Field(
        ...,
        description="Error type (e.g., 'FXConversionError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Additional error context (optional)"
    )


class ValidationErrorDetail(BaseModel):
    """Request validation failures (422)."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict] = Field(
        ...,
        description="One entry per invalid field"
    )
