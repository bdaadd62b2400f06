# backend/app/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The application layer (main.py) is responsible for mapping these to
appropriate HTTP responses.

The analytics engine itself never raises: degenerate series produce zero
metrics. These exceptions cover the collaborators around it (currency
conversion, programmatic input validation).

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    └── FXRateError
        └── FXConversionError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    This is for programmatic validation errors (invalid parameters, missing
    required fields, etc.), NOT for request validation which is handled
    by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


# =============================================================================
# FX RATE ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """
    Base exception for exchange-rate failures.

    Attributes:
        base_currency: Currency being converted from
        quote_currency: Currency being converted to
    """

    def __init__(
            self,
            message: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        self.base_currency = base_currency
        self.quote_currency = quote_currency
        super().__init__(message)


class FXConversionError(FXRateError):
    """
    Raised when an amount cannot be converted to the common unit.

    Typical causes: the currency has no configured rate, or the rate
    is zero or negative.
    """

    def __init__(
            self,
            message: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        super().__init__(message, base_currency=base_currency, quote_currency=quote_currency)


__all__ = [
    "ServiceError",
    "ValidationError",
    "FXRateError",
    "FXConversionError",
]
