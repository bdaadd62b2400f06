# backend/app/utils/__init__.py
"""
Utility modules for the Portfolio Analytics service.

Cross-cutting utilities used throughout the application:
- logging: Logging configuration with correlation ID support
- context: Request context (correlation IDs)
- fx_conversion: Conversion of amounts to the common currency unit

Usage:
    from app.utils import setup_logging
    from app.utils import get_correlation_id, set_correlation_id
    from app.utils import CurrencyConverter
"""

from app.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from app.utils.fx_conversion import (
    CurrencyConverter,
    ToCommonUnit,
    convert_using_fx_rate,
    identity_conversion,
)
from app.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    # FX conversion
    "CurrencyConverter",
    "ToCommonUnit",
    "convert_using_fx_rate",
    "identity_conversion",
]
