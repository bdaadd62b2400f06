# backend/app/utils/fx_conversion.py
"""
FX Rate Conversion Utilities

Portfolio rollups add up accounts held in different currencies, so every
amount is first converted to a single common unit (COP by default).

Rate convention (standard FX notation):
    "1 currency = X common_unit"
    Example: USD rate 4000 means 1 USD = 4000 COP
    Usage: To convert USD → COP, MULTIPLY by rate

The analytics core never looks rates up itself. It receives a plain
callable `to_common_unit(value, currency) -> float`; CurrencyConverter is
the standard implementation, built from whatever rates the caller has.
"""

from typing import Callable

from app.services.constants import BASE_CURRENCY, DEFAULT_USD_TO_COP_RATE
from app.services.exceptions import FXConversionError

# Signature of the conversion collaborator injected into aggregation
ToCommonUnit = Callable[[float, str], float]


def convert_using_fx_rate(amount: float, fx_rate: float) -> float:
    """
    Convert an amount to the common unit using an FX rate.

    FX rate convention: 1 currency = fx_rate × common_unit
    Therefore: common_amount = amount × fx_rate

    Example:
        - Currency: USD, common unit: COP
        - FX rate: 4000 (meaning 1 USD = 4000 COP)
        - Amount: 2.5 USD
        - Common amount: 2.5 × 4000 = 10000 COP

    Args:
        amount: Amount in the source currency
        fx_rate: FX rate (1 source = X common unit)

    Returns:
        Amount converted to the common unit
    """
    return amount * fx_rate


def identity_conversion(value: float, currency: str) -> float:
    """Conversion for series that are already in a single unit."""
    return value


class CurrencyConverter:
    """
    Converts amounts to a common unit using a fixed table of rates.

    The common unit itself always converts at 1. Lookups are
    case-insensitive.

    Usage:
        converter = CurrencyConverter.for_usd_rate(4000)
        converter(1, "USD")     # 4000.0
        converter(5000, "COP")  # 5000.0
    """

    def __init__(
            self,
            rates: dict[str, float] | None = None,
            base_currency: str = BASE_CURRENCY,
    ) -> None:
        self.base_currency = base_currency.upper()
        self._rates: dict[str, float] = {self.base_currency: 1.0}

        for currency, rate in (rates or {}).items():
            if rate <= 0:
                raise FXConversionError(
                    f"FX rate for {currency.upper()} must be positive, got {rate}",
                    base_currency=currency.upper(),
                    quote_currency=self.base_currency,
                )
            self._rates[currency.upper()] = float(rate)

    @classmethod
    def for_usd_rate(
            cls,
            usd_to_cop_rate: float | None = None,
            fallback_rate: float = DEFAULT_USD_TO_COP_RATE,
    ) -> "CurrencyConverter":
        """
        Build a COP-based converter from a USD→COP rate.

        Falls back to `fallback_rate` when no rate is available.
        """
        rate = usd_to_cop_rate if usd_to_cop_rate else fallback_rate
        return cls(rates={"USD": rate}, base_currency="COP")

    @property
    def rates(self) -> dict[str, float]:
        """Copy of the configured rates, keyed by upper-case currency code."""
        return dict(self._rates)

    def supports(self, currency: str) -> bool:
        """Check whether a currency can be converted."""
        return currency.upper() in self._rates

    def to_common_unit(self, value: float, currency: str) -> float:
        """
        Convert value from currency to the common unit.

        Raises:
            FXConversionError: If the currency has no configured rate
        """
        rate = self._rates.get(currency.upper())
        if rate is None:
            raise FXConversionError(
                f"No FX rate configured for {currency.upper()} → {self.base_currency}",
                base_currency=currency.upper(),
                quote_currency=self.base_currency,
            )
        return convert_using_fx_rate(value, rate)

    def __call__(self, value: float, currency: str) -> float:
        return self.to_common_unit(value, currency)
