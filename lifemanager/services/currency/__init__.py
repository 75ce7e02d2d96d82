"""Currency conversion service package."""

from lifemanager.services.currency.exchange_rate_service import (
    CURRENCIES,
    Conversion,
    Currency,
    ExchangeRateService,
)

__all__ = [
    "CURRENCIES",
    "Conversion",
    "Currency",
    "ExchangeRateService",
]
