"""
Exchange Rate Service

Converts foreign-currency entries to the base currency at entry time.
Rates come from a public API that returns every rate for one source
currency:

    GET {api_base_url}/latest/USD
    {"result": "success", "rates": {"TWD": 32.1, ...}}

A missing rate is not an error for the caller: get_exchange_rate
returns None and convert() keeps the original amount.
"""

import time
from typing import Optional

import requests
import structlog
from pydantic import BaseModel, Field

from lifemanager.config import get_settings


logger = structlog.get_logger(__name__)


class Currency(BaseModel):
    """A currency the entry form offers."""
    code: str = Field(..., min_length=3, max_length=3)
    label: str
    symbol: str


CURRENCIES = [
    Currency(code="TWD", label="New Taiwan Dollar", symbol="NT$"),
    Currency(code="USD", label="US Dollar", symbol="$"),
    Currency(code="JPY", label="Japanese Yen", symbol="¥"),
    Currency(code="EUR", label="Euro", symbol="€"),
    Currency(code="KRW", label="South Korean Won", symbol="₩"),
    Currency(code="CNY", label="Chinese Yuan", symbol="¥"),
]


class Conversion(BaseModel):
    """Outcome of converting an entry to the base currency."""
    original_amount: float
    original_currency: str
    amount: float
    currency: str
    rate: Optional[float] = None

    @property
    def converted(self) -> bool:
        return self.rate is not None and self.original_currency != self.currency


class ExchangeRateService:
    """
    Exchange rate lookups with a small in-process cache.

    Rates for a source currency are cached for ``cache_ttl_seconds``.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self._settings = get_settings().currency
        self._session = session or requests.Session()
        self._cache: dict[str, tuple[float, dict[str, float]]] = {}

    @property
    def base_currency(self) -> str:
        return self._settings.base_currency

    def _cached_rates(self, from_currency: str) -> Optional[dict[str, float]]:
        entry = self._cache.get(from_currency)
        if entry is None:
            return None
        fetched_at, rates = entry
        if time.monotonic() - fetched_at > self._settings.cache_ttl_seconds:
            del self._cache[from_currency]
            return None
        return rates

    def _fetch_rates(self, from_currency: str) -> Optional[dict[str, float]]:
        url = f"{self._settings.api_base_url.rstrip('/')}/latest/{from_currency}"
        try:
            response = self._session.get(url, timeout=self._settings.request_timeout_seconds)
            response.raise_for_status()
            body = response.json()
        except (ValueError, requests.RequestException) as e:
            logger.error("exchange_rate_fetch_failed", currency=from_currency, error=str(e))
            return None

        if not isinstance(body, dict) or body.get("result") != "success":
            logger.warning("exchange_rate_unavailable", currency=from_currency)
            return None
        rates = body.get("rates")
        if not isinstance(rates, dict):
            return None

        self._cache[from_currency] = (time.monotonic(), rates)
        return rates

    async def get_exchange_rate(
        self,
        from_currency: str,
        to_currency: Optional[str] = None,
    ) -> Optional[float]:
        """
        Rate such that 1 ``from_currency`` = rate ``to_currency``.

        Same-currency lookups return 1 without a request. Returns None
        when the rate cannot be obtained.
        """
        from_currency = from_currency.upper()
        to_currency = (to_currency or self.base_currency).upper()
        if from_currency == to_currency:
            return 1.0

        rates = self._cached_rates(from_currency) or self._fetch_rates(from_currency)
        if not rates:
            return None

        rate = rates.get(to_currency)
        if not rate:
            return None
        try:
            return float(rate)
        except (TypeError, ValueError):
            return None

    async def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: Optional[str] = None,
    ) -> Conversion:
        """
        Convert an amount, falling back to the unconverted amount.

        On fallback the result keeps the original currency and has
        rate=None.
        """
        to_currency = (to_currency or self.base_currency).upper()
        from_currency = from_currency.upper()
        rate = await self.get_exchange_rate(from_currency, to_currency)
        if rate is None:
            return Conversion(
                original_amount=amount,
                original_currency=from_currency,
                amount=amount,
                currency=from_currency,
            )
        return Conversion(
            original_amount=amount,
            original_currency=from_currency,
            amount=round(amount * rate, 2),
            currency=to_currency,
            rate=rate,
        )
