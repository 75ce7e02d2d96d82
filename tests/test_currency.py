"""Tests for ExchangeRateService (HTTP mocked)."""

import pytest
import requests

from lifemanager.services.currency import CURRENCIES, ExchangeRateService


@pytest.fixture
def service(http_session, monkeypatch):
    monkeypatch.setenv("CURRENCY_BASE_CURRENCY", "twd")
    monkeypatch.setenv("CURRENCY_API_BASE_URL", "https://rates.test/v6/")
    return ExchangeRateService(session=http_session)


class TestExchangeRates:
    """Tests for get_exchange_rate."""

    def test_supported_currencies(self):
        assert [c.code for c in CURRENCIES] == ["TWD", "USD", "JPY", "EUR", "KRW", "CNY"]

    def test_base_currency_is_upper_cased(self, service):
        assert service.base_currency == "TWD"

    @pytest.mark.asyncio
    async def test_same_currency_needs_no_request(self, service, http_session):
        assert await service.get_exchange_rate("twd") == 1.0
        http_session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_rate_lookup(self, service, http_session, json_response):
        http_session.get.return_value = json_response(
            {"result": "success", "rates": {"TWD": 32.1, "JPY": 155.0}}
        )
        assert await service.get_exchange_rate("USD") == 32.1
        url = http_session.get.call_args.args[0]
        assert url == "https://rates.test/v6/latest/USD"

    @pytest.mark.asyncio
    async def test_rates_are_cached(self, service, http_session, json_response):
        http_session.get.return_value = json_response(
            {"result": "success", "rates": {"TWD": 32.1, "JPY": 155.0}}
        )
        await service.get_exchange_rate("USD")
        assert await service.get_exchange_rate("USD", "JPY") == 155.0
        assert http_session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_api_error_result(self, service, http_session, json_response):
        http_session.get.return_value = json_response({"result": "error"})
        assert await service.get_exchange_rate("USD") is None

    @pytest.mark.asyncio
    async def test_missing_target_rate(self, service, http_session, json_response):
        http_session.get.return_value = json_response({"result": "success", "rates": {}})
        assert await service.get_exchange_rate("USD") is None

    @pytest.mark.asyncio
    async def test_network_failure(self, service, http_session):
        http_session.get.side_effect = requests.ConnectionError("offline")
        assert await service.get_exchange_rate("USD") is None


class TestConvert:
    """Tests for convert."""

    @pytest.mark.asyncio
    async def test_converts_and_rounds(self, service, http_session, json_response):
        http_session.get.return_value = json_response(
            {"result": "success", "rates": {"TWD": 32.123}}
        )
        conversion = await service.convert(10, "USD")
        assert conversion.converted
        assert conversion.amount == 321.23
        assert conversion.currency == "TWD"
        assert conversion.original_amount == 10

    @pytest.mark.asyncio
    async def test_falls_back_to_original_amount(self, service, http_session):
        http_session.get.side_effect = requests.Timeout("slow")
        conversion = await service.convert(10, "usd")
        assert not conversion.converted
        assert conversion.amount == 10
        assert conversion.currency == "USD"
        assert conversion.rate is None
