"""
Integration tests for exchange-rate endpoints.

The upstream API is the mocked transport from conftest (UPSTREAM_RATES).
"""

import httpx
import pytest
from httpx import AsyncClient

from agencydesk.api.dependencies import get_exchange_rate_service
from agencydesk.main import app
from agencydesk.services.exchange_rates import ExchangeRateService


@pytest.mark.asyncio
class TestExchangeRates:
    """Test GET /api/exchange-rates/."""

    async def test_get_rates(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/exchange-rates/", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["base"] == "USD"
        assert data["rates"]["TRY"] == 32.0
        assert "GBP" not in data["rates"]

    async def test_rates_cached_between_requests(self, client: AsyncClient, auth_headers, upstream_calls):
        await client.get("/api/exchange-rates/", headers=auth_headers)
        await client.get("/api/exchange-rates/", headers=auth_headers)

        assert len(upstream_calls) == 1

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/exchange-rates/")

        assert response.status_code == 401


@pytest.mark.asyncio
class TestRefresh:
    """Test POST /api/exchange-rates/refresh."""

    async def test_admin_refresh(self, client: AsyncClient, admin_auth_headers, upstream_calls):
        await client.get("/api/exchange-rates/", headers=admin_auth_headers)

        response = await client.post("/api/exchange-rates/refresh", headers=admin_auth_headers)

        assert response.status_code == 200
        assert len(upstream_calls) == 2

    async def test_refresh_admin_only(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/exchange-rates/refresh", headers=auth_headers)

        assert response.status_code == 403

    async def test_refresh_provider_down(self, client: AsyncClient, admin_auth_headers, redis_client):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        down = ExchangeRateService(
            api_url="https://rates.test/v6/latest/USD",
            redis=redis_client,
            transport=httpx.MockTransport(handler),
        )
        app.dependency_overrides[get_exchange_rate_service] = lambda: down

        response = await client.post("/api/exchange-rates/refresh", headers=admin_auth_headers)

        assert response.status_code == 503


@pytest.mark.asyncio
class TestConvert:
    """Test GET /api/exchange-rates/convert."""

    async def test_convert(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/exchange-rates/convert",
            params={"amount": 100, "from": "USD", "to": "SAR"},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["converted"] == 375.0
        assert data["to_currency"] == "SAR"
        assert data["formatted"]

    async def test_convert_cross_rate(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/exchange-rates/convert",
            params={"amount": 3200, "from": "TRY", "to": "EUR"},
            headers=auth_headers
        )

        data = response.json()
        assert data["converted"] == 85.0
        assert "€" in data["formatted"]

    async def test_unknown_currency(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/exchange-rates/convert",
            params={"amount": 1, "from": "USD", "to": "GBP"},
            headers=auth_headers
        )

        assert response.status_code == 422
        assert "GBP" in response.json()["detail"]

    async def test_non_finite_amount_rejected(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/exchange-rates/convert",
            params={"amount": "inf", "from": "USD", "to": "SAR"},
            headers=auth_headers
        )

        assert response.status_code == 422

    async def test_formatted_in_arabic_digits(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/exchange-rates/convert",
            params={"amount": 100, "from": "USD", "to": "SAR"},
            headers=auth_headers
        )

        assert "٣٧٥" in response.json()["formatted"]
