"""
Integration tests for dashboard endpoints.

All requests are served with today = 2025-06-15 and the mocked upstream
rates from conftest (EUR 0.85, TRY 32.0, SAR 3.75).
"""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import (
    ClientFactory,
    ClientServiceFactory,
    FinanceTransactionFactory,
    InvoiceFactory,
)


@pytest.fixture
async def agency_data(db_session: AsyncSession):
    """
    - Acme: active, social media due in 5 days and a website due in 20 days
    - Globex: finished this month after its only logo service completed
    - Initech: a lead, excluded from revenue
    """
    acme = await ClientFactory.create_async(db_session, name="Acme", services=[
        ClientServiceFactory.build(
            main_category="Social Media", price=1000, currency="USD",
            start_date=date(2025, 5, 1), end_date=date(2025, 6, 20), position=0,
            deliverables={"type": "social", "posts_total": 10, "posts_done": 5},
        ),
        ClientServiceFactory.build(
            main_category="Website", price=1700, currency="EUR",
            start_date=date(2025, 5, 1), end_date=date(2025, 7, 5), position=1,
        ),
    ])
    globex = await ClientFactory.create_async(
        db_session, name="Globex", status="finished", completed_date=date(2025, 6, 10), services=[
            ClientServiceFactory.build(
                main_category="Logo", price=3200, currency="TRY", status="completed",
                start_date=date(2025, 5, 1), end_date=date(2025, 6, 10),
                completed_at=date(2025, 6, 10), position=0,
            ),
        ]
    )
    initech = await ClientFactory.create_async(db_session, name="Initech", kind="lead", services=[
        ClientServiceFactory.build(
            main_category="Website", price=5000, currency="USD",
            start_date=date(2025, 6, 1), end_date=date(2025, 6, 12), position=0,
        ),
    ])
    await InvoiceFactory.create_async(
        db_session, invoice_number="INV-1", amount=500, currency="USD", status="paid",
        issue_date=date(2025, 6, 1), due_date=date(2025, 6, 10)
    )
    await InvoiceFactory.create_async(
        db_session, invoice_number="INV-2", amount=750, currency="SAR", status="sent",
        issue_date=date(2025, 5, 20), due_date=date(2025, 6, 1)
    )
    await InvoiceFactory.create_async(
        db_session, invoice_number="INV-3", amount=100, currency="USD", status="draft",
        issue_date=date(2025, 6, 14), due_date=date(2025, 6, 30)
    )
    await FinanceTransactionFactory.create_async(
        db_session, type="income", amount=2000, currency="USD", date=date(2025, 6, 2)
    )
    await FinanceTransactionFactory.create_async(
        db_session, type="expense", amount=6400, currency="TRY", date=date(2025, 6, 3)
    )
    await FinanceTransactionFactory.create_async(
        db_session, type="income", amount=999, currency="USD", date=date(2025, 4, 3)
    )
    await db_session.commit()
    return {"acme": acme, "globex": globex, "initech": initech}


@pytest.mark.asyncio
class TestOverview:
    """Test GET /api/dashboard/overview."""

    async def test_overview(self, client: AsyncClient, admin_auth_headers, agency_data):
        response = await client.get("/api/dashboard/overview", headers=admin_auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "USD"

        clients = data["clients"]
        assert clients["total_clients"] == 2
        assert clients["total_leads"] == 1
        assert clients["active_clients"] == 1
        assert clients["expiring_clients"] == 1
        assert clients["completed_this_month"] == 1
        assert clients["clients"] == [
            {"id": agency_data["acme"].id, "name": "Acme", "days_left": 5, "is_expiring": True}
        ]

        assert data["revenue_by_category"] == [
            {"category": "Website", "total": 2000.0},
            {"category": "Social Media", "total": 1000.0},
            {"category": "Logo", "total": 100.0},
        ]

        top = data["top_performers"]
        assert [p["name"] for p in top] == ["Acme", "Globex"]
        assert top[0]["revenue"] == 3000.0
        assert top[0]["bar_percent"] == 100
        assert top[1]["bar_percent"] == 3.33
        assert top[1]["completion_rate"] == 100

        invoices = data["invoices"]
        assert invoices["paid"] == {"count": 1, "total": 500.0}
        assert invoices["unpaid"] == {"count": 2, "total": 300.0}
        assert invoices["overdue"] == {"count": 1, "total": 200.0}

    async def test_currency_override(self, client: AsyncClient, admin_auth_headers, agency_data):
        response = await client.get(
            "/api/dashboard/overview", params={"currency": "SAR"}, headers=admin_auth_headers
        )

        data = response.json()
        assert data["currency"] == "SAR"
        assert data["revenue_by_category"][0] == {"category": "Website", "total": 7500.0}
        assert data["invoices"]["paid"]["total"] == 1875.0

    async def test_saved_preference_is_default_currency(self, client: AsyncClient, admin_auth_headers, agency_data):
        await client.put("/api/auth/preferences", json={"currency": "EUR"}, headers=admin_auth_headers)

        response = await client.get("/api/dashboard/overview", headers=admin_auth_headers)

        data = response.json()
        assert data["currency"] == "EUR"
        assert data["top_performers"][0]["revenue"] == 2550.0

    async def test_unknown_currency(self, client: AsyncClient, admin_auth_headers):
        response = await client.get(
            "/api/dashboard/overview", params={"currency": "GBP"}, headers=admin_auth_headers
        )

        assert response.status_code == 422

    async def test_invoices_hidden_without_invoice_access(self, client: AsyncClient, viewer_auth_headers, agency_data):
        response = await client.get("/api/dashboard/overview", headers=viewer_auth_headers)

        assert response.status_code == 200
        assert response.json()["invoices"] is None

    async def test_empty_dashboard(self, client: AsyncClient, admin_auth_headers):
        response = await client.get("/api/dashboard/overview", headers=admin_auth_headers)

        data = response.json()
        assert data["clients"]["total_clients"] == 0
        assert data["revenue_by_category"] == []
        assert data["top_performers"] == []

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/dashboard/overview")

        assert response.status_code == 401


@pytest.mark.asyncio
class TestWidgets:
    """Test the individual dashboard widgets."""

    async def test_clients_window(self, client: AsyncClient, auth_headers, agency_data):
        response = await client.get("/api/dashboard/clients", params={"window_days": 3}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["expiring_clients"] == 0

    async def test_top_performers_limit(self, client: AsyncClient, auth_headers, agency_data):
        response = await client.get("/api/dashboard/top-performers", params={"limit": 1}, headers=auth_headers)

        assert [p["name"] for p in response.json()] == ["Acme"]

    async def test_revenue_by_category(self, client: AsyncClient, auth_headers, agency_data):
        response = await client.get("/api/dashboard/revenue-by-category", headers=auth_headers)

        assert [r["category"] for r in response.json()] == ["Website", "Social Media", "Logo"]

    async def test_invoice_summary_requires_permission(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/dashboard/invoices", headers=auth_headers)

        assert response.status_code == 403

    async def test_work_tracking(self, client: AsyncClient, auth_headers, agency_data):
        response = await client.get("/api/dashboard/work-tracking", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_services"] == 4
        assert data["completed_services"] == 1
        assert data["in_progress_services"] == 3
        assert data["overdue_services"] == 1
        assert data["completed_this_month"] == 1
        assert data["overall_progress"] == 50

    async def test_finance_month(self, client: AsyncClient, admin_auth_headers, agency_data):
        response = await client.get(
            "/api/dashboard/finance", params={"month": 6, "year": 2025}, headers=admin_auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["income"] == 2000.0
        assert data["expenses"] == 200.0
        assert data["net_profit"] == 1800.0

    async def test_finance_requires_permission(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/dashboard/finance", headers=auth_headers)

        assert response.status_code == 403
