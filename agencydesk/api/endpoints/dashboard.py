"""
Dashboard API Endpoints

Read-only aggregates computed on request from the stored records. Every
monetary value is converted to the display currency: the `currency` query
parameter when given, otherwise the user's saved preference.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import (
    get_db,
    get_display_currency,
    get_rates_snapshot,
    get_today,
    require_permission,
)
from agencydesk.core import aggregations
from agencydesk.core.config import settings
from agencydesk.core.currency import Currency, ExchangeRateSnapshot
from agencydesk.core.permissions import Permission, has_permission
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.client import Client, ClientKind
from agencydesk.schemas.dashboard import (
    CategoryRevenue,
    ClientsOverview,
    DashboardOverview,
    FinanceSummary,
    InvoiceSummary,
    TopPerformer,
    WorkTrackingStats,
)
from agencydesk.services import client_store

router = APIRouter()

can_view_clients = require_permission(Permission.VIEW_CLIENTS)


def _confirmed(clients: List[Client]) -> List[Client]:
    return [c for c in clients if c.kind == ClientKind.CONFIRMED]


@router.get("/overview", response_model=DashboardOverview)
async def overview(
    user: AuthUser = Depends(can_view_clients),
    currency: Currency = Depends(get_display_currency),
    rates: ExchangeRateSnapshot = Depends(get_rates_snapshot),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """All dashboard widgets in one response. Invoice totals need invoice access."""
    clients = await client_store.list_clients(db)
    confirmed = _confirmed(clients)

    invoices = None
    if has_permission(user, Permission.VIEW_INVOICES):
        invoices = aggregations.invoice_summary(
            await client_store.list_invoices(db), rates, currency, today
        )

    return DashboardOverview(
        currency=currency,
        clients=aggregations.clients_overview(clients, today, settings.EXPIRING_WINDOW_DAYS),
        revenue_by_category=aggregations.revenue_by_category(confirmed, rates, currency),
        top_performers=aggregations.top_performers(
            confirmed, rates, currency, settings.TOP_PERFORMERS_LIMIT
        ),
        invoices=invoices,
    )


@router.get("/clients", response_model=ClientsOverview)
async def clients_overview(
    window_days: int = Query(settings.EXPIRING_WINDOW_DAYS, ge=0, le=365),
    user: AuthUser = Depends(can_view_clients),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    clients = await client_store.list_clients(db)
    return aggregations.clients_overview(clients, today, window_days)


@router.get("/revenue-by-category", response_model=List[CategoryRevenue])
async def revenue_by_category(
    user: AuthUser = Depends(can_view_clients),
    currency: Currency = Depends(get_display_currency),
    rates: ExchangeRateSnapshot = Depends(get_rates_snapshot),
    db: AsyncSession = Depends(get_db)
):
    clients = await client_store.list_clients(db)
    return aggregations.revenue_by_category(_confirmed(clients), rates, currency)


@router.get("/top-performers", response_model=List[TopPerformer])
async def top_performers(
    limit: int = Query(settings.TOP_PERFORMERS_LIMIT, ge=1, le=50),
    user: AuthUser = Depends(can_view_clients),
    currency: Currency = Depends(get_display_currency),
    rates: ExchangeRateSnapshot = Depends(get_rates_snapshot),
    db: AsyncSession = Depends(get_db)
):
    clients = await client_store.list_clients(db)
    return aggregations.top_performers(_confirmed(clients), rates, currency, limit)


@router.get("/invoices", response_model=InvoiceSummary)
async def invoices_summary(
    user: AuthUser = Depends(require_permission(Permission.VIEW_INVOICES)),
    currency: Currency = Depends(get_display_currency),
    rates: ExchangeRateSnapshot = Depends(get_rates_snapshot),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    invoices = await client_store.list_invoices(db)
    return aggregations.invoice_summary(invoices, rates, currency, today)


@router.get("/work-tracking", response_model=WorkTrackingStats)
async def work_tracking(
    user: AuthUser = Depends(require_permission(Permission.VIEW_CLIENTS, Permission.EDIT_WORK_TRACKING)),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    clients = await client_store.list_clients(db, include_archived=False)
    return aggregations.work_tracking_stats(clients, today)


@router.get("/finance", response_model=FinanceSummary)
async def finance(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    user: AuthUser = Depends(require_permission(Permission.VIEW_FINANCE)),
    currency: Currency = Depends(get_display_currency),
    rates: ExchangeRateSnapshot = Depends(get_rates_snapshot),
    db: AsyncSession = Depends(get_db)
):
    transactions = await client_store.list_transactions(db)
    return aggregations.finance_summary(transactions, rates, currency, month, year)
