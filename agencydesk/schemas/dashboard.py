"""
Pydantic schemas for dashboard aggregates.

All structures are computed on demand and never persisted.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from agencydesk.core.currency import Currency


class DerivedClientView(BaseModel):
    """Per-client deadline view for the clients widget"""
    id: str
    name: str
    days_left: Optional[int] = None  # earliest in-progress deadline, None if nothing in progress
    is_expiring: bool = False


class ClientsOverview(BaseModel):
    total_clients: int
    total_leads: int
    active_clients: int
    expiring_clients: int
    completed_this_month: int
    clients: List[DerivedClientView] = Field(default_factory=list)


class CategoryRevenue(BaseModel):
    category: str
    total: float


class TopPerformer(BaseModel):
    id: str
    name: str
    revenue: float
    bar_percent: float  # relative to the top entry of the returned set
    completion_rate: int


class InvoiceBucket(BaseModel):
    count: int = 0
    total: float = 0


class InvoiceSummary(BaseModel):
    currency: Currency
    paid: InvoiceBucket
    unpaid: InvoiceBucket
    overdue: InvoiceBucket


class WorkTrackingStats(BaseModel):
    total_services: int
    completed_services: int
    in_progress_services: int
    delayed_services: int
    overdue_services: int  # past end_date and not completed
    completed_this_month: int
    overall_progress: int


class FinanceSummary(BaseModel):
    currency: Currency
    month: Optional[int] = None
    year: Optional[int] = None
    income: float
    expenses: float
    net_profit: float


class DashboardOverview(BaseModel):
    currency: Currency
    clients: ClientsOverview
    revenue_by_category: List[CategoryRevenue]
    top_performers: List[TopPerformer]
    invoices: Optional[InvoiceSummary] = None  # omitted without invoice access


class CurrencyConversion(BaseModel):
    amount: float
    from_currency: Currency
    to_currency: Currency
    converted: float
    formatted: str  # locale-aware display string
