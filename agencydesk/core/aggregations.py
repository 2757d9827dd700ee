"""
Dashboard aggregations.

Every function here is pure: rates, display currency and the current date are
passed in by the caller, so the same inputs always produce the same rollups.
Client status is always read through `resolve_client_status` and monetary
values are always converted with `convert_amount`.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from agencydesk.core.client_status import completion_date, resolve_client_status
from agencydesk.core.currency import Currency, RateSource, convert_amount, round_money
from agencydesk.core.progress import client_completion_rate, overall_progress, percent_of
from agencydesk.schemas.client import Client, ClientKind, ClientService, ClientStatus, ServiceStatus
from agencydesk.schemas.dashboard import (
    CategoryRevenue,
    ClientsOverview,
    DerivedClientView,
    FinanceSummary,
    InvoiceBucket,
    InvoiceSummary,
    TopPerformer,
    WorkTrackingStats,
)
from agencydesk.schemas.finance import FinanceTransaction, TransactionType
from agencydesk.schemas.goal import Goal, GoalStatus, GoalSummary
from agencydesk.schemas.invoice import Invoice, InvoiceStatus

DEFAULT_WINDOW_DAYS = 14
DEFAULT_TOP_LIMIT = 4


def _same_month(value: Optional[date], today: date) -> bool:
    return value is not None and value.year == today.year and value.month == today.month


def _in_progress(client: Client) -> List[ClientService]:
    return [s for s in client.services if s.status == ServiceStatus.IN_PROGRESS]


# ==================== Clients ====================

def active_clients(clients: Iterable[Client]) -> List[Client]:
    """Clients whose resolved status is active."""
    return [c for c in clients if resolve_client_status(c) == ClientStatus.ACTIVE]


def days_left(client: Client, today: date) -> Optional[int]:
    """Days until the earliest in-progress deadline, None if nothing is in progress."""
    remaining = [(s.end_date - today).days for s in _in_progress(client)]
    return min(remaining) if remaining else None


def client_view(
    client: Client,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS
) -> DerivedClientView:
    remaining = days_left(client, today)
    return DerivedClientView(
        id=client.id,
        name=client.name,
        days_left=remaining,
        is_expiring=remaining is not None and remaining <= window_days,
    )


def active_client_views(
    clients: Iterable[Client],
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
    limit: Optional[int] = None
) -> List[DerivedClientView]:
    views = [client_view(c, today, window_days) for c in active_clients(clients)]
    return views[:limit] if limit is not None else views


def clients_with_expiring_services(
    clients: Iterable[Client],
    window_days: int,
    today: date
) -> List[DerivedClientView]:
    """
    Active clients with an in-progress service due within the window.

    A client qualifies when at least one in-progress service is due between
    today and today + window_days inclusive. Each row reports the minimum
    days left over all of the client's in-progress services, and rows are
    ordered most urgent first.
    """
    horizon = today + timedelta(days=window_days)
    rows = []
    for client in active_clients(clients):
        if any(today <= s.end_date <= horizon for s in _in_progress(client)):
            rows.append(client_view(client, today, window_days))
    rows.sort(key=lambda row: row.days_left)
    return rows


def completed_clients_this_month(clients: Iterable[Client], today: date) -> List[Client]:
    """Finished clients whose completion falls in today's calendar month."""
    return [
        c for c in clients
        if resolve_client_status(c) == ClientStatus.FINISHED and _same_month(completion_date(c), today)
    ]


def clients_overview(
    clients: Sequence[Client],
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
    limit: Optional[int] = DEFAULT_TOP_LIMIT
) -> ClientsOverview:
    confirmed = [c for c in clients if c.kind == ClientKind.CONFIRMED]
    leads = [c for c in clients if c.kind == ClientKind.LEAD]
    return ClientsOverview(
        total_clients=len(confirmed),
        total_leads=len(leads),
        active_clients=len(active_clients(confirmed)),
        expiring_clients=len(clients_with_expiring_services(confirmed, window_days, today)),
        completed_this_month=len(completed_clients_this_month(confirmed, today)),
        clients=active_client_views(confirmed, today, window_days, limit),
    )


# ==================== Revenue ====================

def client_revenue(client: Client, rates: Optional[RateSource], currency: Currency) -> float:
    total = sum(convert_amount(s.price, s.currency, currency, rates) for s in client.services)
    return round_money(total)


def revenue_by_category(
    clients: Iterable[Client],
    rates: Optional[RateSource],
    currency: Currency
) -> List[CategoryRevenue]:
    """Converted service revenue per main category, largest first, empty groups dropped."""
    totals: Dict[str, float] = defaultdict(float)
    for client in clients:
        for service in client.services:
            totals[service.main_category] += convert_amount(
                service.price, service.currency, currency, rates
            )

    rows = [
        CategoryRevenue(category=category, total=round_money(total))
        for category, total in totals.items()
        if total > 0
    ]
    rows.sort(key=lambda row: row.total, reverse=True)
    return rows


def top_performers(
    clients: Iterable[Client],
    rates: Optional[RateSource],
    currency: Currency,
    limit: int = DEFAULT_TOP_LIMIT
) -> List[TopPerformer]:
    """
    Clients ranked by total converted revenue.

    bar_percent is each entry's revenue relative to the first entry of the
    returned list, so the leader always gets a full bar.
    """
    ranked = sorted(
        ((client, client_revenue(client, rates, currency)) for client in clients),
        key=lambda pair: pair[1],
        reverse=True,
    )[:max(limit, 0)]

    top_revenue = ranked[0][1] if ranked else 0
    return [
        TopPerformer(
            id=client.id,
            name=client.name,
            revenue=revenue,
            bar_percent=round_money(revenue / top_revenue * 100) if top_revenue > 0 else 0,
            completion_rate=client_completion_rate(client),
        )
        for client, revenue in ranked
    ]


# ==================== Invoices ====================

def is_invoice_overdue(invoice: Invoice, today: date) -> bool:
    if invoice.status == InvoiceStatus.OVERDUE:
        return True
    return invoice.status == InvoiceStatus.SENT and invoice.due_date < today


def _bucket(invoices: Sequence[Invoice], rates: Optional[RateSource], currency: Currency) -> InvoiceBucket:
    total = sum(convert_amount(i.amount, i.currency, currency, rates) for i in invoices)
    return InvoiceBucket(count=len(invoices), total=round_money(total))


def invoice_summary(
    invoices: Sequence[Invoice],
    rates: Optional[RateSource],
    currency: Currency,
    today: date
) -> InvoiceSummary:
    """
    Paid, unpaid and overdue invoice buckets in the display currency.

    Unpaid covers sent and draft invoices. A sent invoice past its due date
    also counts as overdue.
    """
    paid = [i for i in invoices if i.status == InvoiceStatus.PAID]
    unpaid = [i for i in invoices if i.status in (InvoiceStatus.SENT, InvoiceStatus.DRAFT)]
    overdue = [i for i in invoices if is_invoice_overdue(i, today)]
    return InvoiceSummary(
        currency=currency,
        paid=_bucket(paid, rates, currency),
        unpaid=_bucket(unpaid, rates, currency),
        overdue=_bucket(overdue, rates, currency),
    )


def upcoming_invoices(invoices: Iterable[Invoice], days: int, today: date) -> List[Invoice]:
    """Unpaid invoices due within the next `days` days, soonest first."""
    horizon = today + timedelta(days=days)
    rows = [
        i for i in invoices
        if i.status in (InvoiceStatus.SENT, InvoiceStatus.DRAFT) and today <= i.due_date <= horizon
    ]
    rows.sort(key=lambda i: i.due_date)
    return rows


# ==================== Work tracking ====================

def _services(clients: Iterable[Client]) -> List[ClientService]:
    return [s for c in clients for s in c.services]


def services_completed_this_month(clients: Iterable[Client], today: date) -> List[ClientService]:
    return [
        s for s in _services(clients)
        if s.status == ServiceStatus.COMPLETED and _same_month(s.completed_at, today)
    ]


def delayed_services(clients: Iterable[Client], today: date) -> List[ClientService]:
    """Services not yet completed whose end date has passed."""
    return [
        s for s in _services(clients)
        if s.status != ServiceStatus.COMPLETED and s.end_date < today
    ]


def work_tracking_stats(clients: Sequence[Client], today: date) -> WorkTrackingStats:
    services = _services(clients)

    def count(status):
        return sum(1 for s in services if s.status == status)

    return WorkTrackingStats(
        total_services=len(services),
        completed_services=count(ServiceStatus.COMPLETED),
        in_progress_services=count(ServiceStatus.IN_PROGRESS),
        delayed_services=count(ServiceStatus.DELAYED),
        overdue_services=len(delayed_services(clients, today)),
        completed_this_month=len(services_completed_this_month(clients, today)),
        overall_progress=overall_progress(services),
    )


# ==================== Finance ====================

def _period(
    transactions: Iterable[FinanceTransaction],
    month: Optional[int],
    year: Optional[int]
) -> List[FinanceTransaction]:
    return [
        t for t in transactions
        if (month is None or t.date.month == month) and (year is None or t.date.year == year)
    ]


def _sum_of(
    transactions: Iterable[FinanceTransaction],
    kind: TransactionType,
    rates: Optional[RateSource],
    currency: Currency,
    month: Optional[int],
    year: Optional[int]
) -> float:
    total = sum(
        convert_amount(t.amount, t.currency, currency, rates)
        for t in _period(transactions, month, year)
        if t.type == kind
    )
    return round_money(total)


def total_income(
    transactions: Iterable[FinanceTransaction],
    rates: Optional[RateSource],
    currency: Currency,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> float:
    return _sum_of(transactions, TransactionType.INCOME, rates, currency, month, year)


def total_expenses(
    transactions: Iterable[FinanceTransaction],
    rates: Optional[RateSource],
    currency: Currency,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> float:
    return _sum_of(transactions, TransactionType.EXPENSE, rates, currency, month, year)


def net_profit(
    transactions: Sequence[FinanceTransaction],
    rates: Optional[RateSource],
    currency: Currency,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> float:
    income = total_income(transactions, rates, currency, month, year)
    expenses = total_expenses(transactions, rates, currency, month, year)
    return round_money(income - expenses)


def finance_summary(
    transactions: Sequence[FinanceTransaction],
    rates: Optional[RateSource],
    currency: Currency,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> FinanceSummary:
    income = total_income(transactions, rates, currency, month, year)
    expenses = total_expenses(transactions, rates, currency, month, year)
    return FinanceSummary(
        currency=currency,
        month=month,
        year=year,
        income=income,
        expenses=expenses,
        net_profit=round_money(income - expenses),
    )


# ==================== Goals ====================

def goals_for_month(goals: Iterable[Goal], month: int, year: int) -> List[Goal]:
    return [g for g in goals if g.month == month and g.year == year]


def goal_summary(goals: Sequence[Goal]) -> GoalSummary:
    """Counts for one month's goals; the completion rate is the achieved share."""
    total = len(goals)
    achieved = sum(1 for g in goals if g.status == GoalStatus.ACHIEVED)
    return GoalSummary(
        total=total,
        achieved=achieved,
        in_progress=sum(1 for g in goals if g.status == GoalStatus.IN_PROGRESS),
        completion_rate=percent_of(achieved, total),
    )
