"""
Persistence entry points for clients, invoices and finance transactions.

Every client mutation loads the stored client, runs the change through the
status resolver in `agencydesk.core.client_status`, and writes the resulting
client back in full. Callers always receive schema objects, never ORM rows.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import extract, select
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.core.client_status import (
    append_service,
    apply_service_update,
    new_service,
    refresh_client_status,
)
from agencydesk.core.exceptions import ClientNotFound, InvoiceNotFound, TransactionNotFound
from agencydesk.core.logging import get_logger
from agencydesk.models.client import Client as ClientModel
from agencydesk.models.client_service import ClientService as ClientServiceModel
from agencydesk.models.finance_transaction import FinanceTransaction as FinanceTransactionModel
from agencydesk.models.invoice import Invoice as InvoiceModel
from agencydesk.schemas.client import (
    Client,
    ClientCreate,
    ClientKind,
    ClientServiceCreate,
    ClientServiceUpdate,
    ClientStatus,
    ClientUpdate,
)
from agencydesk.schemas.finance import (
    FinanceTransaction,
    FinanceTransactionCreate,
    FinanceTransactionUpdate,
)
from agencydesk.schemas.invoice import Invoice, InvoiceCreate, InvoiceStatus, InvoiceUpdate
from agencydesk.services.catalog import resolve_service_packages

logger = get_logger(__name__)

REQUIRED_CLIENT_FIELDS = ("kind", "status", "name")


def _plain(values: Dict[str, Any]) -> Dict[str, Any]:
    """Replace enum members by their values so they can be bound to String columns."""
    return {key: (value.value if isinstance(value, Enum) else value) for key, value in values.items()}


# ==================== Clients ====================

async def _get_client_row(db: AsyncSession, client_id: str) -> ClientModel:
    result = await db.execute(select(ClientModel).where(ClientModel.id == client_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise ClientNotFound(client_id)
    return row


def _write_client(row: ClientModel, client: Client):
    """Copy a resolved client (and its services, in order) onto its ORM row."""
    for key, value in _plain(client.model_dump(exclude={"id", "created_at", "services"})).items():
        setattr(row, key, value)

    existing = {s.id: s for s in row.services}
    services = []
    for position, service in enumerate(client.services):
        service_row = existing.get(service.id) or ClientServiceModel(id=service.id, client_id=client.id)
        values = _plain(service.model_dump(exclude={"id"}))
        values["position"] = position
        for key, value in values.items():
            setattr(service_row, key, value)
        services.append(service_row)
    row.services = services


async def list_clients(
    db: AsyncSession,
    kind: Optional[ClientKind] = None,
    include_archived: bool = True
) -> List[Client]:
    query = select(ClientModel).order_by(ClientModel.created_at)
    if kind is not None:
        query = query.where(ClientModel.kind == kind.value)
    if not include_archived:
        query = query.where(ClientModel.status != ClientStatus.ARCHIVED.value)
    result = await db.execute(query)
    return [Client.model_validate(row) for row in result.scalars().all()]


async def get_client(db: AsyncSession, client_id: str) -> Client:
    """
    Raises:
        ClientNotFound: if no client has that id
    """
    return Client.model_validate(await _get_client_row(db, client_id))


async def add_client(db: AsyncSession, data: ClientCreate, today: Optional[date] = None) -> Client:
    """
    Create a client together with its initial services.

    Services are appended in the order given and the client status is
    resolved once they are all in place.
    """
    today = today or date.today()
    client = Client(
        id=str(uuid.uuid4()),
        created_at=datetime.now(timezone.utc),
        **data.model_dump(exclude={"services"}),
    )
    services = [
        new_service(await resolve_service_packages(db, service), today) for service in data.services
    ]
    client = refresh_client_status(client.model_copy(update={"services": services}), today)

    row = ClientModel(id=client.id, created_at=client.created_at)
    row.services = []
    _write_client(row, client)
    db.add(row)
    await db.commit()
    logger.info(f"Client {client.id} created with {len(client.services)} services")
    return client


async def update_client(
    db: AsyncSession,
    client_id: str,
    patch: ClientUpdate,
    today: Optional[date] = None
) -> Client:
    """Replace client attributes; the status is re-resolved against its services."""
    row = await _get_client_row(db, client_id)
    changes = {
        key: value for key, value in patch.model_dump(exclude_unset=True).items()
        if value is not None or key not in REQUIRED_CLIENT_FIELDS
    }
    stored = Client.model_validate(row)
    client = refresh_client_status(stored.model_copy(update=changes), today, previous=stored.status)
    _write_client(row, client)
    await db.commit()
    return client


async def add_service_to_client(
    db: AsyncSession,
    client_id: str,
    data: ClientServiceCreate,
    today: Optional[date] = None
) -> Client:
    row = await _get_client_row(db, client_id)
    data = await resolve_service_packages(db, data)
    client = append_service(Client.model_validate(row), data, today)
    _write_client(row, client)
    await db.commit()
    logger.info(f"Service {client.services[-1].id} added to client {client_id}")
    return client


async def update_service(
    db: AsyncSession,
    client_id: str,
    service_id: str,
    patch: Union[ClientServiceUpdate, Dict[str, Any]],
    today: Optional[date] = None
) -> Client:
    """
    Patch one service and persist the re-resolved client.

    Raises:
        ClientNotFound: if no client has that id
        ServiceNotFound: if the client owns no such service
        MalformedService: if the patched service is invalid
    """
    row = await _get_client_row(db, client_id)
    if isinstance(patch, ClientServiceUpdate):
        patch = await resolve_service_packages(db, patch)
    previous_status = row.status
    client = apply_service_update(Client.model_validate(row), service_id, patch, today)
    _write_client(row, client)
    await db.commit()
    if client.status.value != previous_status:
        logger.info(f"Client {client_id} status changed from {previous_status} to {client.status.value}")
    return client


async def archive_client(db: AsyncSession, client_id: str) -> Client:
    row = await _get_client_row(db, client_id)
    client = Client.model_validate(row).model_copy(update={"status": ClientStatus.ARCHIVED})
    _write_client(row, client)
    await db.commit()
    return client


async def restore_client(db: AsyncSession, client_id: str, today: Optional[date] = None) -> Client:
    """Bring an archived client back as active, then re-resolve against its services."""
    row = await _get_client_row(db, client_id)
    stored = Client.model_validate(row)
    client = stored.model_copy(update={"status": ClientStatus.ACTIVE})
    client = refresh_client_status(client, today, previous=stored.status)
    _write_client(row, client)
    await db.commit()
    return client


# ==================== Invoices ====================

async def _get_invoice_row(db: AsyncSession, invoice_id: str) -> InvoiceModel:
    result = await db.execute(select(InvoiceModel).where(InvoiceModel.id == invoice_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise InvoiceNotFound(invoice_id)
    return row


async def list_invoices(db: AsyncSession, status: Optional[InvoiceStatus] = None) -> List[Invoice]:
    query = select(InvoiceModel).order_by(InvoiceModel.due_date)
    if status is not None:
        query = query.where(InvoiceModel.status == status.value)
    result = await db.execute(query)
    return [Invoice.model_validate(row) for row in result.scalars().all()]


async def get_invoice(db: AsyncSession, invoice_id: str) -> Invoice:
    return Invoice.model_validate(await _get_invoice_row(db, invoice_id))


async def add_invoice(db: AsyncSession, data: InvoiceCreate) -> Invoice:
    row = InvoiceModel(**_plain(data.model_dump()))
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return Invoice.model_validate(row)


async def update_invoice(
    db: AsyncSession,
    invoice_id: str,
    patch: InvoiceUpdate,
    today: Optional[date] = None
) -> Invoice:
    """Replace invoice attributes. Marking an invoice paid stamps its paid date."""
    row = await _get_invoice_row(db, invoice_id)
    changes = patch.model_dump(exclude_unset=True)
    if changes.get("status") == InvoiceStatus.PAID and not (changes.get("paid_date") or row.paid_date):
        changes["paid_date"] = today or date.today()
    for key, value in _plain(changes).items():
        setattr(row, key, value)
    await db.commit()
    return Invoice.model_validate(row)


# ==================== Finance ====================

async def _get_transaction_row(db: AsyncSession, transaction_id: str) -> FinanceTransactionModel:
    result = await db.execute(
        select(FinanceTransactionModel).where(FinanceTransactionModel.id == transaction_id)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise TransactionNotFound(transaction_id)
    return row


async def list_transactions(
    db: AsyncSession,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> List[FinanceTransaction]:
    query = select(FinanceTransactionModel).order_by(FinanceTransactionModel.date.desc())
    if month is not None:
        query = query.where(extract("month", FinanceTransactionModel.date) == month)
    if year is not None:
        query = query.where(extract("year", FinanceTransactionModel.date) == year)
    result = await db.execute(query)
    return [FinanceTransaction.model_validate(row) for row in result.scalars().all()]


async def add_transaction(db: AsyncSession, data: FinanceTransactionCreate) -> FinanceTransaction:
    row = FinanceTransactionModel(**_plain(data.model_dump()))
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return FinanceTransaction.model_validate(row)


async def update_transaction(
    db: AsyncSession,
    transaction_id: str,
    patch: FinanceTransactionUpdate
) -> FinanceTransaction:
    row = await _get_transaction_row(db, transaction_id)
    for key, value in _plain(patch.model_dump(exclude_unset=True)).items():
        setattr(row, key, value)
    await db.commit()
    return FinanceTransaction.model_validate(row)
