"""
Invoices API Endpoints
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import get_db, get_today, require_permission
from agencydesk.core.aggregations import upcoming_invoices
from agencydesk.core.permissions import Permission
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.invoice import Invoice, InvoiceCreate, InvoiceStatus, InvoiceUpdate
from agencydesk.services import client_store

router = APIRouter()


@router.get("/", response_model=List[Invoice])
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    user: AuthUser = Depends(require_permission(Permission.VIEW_INVOICES)),
    db: AsyncSession = Depends(get_db)
):
    return await client_store.list_invoices(db, status=status_filter)


@router.get("/upcoming", response_model=List[Invoice])
async def list_upcoming_invoices(
    days: int = Query(7, ge=0, le=365),
    user: AuthUser = Depends(require_permission(Permission.VIEW_INVOICES)),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """Unpaid invoices due within the next `days` days."""
    return upcoming_invoices(await client_store.list_invoices(db), days, today)


@router.post("/", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    user: AuthUser = Depends(require_permission(Permission.CREATE_INVOICES)),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await client_store.add_invoice(db, data)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invoice number {data.invoice_number} already exists"
        )


@router.get("/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str,
    user: AuthUser = Depends(require_permission(Permission.VIEW_INVOICES)),
    db: AsyncSession = Depends(get_db)
):
    return await client_store.get_invoice(db, invoice_id)


@router.patch("/{invoice_id}", response_model=Invoice)
async def update_invoice(
    invoice_id: str,
    data: InvoiceUpdate,
    user: AuthUser = Depends(require_permission(Permission.EDIT_INVOICES)),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    return await client_store.update_invoice(db, invoice_id, data, today)
