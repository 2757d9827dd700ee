"""
Finance Transactions API Endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import get_db, require_permission
from agencydesk.core.permissions import Permission
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.finance import (
    FinanceTransaction,
    FinanceTransactionCreate,
    FinanceTransactionUpdate,
)
from agencydesk.services import client_store

router = APIRouter()


@router.get("/transactions", response_model=List[FinanceTransaction])
async def list_transactions(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    user: AuthUser = Depends(require_permission(Permission.VIEW_FINANCE)),
    db: AsyncSession = Depends(get_db)
):
    return await client_store.list_transactions(db, month=month, year=year)


@router.post("/transactions", response_model=FinanceTransaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: FinanceTransactionCreate,
    user: AuthUser = Depends(require_permission(Permission.EDIT_FINANCE)),
    db: AsyncSession = Depends(get_db)
):
    return await client_store.add_transaction(db, data)


@router.patch("/transactions/{transaction_id}", response_model=FinanceTransaction)
async def update_transaction(
    transaction_id: str,
    data: FinanceTransactionUpdate,
    user: AuthUser = Depends(require_permission(Permission.EDIT_FINANCE)),
    db: AsyncSession = Depends(get_db)
):
    return await client_store.update_transaction(db, transaction_id, data)
