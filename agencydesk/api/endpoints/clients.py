"""
Clients API Endpoints

CRUD for leads and confirmed clients and their services. Service changes
always go through the client store so the client status is re-resolved.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import get_db, get_today, require_permission
from agencydesk.core.permissions import Permission
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.client import (
    Client,
    ClientCreate,
    ClientKind,
    ClientServiceCreate,
    ClientServiceUpdate,
    ClientUpdate,
)
from agencydesk.services import client_store

router = APIRouter()

can_view = require_permission(Permission.VIEW_CLIENTS, Permission.VIEW_LEADS)
can_edit = require_permission(Permission.EDIT_CLIENTS, Permission.EDIT_LEADS)
can_archive = require_permission(Permission.ARCHIVE_CLIENTS)
can_track_work = require_permission(Permission.EDIT_CLIENTS, Permission.EDIT_WORK_TRACKING)


@router.get("/", response_model=List[Client])
async def list_clients(
    kind: Optional[ClientKind] = Query(None),
    include_archived: bool = Query(True),
    user: AuthUser = Depends(can_view),
    db: AsyncSession = Depends(get_db)
):
    """
    List clients and leads.

    Query parameters:
    - kind: Only leads or only confirmed clients
    - include_archived: Include archived clients
    """
    return await client_store.list_clients(db, kind=kind, include_archived=include_archived)


@router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    return await client_store.add_client(db, data, today)


@router.get("/{client_id}", response_model=Client)
async def get_client(
    client_id: str,
    user: AuthUser = Depends(can_view),
    db: AsyncSession = Depends(get_db)
):
    return await client_store.get_client(db, client_id)


@router.patch("/{client_id}", response_model=Client)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    return await client_store.update_client(db, client_id, data, today)


@router.post("/{client_id}/archive", response_model=Client)
async def archive_client(
    client_id: str,
    user: AuthUser = Depends(can_archive),
    db: AsyncSession = Depends(get_db)
):
    return await client_store.archive_client(db, client_id)


@router.post("/{client_id}/restore", response_model=Client)
async def restore_client(
    client_id: str,
    user: AuthUser = Depends(can_archive),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    return await client_store.restore_client(db, client_id, today)


# ==================== Services ====================

@router.post("/{client_id}/services", response_model=Client, status_code=status.HTTP_201_CREATED)
async def add_service(
    client_id: str,
    data: ClientServiceCreate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """Append a service to the end of the client's service list."""
    return await client_store.add_service_to_client(db, client_id, data, today)


@router.patch("/{client_id}/services/{service_id}", response_model=Client)
async def update_service(
    client_id: str,
    service_id: str,
    data: ClientServiceUpdate,
    user: AuthUser = Depends(can_track_work),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """Patch one service; the client is promoted to finished once every service is completed."""
    return await client_store.update_service(db, client_id, service_id, data, today)
