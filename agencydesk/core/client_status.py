"""
Client status resolution.

A client's lifecycle status is derived from its services every time a service
changes. Archival is terminal. A client whose services are all completed is
promoted to finished, and a finished client that takes on open work again goes
back to active. This module is the only place that rule lives; the
store's service mutations go through `apply_service_update` and
`append_service`.
"""

import uuid
from datetime import date
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from agencydesk.core.exceptions import MalformedService, ServiceNotFound
from agencydesk.schemas.client import (
    Client,
    ClientService,
    ClientServiceCreate,
    ClientServiceUpdate,
    ClientStatus,
    ServiceStatus,
)


def resolve_client_status(client: Client) -> ClientStatus:
    """
    Derive the effective status of a client.

    - archived always wins
    - a non-empty service list that is entirely completed means finished
    - anything else keeps the stored status
    """
    if client.status == ClientStatus.ARCHIVED:
        return ClientStatus.ARCHIVED

    has_services = len(client.services) > 0
    if has_services and all(s.status == ServiceStatus.COMPLETED for s in client.services):
        return ClientStatus.FINISHED

    return client.status


def completion_date(client: Client) -> Optional[date]:
    """When the client finished: its own stamp, else its latest service completion."""
    if client.completed_date is not None:
        return client.completed_date
    stamps = [s.completed_at for s in client.services if s.completed_at is not None]
    return max(stamps) if stamps else None


def refresh_client_status(
    client: Client,
    today: Optional[date] = None,
    previous: Optional[ClientStatus] = None
) -> Client:
    """
    Return the client with its status re-resolved.

    `previous` is the status stored before the change (defaults to
    `client.status`). A promotion from any other status stamps
    `completed_date` with today; a finished or archived client keeps its
    stamp, and any other status clears it.
    """
    today = today or date.today()
    previous = previous or client.status
    status = resolve_client_status(client)
    changes: Dict[str, Any] = {"status": status}
    if status == ClientStatus.FINISHED:
        kept = previous in (ClientStatus.FINISHED, ClientStatus.ARCHIVED)
        if client.completed_date is None or not kept:
            changes["completed_date"] = today
    elif status != ClientStatus.ARCHIVED:
        changes["completed_date"] = None
    return client.model_copy(update=changes)


def _reopened(client: Client, service: ClientService) -> Client:
    # Open work on a finished client makes it active again
    if client.status == ClientStatus.FINISHED and service.status != ServiceStatus.COMPLETED:
        return client.model_copy(update={"status": ClientStatus.ACTIVE})
    return client


def _changes(patch: Union[BaseModel, Mapping[str, Any]]) -> Dict[str, Any]:
    if not isinstance(patch, BaseModel):
        return dict(patch)
    changes = patch.model_dump(exclude_unset=True)
    # Nested models (deliverables) are replaced whole, defaults included
    for key in changes:
        value = getattr(patch, key)
        if isinstance(value, BaseModel):
            changes[key] = value.model_dump()
    return changes


def merge_service(
    service: ClientService,
    patch: Union[ClientServiceUpdate, Mapping[str, Any]],
    today: Optional[date] = None
) -> ClientService:
    """
    Apply a patch to a service and validate the result.

    Raises:
        MalformedService: if the merged service breaks a price, date or
            deliverable invariant
    """
    today = today or date.today()
    changes = _changes(patch)
    data = service.model_dump()
    data.update(changes)

    if data["status"] == ServiceStatus.COMPLETED:
        if data.get("completed_at") is None:
            data["completed_at"] = today
    elif "status" in changes:
        data["completed_at"] = None

    try:
        return ClientService.model_validate(data)
    except ValidationError as e:
        raise MalformedService(f"Invalid update for service {service.id}: {e}") from e


def apply_service_update(
    client: Client,
    service_id: str,
    patch: Union[ClientServiceUpdate, Mapping[str, Any]],
    today: Optional[date] = None
) -> Client:
    """
    Replace one service with its patched version and re-resolve the client.

    Raises:
        ServiceNotFound: if the client owns no service with that id
        MalformedService: if the patched service is invalid
    """
    today = today or date.today()
    services = []
    updated = client
    found = False
    for service in client.services:
        if service.id == service_id:
            found = True
            merged = merge_service(service, patch, today)
            if service.status == ServiceStatus.COMPLETED:
                updated = _reopened(client, merged)
            service = merged
        services.append(service)

    if not found:
        raise ServiceNotFound(client.id, service_id)

    updated = updated.model_copy(update={"services": services})
    return refresh_client_status(updated, today, previous=client.status)


def new_service(
    data: Union[ClientServiceCreate, Mapping[str, Any]],
    today: Optional[date] = None,
    service_id: Optional[str] = None
) -> ClientService:
    """
    Build a validated service with a fresh identifier.

    Raises:
        MalformedService: if the data breaks a service invariant
    """
    today = today or date.today()
    payload = _changes(data)
    payload["id"] = service_id or str(uuid.uuid4())
    if payload.get("status") == ServiceStatus.COMPLETED and payload.get("completed_at") is None:
        payload["completed_at"] = today
    try:
        return ClientService.model_validate(payload)
    except ValidationError as e:
        raise MalformedService(f"Invalid service: {e}") from e


def append_service(
    client: Client,
    data: Union[ClientServiceCreate, Mapping[str, Any]],
    today: Optional[date] = None,
    service_id: Optional[str] = None
) -> Client:
    """Append a new service at the end of the client's sequence and re-resolve."""
    service = new_service(data, today, service_id)
    updated = _reopened(client, service).model_copy(update={"services": [*client.services, service]})
    return refresh_client_status(updated, today, previous=client.status)
