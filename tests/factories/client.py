"""
Client and service factories for test data generation.

`ClientFactory` / `ClientServiceFactory` build ORM rows for integration
tests. `ClientRecordFactory` / `ServiceRecordFactory` build the schema
objects the pure computation core works on.
"""

import uuid
from datetime import date, datetime, timedelta, timezone

import factory
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.models.client import Client
from agencydesk.models.client_service import ClientService
from agencydesk.schemas.client import (
    Client as ClientRecord,
    ClientKind,
    ClientService as ServiceRecord,
    ClientStatus,
    ServiceStatus,
)
from agencydesk.core.currency import Currency


class ClientServiceFactory(factory.Factory):
    """Factory for ClientService rows. Attach them through ClientFactory(services=[...])."""

    class Meta:
        model = ClientService

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    position = factory.Sequence(lambda n: n)
    main_category = "Social Media"
    sub_package = "Basic"
    price = 100.0
    currency = "USD"
    start_date = factory.LazyFunction(date.today)
    end_date = factory.LazyAttribute(lambda o: o.start_date + timedelta(days=30))
    status = "in_progress"
    deliverables = None
    sales_owner_id = None
    assignee_ids = factory.LazyFunction(list)
    notes = None
    completed_at = None


class ClientFactory(factory.Factory):
    """Factory for Client rows (confirmed and active by default)."""

    class Meta:
        model = Client

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    kind = "confirmed"
    status = "active"
    stage = None
    name = factory.Faker("name")
    company = factory.Faker("company")
    email = factory.Sequence(lambda n: f"client{n}@example.com")
    phone = None
    country = "SA"
    completed_date = None
    services = factory.LazyFunction(list)

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        **kwargs
    ) -> Client:
        """
        Create client (and any services passed in) asynchronously.

        Usage:
            client = await ClientFactory.create_async(
                db_session,
                services=[ClientServiceFactory.build(price=500)]
            )
        """
        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        return instance


# ==================== Schema records ====================

class ServiceRecordFactory(factory.Factory):
    class Meta:
        model = ServiceRecord

    id = factory.Sequence(lambda n: f"svc-{n}")
    main_category = "Social Media"
    sub_package = "Basic"
    price = 100.0
    currency = Currency.USD
    start_date = date(2025, 6, 1)
    end_date = date(2025, 6, 30)
    status = ServiceStatus.IN_PROGRESS
    deliverables = None
    completed_at = None


class ClientRecordFactory(factory.Factory):
    class Meta:
        model = ClientRecord

    id = factory.Sequence(lambda n: f"client-{n}")
    kind = ClientKind.CONFIRMED
    status = ClientStatus.ACTIVE
    name = factory.Sequence(lambda n: f"Client {n}")
    created_at = factory.LazyFunction(lambda: datetime(2025, 1, 1, tzinfo=timezone.utc))
    completed_date = None
    services = factory.LazyFunction(list)
