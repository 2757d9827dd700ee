"""
Unit tests for agencydesk/core/client_status.py

Tests status resolution and the service mutation rules without database.
"""

from datetime import date

import pytest

from agencydesk.core.aggregations import completed_clients_this_month
from agencydesk.core.client_status import (
    append_service,
    apply_service_update,
    completion_date,
    refresh_client_status,
    resolve_client_status,
)
from agencydesk.core.exceptions import MalformedService, ServiceNotFound
from agencydesk.schemas.client import (
    ClientServiceCreate,
    ClientServiceUpdate,
    ClientStatus,
    ServiceStatus,
)
from tests.factories import ClientRecordFactory, ServiceRecordFactory

TODAY = date(2025, 6, 15)


class TestResolveClientStatus:
    """Test resolve_client_status."""

    def test_archived_dominates_completed_services(self):
        client = ClientRecordFactory(
            status=ClientStatus.ARCHIVED,
            services=[ServiceRecordFactory(status=ServiceStatus.COMPLETED)]
        )
        assert resolve_client_status(client) == ClientStatus.ARCHIVED

    def test_all_services_completed_promotes_to_finished(self):
        client = ClientRecordFactory(services=[
            ServiceRecordFactory(status=ServiceStatus.COMPLETED),
            ServiceRecordFactory(status=ServiceStatus.COMPLETED),
        ])
        assert resolve_client_status(client) == ClientStatus.FINISHED

    def test_zero_services_never_promoted(self):
        client = ClientRecordFactory(services=[])
        assert resolve_client_status(client) == ClientStatus.ACTIVE

    def test_partially_completed_keeps_stored_status(self):
        client = ClientRecordFactory(status=ClientStatus.PAUSED, services=[
            ServiceRecordFactory(status=ServiceStatus.COMPLETED),
            ServiceRecordFactory(status=ServiceStatus.DELAYED),
        ])
        assert resolve_client_status(client) == ClientStatus.PAUSED

    def test_paused_with_all_completed_is_finished(self):
        client = ClientRecordFactory(
            status=ClientStatus.PAUSED,
            services=[ServiceRecordFactory(status=ServiceStatus.COMPLETED)]
        )
        assert resolve_client_status(client) == ClientStatus.FINISHED


class TestApplyServiceUpdate:
    """Test apply_service_update."""

    def test_completing_last_service_finishes_client(self):
        done = ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 6, 1))
        open_service = ServiceRecordFactory()
        client = ClientRecordFactory(services=[done, open_service])

        updated = apply_service_update(
            client, open_service.id, ClientServiceUpdate(status=ServiceStatus.COMPLETED), TODAY
        )

        assert updated.status == ClientStatus.FINISHED
        assert updated.completed_date == TODAY
        assert updated.services[1].completed_at == TODAY
        # The original record is left untouched
        assert client.status == ClientStatus.ACTIVE

    def test_completing_one_of_many_keeps_active(self):
        first = ServiceRecordFactory()
        second = ServiceRecordFactory()
        client = ClientRecordFactory(services=[first, second])

        updated = apply_service_update(client, first.id, {"status": "completed"}, TODAY)

        assert updated.status == ClientStatus.ACTIVE
        assert updated.completed_date is None
        assert updated.services[0].status == ServiceStatus.COMPLETED

    def test_archived_client_stays_archived(self):
        service = ServiceRecordFactory()
        client = ClientRecordFactory(status=ClientStatus.ARCHIVED, services=[service])

        updated = apply_service_update(client, service.id, {"status": "completed"}, TODAY)

        assert updated.status == ClientStatus.ARCHIVED
        assert updated.completed_date is None

    def test_reopening_service_clears_completed_at(self):
        service = ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 5, 2))
        other = ServiceRecordFactory()
        client = ClientRecordFactory(services=[service, other])

        updated = apply_service_update(client, service.id, {"status": "in_progress"}, TODAY)

        assert updated.services[0].completed_at is None

    def test_patch_only_touches_named_service(self):
        first = ServiceRecordFactory(price=100)
        second = ServiceRecordFactory(price=200)
        client = ClientRecordFactory(services=[first, second])

        updated = apply_service_update(client, second.id, ClientServiceUpdate(price=250), TODAY)

        assert [s.price for s in updated.services] == [100, 250]
        assert [s.id for s in updated.services] == [first.id, second.id]

    def test_unknown_service_raises(self):
        client = ClientRecordFactory(services=[ServiceRecordFactory()])

        with pytest.raises(ServiceNotFound):
            apply_service_update(client, "missing", {"status": "completed"}, TODAY)

    def test_negative_price_is_rejected(self):
        service = ServiceRecordFactory()
        client = ClientRecordFactory(services=[service])

        with pytest.raises(MalformedService):
            apply_service_update(client, service.id, {"price": -5}, TODAY)

    def test_done_above_total_is_rejected(self):
        service = ServiceRecordFactory()
        client = ClientRecordFactory(services=[service])
        patch = {"deliverables": {"type": "social", "posts_total": 4, "posts_done": 6}}

        with pytest.raises(MalformedService):
            apply_service_update(client, service.id, patch, TODAY)

    def test_end_before_start_is_rejected(self):
        service = ServiceRecordFactory(start_date=date(2025, 6, 1), end_date=date(2025, 6, 30))
        client = ClientRecordFactory(services=[service])

        with pytest.raises(MalformedService):
            apply_service_update(client, service.id, {"end_date": date(2025, 5, 1)}, TODAY)


class TestAppendService:
    """Test append_service."""

    def test_appends_at_the_end(self):
        existing = ServiceRecordFactory()
        client = ClientRecordFactory(services=[existing])
        data = ClientServiceCreate(
            main_category="Website",
            price=1200,
            start_date=date(2025, 6, 1),
            end_date=date(2025, 8, 1),
        )

        updated = append_service(client, data, TODAY, service_id="new-service")

        assert [s.id for s in updated.services] == [existing.id, "new-service"]
        assert updated.services[-1].main_category == "Website"

    def test_generates_identifier(self):
        client = ClientRecordFactory()
        data = ClientServiceCreate(main_category="Logo", start_date=TODAY, end_date=TODAY)

        updated = append_service(client, data, TODAY)

        assert updated.services[0].id

    def test_appending_open_service_to_empty_client_keeps_active(self):
        client = ClientRecordFactory()
        data = ClientServiceCreate(main_category="Logo", start_date=TODAY, end_date=TODAY)

        assert append_service(client, data, TODAY).status == ClientStatus.ACTIVE

    def test_appending_completed_service_to_empty_client_finishes_it(self):
        client = ClientRecordFactory()
        data = ClientServiceCreate(
            main_category="Logo",
            start_date=TODAY,
            end_date=TODAY,
            status=ServiceStatus.COMPLETED,
        )

        updated = append_service(client, data, TODAY)

        assert updated.status == ClientStatus.FINISHED
        assert updated.services[0].completed_at == TODAY


class TestCompletionDate:
    """Test completion_date fallback."""

    def test_prefers_client_stamp(self):
        client = ClientRecordFactory(completed_date=date(2025, 6, 3), services=[
            ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 6, 10)),
        ])
        assert completion_date(client) == date(2025, 6, 3)

    def test_falls_back_to_latest_service(self):
        client = ClientRecordFactory(services=[
            ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 5, 20)),
            ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 6, 2)),
        ])
        assert completion_date(client) == date(2025, 6, 2)

    def test_none_without_any_stamp(self):
        assert completion_date(ClientRecordFactory()) is None


class TestReactivation:
    """Test reopening and re-finishing a client."""

    def test_reopened_service_makes_finished_client_active(self):
        service = ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 1, 10))
        client = ClientRecordFactory(
            status=ClientStatus.FINISHED, completed_date=date(2025, 1, 10), services=[service]
        )

        updated = apply_service_update(client, service.id, {"status": "in_progress"}, TODAY)

        assert updated.status == ClientStatus.ACTIVE
        assert updated.completed_date is None

    def test_refinished_client_gets_new_completion_date(self):
        service = ServiceRecordFactory()
        client = ClientRecordFactory(services=[service])

        client = apply_service_update(client, service.id, {"status": "completed"}, date(2025, 1, 10))
        assert client.completed_date == date(2025, 1, 10)

        client = apply_service_update(client, service.id, {"status": "in_progress"}, date(2025, 2, 1))
        client = apply_service_update(client, service.id, {"status": "completed"}, date(2025, 3, 5))

        assert client.status == ClientStatus.FINISHED
        assert client.completed_date == date(2025, 3, 5)
        assert completed_clients_this_month([client], date(2025, 3, 20)) == [client]
        assert completed_clients_this_month([client], date(2025, 1, 20)) == []

    def test_editing_completed_service_keeps_completion_date(self):
        service = ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 1, 10))
        client = ClientRecordFactory(
            status=ClientStatus.FINISHED, completed_date=date(2025, 1, 10), services=[service]
        )

        updated = apply_service_update(client, service.id, {"price": 900}, TODAY)

        assert updated.status == ClientStatus.FINISHED
        assert updated.completed_date == date(2025, 1, 10)

    def test_appending_completed_service_keeps_finished(self):
        client = ClientRecordFactory(
            status=ClientStatus.FINISHED,
            completed_date=date(2025, 1, 10),
            services=[ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 1, 10))],
        )
        data = ClientServiceCreate(
            main_category="Logo", start_date=TODAY, end_date=TODAY, status=ServiceStatus.COMPLETED
        )

        updated = append_service(client, data, TODAY)

        assert updated.status == ClientStatus.FINISHED
        assert updated.completed_date == date(2025, 1, 10)

    def test_explicit_active_on_completed_client_stays_finished(self):
        client = ClientRecordFactory(
            status=ClientStatus.FINISHED,
            completed_date=date(2025, 1, 10),
            services=[ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 1, 10))],
        )

        updated = refresh_client_status(
            client.model_copy(update={"status": ClientStatus.ACTIVE}), TODAY, previous=ClientStatus.FINISHED
        )

        assert updated.status == ClientStatus.FINISHED
        assert updated.completed_date == date(2025, 1, 10)

    def test_restored_client_keeps_completion_date(self):
        client = ClientRecordFactory(
            status=ClientStatus.ACTIVE,
            completed_date=date(2025, 1, 10),
            services=[ServiceRecordFactory(status=ServiceStatus.COMPLETED, completed_at=date(2025, 1, 10))],
        )

        updated = refresh_client_status(client, TODAY, previous=ClientStatus.ARCHIVED)

        assert updated.status == ClientStatus.FINISHED
        assert updated.completed_date == date(2025, 1, 10)
