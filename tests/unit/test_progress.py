"""
Unit tests for agencydesk/core/progress.py
"""

from agencydesk.core.progress import (
    client_completion_rate,
    deliverables_progress,
    goal_progress,
    overall_progress,
    service_progress,
)
from agencydesk.schemas.client import (
    CustomDeliverables,
    LogoDeliverables,
    ServiceStatus,
    SocialDeliverables,
    WebsiteDeliverables,
)
from tests.factories import ClientRecordFactory, ServiceRecordFactory


class TestDeliverablesProgress:
    """Test deliverables_progress for each deliverables kind."""

    def test_social_counters(self):
        deliverables = SocialDeliverables(posts_total=10, posts_done=5, reels_total=2, reels_done=2)
        # 7 of 12
        assert deliverables_progress(deliverables) == 58

    def test_social_report_counts_when_tracked(self):
        deliverables = SocialDeliverables(posts_total=3, posts_done=3, report_total=1, report_done=0)
        assert deliverables_progress(deliverables) == 75

    def test_logo_counters(self):
        deliverables = LogoDeliverables(
            concepts_total=3, concepts_done=3,
            revisions_total=2, revisions_done=1,
            final_files_total=1, final_files_done=0,
        )
        assert deliverables_progress(deliverables) == 67

    def test_website_milestones(self):
        deliverables = WebsiteDeliverables(requirements_done=True, ui_done=True, dev_done=True)
        assert deliverables_progress(deliverables) == 50

    def test_custom_items(self):
        assert deliverables_progress(CustomDeliverables(items_total=8, items_done=1)) == 13

    def test_rounds_half_up(self):
        assert deliverables_progress(CustomDeliverables(items_total=8, items_done=3)) == 38

    def test_nothing_tracked(self):
        assert deliverables_progress(SocialDeliverables()) == 0
        assert deliverables_progress(None) == 0


class TestServiceProgress:
    """Test service_progress."""

    def test_uses_deliverables(self):
        service = ServiceRecordFactory(deliverables=CustomDeliverables(items_total=4, items_done=1))
        assert service_progress(service) == 25

    def test_completed_without_deliverables_is_full(self):
        assert service_progress(ServiceRecordFactory(status=ServiceStatus.COMPLETED)) == 100

    def test_open_without_deliverables_is_empty(self):
        assert service_progress(ServiceRecordFactory()) == 0


class TestOverallProgress:
    """Test pooled progress across services."""

    def test_pools_counters(self):
        services = [
            ServiceRecordFactory(deliverables=CustomDeliverables(items_total=2, items_done=2)),
            ServiceRecordFactory(deliverables=CustomDeliverables(items_total=8, items_done=0)),
        ]
        # 2 of 10, not the average of 100 and 0
        assert overall_progress(services) == 20

    def test_services_without_deliverables_skipped(self):
        services = [
            ServiceRecordFactory(status=ServiceStatus.COMPLETED),
            ServiceRecordFactory(deliverables=CustomDeliverables(items_total=4, items_done=1)),
        ]
        assert overall_progress(services) == 25

    def test_empty(self):
        assert overall_progress([]) == 0


class TestClientCompletionRate:

    def test_share_of_completed_services(self):
        client = ClientRecordFactory(services=[
            ServiceRecordFactory(status=ServiceStatus.COMPLETED),
            ServiceRecordFactory(),
        ])
        assert client_completion_rate(client) == 50

    def test_no_services(self):
        assert client_completion_rate(ClientRecordFactory()) == 0


class TestGoalProgress:

    def test_share_of_target(self):
        assert goal_progress(2500, 10000) == 25

    def test_capped_at_hundred(self):
        assert goal_progress(15000, 10000) == 100

    def test_zero_target(self):
        assert goal_progress(5, 0) == 0
