"""
Service completion rollups computed from deliverables.
"""

from typing import Iterable, Optional, Tuple

from agencydesk.schemas.client import Client, ClientService, Deliverables, ServiceStatus


def percent_of(done: int, total: int) -> int:
    # rounds half up
    return int(done * 100 / total + 0.5) if total > 0 else 0


def _totals(counters: Iterable[Tuple[int, int]]) -> Tuple[int, int]:
    done_sum = 0
    total_sum = 0
    for done, total in counters:
        total_sum += total
        done_sum += min(done, total)
    return done_sum, total_sum


def deliverables_progress(deliverables: Optional[Deliverables]) -> int:
    """
    Percentage of tracked deliverables that are done.

    Milestones count as one unit each and counters are clamped to their
    totals. Returns 0 when nothing is tracked.
    """
    if deliverables is None:
        return 0
    return percent_of(*_totals(deliverables.counters()))


def service_progress(service: ClientService) -> int:
    """Deliverables progress, or 100 for a completed service with nothing tracked."""
    if service.deliverables is not None:
        done, total = _totals(service.deliverables.counters())
        if total > 0:
            return percent_of(done, total)
    return 100 if service.status == ServiceStatus.COMPLETED else 0


def overall_progress(services: Iterable[ClientService]) -> int:
    """Pooled deliverables progress across many services."""
    done_sum = 0
    total_sum = 0
    for service in services:
        if service.deliverables is None:
            continue
        done, total = _totals(service.deliverables.counters())
        done_sum += done
        total_sum += total
    return percent_of(done_sum, total_sum)


def client_completion_rate(client: Client) -> int:
    """Share of a client's services that are completed, as a whole percent."""
    completed = sum(1 for s in client.services if s.status == ServiceStatus.COMPLETED)
    return percent_of(completed, len(client.services))


def goal_progress(current: float, target: float) -> int:
    """Percent of a goal's target reached, capped at 100."""
    if target <= 0:
        return 0
    return min(100, percent_of(current, target))
