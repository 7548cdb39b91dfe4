"""Overall status and service grouping for status pages."""

from collections.abc import Iterable, Sequence
from typing import Any

from statuspage.core.enums import ServiceStatus
from statuspage.services.policy import is_publicly_visible


def compute_overall_status(services: Iterable[Any]) -> ServiceStatus:
    """Worst status among the public services; Operational when there are none."""
    return ServiceStatus.most_severe(
        ServiceStatus(s.status) for s in services if is_publicly_visible(s)
    )


def group_services(services: Sequence[Any]) -> dict[str, list[Any]]:
    """Group by ``group`` (first-appearance order), each group sorted by ``order``.

    ``sorted`` is stable, so services sharing an order value keep input order.
    """
    groups: dict[str, list[Any]] = {}
    for service in services:
        groups.setdefault(service.group, []).append(service)
    return {name: sorted(members, key=lambda s: s.order) for name, members in groups.items()}
