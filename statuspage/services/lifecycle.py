"""Incident lifecycle engine.

Pure planning: given an incident's type, impact and affected services, decide
which service status changes a creation or a status transition causes. The
result is an ordered list of intended writes; ``IncidentService`` applies
them and emits the matching notifications.
"""

import datetime
from collections.abc import Sequence
from dataclasses import dataclass, field

from statuspage.core.database import as_utc
from statuspage.core.enums import Impact, IncidentStatus, IncidentType, ServiceStatus
from statuspage.core.exceptions import ValidationFailedError


@dataclass(frozen=True)
class ServiceStatusChange:
    service_id: str
    status: ServiceStatus


@dataclass
class TransitionPlan:
    status: IncidentStatus
    resolved_at: datetime.datetime | None
    newly_resolved: bool = False
    cascade: list[ServiceStatusChange] = field(default_factory=list)


def impact_to_service_status(impact: Impact) -> ServiceStatus:
    return impact.service_status


def plan_creation_cascade(
    incident_type: IncidentType,
    impact: Impact,
    affected_service_ids: Sequence[str],
) -> list[ServiceStatusChange]:
    """Affected services take the impact's status; maintenance never cascades."""
    if incident_type is not IncidentType.INCIDENT or not affected_service_ids:
        return []
    status = impact_to_service_status(impact)
    return [ServiceStatusChange(service_id=sid, status=status) for sid in affected_service_ids]


def plan_status_transition(
    incident_type: IncidentType,
    resolved_at: datetime.datetime | None,
    new_status: IncidentStatus,
    affected_service_ids: Sequence[str],
    now: datetime.datetime,
) -> TransitionPlan:
    """Plan the effects of an update moving the incident to ``new_status``.

    ``resolved_at`` is only ever set once. The first resolution of an
    Incident (not Maintenance) restores every affected service to Operational.
    """
    if not new_status.is_terminal or resolved_at is not None:
        return TransitionPlan(status=new_status, resolved_at=resolved_at)

    cascade = []
    if incident_type is IncidentType.INCIDENT:
        cascade = [
            ServiceStatusChange(service_id=sid, status=ServiceStatus.OPERATIONAL)
            for sid in affected_service_ids
        ]
    return TransitionPlan(status=new_status, resolved_at=now, newly_resolved=True, cascade=cascade)


def scheduling_window(
    incident_type: IncidentType,
    scheduled_for: datetime.datetime | None,
    scheduled_until: datetime.datetime | None,
) -> tuple[datetime.datetime | None, datetime.datetime | None]:
    """Return the schedule to store; only Maintenance keeps one."""
    if incident_type is not IncidentType.MAINTENANCE:
        return None, None
    scheduled_for, scheduled_until = as_utc(scheduled_for), as_utc(scheduled_until)
    if scheduled_for and scheduled_until and scheduled_until < scheduled_for:
        raise ValidationFailedError("scheduled_until must not be earlier than scheduled_for.")
    return scheduled_for, scheduled_until
