"""Pure planning of incident cascades."""

import datetime

import pytest

from statuspage.core.enums import Impact, IncidentStatus, IncidentType, ServiceStatus
from statuspage.core.exceptions import ValidationFailedError
from statuspage.services.lifecycle import (
    ServiceStatusChange,
    plan_creation_cascade,
    plan_status_transition,
    scheduling_window,
)

NOW = datetime.datetime(2026, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)


class TestCreationCascade:
    def test_critical_incident_sets_major_outage_in_order(self):
        plan = plan_creation_cascade(IncidentType.INCIDENT, Impact.CRITICAL, ["s1", "s2"])
        assert plan == [
            ServiceStatusChange("s1", ServiceStatus.MAJOR_OUTAGE),
            ServiceStatusChange("s2", ServiceStatus.MAJOR_OUTAGE),
        ]

    def test_no_impact_sets_operational(self):
        plan = plan_creation_cascade(IncidentType.INCIDENT, Impact.NONE, ["s1"])
        assert plan == [ServiceStatusChange("s1", ServiceStatus.OPERATIONAL)]

    def test_maintenance_never_cascades(self):
        assert plan_creation_cascade(IncidentType.MAINTENANCE, Impact.CRITICAL, ["s1"]) == []

    def test_no_affected_services(self):
        assert plan_creation_cascade(IncidentType.INCIDENT, Impact.CRITICAL, []) == []


class TestStatusTransition:
    def test_first_resolution_sets_resolved_at_and_reverts(self):
        plan = plan_status_transition(IncidentType.INCIDENT, None, IncidentStatus.RESOLVED, ["s1", "s2"], NOW)
        assert plan.resolved_at == NOW
        assert plan.newly_resolved
        assert plan.cascade == [
            ServiceStatusChange("s1", ServiceStatus.OPERATIONAL),
            ServiceStatusChange("s2", ServiceStatus.OPERATIONAL),
        ]

    def test_repeated_resolution_is_idempotent(self):
        earlier = NOW - datetime.timedelta(hours=1)
        plan = plan_status_transition(IncidentType.INCIDENT, earlier, IncidentStatus.RESOLVED, ["s1"], NOW)
        assert plan.resolved_at == earlier
        assert not plan.newly_resolved
        assert plan.cascade == []

    def test_non_terminal_status_changes_nothing_else(self):
        plan = plan_status_transition(IncidentType.INCIDENT, None, IncidentStatus.MONITORING, ["s1"], NOW)
        assert plan.status is IncidentStatus.MONITORING
        assert plan.resolved_at is None
        assert plan.cascade == []

    def test_resolving_maintenance_does_not_touch_services(self):
        plan = plan_status_transition(IncidentType.MAINTENANCE, None, IncidentStatus.RESOLVED, ["s1"], NOW)
        assert plan.resolved_at == NOW
        assert plan.cascade == []

    def test_reopening_keeps_resolved_at(self):
        plan = plan_status_transition(IncidentType.INCIDENT, NOW, IncidentStatus.INVESTIGATING, ["s1"], NOW)
        assert plan.resolved_at == NOW
        assert plan.cascade == []


class TestSchedulingWindow:
    def test_dropped_for_incidents(self):
        assert scheduling_window(IncidentType.INCIDENT, NOW, NOW) == (None, None)

    def test_kept_for_maintenance(self):
        until = NOW + datetime.timedelta(hours=2)
        assert scheduling_window(IncidentType.MAINTENANCE, NOW, until) == (NOW, until)

    def test_naive_values_are_treated_as_utc(self):
        naive = datetime.datetime(2026, 3, 1, 12, 0)
        start, _ = scheduling_window(IncidentType.MAINTENANCE, naive, None)
        assert start == NOW

    def test_until_before_for_is_rejected(self):
        with pytest.raises(ValidationFailedError):
            scheduling_window(IncidentType.MAINTENANCE, NOW, NOW - datetime.timedelta(minutes=1))
