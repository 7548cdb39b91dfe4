"""Explicit orderings on the domain enums."""

import pytest

from statuspage.core.enums import Impact, IncidentStatus, Role, ServiceStatus


class TestServiceStatus:
    def test_severity_order(self):
        ordered = [
            ServiceStatus.OPERATIONAL,
            ServiceStatus.DEGRADED_PERFORMANCE,
            ServiceStatus.PARTIAL_OUTAGE,
            ServiceStatus.MAJOR_OUTAGE,
        ]
        assert [s.severity for s in ordered] == [0, 1, 2, 3]

    def test_most_severe_of_nothing_is_operational(self):
        assert ServiceStatus.most_severe([]) is ServiceStatus.OPERATIONAL

    def test_most_severe_does_not_use_string_order(self):
        # Alphabetically "Partial Outage" > "Major Outage"; severity says otherwise.
        statuses = [ServiceStatus.PARTIAL_OUTAGE, ServiceStatus.MAJOR_OUTAGE, ServiceStatus.DEGRADED_PERFORMANCE]
        assert ServiceStatus.most_severe(statuses) is ServiceStatus.MAJOR_OUTAGE

    def test_values_are_human_readable(self):
        assert ServiceStatus("Degraded Performance") is ServiceStatus.DEGRADED_PERFORMANCE
        with pytest.raises(ValueError):
            ServiceStatus("degraded")


class TestImpact:
    @pytest.mark.parametrize(
        "impact,expected",
        [
            (Impact.CRITICAL, ServiceStatus.MAJOR_OUTAGE),
            (Impact.MAJOR, ServiceStatus.PARTIAL_OUTAGE),
            (Impact.MINOR, ServiceStatus.DEGRADED_PERFORMANCE),
            (Impact.NONE, ServiceStatus.OPERATIONAL),
        ],
    )
    def test_service_status_mapping(self, impact, expected):
        assert impact.service_status is expected


class TestRole:
    def test_admin_permits_everything(self):
        assert all(Role.ADMIN.permits(r) for r in Role)

    def test_editor_permits_editor_and_viewer(self):
        assert Role.EDITOR.permits(Role.EDITOR)
        assert Role.EDITOR.permits(Role.VIEWER)
        assert not Role.EDITOR.permits(Role.ADMIN)

    def test_viewer_permits_only_viewer(self):
        assert Role.VIEWER.permits(Role.VIEWER)
        assert not Role.VIEWER.permits(Role.EDITOR)


def test_only_resolved_is_terminal():
    assert [s for s in IncidentStatus if s.is_terminal] == [IncidentStatus.RESOLVED]
