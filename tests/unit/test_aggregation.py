"""Overall status and grouping over service snapshots."""

from dataclasses import dataclass

from statuspage.core.enums import ServiceStatus
from statuspage.services.aggregation import compute_overall_status, group_services


@dataclass
class Svc:
    name: str
    status: ServiceStatus = ServiceStatus.OPERATIONAL
    group: str = "Default"
    order: int = 0
    is_public: bool = True


class TestComputeOverallStatus:
    def test_empty_is_operational(self):
        assert compute_overall_status([]) is ServiceStatus.OPERATIONAL

    def test_all_operational(self):
        assert compute_overall_status([Svc("a"), Svc("b")]) is ServiceStatus.OPERATIONAL

    def test_worst_public_status_wins(self):
        services = [
            Svc("a", ServiceStatus.DEGRADED_PERFORMANCE),
            Svc("b", ServiceStatus.MAJOR_OUTAGE),
            Svc("c", ServiceStatus.PARTIAL_OUTAGE),
        ]
        assert compute_overall_status(services) is ServiceStatus.MAJOR_OUTAGE

    def test_private_services_are_ignored(self):
        services = [
            Svc("public", ServiceStatus.DEGRADED_PERFORMANCE),
            Svc("private", ServiceStatus.MAJOR_OUTAGE, is_public=False),
        ]
        assert compute_overall_status(services) is ServiceStatus.DEGRADED_PERFORMANCE

    def test_only_private_services_is_operational(self):
        assert compute_overall_status([Svc("x", ServiceStatus.MAJOR_OUTAGE, is_public=False)]) is (
            ServiceStatus.OPERATIONAL
        )


class TestGroupServices:
    def test_groups_in_first_appearance_order(self):
        services = [Svc("api", group="Core"), Svc("docs", group="Web"), Svc("db", group="Core")]
        assert list(group_services(services)) == ["Core", "Web"]

    def test_members_sorted_by_order(self):
        services = [Svc("c", order=2), Svc("a", order=0), Svc("b", order=1)]
        assert [s.name for s in group_services(services)["Default"]] == ["a", "b", "c"]

    def test_ties_keep_input_order(self):
        services = [Svc("first", order=1), Svc("second", order=1), Svc("zero", order=0), Svc("third", order=1)]
        names = [s.name for s in group_services(services)["Default"]]
        assert names == ["zero", "first", "second", "third"]

    def test_empty(self):
        assert group_services([]) == {}
