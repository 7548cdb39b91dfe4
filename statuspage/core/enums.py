"""Domain enumerations with explicit orderings.

Values are the human-readable strings shown on status pages and sent over the
wire. Ordering never relies on string comparison.
"""

from collections.abc import Iterable
from enum import Enum


class ServiceStatus(str, Enum):
    OPERATIONAL = "Operational"
    DEGRADED_PERFORMANCE = "Degraded Performance"
    PARTIAL_OUTAGE = "Partial Outage"
    MAJOR_OUTAGE = "Major Outage"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def most_severe(cls, statuses: Iterable["ServiceStatus"]) -> "ServiceStatus":
        """Worst status wins; Operational when nothing is given."""
        worst = cls.OPERATIONAL
        for status in statuses:
            if status.severity > worst.severity:
                worst = status
        return worst


_SEVERITY = {
    ServiceStatus.OPERATIONAL: 0,
    ServiceStatus.DEGRADED_PERFORMANCE: 1,
    ServiceStatus.PARTIAL_OUTAGE: 2,
    ServiceStatus.MAJOR_OUTAGE: 3,
}


class IncidentType(str, Enum):
    INCIDENT = "Incident"
    MAINTENANCE = "Maintenance"


class IncidentStatus(str, Enum):
    INVESTIGATING = "Investigating"
    IDENTIFIED = "Identified"
    MONITORING = "Monitoring"
    RESOLVED = "Resolved"

    @property
    def is_terminal(self) -> bool:
        return self is IncidentStatus.RESOLVED


class Impact(str, Enum):
    NONE = "None"
    MINOR = "Minor"
    MAJOR = "Major"
    CRITICAL = "Critical"

    @property
    def service_status(self) -> ServiceStatus:
        """Status applied to affected services when an incident opens."""
        return _IMPACT_TO_STATUS.get(self, ServiceStatus.OPERATIONAL)


_IMPACT_TO_STATUS = {
    Impact.CRITICAL: ServiceStatus.MAJOR_OUTAGE,
    Impact.MAJOR: ServiceStatus.PARTIAL_OUTAGE,
    Impact.MINOR: ServiceStatus.DEGRADED_PERFORMANCE,
}


class Role(str, Enum):
    ADMIN = "Admin"
    EDITOR = "Editor"
    VIEWER = "Viewer"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def permits(self, required: "Role") -> bool:
        """True if this role may do everything ``required`` may."""
        return self.rank >= required.rank


_ROLE_RANK = {
    Role.VIEWER: 1,
    Role.EDITOR: 2,
    Role.ADMIN: 3,
}
