"""Unauthenticated status page reads, keyed by organization domain.

Only records flagged public are returned; private services are left out of
incident projections as well.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

import statuspage.core.database as db_module
from statuspage.core.database import Incident, IncidentUpdate, Service
from statuspage.core.enums import IncidentStatus, IncidentType
from statuspage.core.exceptions import NotFoundError
from statuspage.schemas.common import Pagination
from statuspage.schemas.public import (
    PublicIncidentDetail,
    PublicIncidentPage,
    PublicStatus,
)
from statuspage.services.aggregation import compute_overall_status, group_services
from statuspage.services.organizations import get_organization_by_domain
from statuspage.services.projections import (
    load_affected,
    public_incident,
    public_organization,
    public_service,
    public_update,
)


class PublicStatusService:
    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory_override = session_factory

    @property
    def _session_factory(self) -> async_sessionmaker:
        return self._session_factory_override or db_module.async_session

    async def get_status(self, domain: str) -> PublicStatus:
        async with self._session_factory() as session:
            org = await get_organization_by_domain(session, domain)

            result = await session.execute(
                select(Service)
                .where(Service.organization_id == org.id, Service.is_public.is_(True))
                .order_by(Service.created_at, Service.id)
            )
            services = list(result.scalars().all())

            result = await session.execute(
                select(Incident)
                .where(
                    Incident.organization_id == org.id,
                    Incident.is_public.is_(True),
                    Incident.status != IncidentStatus.RESOLVED,
                )
                .order_by(Incident.created_at.desc(), Incident.id)
            )
            open_incidents = list(result.scalars().all())
            affected = await load_affected(session, open_incidents)

        active = [public_incident(i, affected) for i in open_incidents]
        scheduled = sorted(
            (
                public_incident(i, affected)
                for i in open_incidents
                if i.type is IncidentType.MAINTENANCE and i.scheduled_for is not None
            ),
            key=lambda item: item.scheduled_for,
        )
        groups = group_services(services)
        return PublicStatus(
            organization=public_organization(org),
            overall_status=compute_overall_status(services),
            service_groups={name: [public_service(s) for s in members] for name, members in groups.items()},
            active_incidents=active,
            scheduled_maintenance=scheduled,
        )

    async def list_resolved_incidents(self, domain: str, page: int = 1, limit: int = 10) -> PublicIncidentPage:
        async with self._session_factory() as session:
            org = await get_organization_by_domain(session, domain)
            conditions = (
                Incident.organization_id == org.id,
                Incident.is_public.is_(True),
                Incident.status == IncidentStatus.RESOLVED,
            )
            total = await session.scalar(select(func.count()).select_from(Incident).where(*conditions)) or 0
            result = await session.execute(
                select(Incident)
                .where(*conditions)
                .order_by(Incident.created_at.desc(), Incident.id)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            incidents = list(result.scalars().all())
            affected = await load_affected(session, incidents)

        return PublicIncidentPage(
            incidents=[public_incident(i, affected) for i in incidents],
            pagination=Pagination.build(total, page, limit),
        )

    async def get_incident(self, domain: str, incident_id: str) -> PublicIncidentDetail:
        async with self._session_factory() as session:
            org = await get_organization_by_domain(session, domain)
            incident = await session.get(Incident, incident_id)
            if incident is None or incident.organization_id != org.id or not incident.is_public:
                raise NotFoundError("Incident not found.")

            result = await session.execute(
                select(IncidentUpdate)
                .where(IncidentUpdate.incident_id == incident.id, IncidentUpdate.is_public.is_(True))
                .order_by(IncidentUpdate.created_at, IncidentUpdate.id)
            )
            updates = list(result.scalars().all())
            affected = await load_affected(session, [incident])

        return PublicIncidentDetail(
            incident=public_incident(incident, affected),
            updates=[public_update(u) for u in updates],
        )
