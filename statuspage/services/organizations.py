import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import statuspage.core.database as db_module
from statuspage.config import settings
from statuspage.core.database import (
    Incident,
    IncidentAffectedService,
    IncidentUpdate,
    Organization,
    Service,
    ServiceStatusEntry,
    Subscriber,
    TeamMember,
    utcnow,
)
from statuspage.core.enums import Role
from statuspage.core.exceptions import ConflictError, NotFoundError
from statuspage.schemas.organizations import (
    MemberOrganization,
    OrganizationCreate,
    OrganizationOut,
    OrganizationUpdate,
)
from statuspage.services.policy import Actor, require_role
from statuspage.services.projections import organization_out

logger = structlog.get_logger()


async def get_organization_or_404(session: AsyncSession, organization_id: str) -> Organization:
    org = await session.get(Organization, organization_id)
    if org is None:
        raise NotFoundError("Organization not found.")
    return org


async def get_organization_by_domain(session: AsyncSession, domain: str) -> Organization:
    result = await session.execute(select(Organization).where(Organization.domain == domain.lower()))
    org = result.scalar_one_or_none()
    if org is None:
        raise NotFoundError("Status page not found.")
    return org


class OrganizationService:
    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory_override = session_factory

    @property
    def _session_factory(self) -> async_sessionmaker:
        return self._session_factory_override or db_module.async_session

    async def create_organization(self, actor: Actor, data: OrganizationCreate) -> OrganizationOut:
        """Create an organization; the creator becomes its first Admin."""
        async with self._session_factory() as session:
            taken = await session.scalar(select(Organization.id).where(Organization.domain == data.domain))
            if taken is not None:
                raise ConflictError("Domain is already taken.")

            now = utcnow()
            org = Organization(
                name=data.name,
                domain=data.domain,
                logo=data.logo,
                brand_color=data.brand_color or settings.statuspage_default_brand_color,
                settings={"timezone": settings.statuspage_default_timezone},
                created_at=now,
                updated_at=now,
            )
            session.add(org)
            await session.flush()
            session.add(
                TeamMember(
                    organization_id=org.id,
                    user_id=actor.id,
                    email=actor.email.lower(),
                    name=actor.name or actor.email,
                    role=Role.ADMIN,
                    invite_accepted=True,
                    last_active=now,
                    created_at=now,
                    updated_at=now,
                )
            )
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError("Domain is already taken.") from exc

        logger.info("organization_created", organization_id=org.id, domain=org.domain, actor_id=actor.id)
        return organization_out(org)

    async def list_organizations(self, actor: Actor) -> list[MemberOrganization]:
        """Organizations where the actor is an accepted member."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Organization, TeamMember.role)
                .join(TeamMember, TeamMember.organization_id == Organization.id)
                .where(TeamMember.user_id == actor.id, TeamMember.invite_accepted.is_(True))
                .order_by(Organization.name)
            )
            return [
                MemberOrganization(
                    id=org.id,
                    name=org.name,
                    domain=org.domain,
                    logo=org.logo,
                    brand_color=org.brand_color,
                    role=role,
                )
                for org, role in result.all()
            ]

    async def get_organization(self, actor: Actor, organization_id: str) -> OrganizationOut:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.VIEWER)
            return organization_out(org)

    async def update_organization(
        self, actor: Actor, organization_id: str, data: OrganizationUpdate
    ) -> OrganizationOut:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.ADMIN)

            changes = data.model_dump(exclude_unset=True, exclude={"settings"})
            for field, value in changes.items():
                if value is None and field in ("name", "brand_color"):
                    continue
                setattr(org, field, value)
            if data.settings is not None:
                # Merge key by key; omitted keys keep their stored value.
                org.settings = {**(org.settings or {}), **data.settings.model_dump(exclude_unset=True)}
            org.updated_at = utcnow()
            await session.commit()

        logger.info("organization_updated", organization_id=org.id)
        return organization_out(org)

    async def delete_organization(self, actor: Actor, organization_id: str) -> None:
        """Delete the organization and everything it owns."""
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.ADMIN)

            service_ids = select(Service.id).where(Service.organization_id == org.id)
            incident_ids = select(Incident.id).where(Incident.organization_id == org.id)

            await session.execute(delete(ServiceStatusEntry).where(ServiceStatusEntry.service_id.in_(service_ids)))
            await session.execute(
                delete(IncidentAffectedService).where(IncidentAffectedService.incident_id.in_(incident_ids))
            )
            await session.execute(delete(IncidentUpdate).where(IncidentUpdate.incident_id.in_(incident_ids)))
            await session.execute(delete(Incident).where(Incident.organization_id == org.id))
            await session.execute(delete(Service).where(Service.organization_id == org.id))
            await session.execute(delete(Subscriber).where(Subscriber.organization_id == org.id))
            await session.execute(delete(TeamMember).where(TeamMember.organization_id == org.id))
            await session.delete(org)
            await session.commit()

        logger.info("organization_deleted", organization_id=organization_id, actor_id=actor.id)
