"""ORM row to response model conversions shared by the services."""

from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.config import settings
from statuspage.core.database import Incident, IncidentUpdate, Organization, Service, as_utc
from statuspage.schemas.incidents import AffectedService, IncidentOut, IncidentUpdateOut
from statuspage.schemas.organizations import OrganizationOut, OrganizationSettings
from statuspage.schemas.public import (
    PublicIncident,
    PublicIncidentUpdate,
    PublicOrganization,
    PublicService,
    PublicServiceRef,
)
from statuspage.schemas.services import ServiceOut


async def load_services(session: AsyncSession, service_ids: Iterable[str]) -> dict[str, Service]:
    ids = set(service_ids)
    if not ids:
        return {}
    result = await session.execute(select(Service).where(Service.id.in_(ids)))
    return {service.id: service for service in result.scalars().all()}


async def load_affected(session: AsyncSession, incidents: Sequence[Incident]) -> dict[str, Service]:
    """Every service referenced by any of ``incidents``, keyed by id."""
    ids: set[str] = set()
    for incident in incidents:
        ids.update(incident.affected_service_ids)
    return await load_services(session, ids)


def organization_settings(org: Organization) -> OrganizationSettings:
    raw = {"timezone": settings.statuspage_default_timezone, **(org.settings or {})}
    return OrganizationSettings(**raw)


def organization_out(org: Organization) -> OrganizationOut:
    return OrganizationOut(
        id=org.id,
        name=org.name,
        domain=org.domain,
        logo=org.logo,
        brand_color=org.brand_color,
        settings=organization_settings(org),
        created_at=as_utc(org.created_at),
        updated_at=as_utc(org.updated_at),
    )


def public_organization(org: Organization) -> PublicOrganization:
    return PublicOrganization(name=org.name, domain=org.domain, logo=org.logo, brand_color=org.brand_color)


def service_out(service: Service) -> ServiceOut:
    return ServiceOut(
        id=service.id,
        organization_id=service.organization_id,
        name=service.name,
        description=service.description,
        status=service.status,
        group=service.group,
        order=service.order,
        is_public=service.is_public,
        created_at=as_utc(service.created_at),
        updated_at=as_utc(service.updated_at),
    )


def public_service(service: Service) -> PublicService:
    return PublicService(
        id=service.id,
        name=service.name,
        description=service.description,
        status=service.status,
        group=service.group,
        order=service.order,
    )


def incident_out(incident: Incident, services: dict[str, Service]) -> IncidentOut:
    affected = [
        AffectedService(id=sid, name=services[sid].name, status=services[sid].status)
        for sid in incident.affected_service_ids
        if sid in services
    ]
    return IncidentOut(
        id=incident.id,
        organization_id=incident.organization_id,
        title=incident.title,
        description=incident.description,
        type=incident.type,
        status=incident.status,
        impact=incident.impact,
        affected_services=affected,
        is_public=incident.is_public,
        created_by=incident.created_by,
        scheduled_for=as_utc(incident.scheduled_for),
        scheduled_until=as_utc(incident.scheduled_until),
        resolved_at=as_utc(incident.resolved_at),
        created_at=as_utc(incident.created_at),
        updated_at=as_utc(incident.updated_at),
    )


def public_incident(incident: Incident, services: dict[str, Service]) -> PublicIncident:
    """Public projection; private affected services are left out."""
    affected = [
        PublicServiceRef(id=sid, name=services[sid].name, status=services[sid].status)
        for sid in incident.affected_service_ids
        if sid in services and services[sid].is_public
    ]
    return PublicIncident(
        id=incident.id,
        title=incident.title,
        description=incident.description,
        type=incident.type,
        status=incident.status,
        impact=incident.impact,
        affected_services=affected,
        scheduled_for=as_utc(incident.scheduled_for),
        scheduled_until=as_utc(incident.scheduled_until),
        resolved_at=as_utc(incident.resolved_at),
        created_at=as_utc(incident.created_at),
        updated_at=as_utc(incident.updated_at),
    )


def update_out(update: IncidentUpdate) -> IncidentUpdateOut:
    return IncidentUpdateOut(
        id=update.id,
        incident_id=update.incident_id,
        message=update.message,
        status=update.status,
        created_by=update.created_by,
        is_public=update.is_public,
        created_at=as_utc(update.created_at),
    )


def public_update(update: IncidentUpdate) -> PublicIncidentUpdate:
    return PublicIncidentUpdate(
        id=update.id,
        message=update.message,
        status=update.status,
        created_at=as_utc(update.created_at),
    )
