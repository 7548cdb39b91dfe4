from fastapi import APIRouter, Depends, Query

from statuspage.config import settings
from statuspage.core.enums import IncidentStatus, IncidentType
from statuspage.dependencies import get_actor, get_incident_service, get_service_catalog
from statuspage.schemas.common import ApiResponse, ok
from statuspage.schemas.incidents import IncidentPage
from statuspage.schemas.organizations import (
    MemberOrganization,
    OrganizationCreate,
    OrganizationOut,
    OrganizationUpdate,
)
from statuspage.schemas.services import ServiceOut
from statuspage.schemas.subscribers import SubscriberOut
from statuspage.services.incidents import IncidentService
from statuspage.services.organizations import OrganizationService
from statuspage.services.policy import Actor
from statuspage.services.service_catalog import ServiceCatalog
from statuspage.services.subscribers import SubscriberService

router = APIRouter()

_service = OrganizationService()
_subscribers = SubscriberService()


@router.get("/api/organizations")
async def list_organizations(actor: Actor = Depends(get_actor)) -> ApiResponse[list[MemberOrganization]]:
    """Organizations the caller belongs to, with the caller's role."""
    return ok(await _service.list_organizations(actor))


@router.post("/api/organizations", status_code=201)
async def create_organization(
    body: OrganizationCreate, actor: Actor = Depends(get_actor)
) -> ApiResponse[OrganizationOut]:
    return ok(await _service.create_organization(actor, body), "Organization created.")


@router.get("/api/organizations/{org_id}")
async def get_organization(org_id: str, actor: Actor = Depends(get_actor)) -> ApiResponse[OrganizationOut]:
    return ok(await _service.get_organization(actor, org_id))


@router.put("/api/organizations/{org_id}")
async def update_organization(
    org_id: str, body: OrganizationUpdate, actor: Actor = Depends(get_actor)
) -> ApiResponse[OrganizationOut]:
    return ok(await _service.update_organization(actor, org_id, body), "Organization updated.")


@router.delete("/api/organizations/{org_id}")
async def delete_organization(org_id: str, actor: Actor = Depends(get_actor)) -> ApiResponse[None]:
    """Delete an organization and everything it owns."""
    await _service.delete_organization(actor, org_id)
    return ok(message="Organization deleted.")


@router.get("/api/organizations/{org_id}/services")
async def list_services(
    org_id: str,
    actor: Actor = Depends(get_actor),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ApiResponse[list[ServiceOut]]:
    return ok(await catalog.list_services(actor, org_id))


@router.get("/api/organizations/{org_id}/incidents")
async def list_incidents(
    org_id: str,
    incident_type: IncidentType | None = Query(None, alias="type"),
    status: IncidentStatus | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.statuspage_max_page_size),
    actor: Actor = Depends(get_actor),
    incidents: IncidentService = Depends(get_incident_service),
) -> ApiResponse[IncidentPage]:
    """Incidents of an organization, newest first."""
    return ok(await incidents.list_incidents(actor, org_id, incident_type, status, page, limit))


@router.get("/api/organizations/{org_id}/subscribers")
async def list_subscribers(org_id: str, actor: Actor = Depends(get_actor)) -> ApiResponse[list[SubscriberOut]]:
    return ok(await _subscribers.list_subscribers(actor, org_id))


@router.delete("/api/organizations/{org_id}/subscribers/{subscriber_id}")
async def delete_subscriber(org_id: str, subscriber_id: str, actor: Actor = Depends(get_actor)) -> ApiResponse[None]:
    await _subscribers.delete_subscriber(actor, org_id, subscriber_id)
    return ok(message="Subscriber removed.")
