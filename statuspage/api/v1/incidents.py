from fastapi import APIRouter, Depends

from statuspage.dependencies import get_actor, get_incident_service
from statuspage.schemas.common import ApiResponse, ok
from statuspage.schemas.incidents import (
    IncidentCreate,
    IncidentDetail,
    IncidentOut,
    IncidentPatch,
    IncidentUpdateCreate,
    IncidentUpdateOut,
)
from statuspage.services.incidents import IncidentService
from statuspage.services.policy import Actor

router = APIRouter()


@router.post("/api/incidents", status_code=201)
async def create_incident(
    body: IncidentCreate,
    actor: Actor = Depends(get_actor),
    incidents: IncidentService = Depends(get_incident_service),
) -> ApiResponse[IncidentOut]:
    """Open an incident or schedule maintenance."""
    return ok(await incidents.create_incident(actor, body), "Incident created.")


@router.get("/api/incidents/{incident_id}")
async def get_incident(
    incident_id: str,
    actor: Actor = Depends(get_actor),
    incidents: IncidentService = Depends(get_incident_service),
) -> ApiResponse[IncidentDetail]:
    return ok(await incidents.get_incident(actor, incident_id))


@router.put("/api/incidents/{incident_id}")
async def update_incident(
    incident_id: str,
    body: IncidentPatch,
    actor: Actor = Depends(get_actor),
    incidents: IncidentService = Depends(get_incident_service),
) -> ApiResponse[IncidentOut]:
    return ok(await incidents.update_incident(actor, incident_id, body), "Incident updated.")


@router.delete("/api/incidents/{incident_id}")
async def delete_incident(
    incident_id: str,
    actor: Actor = Depends(get_actor),
    incidents: IncidentService = Depends(get_incident_service),
) -> ApiResponse[None]:
    await incidents.delete_incident(actor, incident_id)
    return ok(message="Incident deleted.")


@router.post("/api/incidents/{incident_id}/updates", status_code=201)
async def add_incident_update(
    incident_id: str,
    body: IncidentUpdateCreate,
    actor: Actor = Depends(get_actor),
    incidents: IncidentService = Depends(get_incident_service),
) -> ApiResponse[IncidentUpdateOut]:
    """Post an update; the incident moves to the update's status."""
    return ok(await incidents.append_update(actor, incident_id, body), "Update added.")
