from fastapi import APIRouter, Depends, Query

from statuspage.dependencies import get_actor, get_service_catalog
from statuspage.schemas.common import ApiResponse, ok
from statuspage.schemas.services import (
    ServiceCreate,
    ServiceDetail,
    ServiceOut,
    ServiceStatusUpdate,
    ServiceUpdate,
    ServiceUptime,
)
from statuspage.services.policy import Actor
from statuspage.services.service_catalog import ServiceCatalog

router = APIRouter()


@router.post("/api/services", status_code=201)
async def create_service(
    body: ServiceCreate,
    actor: Actor = Depends(get_actor),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ApiResponse[ServiceOut]:
    return ok(await catalog.create_service(actor, body), "Service created.")


@router.get("/api/services/{service_id}")
async def get_service(
    service_id: str,
    actor: Actor = Depends(get_actor),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ApiResponse[ServiceDetail]:
    """A service with its most recent status history, newest first."""
    return ok(await catalog.get_service(actor, service_id))


@router.put("/api/services/{service_id}")
async def update_service(
    service_id: str,
    body: ServiceUpdate,
    actor: Actor = Depends(get_actor),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ApiResponse[ServiceOut]:
    return ok(await catalog.update_service(actor, service_id, body), "Service updated.")


@router.put("/api/services/{service_id}/status")
async def update_service_status(
    service_id: str,
    body: ServiceStatusUpdate,
    actor: Actor = Depends(get_actor),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ApiResponse[ServiceOut]:
    return ok(await catalog.update_status(actor, service_id, body.status), "Service status updated.")


@router.delete("/api/services/{service_id}")
async def delete_service(
    service_id: str,
    actor: Actor = Depends(get_actor),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ApiResponse[None]:
    await catalog.delete_service(actor, service_id)
    return ok(message="Service deleted.")


@router.get("/api/services/{service_id}/uptime")
async def get_service_uptime(
    service_id: str,
    window_hours: int = Query(24 * 30, ge=1, le=24 * 365),
    actor: Actor = Depends(get_actor),
    catalog: ServiceCatalog = Depends(get_service_catalog),
) -> ApiResponse[ServiceUptime]:
    return ok(await catalog.get_uptime(actor, service_id, window_hours))
