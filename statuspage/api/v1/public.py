from fastapi import APIRouter, Query

from statuspage.config import settings
from statuspage.schemas.common import ApiResponse, ok
from statuspage.schemas.public import (
    PublicIncidentDetail,
    PublicIncidentPage,
    PublicStatus,
    SubscribeRequest,
    SubscriptionOut,
)
from statuspage.services.public import PublicStatusService
from statuspage.services.subscribers import SubscriberService

router = APIRouter()

_service = PublicStatusService()
_subscribers = SubscriberService()


@router.get("/api/public/{domain}/status")
async def get_public_status(domain: str) -> ApiResponse[PublicStatus]:
    """Status page snapshot, no auth required."""
    return ok(await _service.get_status(domain))


@router.get("/api/public/{domain}/incidents")
async def list_public_incidents(
    domain: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.statuspage_max_page_size),
) -> ApiResponse[PublicIncidentPage]:
    """Resolved public incidents, newest first."""
    return ok(await _service.list_resolved_incidents(domain, page, limit))


@router.get("/api/public/{domain}/incidents/{incident_id}")
async def get_public_incident(domain: str, incident_id: str) -> ApiResponse[PublicIncidentDetail]:
    return ok(await _service.get_incident(domain, incident_id))


@router.post("/api/public/{domain}/subscribers", status_code=201)
async def subscribe(domain: str, body: SubscribeRequest) -> ApiResponse[SubscriptionOut]:
    subscription, _token = await _subscribers.subscribe(domain, body)
    return ok(subscription, "Subscription created. Check your email to verify it.")


@router.post("/api/public/{domain}/subscribers/verify/{token}")
async def verify_subscription(domain: str, token: str) -> ApiResponse[SubscriptionOut]:
    return ok(await _subscribers.verify(domain, token), "Subscription verified.")
