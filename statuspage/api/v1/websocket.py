import asyncio

import structlog
from fastapi import APIRouter, Query, WebSocket
from sqlalchemy import select

import statuspage.core.database as db_module
from statuspage.core.database import Organization
from statuspage.core.enums import Role
from statuspage.services.jwt_service import JWTService
from statuspage.services.policy import can_access
from statuspage.services.realtime.fanout import Audience
from statuspage.services.realtime.hub import ChannelHub, Subscription

logger = structlog.get_logger()

router = APIRouter()


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        message = await subscription.next_message()
        await websocket.send_json(message)


async def _drain(websocket: WebSocket) -> None:
    """Consume client frames until the client goes away; clients only listen."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def pump_channel(websocket: WebSocket, hub: ChannelHub, channel: str) -> None:
    """Relay a hub channel to an accepted WebSocket until either side stops."""
    subscription = hub.subscribe(channel)
    try:
        await websocket.send_json({"event": "subscribed", "data": {"channel": channel}})
        tasks = {
            asyncio.create_task(_forward(websocket, subscription)),
            asyncio.create_task(_drain(websocket)),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.debug("realtime_connection_closed", channel=channel, error=str(task.exception()))
    finally:
        hub.unsubscribe(subscription)


@router.websocket("/ws/organizations/{organization_id}")
async def organization_ws(websocket: WebSocket, organization_id: str, token: str = Query(default="")):
    """Live events for an organization's dashboard; team members only."""
    actor = JWTService().actor_from_token(token) if token else None
    if actor is None:
        await websocket.close(code=4001, reason="Invalid or missing token")
        return

    async with db_module.async_session() as session:
        allowed = await can_access(session, actor, organization_id, Role.VIEWER)
    if not allowed:
        await websocket.close(code=4003, reason="Not a member of this organization")
        return

    await websocket.accept()
    await pump_channel(websocket, websocket.app.state.hub, Audience.organization(organization_id).channel)


@router.websocket("/ws/public/{domain}")
async def public_ws(websocket: WebSocket, domain: str):
    """Live events for a public status page."""
    domain = domain.lower()
    async with db_module.async_session() as session:
        org_id = await session.scalar(select(Organization.id).where(Organization.domain == domain))
    if org_id is None:
        await websocket.close(code=4004, reason="Status page not found")
        return

    await websocket.accept()
    await pump_channel(websocket, websocket.app.state.hub, Audience.public(domain).channel)
