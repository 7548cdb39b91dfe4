import time

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text

import statuspage.core.database as db_module
from statuspage.dependencies import get_broadcaster, get_hub
from statuspage.schemas.health import HealthResponse
from statuspage.services.realtime.fanout import Broadcaster
from statuspage.services.realtime.hub import ChannelHub

logger = structlog.get_logger()

router = APIRouter()

_start_time = time.monotonic()


@router.get("/health")
async def health_check(
    broadcaster: Broadcaster = Depends(get_broadcaster),
    hub: ChannelHub = Depends(get_hub),
) -> HealthResponse:
    """Liveness plus database reachability, no auth required."""
    try:
        async with db_module.async_session() as session:
            await session.execute(text("SELECT 1"))
        database = "connected"
    except Exception as exc:
        logger.warning("health_db_unreachable", error=str(exc))
        database = "disconnected"

    return HealthResponse(
        status="ok" if database == "connected" else "degraded",
        database=database,
        fanout_running=broadcaster.running,
        fanout_pending=broadcaster.pending,
        fanout_dropped=broadcaster.dropped,
        realtime_connections=hub.subscriber_count(),
        uptime_seconds=round(time.monotonic() - _start_time, 1),
    )
