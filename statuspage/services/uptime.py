"""Availability calculations over the service status history."""

from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.core.database import Service, ServiceStatusEntry, as_utc, utcnow
from statuspage.core.enums import ServiceStatus


def compute_availability(
    entries: Sequence[ServiceStatusEntry],
    window_start: datetime,
    now: datetime,
    initial_status: ServiceStatus = ServiceStatus.OPERATIONAL,
) -> float:
    """Percentage of [window_start, now] spent Operational.

    Intervals come from consecutive ``recorded_at`` timestamps; the stored
    ``duration`` column is not consulted. ``entries`` must be oldest first.
    Returns 100.0 for an empty window.
    """
    window_start, now = as_utc(window_start), as_utc(now)
    window_seconds = (now - window_start).total_seconds()
    if window_seconds <= 0:
        return 100.0

    current = initial_status
    cursor = window_start
    downtime = 0.0
    for entry in entries:
        at = as_utc(entry.recorded_at)
        if at <= window_start:
            current = ServiceStatus(entry.status)
            continue
        if at > now:
            break
        if current is not ServiceStatus.OPERATIONAL:
            downtime += (at - cursor).total_seconds()
        cursor = at
        current = ServiceStatus(entry.status)

    if current is not ServiceStatus.OPERATIONAL:
        downtime += (now - cursor).total_seconds()

    availability = max(0.0, (1.0 - downtime / window_seconds) * 100.0)
    return round(availability, 4)


async def get_service_availability(
    session: AsyncSession,
    service: Service,
    window_hours: int,
    now: datetime | None = None,
) -> float:
    now = now or utcnow()
    window_start = max(now - timedelta(hours=window_hours), as_utc(service.created_at))
    result = await session.execute(
        select(ServiceStatusEntry)
        .where(ServiceStatusEntry.service_id == service.id)
        .order_by(ServiceStatusEntry.recorded_at, ServiceStatusEntry.id)
    )
    entries = list(result.scalars().all())
    return compute_availability(entries, window_start, now)


async def recent_history(session: AsyncSession, service_id: str, limit: int) -> list[ServiceStatusEntry]:
    """Latest status history entries, newest first."""
    result = await session.execute(
        select(ServiceStatusEntry)
        .where(ServiceStatusEntry.service_id == service_id)
        .order_by(ServiceStatusEntry.recorded_at.desc(), ServiceStatusEntry.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
