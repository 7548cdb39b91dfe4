"""Incident orchestration.

Applies the lifecycle engine's plans inside a single session so that the
incident, its updates and every cascaded service status change commit
together, then hands the resulting notifications to the broadcaster.
"""

from collections.abc import Sequence

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import statuspage.core.database as db_module
from statuspage.core.database import (
    Incident,
    IncidentAffectedService,
    IncidentUpdate,
    Organization,
    Service,
    as_utc,
    utcnow,
)
from statuspage.core.enums import IncidentStatus, IncidentType, Role
from statuspage.core.exceptions import NotFoundError
from statuspage.schemas.common import Pagination
from statuspage.schemas.incidents import (
    IncidentCreate,
    IncidentDetail,
    IncidentOut,
    IncidentPage,
    IncidentPatch,
    IncidentUpdateCreate,
    IncidentUpdateOut,
)
from statuspage.services.lifecycle import (
    ServiceStatusChange,
    plan_creation_cascade,
    plan_status_transition,
    scheduling_window,
)
from statuspage.services.organizations import get_organization_or_404
from statuspage.services.policy import Actor, is_publicly_visible, require_role
from statuspage.services.projections import (
    incident_out,
    load_affected,
    load_services,
    public_incident,
    public_update,
    update_out,
)
from statuspage.services.realtime.fanout import (
    Broadcaster,
    EventType,
    Notification,
    notification_payload,
)
from statuspage.services.service_catalog import record_status_change, status_notification

logger = structlog.get_logger()


def _unique(ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(ids))


async def _resolve_affected(session: AsyncSession, organization_id: str, ids: Sequence[str]) -> dict[str, Service]:
    """Load the affected services; each must exist in the same organization."""
    services = await load_services(session, ids)
    for sid in ids:
        service = services.get(sid)
        if service is None or service.organization_id != organization_id:
            raise NotFoundError(f"Service {sid} not found.", details={"service_id": sid})
    return services


def _apply_cascade(
    session: AsyncSession,
    incident: Incident,
    changes: Sequence[ServiceStatusChange],
    services: dict[str, Service],
    now,
) -> list[Notification]:
    """Write each planned change and build its status-update notification."""
    notifications = []
    for change in changes:
        service = services.get(change.service_id)
        if service is None:
            continue
        record_status_change(session, service, change.status, now)
        notifications.append(
            status_notification(service, public=is_publicly_visible(service, parent=incident))
        )
    return notifications


def _incident_notification(event: EventType, incident: Incident, services: dict[str, Service]) -> Notification:
    return Notification(
        event,
        notification_payload(incident_out(incident, services)),
        public=is_publicly_visible(incident),
        public_payload=notification_payload(public_incident(incident, services)),
    )


class IncidentService:
    def __init__(
        self,
        broadcaster: Broadcaster | None = None,
        session_factory: async_sessionmaker | None = None,
    ):
        self._broadcaster = broadcaster
        self._session_factory_override = session_factory

    @property
    def _session_factory(self) -> async_sessionmaker:
        return self._session_factory_override or db_module.async_session

    def _notify(self, org: Organization, notifications: Sequence[Notification]) -> None:
        if self._broadcaster is not None:
            self._broadcaster.notify_all(org.id, org.domain, notifications)

    async def _load(self, session: AsyncSession, incident_id: str) -> Incident:
        incident = await session.get(Incident, incident_id)
        if incident is None:
            raise NotFoundError("Incident not found.")
        return incident

    async def create_incident(self, actor: Actor, data: IncidentCreate) -> IncidentOut:
        """Create an incident with its initial update and cascade its impact."""
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, data.organization_id)
            await require_role(session, actor, org.id, Role.EDITOR)

            affected_ids = _unique(data.affected_services)
            services = await _resolve_affected(session, org.id, affected_ids)
            scheduled_for, scheduled_until = scheduling_window(
                data.type, data.scheduled_for, data.scheduled_until
            )

            now = utcnow()
            incident = Incident(
                organization_id=org.id,
                title=data.title,
                description=data.description,
                type=data.type,
                status=data.status,
                impact=data.impact,
                is_public=data.is_public,
                created_by=actor.id,
                scheduled_for=scheduled_for,
                scheduled_until=scheduled_until,
                created_at=now,
                updated_at=now,
                affected_links=[
                    IncidentAffectedService(service_id=sid, position=i) for i, sid in enumerate(affected_ids)
                ],
            )
            session.add(incident)
            await session.flush()
            session.add(
                IncidentUpdate(
                    incident_id=incident.id,
                    message=data.description,
                    status=data.status,
                    created_by=actor.id,
                    is_public=data.is_public,
                    created_at=now,
                )
            )

            changes = plan_creation_cascade(data.type, data.impact, affected_ids)
            notifications = _apply_cascade(session, incident, changes, services, now)
            await session.commit()

        logger.info(
            "incident_created",
            incident_id=incident.id,
            organization_id=org.id,
            type=incident.type.value,
            impact=incident.impact.value,
            cascaded=len(notifications),
        )
        notifications.append(_incident_notification(EventType.INCIDENT_CREATED, incident, services))
        self._notify(org, notifications)
        return incident_out(incident, services)

    async def append_update(self, actor: Actor, incident_id: str, data: IncidentUpdateCreate) -> IncidentUpdateOut:
        """Append an update; the incident takes the update's status."""
        async with self._session_factory() as session:
            incident = await self._load(session, incident_id)
            await require_role(session, actor, incident.organization_id, Role.EDITOR)
            org = await get_organization_or_404(session, incident.organization_id)

            now = utcnow()
            update = IncidentUpdate(
                incident_id=incident.id,
                message=data.message,
                status=data.status,
                created_by=actor.id,
                is_public=incident.is_public if data.is_public is None else data.is_public,
                created_at=now,
            )
            session.add(update)

            plan = plan_status_transition(
                incident.type,
                as_utc(incident.resolved_at),
                data.status,
                incident.affected_service_ids,
                now,
            )
            incident.status = plan.status
            incident.resolved_at = plan.resolved_at
            incident.updated_at = now

            services = await load_services(session, incident.affected_service_ids)
            notifications = _apply_cascade(session, incident, plan.cascade, services, now)
            await session.commit()

        logger.info(
            "incident_update_added",
            incident_id=incident.id,
            status=update.status.value,
            resolved=plan.newly_resolved,
            cascaded=len(notifications),
        )
        notifications.append(
            Notification(
                EventType.INCIDENT_UPDATE,
                {"incident_id": incident.id, "update": notification_payload(update_out(update))},
                public=is_publicly_visible(update, parent=incident),
                public_payload={"incident_id": incident.id, "update": notification_payload(public_update(update))},
            )
        )
        self._notify(org, notifications)
        return update_out(update)

    async def list_incidents(
        self,
        actor: Actor,
        organization_id: str,
        incident_type: IncidentType | None = None,
        status: IncidentStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> IncidentPage:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.VIEWER)

            conditions = [Incident.organization_id == org.id]
            if incident_type is not None:
                conditions.append(Incident.type == incident_type)
            if status is not None:
                conditions.append(Incident.status == status)

            total = await session.scalar(select(func.count()).select_from(Incident).where(*conditions)) or 0
            result = await session.execute(
                select(Incident)
                .where(*conditions)
                .order_by(Incident.created_at.desc(), Incident.id)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            incidents = list(result.scalars().all())
            services = await load_affected(session, incidents)

        return IncidentPage(
            incidents=[incident_out(i, services) for i in incidents],
            pagination=Pagination.build(total, page, limit),
        )

    async def get_incident(self, actor: Actor, incident_id: str) -> IncidentDetail:
        async with self._session_factory() as session:
            incident = await self._load(session, incident_id)
            await require_role(session, actor, incident.organization_id, Role.VIEWER)
            services = await load_services(session, incident.affected_service_ids)
            result = await session.execute(
                select(IncidentUpdate)
                .where(IncidentUpdate.incident_id == incident.id)
                .order_by(IncidentUpdate.created_at, IncidentUpdate.id)
            )
            updates = list(result.scalars().all())

        return IncidentDetail(
            incident=incident_out(incident, services),
            updates=[update_out(u) for u in updates],
        )

    async def update_incident(self, actor: Actor, incident_id: str, data: IncidentPatch) -> IncidentOut:
        """Edit incident fields. Status only changes through updates; nothing cascades."""
        async with self._session_factory() as session:
            incident = await self._load(session, incident_id)
            await require_role(session, actor, incident.organization_id, Role.EDITOR)
            org = await get_organization_or_404(session, incident.organization_id)
            changes = data.model_dump(exclude_unset=True)

            for field in ("title", "type", "impact", "is_public"):
                if changes.get(field) is not None:
                    setattr(incident, field, changes[field])

            if "affected_services" in changes and data.affected_services is not None:
                wanted = _unique(data.affected_services)
                await _resolve_affected(session, org.id, wanted)
                # Keep existing link rows so a retained service is not deleted and re-inserted.
                existing = {link.service_id: link for link in incident.affected_links}
                links = []
                for position, sid in enumerate(wanted):
                    link = existing.get(sid) or IncidentAffectedService(service_id=sid)
                    link.position = position
                    links.append(link)
                incident.affected_links = links

            scheduled_for = changes.get("scheduled_for", incident.scheduled_for)
            scheduled_until = changes.get("scheduled_until", incident.scheduled_until)
            incident.scheduled_for, incident.scheduled_until = scheduling_window(
                incident.type, scheduled_for, scheduled_until
            )
            incident.updated_at = utcnow()
            await session.commit()
            services = await load_services(session, incident.affected_service_ids)

        logger.info("incident_updated", incident_id=incident.id, fields=sorted(changes))
        self._notify(org, [_incident_notification(EventType.INCIDENT_UPDATED, incident, services)])
        return incident_out(incident, services)

    async def delete_incident(self, actor: Actor, incident_id: str) -> None:
        async with self._session_factory() as session:
            incident = await self._load(session, incident_id)
            await require_role(session, actor, incident.organization_id, Role.ADMIN)
            org = await get_organization_or_404(session, incident.organization_id)
            public = is_publicly_visible(incident)

            await session.execute(delete(IncidentUpdate).where(IncidentUpdate.incident_id == incident.id))
            await session.delete(incident)
            await session.commit()

        logger.info("incident_deleted", incident_id=incident_id, actor_id=actor.id)
        payload = {"id": incident_id}
        self._notify(
            org, [Notification(EventType.INCIDENT_DELETED, payload, public=public, public_payload=payload)]
        )
