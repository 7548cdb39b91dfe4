import datetime

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import statuspage.core.database as db_module
from statuspage.config import settings
from statuspage.core.database import (
    IncidentAffectedService,
    Organization,
    Service,
    ServiceStatusEntry,
    utcnow,
)
from statuspage.core.enums import Role, ServiceStatus
from statuspage.core.exceptions import NotFoundError
from statuspage.schemas.services import (
    ServiceCreate,
    ServiceDetail,
    ServiceOut,
    ServiceUpdate,
    ServiceUptime,
    StatusHistoryEntry,
)
from statuspage.services.organizations import get_organization_or_404
from statuspage.services.policy import Actor, is_publicly_visible, require_role
from statuspage.services.projections import public_service, service_out
from statuspage.services.realtime.fanout import (
    Broadcaster,
    EventType,
    Notification,
    notification_payload,
)
from statuspage.services.uptime import get_service_availability, recent_history

logger = structlog.get_logger()


def record_status_change(
    session: AsyncSession,
    service: Service,
    status: ServiceStatus,
    now: datetime.datetime,
) -> ServiceStatusEntry:
    """Set the service status and append exactly one history entry."""
    service.status = status
    service.updated_at = now
    entry = ServiceStatusEntry(service_id=service.id, status=status, recorded_at=now, duration=0)
    session.add(entry)
    return entry


def status_notification(service: Service, public: bool) -> Notification:
    payload = {"service_id": service.id, "status": service.status.value}
    return Notification(EventType.STATUS_UPDATE, payload, public=public, public_payload=payload)


def service_notification(event: EventType, service: Service) -> Notification:
    return Notification(
        event,
        notification_payload(service_out(service)),
        public=is_publicly_visible(service),
        public_payload=notification_payload(public_service(service)),
    )


class ServiceCatalog:
    """Service CRUD and direct status changes."""

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

    def _notify(self, org: Organization, *notifications: Notification) -> None:
        if self._broadcaster is not None:
            self._broadcaster.notify_all(org.id, org.domain, notifications)

    async def _load(self, session: AsyncSession, service_id: str) -> Service:
        service = await session.get(Service, service_id)
        if service is None:
            raise NotFoundError("Service not found.")
        return service

    async def create_service(self, actor: Actor, data: ServiceCreate) -> ServiceOut:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, data.organization_id)
            await require_role(session, actor, org.id, Role.EDITOR)

            existing = await session.scalar(
                select(func.count()).select_from(Service).where(Service.organization_id == org.id)
            )
            now = utcnow()
            service = Service(
                organization_id=org.id,
                name=data.name,
                description=data.description,
                group=data.group or "Default",
                order=existing or 0,
                is_public=data.is_public,
                status=ServiceStatus.OPERATIONAL,
                created_at=now,
                updated_at=now,
            )
            session.add(service)
            await session.commit()

        logger.info("service_created", service_id=service.id, organization_id=org.id)
        self._notify(org, service_notification(EventType.SERVICE_CREATED, service))
        return service_out(service)

    async def list_services(self, actor: Actor, organization_id: str) -> list[ServiceOut]:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.VIEWER)
            result = await session.execute(
                select(Service)
                .where(Service.organization_id == org.id)
                .order_by(Service.group, Service.order, Service.created_at)
            )
            return [service_out(s) for s in result.scalars().all()]

    async def get_service(self, actor: Actor, service_id: str) -> ServiceDetail:
        async with self._session_factory() as session:
            service = await self._load(session, service_id)
            await require_role(session, actor, service.organization_id, Role.VIEWER)
            history = await recent_history(session, service.id, settings.statuspage_history_limit)

        return ServiceDetail(
            **service_out(service).model_dump(),
            history=[
                StatusHistoryEntry(status=h.status, recorded_at=h.recorded_at, duration=h.duration)
                for h in history
            ],
        )

    async def update_service(self, actor: Actor, service_id: str, data: ServiceUpdate) -> ServiceOut:
        async with self._session_factory() as session:
            service = await self._load(session, service_id)
            await require_role(session, actor, service.organization_id, Role.EDITOR)
            org = await get_organization_or_404(session, service.organization_id)

            for field, value in data.model_dump(exclude_unset=True).items():
                if value is None and field in ("name", "group", "is_public", "order"):
                    continue
                setattr(service, field, value)
            service.updated_at = utcnow()
            await session.commit()

        logger.info("service_updated", service_id=service.id)
        self._notify(org, service_notification(EventType.SERVICE_UPDATED, service))
        return service_out(service)

    async def update_status(self, actor: Actor, service_id: str, status: ServiceStatus) -> ServiceOut:
        async with self._session_factory() as session:
            service = await self._load(session, service_id)
            await require_role(session, actor, service.organization_id, Role.EDITOR)
            org = await get_organization_or_404(session, service.organization_id)

            previous = service.status
            record_status_change(session, service, status, utcnow())
            await session.commit()

        logger.info(
            "service_status_changed",
            service_id=service.id,
            previous=previous.value,
            status=status.value,
        )
        self._notify(org, status_notification(service, public=is_publicly_visible(service)))
        return service_out(service)

    async def delete_service(self, actor: Actor, service_id: str) -> None:
        async with self._session_factory() as session:
            service = await self._load(session, service_id)
            await require_role(session, actor, service.organization_id, Role.ADMIN)
            org = await get_organization_or_404(session, service.organization_id)
            public = is_publicly_visible(service)

            await session.execute(delete(ServiceStatusEntry).where(ServiceStatusEntry.service_id == service.id))
            await session.execute(
                delete(IncidentAffectedService).where(IncidentAffectedService.service_id == service.id)
            )
            await session.delete(service)
            await session.commit()

        logger.info("service_deleted", service_id=service_id)
        payload = {"id": service_id}
        self._notify(org, Notification(EventType.SERVICE_DELETED, payload, public=public, public_payload=payload))

    async def get_uptime(self, actor: Actor, service_id: str, window_hours: int) -> ServiceUptime:
        async with self._session_factory() as session:
            service = await self._load(session, service_id)
            await require_role(session, actor, service.organization_id, Role.VIEWER)
            availability = await get_service_availability(session, service, window_hours)

        return ServiceUptime(
            service_id=service.id,
            window_hours=window_hours,
            availability=availability,
            current_status=service.status,
        )
