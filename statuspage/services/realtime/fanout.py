"""Best-effort realtime fanout.

Mutations call ``Broadcaster.publish`` after their database commit. Publishing
only enqueues; a single background worker hands events to the transport in
publish order. Delivery failures are logged and dropped, never retried and
never reported back to the mutation.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import structlog

logger = structlog.get_logger()


class EventType(str, Enum):
    INCIDENT_CREATED = "incident-created"
    INCIDENT_UPDATED = "incident-updated"
    INCIDENT_UPDATE = "incident-update"
    INCIDENT_DELETED = "incident-deleted"
    SERVICE_CREATED = "service-created"
    SERVICE_UPDATED = "service-updated"
    SERVICE_DELETED = "service-deleted"
    STATUS_UPDATE = "status-update"


class AudienceKind(str, Enum):
    ORGANIZATION = "organization"
    PUBLIC = "public"


@dataclass(frozen=True)
class Audience:
    kind: AudienceKind
    key: str  # organization id or organization domain

    @classmethod
    def organization(cls, organization_id: str) -> "Audience":
        return cls(AudienceKind.ORGANIZATION, organization_id)

    @classmethod
    def public(cls, domain: str) -> "Audience":
        return cls(AudienceKind.PUBLIC, domain)

    @property
    def channel(self) -> str:
        prefix = "org" if self.kind is AudienceKind.ORGANIZATION else "public"
        return f"{prefix}-{self.key}"

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.key}"


class Transport(Protocol):
    async def send(self, channel: str, event: str, payload: dict) -> None: ...


@dataclass
class Notification:
    """One domain event, addressed to the org channel and optionally the public one."""

    event: EventType
    payload: dict
    public: bool = False
    public_payload: dict | None = None


def audiences_for(organization_id: str, domain: str, publicly_visible: bool) -> list[Audience]:
    audiences = [Audience.organization(organization_id)]
    if publicly_visible:
        audiences.append(Audience.public(domain))
    return audiences


class Broadcaster:
    """Fire-and-forget publisher over an injected transport."""

    def __init__(self, transport: Transport, max_pending: int = 1000):
        self._transport = transport
        self._queue: asyncio.Queue[tuple[Audience, str, dict]] = asyncio.Queue(maxsize=max_pending)
        self._task: asyncio.Task | None = None
        self._running = False
        self._dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def dropped(self) -> int:
        return self._dropped

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._worker())
        logger.info("fanout_started")

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("fanout_stopped", undelivered=self._queue.qsize())

    async def flush(self) -> None:
        """Wait until every event published so far has been handed to the transport.

        Returns immediately when the worker is not running.
        """
        if not self._running:
            return
        await self._queue.join()

    def publish(self, audience: Audience, event: EventType | str, payload: dict) -> None:
        name = event.value if isinstance(event, EventType) else event
        try:
            self._queue.put_nowait((audience, name, payload))
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning("fanout_queue_full", audience=str(audience), event_name=name)

    def notify(self, organization_id: str, domain: str, notification: Notification) -> None:
        for audience in audiences_for(organization_id, domain, notification.public):
            payload = notification.payload
            if audience.kind is AudienceKind.PUBLIC and notification.public_payload is not None:
                payload = notification.public_payload
            self.publish(audience, notification.event, payload)

    def notify_all(self, organization_id: str, domain: str, notifications: Iterable[Notification]) -> None:
        for notification in notifications:
            self.notify(organization_id, domain, notification)

    async def _worker(self) -> None:
        while True:
            audience, event, payload = await self._queue.get()
            try:
                await self._transport.send(audience.channel, event, payload)
                logger.debug("fanout_delivered", channel=audience.channel, event_name=event)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning(
                    "fanout_delivery_failed",
                    channel=audience.channel,
                    event_name=event,
                    error=str(exc),
                )
            finally:
                self._queue.task_done()


def notification_payload(model: Any) -> dict:
    """JSON-safe payload from a pydantic model."""
    return model.model_dump(mode="json")
