import secrets

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

import statuspage.core.database as db_module
from statuspage.core.database import Service, Subscriber, utcnow
from statuspage.core.enums import Role
from statuspage.core.exceptions import ConflictError, NotFoundError
from statuspage.schemas.public import SubscribeRequest, SubscriptionOut
from statuspage.schemas.subscribers import SubscriberOut
from statuspage.services.organizations import get_organization_by_domain, get_organization_or_404
from statuspage.services.policy import Actor, require_role

logger = structlog.get_logger()


def _subscriber_out(subscriber: Subscriber) -> SubscriberOut:
    return SubscriberOut(
        id=subscriber.id,
        organization_id=subscriber.organization_id,
        email=subscriber.email,
        is_verified=subscriber.is_verified,
        all_services=subscriber.all_services,
        specific_services=list(subscriber.specific_services or []),
        created_at=subscriber.created_at,
    )


class SubscriberService:
    """Status page email subscriptions. Delivering the emails is out of scope."""

    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory_override = session_factory

    @property
    def _session_factory(self) -> async_sessionmaker:
        return self._session_factory_override or db_module.async_session

    async def subscribe(self, domain: str, data: SubscribeRequest) -> tuple[SubscriptionOut, str]:
        """Register a subscriber; returns the subscription and its verification token."""
        email = data.email.lower()
        async with self._session_factory() as session:
            org = await get_organization_by_domain(session, domain)
            existing = await session.scalar(
                select(Subscriber.id).where(Subscriber.organization_id == org.id, Subscriber.email == email)
            )
            if existing is not None:
                raise ConflictError("This email is already subscribed.")

            specific: list[str] = []
            if not data.all_services and data.specific_services:
                # Only public services of this organization can be followed.
                result = await session.execute(
                    select(Service.id).where(
                        Service.organization_id == org.id,
                        Service.is_public.is_(True),
                        Service.id.in_(data.specific_services),
                    )
                )
                known = set(result.scalars().all())
                specific = [sid for sid in dict.fromkeys(data.specific_services) if sid in known]

            now = utcnow()
            subscriber = Subscriber(
                organization_id=org.id,
                email=email,
                verification_token=secrets.token_hex(20),
                is_verified=False,
                all_services=data.all_services,
                specific_services=specific,
                created_at=now,
                updated_at=now,
            )
            session.add(subscriber)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError("This email is already subscribed.") from exc

        logger.info("subscriber_created", organization_id=org.id, subscriber_id=subscriber.id)
        return SubscriptionOut(email=subscriber.email, is_verified=False), subscriber.verification_token

    async def verify(self, domain: str, token: str) -> SubscriptionOut:
        async with self._session_factory() as session:
            org = await get_organization_by_domain(session, domain)
            result = await session.execute(
                select(Subscriber).where(
                    Subscriber.organization_id == org.id,
                    Subscriber.verification_token == token,
                )
            )
            subscriber = result.scalar_one_or_none()
            if subscriber is None:
                raise NotFoundError("Verification token not found.")

            subscriber.is_verified = True
            subscriber.verification_token = None
            subscriber.updated_at = utcnow()
            await session.commit()

        logger.info("subscriber_verified", organization_id=org.id, subscriber_id=subscriber.id)
        return SubscriptionOut(email=subscriber.email, is_verified=True)

    async def list_subscribers(self, actor: Actor, organization_id: str) -> list[SubscriberOut]:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.VIEWER)
            result = await session.execute(
                select(Subscriber).where(Subscriber.organization_id == org.id).order_by(Subscriber.created_at)
            )
            return [_subscriber_out(s) for s in result.scalars().all()]

    async def delete_subscriber(self, actor: Actor, organization_id: str, subscriber_id: str) -> None:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.ADMIN)
            subscriber = await session.get(Subscriber, subscriber_id)
            if subscriber is None or subscriber.organization_id != org.id:
                raise NotFoundError("Subscriber not found.")
            await session.delete(subscriber)
            await session.commit()

        logger.info("subscriber_deleted", organization_id=organization_id, subscriber_id=subscriber_id)
