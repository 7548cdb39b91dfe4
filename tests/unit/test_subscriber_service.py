"""Status page subscriptions."""

import pytest

from statuspage.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from statuspage.schemas.public import SubscribeRequest
from statuspage.schemas.services import ServiceCreate
from statuspage.services.service_catalog import ServiceCatalog
from statuspage.services.subscribers import SubscriberService
from tests.mocks.identities import ADMIN, EDITOR, VIEWER


@pytest.fixture
def subscribers(session_factory):
    return SubscriberService(session_factory=session_factory)


async def test_subscribe_and_verify(subscribers, org):
    subscription, token = await subscribers.subscribe("acme", SubscribeRequest(email="Fan@Example.com"))
    assert subscription.email == "fan@example.com"
    assert subscription.is_verified is False

    verified = await subscribers.verify("acme", token)
    assert verified.is_verified is True
    with pytest.raises(NotFoundError):
        await subscribers.verify("acme", token)


async def test_duplicate_subscription_conflicts(subscribers, org):
    await subscribers.subscribe("acme", SubscribeRequest(email="fan@example.com"))
    with pytest.raises(ConflictError):
        await subscribers.subscribe("acme", SubscribeRequest(email="FAN@example.com"))


async def test_unknown_domain(subscribers):
    with pytest.raises(NotFoundError):
        await subscribers.subscribe("nowhere", SubscribeRequest(email="fan@example.com"))


async def test_specific_services_keep_only_public_ones(subscribers, org, session_factory):
    catalog = ServiceCatalog(session_factory=session_factory)
    api = await catalog.create_service(EDITOR, ServiceCreate(organization_id=org.id, name="API"))
    hidden = await catalog.create_service(EDITOR, ServiceCreate(organization_id=org.id, name="Cron", is_public=False))
    await subscribers.subscribe(
        "acme",
        SubscribeRequest(email="fan@example.com", all_services=False, specific_services=[hidden.id, api.id, "bogus"]),
    )
    listed = await subscribers.list_subscribers(VIEWER, org.id)
    assert listed[0].specific_services == [api.id]


async def test_delete_requires_admin(subscribers, org):
    await subscribers.subscribe("acme", SubscribeRequest(email="fan@example.com"))
    subscriber_id = (await subscribers.list_subscribers(VIEWER, org.id))[0].id
    with pytest.raises(ForbiddenError):
        await subscribers.delete_subscriber(EDITOR, org.id, subscriber_id)
    await subscribers.delete_subscriber(ADMIN, org.id, subscriber_id)
    assert await subscribers.list_subscribers(VIEWER, org.id) == []
