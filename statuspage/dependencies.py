from fastapi import Request

from statuspage.core.exceptions import AuthenticationError
from statuspage.services.incidents import IncidentService
from statuspage.services.policy import Actor
from statuspage.services.realtime.fanout import Broadcaster
from statuspage.services.realtime.hub import ChannelHub
from statuspage.services.service_catalog import ServiceCatalog


def get_actor(request: Request) -> Actor:
    """Return the actor the auth middleware attached to the request."""
    actor = getattr(request.state, "actor", None)
    if actor is None:
        raise AuthenticationError()
    return actor


def get_broadcaster(request: Request) -> Broadcaster:
    """Return the broadcaster stored on app state during lifespan."""
    return request.app.state.broadcaster


def get_hub(request: Request) -> ChannelHub:
    return request.app.state.hub


def get_incident_service(request: Request) -> IncidentService:
    return IncidentService(broadcaster=get_broadcaster(request))


def get_service_catalog(request: Request) -> ServiceCatalog:
    return ServiceCatalog(broadcaster=get_broadcaster(request))
