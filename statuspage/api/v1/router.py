from fastapi import APIRouter

from statuspage.api.v1.health import router as health_router
from statuspage.api.v1.incidents import router as incidents_router
from statuspage.api.v1.organizations import router as organizations_router
from statuspage.api.v1.public import router as public_router
from statuspage.api.v1.services import router as services_router
from statuspage.api.v1.team import router as team_router
from statuspage.api.v1.websocket import router as websocket_router

v1_router = APIRouter()

v1_router.include_router(health_router, tags=["Health"])

# Dashboard
v1_router.include_router(organizations_router, tags=["Organizations"])
v1_router.include_router(team_router, tags=["Team"])
v1_router.include_router(services_router, tags=["Services"])
v1_router.include_router(incidents_router, tags=["Incidents"])

# Status pages
v1_router.include_router(public_router, tags=["Public"])

# WebSocket
v1_router.include_router(websocket_router, tags=["WebSocket"])
