from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from statuspage.api.v1.router import v1_router
from statuspage.config import settings
from statuspage.core.database import close_db, init_db
from statuspage.core.exceptions import (
    StatusPageError,
    request_validation_handler,
    status_page_error_handler,
)
from statuspage.core.middleware import AuthMiddleware, RequestLoggingMiddleware
from statuspage.services.realtime.fanout import Broadcaster
from statuspage.services.realtime.hub import ChannelHub

_NAME_TO_LEVEL = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "warn": 30,
    "error": 40,
    "critical": 50,
}

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _NAME_TO_LEVEL.get(settings.statuspage_log_level.lower(), 20)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    await init_db()

    hub = ChannelHub(max_pending_per_subscriber=settings.statuspage_subscriber_queue_size)
    broadcaster = Broadcaster(hub, max_pending=settings.statuspage_fanout_queue_size)
    await broadcaster.start()
    app.state.hub = hub
    app.state.broadcaster = broadcaster

    logger.info("statuspage_backend_starting", db_url=settings.statuspage_db_url.split("://", 1)[0])
    yield

    await broadcaster.stop()
    await close_db()
    logger.info("statuspage_backend_stopping")


app = FastAPI(
    title="Status Page Backend",
    description="Multi-tenant status pages with realtime incident updates",
    version="0.1.0",
    lifespan=lifespan,
)

# Exception handlers
app.add_exception_handler(StatusPageError, status_page_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Middleware (Starlette: last-added = outermost. Execution order top to bottom.)
# 1. RequestLogging (outermost), logs auth rejections too
# 2. CORS, answers preflight before auth
# 3. Auth, Bearer token validation (innermost)
app.add_middleware(AuthMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.statuspage_cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(v1_router)


@app.get("/")
async def root():
    return {"service": "statuspage-backend", "version": "0.1.0"}
