import time

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from statuspage.core.exceptions import AuthenticationError
from statuspage.services.jwt_service import JWTService

logger = structlog.get_logger()

# Paths that skip authentication
PUBLIC_PATHS = {"/health", "/", "/docs", "/openapi.json", "/redoc"}

# Prefixes served without authentication (status pages and their sockets)
PUBLIC_PREFIXES = ("/api/public/",)


class AuthMiddleware(BaseHTTPMiddleware):
    """Validates the identity provider's Bearer token on every non-public request.

    WebSocket connections are not HTTP requests and authenticate in their
    endpoint instead.
    """

    def __init__(self, app, jwt_service: JWTService | None = None):
        super().__init__(app)
        self._jwt_service = jwt_service or JWTService()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if request.method == "OPTIONS" or path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES):
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer "):
            error = AuthenticationError("Missing or malformed Authorization header.")
            return JSONResponse(status_code=error.status, content=error.to_dict())

        token = auth_header.removeprefix("Bearer ").strip()
        actor = self._jwt_service.actor_from_token(token)
        if actor is None:
            error = AuthenticationError("Invalid or expired token.")
            return JSONResponse(status_code=error.status, content=error.to_dict())

        request.state.actor = actor
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request as structured JSON."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = round((time.perf_counter() - start) * 1000, 1)

        actor = getattr(request.state, "actor", None)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            latency_ms=latency_ms,
            actor_id=actor.id if actor else None,
        )
        return response
