from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class StatusPageError(Exception):
    """Base exception for status page API errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 500,
        details: dict | None = None,
    ):
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        result = {
            "success": False,
            "message": self.message,
            "error": {
                "code": self.code,
                "status": self.status,
            },
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class AuthenticationError(StatusPageError):
    def __init__(self, message: str = "Missing or invalid session token.", details: dict | None = None):
        super().__init__(code="authentication_required", message=message, status=401, details=details)


class ForbiddenError(StatusPageError):
    def __init__(self, message: str = "Insufficient permissions.", details: dict | None = None):
        super().__init__(code="forbidden", message=message, status=403, details=details)


class NotFoundError(StatusPageError):
    def __init__(self, message: str = "Resource not found.", details: dict | None = None):
        super().__init__(code="not_found", message=message, status=404, details=details)


class ConflictError(StatusPageError):
    def __init__(self, message: str = "Resource already exists.", details: dict | None = None):
        super().__init__(code="conflict", message=message, status=409, details=details)


class ValidationFailedError(StatusPageError):
    def __init__(self, message: str = "Invalid input.", details: dict | None = None):
        super().__init__(code="validation_error", message=message, status=400, details=details)


async def status_page_error_handler(request: Request, exc: StatusPageError) -> JSONResponse:
    """Global exception handler for StatusPageError and subclasses."""
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render pydantic request validation failures in the shared error shape."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid request."
    body = {
        "success": False,
        "message": message,
        "error": {"code": "validation_error", "status": 422, "details": {"errors": errors}},
    }
    return JSONResponse(status_code=422, content=body)
