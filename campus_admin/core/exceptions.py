"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

class CampusAdminException(HTTPException):
    """Base exception class for the admin control plane"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

class BadRequestException(CampusAdminException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class UnauthorizedException(CampusAdminException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHENTICATED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )

class ForbiddenException(CampusAdminException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(CampusAdminException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class RateLimitException(CampusAdminException):
    """429 Too Many Requests"""

    def __init__(
        self,
        detail: str = "Rate limit exceeded",
        error_code: str = "RATE_LIMIT_EXCEEDED",
        retry_after: Optional[int] = None
    ):
        headers = {}
        if retry_after:
            headers["Retry-After"] = str(retry_after)

        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            error_code=error_code,
            headers=headers
        )

class DependencyFailureException(CampusAdminException):
    """502 Bad Gateway - an external collaborator failed"""

    def __init__(
        self,
        detail: str = "Upstream dependency failed",
        error_code: str = "DEPENDENCY_FAILURE"
    ):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code=error_code
        )

class InternalServerException(CampusAdminException):
    """500 Internal Server Error"""

    def __init__(
        self,
        detail: str = "Internal server error",
        error_code: str = "INTERNAL_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class AlreadyAdminException(BadRequestException):
    """Promotion target already holds an active admin record"""

    def __init__(self, detail: str = "User is already an admin"):
        super().__init__(detail=detail, error_code="ALREADY_ADMIN")

class AdminSuspendedException(ForbiddenException):
    """Caller's admin record is suspended"""

    def __init__(self, detail: str = "Admin account is suspended"):
        super().__init__(detail=detail, error_code="ADMIN_SUSPENDED")

def error_payload(code: str, message: str) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message}}

async def campus_admin_exception_handler(request: Request, exc: CampusAdminException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.error_code or "ERROR", exc.detail),
        headers=exc.headers,
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Only the first problem is surfaced; the full list stays in the logs
    errors = exc.errors()
    logger.info(f"Validation failed on {request.method} {request.url.path}: {errors}")
    message = "Invalid request"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg", message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload("VALIDATION_ERROR", message),
    )

async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    response = JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_payload(
            "RATE_LIMIT_EXCEEDED",
            f"Too many moderation actions. Please try again later ({exc.detail})",
        ),
    )
    limiter = getattr(request.app.state, "limiter", None)
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if limiter is not None and view_rate_limit is not None:
        response = limiter._inject_headers(response, view_rate_limit)
    return response

ROUTING_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Framework-raised HTTP errors such as unknown routes"""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(ROUTING_ERROR_CODES.get(exc.status_code, "ERROR"), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )

async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload("INTERNAL_ERROR", "An internal error occurred"),
    )

def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the application"""
    app.add_exception_handler(CampusAdminException, campus_admin_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
