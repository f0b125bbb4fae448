"""Map exceptions to the response envelope.

Internal detail (stack traces, driver messages) is logged, never returned.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.responses import failure
from domain.model.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


def _request_url(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def _is_unique_violation(exc: BaseException) -> bool:
    """Walk the cause chain looking for a unique-constraint failure."""
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, IntegrityError) and "unique" in str(current.orig).lower():
            return True
        if "UNIQUE constraint failed" in str(current):
            return True
        current = current.__cause__ or current.__context__
    return False


async def domain_error_handler(request: Request, exc: DomainError):
    status_code = STATUS_BY_KIND[exc.kind]
    if status_code >= 500:
        logger.error("Domain error", extra={"path": request.url.path, "error": exc.message})
    else:
        logger.info("Request rejected", extra={"path": request.url.path, "status_code": status_code, "error": exc.message})
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.AUTH else None
    return failure(exc.message, status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods both count as an unmatched route
    if exc.status_code in (404, 405):
        return failure(f"Route {_request_url(request)} not found", 404)
    return failure(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            messages.append("Request body must be valid JSON")
        else:
            field = ".".join(str(part) for part in error.get("loc", ())[1:]) or "body"
            messages.append(f'"{field}" {error.get("msg", "is invalid")}')
    return failure(", ".join(messages) or "Invalid request", 400)


async def unhandled_exception_handler(request: Request, exc: Exception):
    if _is_unique_violation(exc):
        logger.warning("Unique constraint violation", extra={"path": request.url.path})
        return failure("Email already exists", 409)

    logger.exception("Unhandled error", extra={"method": request.method, "path": request.url.path})
    return failure("Internal server error", 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
