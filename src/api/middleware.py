"""Request logging and security headers."""

import logging
import time

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.errors import unhandled_exception_handler

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration, and attach security headers."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
            message = "Request completed"
        except Exception as exc:
            # The framework error middleware sits outside this one, so render the envelope here
            response = await unhandled_exception_handler(request, exc)
            message = "Request failed"

        response.headers.update(SECURITY_HEADERS)
        logger.info(message, extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
        })
        return response


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)
