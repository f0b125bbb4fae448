"""Envelope helpers shared by routes and exception handlers."""

from typing import Any

from fastapi.responses import JSONResponse

from api.models import ApiResponse


def success(data: Any = None, message: str | None = None, status_code: int = 200) -> JSONResponse:
    body = ApiResponse(success=True, data=data, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def failure(error: str, status_code: int, headers: dict[str, str] | None = None) -> JSONResponse:
    body = ApiResponse(success=False, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers)
