import json
from typing import Any

from fastapi import HTTPException, Request

from domain.model.errors import ValidationError
from port.user_repository import UserRepository
from services.credential_service import CredentialService


def get_user_repo(request: Request) -> UserRepository:
    """Get the store opened by the application lifespan, raising 503 if it is closed."""
    repo = getattr(request.app.state, "user_repo", None)
    if repo is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return repo


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


async def read_json_body(request: Request) -> Any:
    """Parse the raw body as JSON. An empty body reads as an empty object."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError("Request body must be valid JSON") from None
