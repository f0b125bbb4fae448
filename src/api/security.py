"""Bearer-token authentication dependency."""

import logging
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies import get_credentials, read_json_body
from domain.model.errors import AuthError
from services.credential_service import CredentialService, TokenClaims

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    credential_service: CredentialService = Depends(get_credentials),
) -> TokenClaims:
    """Get the caller's token claims. Raises AuthError (401) if not authenticated."""
    if not credentials:
        raise AuthError("Access token required")

    claims = credential_service.verify_token(credentials.credentials)
    if not claims:
        raise AuthError("Invalid or expired token")

    return claims


async def get_authenticated_body(
    request: Request,
    current_user: TokenClaims = Depends(get_current_user_required),
) -> Any:
    """Read the JSON body of a protected route once the caller is authenticated.

    FastAPI parses declared Body parameters before resolving dependencies, so a
    protected route reads its body through this dependency instead.
    """
    return await read_json_body(request)
