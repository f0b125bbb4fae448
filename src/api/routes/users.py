"""User management routes.

Public:
- POST /api/login: Exchange credentials for a session token
- POST /api/users: Register a user

Protected (Authorization: Bearer <token>):
- GET /api/users, GET/PUT/DELETE /api/user/{id}, GET /api/search?name=

Handlers are plain functions; FastAPI runs them in its thread pool so that
bcrypt and store calls never block the event loop.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status

from api.dependencies import get_credentials, get_user_repo
from api.models import LoginResponse, UserResponse, dump
from api.responses import success
from api.security import get_authenticated_body, get_current_user_required
from port.user_repository import UserRepository
from services import user_service
from services.credential_service import CredentialService, TokenClaims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["users"])


def _body(payload: Any) -> Any:
    # A request without a body validates like an empty object
    return {} if payload is None else payload


def _query(request: Request) -> dict[str, Any]:
    # Repeated keys keep every value; validation rejects the list
    values: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        values.setdefault(key, []).append(value)
    return {key: items[0] if len(items) == 1 else items for key, items in values.items()}


@router.post("/login")
def login(
    payload: Any = Body(default=None),
    repo: UserRepository = Depends(get_user_repo),
    credentials: CredentialService = Depends(get_credentials),
):
    """Login user and return JWT token with the sanitized user."""
    result = user_service.login(repo, credentials, _body(payload))
    response = LoginResponse(token=result.token, user=UserResponse.from_public(result.user))
    return success(data=dump(response), message="Login successful")


@router.post("/users")
def create_user(
    payload: Any = Body(default=None),
    repo: UserRepository = Depends(get_user_repo),
    credentials: CredentialService = Depends(get_credentials),
):
    """Register a new user."""
    user = user_service.register(repo, credentials, _body(payload))
    return success(
        data=dump(UserResponse.from_public(user)),
        message="User created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/users")
def list_users(
    current_user: TokenClaims = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    users = [UserResponse.from_public(u) for u in user_service.list_users(repo)]
    return success(data=dump(users), message=f"Found {len(users)} users")


@router.get("/user/{user_id}")
def get_user(
    user_id: str,
    current_user: TokenClaims = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    user = user_service.get_user(repo, user_id)
    return success(data=dump(UserResponse.from_public(user)))


@router.put("/user/{user_id}")
def update_user(
    user_id: str,
    current_user: TokenClaims = Depends(get_current_user_required),
    payload: Any = Depends(get_authenticated_body),
    repo: UserRepository = Depends(get_user_repo),
    credentials: CredentialService = Depends(get_credentials),
):
    """Partially update a user. Every field is optional but at least one is required."""
    user = user_service.update_user(repo, credentials, user_id, payload)
    logger.info("User updated via API", extra={"userId": user_id, "actorId": current_user.id})
    return success(data=dump(UserResponse.from_public(user)), message="User updated successfully")


@router.delete("/user/{user_id}")
def delete_user(
    user_id: str,
    current_user: TokenClaims = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    user_service.delete_user(repo, user_id)
    logger.info("User deleted via API", extra={"userId": user_id, "actorId": current_user.id})
    return success(message="User deleted successfully")


@router.get("/search")
def search_users(
    request: Request,
    current_user: TokenClaims = Depends(get_current_user_required),
    repo: UserRepository = Depends(get_user_repo),
):
    """Search users whose name contains the `name` query parameter."""
    term, matches = user_service.search_users(repo, _query(request))
    users = [UserResponse.from_public(u) for u in matches]
    return success(data=dump(users), message=f'Found {len(users)} users matching "{term}"')
