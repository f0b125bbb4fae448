"""User service — the request pipeline behind every user endpoint.

Pure business logic with no HTTP dependencies. Each operation runs its stages
in a fixed order (identifier, shape, existence, uniqueness, hashing, persist,
sanitize) and raises a domain error at the first stage that fails. Route
handlers authenticate the caller before calling in, and map the domain errors
to HTTP status codes.
"""

import logging
from dataclasses import dataclass
from typing import Any

from domain.model.errors import AuthError, ConflictError, NotFoundError, ValidationError
from domain.model.user import PublicUser
from port.user_repository import UserRepository
from services import validation
from services.credential_service import CredentialService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: PublicUser


def _require_id(user_id: str | None) -> str:
    if not user_id:
        raise ValidationError("User ID is required")
    return user_id


def register(repo: UserRepository, credentials: CredentialService, payload: Any) -> PublicUser:
    """Register a new user.

    Raises:
        ValidationError: payload fails the create schema
        ConflictError: email already registered
    """
    data = validation.validate(validation.CREATE_USER, payload)

    # Friendlier message only; the store's unique constraint is the real guard
    if repo.get_by_email(data["email"]):
        raise ConflictError("User with this email already exists")

    password_hash = credentials.hash_password(data["password"])
    user = repo.create(email=data["email"], name=data["name"], password_hash=password_hash)

    logger.info("User registered", extra={"userId": user.id})
    return user.sanitize()


def login(repo: UserRepository, credentials: CredentialService, payload: Any) -> LoginResult:
    """Authenticate by email and password and issue a session token.

    Unknown email and wrong password fail identically.

    Raises:
        ValidationError: payload fails the login schema
        AuthError: invalid credentials (deliberately vague)
    """
    data = validation.validate(validation.LOGIN, payload)

    user = repo.get_by_email(data["email"])
    password_ok = credentials.verify_password(data["password"], user.password_hash if user else None)
    if user is None or not password_ok:
        logger.info("Login rejected")
        raise AuthError(INVALID_CREDENTIALS)

    token = credentials.issue_token(user)
    logger.info("User logged in", extra={"userId": user.id})
    return LoginResult(token=token, user=user.sanitize())


def list_users(repo: UserRepository) -> list[PublicUser]:
    return [user.sanitize() for user in repo.list_all()]


def get_user(repo: UserRepository, user_id: str) -> PublicUser:
    _require_id(user_id)
    user = repo.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user.sanitize()


def update_user(
    repo: UserRepository,
    credentials: CredentialService,
    user_id: str,
    payload: Any,
) -> PublicUser:
    """Apply a partial update to a user.

    Raises:
        ValidationError: missing id, or payload fails the update schema
        NotFoundError: no user with this id
        ConflictError: new email belongs to another user
    """
    _require_id(user_id)
    data = validation.validate(validation.UPDATE_USER, payload)

    existing = repo.get_by_id(user_id)
    if not existing:
        raise NotFoundError("User not found")

    new_email = data.get("email")
    if new_email is not None and new_email != existing.email and repo.get_by_email(new_email):
        raise ConflictError("Email already exists")

    password_hash = credentials.hash_password(data["password"]) if "password" in data else None

    updated = repo.update(
        user_id,
        email=new_email,
        name=data.get("name"),
        password_hash=password_hash,
    )
    if updated is None:
        # Deleted between the existence check and the write
        raise NotFoundError("User not found")

    logger.info("User profile updated", extra={"userId": user_id, "fields": sorted(data)})
    return updated.sanitize()


def delete_user(repo: UserRepository, user_id: str) -> None:
    _require_id(user_id)
    if not repo.delete(user_id):
        raise NotFoundError("User not found")


def search_users(repo: UserRepository, query: Any) -> tuple[str, list[PublicUser]]:
    """Search users by name substring.

    Returns:
        Tuple of (search term, matching users ordered by name)
    """
    data = validation.validate(validation.SEARCH, query)
    term = data["name"]
    return term, [user.sanitize() for user in repo.search_by_name(term)]
