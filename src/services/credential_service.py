"""Credential engine — password hashing and signed session tokens.

Pure functions over bcrypt and python-jose; no HTTP dependencies.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from domain.model.user import User

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72
JWT_ALGORITHM = "HS256"
JWT_ISSUER = "user-management-api"
JWT_AUDIENCE = "user-management-client"
JWT_EXPIRATION_HOURS = 24


def _encode(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes; newer releases reject longer input
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash password using bcrypt with a fresh salt.

    Args:
        password: Plain text password
        rounds: bcrypt work factor (log2 of the iteration count)

    Returns:
        Bcrypt hashed password as string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """Check a password against a bcrypt hash.

    Returns False for a malformed or missing hash instead of raising.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


@dataclass(frozen=True)
class TokenClaims:
    """Identity embedded in a session token."""
    id: str
    email: str
    name: str


class CredentialService:
    """Issues and verifies session tokens with a process-wide signing key."""

    def __init__(
        self,
        secret_key: str,
        expiration: timedelta = timedelta(hours=JWT_EXPIRATION_HOURS),
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ):
        if not secret_key:
            raise ValueError("A JWT signing key is required")
        self._secret_key = secret_key
        self.expiration = expiration
        self.bcrypt_rounds = bcrypt_rounds
        # Compared against when the email is unknown, so login timing does not reveal it
        self._dummy_hash = hash_password("dummy-password", rounds=bcrypt_rounds)

    def hash_password(self, password: str) -> str:
        return hash_password(password, rounds=self.bcrypt_rounds)

    def verify_password(self, plain: str, hashed: str | None) -> bool:
        if not hashed:
            verify_password(plain, self._dummy_hash)
            return False
        return verify_password(plain, hashed)

    def issue_token(self, user: User, now: datetime | None = None) -> str:
        """Create a signed JWT carrying the user's id, email and name."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": user.id,
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "iss": JWT_ISSUER,
            "aud": JWT_AUDIENCE,
            "iat": issued_at,
            "exp": issued_at + self.expiration,
        }
        return jwt.encode(payload, self._secret_key, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> TokenClaims | None:
        """Verify signature, expiry, issuer and audience.

        Returns the claims if the token is valid, None otherwise.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[JWT_ALGORITHM],
                audience=JWT_AUDIENCE,
                issuer=JWT_ISSUER,
            )
        except JWTError as e:
            logger.debug(f"JWT verification failed: {e}")
            return None

        user_id, email, name = payload.get("id"), payload.get("email"), payload.get("name")
        if not all(isinstance(v, str) and v for v in (user_id, email, name)):
            logger.debug("JWT verification failed: missing identity claims")
            return None
        return TokenClaims(id=user_id, email=email, name=name)
