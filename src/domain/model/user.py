from dataclasses import dataclass, fields
from datetime import datetime


@dataclass
class User:
    """Domain model representing a user."""
    id: str
    email: str
    name: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    def sanitize(self) -> "PublicUser":
        """Return the outward view of this user, without the password hash."""
        return PublicUser(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass(frozen=True)
class PublicUser:
    """Sanitized user: everything except the password hash."""
    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
