from typing import Protocol
from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Writes that would give two users the same email raise ConflictError.
    Read misses return None rather than raising.
    """
    def create(self, email: str, name: str, password_hash: str) -> User:
        """Create a new user with a generated id and timestamps."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email (exact match). Return User or None if not found."""
        ...

    def list_all(self) -> list[User]:
        """Return all users, newest first."""
        ...

    def update(
        self,
        user_id: str,
        email: str | None = None,
        name: str | None = None,
        password_hash: str | None = None,
    ) -> User | None:
        """Apply a partial patch. Return the current User, or None if not found.

        An empty patch returns the stored user untouched.
        """
        ...

    def delete(self, user_id: str) -> bool:
        """Delete a user. Return True if a row existed."""
        ...

    def search_by_name(self, term: str) -> list[User]:
        """Return users whose name contains term (case-sensitive), ordered by name."""
        ...
