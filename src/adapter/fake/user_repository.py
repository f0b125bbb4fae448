"""In-memory implementation of UserRepository for testing."""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from domain.model.errors import ConflictError
from domain.model.user import User


def _next_timestamp(previous: datetime) -> datetime:
    now = datetime.now(timezone.utc)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        self._lock = threading.Lock()

    def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self.store.values())

    # ── write operations ─────────────────────────────────────

    def create(self, email: str, name: str, password_hash: str) -> User:
        with self._lock:
            if self._email_taken(email):
                raise ConflictError("Email already exists")

            user_id = uuid.uuid4().hex
            now = datetime.now(timezone.utc)
            user = User(
                id=user_id,
                email=email,
                name=name,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            self.store[user_id] = user
            return replace(user)

    def update(
        self,
        user_id: str,
        email: str | None = None,
        name: str | None = None,
        password_hash: str | None = None,
    ) -> User | None:
        with self._lock:
            user = self.store.get(user_id)
            if not user:
                return None

            changes = {
                key: value
                for key, value in (('email', email), ('name', name), ('password_hash', password_hash))
                if value is not None
            }
            if not changes:
                return replace(user)
            if 'email' in changes and self._email_taken(changes['email'], exclude_id=user_id):
                raise ConflictError("Email already exists")

            updated = replace(user, **changes, updated_at=_next_timestamp(user.updated_at))
            self.store[user_id] = updated
            return replace(updated)

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self.store.pop(user_id, None) is not None

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return replace(user)
        return None

    def list_all(self) -> list[User]:
        users = sorted(self.store.values(), key=lambda u: u.created_at, reverse=True)
        return [replace(u) for u in users]

    def search_by_name(self, term: str) -> list[User]:
        matches = sorted((u for u in self.store.values() if term in u.name), key=lambda u: u.name)
        return [replace(u) for u in matches]
