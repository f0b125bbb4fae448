"""SQLAlchemy implementation of UserRepository."""

import uuid
from datetime import datetime, timedelta, timezone
from logging import getLogger

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from adapter.sql.connection import Database
from adapter.sql.models import UserRow
from domain.model.errors import ConflictError
from domain.model.user import User

logger = getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way out; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return 'unique' in message or 'duplicate' in message


class SqlUserRepository:
    def __init__(self, db: Database):
        self.db = db

    def _to_domain(self, row: UserRow) -> User:
        """Convert a mapped row to the User domain model."""
        return User(
            id=row.id,
            email=row.email,
            name=row.name,
            password_hash=row.password_hash,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )

    # ── write operations ─────────────────────────────────────

    def create(self, email: str, name: str, password_hash: str) -> User:
        """Insert a new user. The UNIQUE constraint on email is the final authority."""
        now = datetime.now(timezone.utc)
        row = UserRow(
            id=uuid.uuid4().hex,
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        with self.db.lock, self.db.session_factory() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                if not _is_unique_violation(e):
                    raise
                logger.warning("User creation failed: email already exists", extra={"email": email})
                raise ConflictError("Email already exists") from e

            logger.info("User created", extra={"userId": row.id, "email": email})
            return self._to_domain(row)

    def update(
        self,
        user_id: str,
        email: str | None = None,
        name: str | None = None,
        password_hash: str | None = None,
    ) -> User | None:
        changes = {
            key: value
            for key, value in (('email', email), ('name', name), ('password_hash', password_hash))
            if value is not None
        }
        with self.db.lock, self.db.session_factory() as session:
            row = session.get(UserRow, user_id)
            if row is None:
                return None
            if not changes:
                return self._to_domain(row)

            previous = _as_utc(row.updated_at)
            now = datetime.now(timezone.utc)
            if now <= previous:
                now = previous + timedelta(microseconds=1)

            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = now
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                if not _is_unique_violation(e):
                    raise
                logger.warning("User update failed: email already exists", extra={"userId": user_id})
                raise ConflictError("Email already exists") from e

            logger.info("User updated", extra={"userId": user_id, "fields": sorted(changes)})
            return self._to_domain(row)

    def delete(self, user_id: str) -> bool:
        with self.db.lock, self.db.session_factory() as session:
            result = session.execute(delete(UserRow).where(UserRow.id == user_id))
            session.commit()
            deleted = result.rowcount > 0
        if deleted:
            logger.info("User deleted", extra={"userId": user_id})
        return deleted

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        with self.db.lock, self.db.session_factory() as session:
            row = session.get(UserRow, user_id)
            return self._to_domain(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        with self.db.lock, self.db.session_factory() as session:
            row = session.scalars(select(UserRow).where(UserRow.email == email)).first()
            return self._to_domain(row) if row else None

    def list_all(self) -> list[User]:
        stmt = select(UserRow).order_by(UserRow.created_at.desc(), UserRow.id)
        with self.db.lock, self.db.session_factory() as session:
            return [self._to_domain(row) for row in session.scalars(stmt)]

    def search_by_name(self, term: str) -> list[User]:
        stmt = (
            select(UserRow)
            .where(UserRow.name.contains(term, autoescape=True))
            .order_by(UserRow.name)
        )
        with self.db.lock, self.db.session_factory() as session:
            rows = session.scalars(stmt).all()
        # LIKE ignores ASCII case on SQLite
        return [self._to_domain(row) for row in rows if term in row.name]
