"""SQL store lifecycle: engine, session factory and write lock.

The store is an explicit object created at application startup and closed at
shutdown; nothing here is a module-level singleton.
"""

import logging
import threading

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = 'sqlite+pysqlite:///:memory:'


class Base(DeclarativeBase):
    pass


def _is_sqlite_memory(url: str) -> bool:
    return url.startswith('sqlite') and (':memory:' in url or url.rstrip('/').endswith('sqlite:'))


class Database:
    """Owns the SQLAlchemy engine for one store instance."""

    def __init__(self, url: str = DEFAULT_DATABASE_URL):
        self.url = url
        if _is_sqlite_memory(url):
            # One shared connection, otherwise every pooled connection sees its own empty database
            self.engine = create_engine(
                url,
                connect_args={'check_same_thread': False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(url, pool_pre_ping=True)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        # Serializes statements on the shared connection and makes check+write atomic
        self.lock = threading.RLock()

    def init(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        from adapter.sql import models  # noqa: F401  registers the mapped tables

        Base.metadata.create_all(self.engine)
        logger.info("Database initialized", extra={"url": self.engine.url.render_as_string(hide_password=True)})

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database closed")
