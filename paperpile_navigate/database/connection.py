"""Database connection management."""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from paperpile_navigate.utils.config import settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections get foreign keys switched on (cascade deletes depend
    on it). In-memory SQLite shares one connection so every session sees the
    same database.

    Args:
        database_url: SQLAlchemy URL
        echo: Log emitted SQL

    Returns:
        Configured engine
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            db_path = database_url.split("sqlite:///", 1)[-1]
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(database_url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        database_url, echo=echo, pool_size=20, max_overflow=10, pool_pre_ping=True
    )


class DatabaseConnection:
    """
    Singleton database connection pool.

    Uses settings.database_url (DATABASE_URL in the environment or .env).
    """

    _instance = None
    _engine = None
    _SessionLocal = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._initialize_engine()
        return cls._instance

    @classmethod
    def _initialize_engine(cls, database_url: Optional[str] = None):
        """Initialize database engine and session factory."""
        database_url = database_url or settings.database_url

        logger.debug("Initializing DatabaseConnection: url=%s", database_url)

        cls._engine = create_db_engine(database_url, echo=settings.database_echo)
        cls._SessionLocal = sessionmaker(
            bind=cls._engine, autocommit=False, autoflush=False
        )

    @classmethod
    def configure(cls, database_url: str) -> "DatabaseConnection":
        """Rebind the singleton to another database (scripts, tests)."""
        if cls._engine is not None:
            cls._engine.dispose()
        cls._instance = super().__new__(cls)
        cls._initialize_engine(database_url)
        return cls._instance

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def get_session(self):
        """Get database session with automatic commit/rollback."""
        session = self._SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
