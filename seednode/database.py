"""Database session management."""

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from seednode.config import get_settings

settings = get_settings()
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    """Enable WAL journaling and foreign key enforcement on every SQLite connection."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def enable_sqlite_pragmas(target_engine) -> None:
    """Attach the pragma listener to an engine if it is backed by SQLite."""
    if target_engine.dialect.name == "sqlite":
        event.listen(target_engine, "connect", _set_sqlite_pragmas)


enable_sqlite_pragmas(engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def init_db() -> None:
    """Create any missing tables."""
    from seednode.models.track import Track  # noqa: F401
    from seednode.models.version import Version  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
