from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .settings import DATABASE_URL, DB_ECHO

Base = declarative_base()

# Largest value an Integer column holds on every supported backend (int4 on PostgreSQL)
MAX_INTEGER = 2 ** 31 - 1


def _create_engine(db_url: str) -> Engine:
    """Create the catalog engine.

    SQLite needs check_same_thread disabled because requests and background
    tasks run on different threads; the in-memory variant additionally needs
    a single shared connection or every session would see an empty database.
    """
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, echo=DB_ECHO, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    return create_engine(db_url, echo=DB_ECHO, pool_pre_ping=True)


engine = _create_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the catalog tables if they do not exist yet"""
    # Registers every model on Base.metadata
    from ..models import contact_message, download, program, resource  # noqa: F401

    Base.metadata.create_all(bind=engine)
