"""
Database connection and session management.
Uses SQLAlchemy for ORM and connection pooling, and provides the unit of
work every balance-affecting operation runs in.
"""

import time
from typing import Callable, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from bank_api.core.config import settings
from bank_api.core.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """SQLite ignores foreign keys unless asked per connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **overrides) -> Engine:
    """
    Create an engine for ``database_url``.

    SQLite gets thread-shared connections and foreign key enforcement;
    server databases get a pre-pinged connection pool.
    """
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
    else:
        options = {
            "pool_pre_ping": True,  # Verify connections before using
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
        }
    options["echo"] = settings.DATABASE_ECHO
    options.update(overrides)

    engine = create_engine(database_url, **options)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.
    Yields session and ensures it's closed after use.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_transient_error(exc: DBAPIError) -> bool:
    """Connectivity drops and lock timeouts; never constraint violations."""
    return isinstance(exc, OperationalError) or bool(exc.connection_invalidated)


def run_in_transaction(
    session: Session,
    work: Callable[[], T],
    attempts: Optional[int] = None,
    backoff_seconds: Optional[float] = None,
) -> T:
    """
    Run ``work`` as one database transaction on ``session``.

    The transaction is committed when ``work`` returns and rolled back when
    it raises, so a failed operation leaves no partial writes. Transient
    infrastructure errors roll back and re-run ``work`` from the start with
    linear backoff; every other exception, business errors included,
    propagates after the rollback.
    """
    max_attempts = attempts or settings.DB_RETRY_ATTEMPTS
    backoff = settings.DB_RETRY_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds

    attempt = 0
    while True:
        attempt += 1
        try:
            result = work()
            session.commit()
            return result
        except DBAPIError as exc:
            session.rollback()
            if not is_transient_error(exc):
                raise
            if attempt >= max_attempts:
                logger.error(
                    "transient_db_error_exhausted",
                    attempts=attempt,
                    error=str(exc.orig),
                )
                raise
            sleep_time = backoff * attempt
            logger.warning(
                "transient_db_error_retry",
                attempt=attempt,
                max_attempts=max_attempts,
                retry_in=sleep_time,
                error=str(exc.orig),
            )
            time.sleep(sleep_time)
        except Exception:
            session.rollback()
            raise
