"""
Database engine, sessions and schema helpers for VaidyaPortal

Routes get a request-scoped session from ``get_db``. Services accept an
optional session and fall back to ``get_db_context`` (or ``run_detached``
when they hand ORM rows back to the caller).
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, TypeVar

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from config import settings


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the portal store

    SQLite (local development and tests) shares one connection across
    threads and enforces foreign keys. Anything else is treated as a pooled
    server database.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo
        )
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_engine(
        url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session closed after the request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Session for code outside a request; commits on success, rolls back on error"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def run_detached(work: Callable[[Session], T]) -> T:
    """
    Run ``work`` in its own session and return its result usable afterwards

    ORM rows in the result (a single instance or a list of them) are
    expunged before the session commits and closes, so their loaded column
    values stay readable. Relationships that were never loaded are not
    available on them.
    """
    with get_db_context() as db:
        result = work(db)
        rows = result if isinstance(result, list) else [result]
        for row in rows:
            if isinstance(row, Base) and row in db:
                db.expunge(row)
        return result


def init_db() -> None:
    """Create any missing portal tables"""
    import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized at: %s", engine.url.render_as_string(hide_password=True))


def drop_db() -> None:
    """Drop every portal table. All data is lost."""
    import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    logger.warning("All database tables dropped")


def reset_db() -> None:
    """Drop and recreate every portal table"""
    drop_db()
    init_db()
    logger.info("Database reset complete")


class DatabaseHealthCheck:
    """Connectivity and size checks used by /health and the seed script"""

    @staticmethod
    def is_connected() -> bool:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            return False

    @staticmethod
    def describe() -> Dict[str, Any]:
        """Status block for the health endpoint"""
        connected = DatabaseHealthCheck.is_connected()
        return {
            "status": "up" if connected else "down",
            "type": engine.dialect.name,
        }

    @staticmethod
    def get_table_counts() -> Dict[str, int]:
        """Row count per existing table"""
        counts = {}
        with get_db_context() as db:
            for table in inspect(engine).get_table_names():
                counts[table] = db.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()
        return counts


__all__ = [
    "engine",
    "build_engine",
    "SessionLocal",
    "Base",
    "get_db",
    "get_db_context",
    "run_detached",
    "init_db",
    "drop_db",
    "reset_db",
    "DatabaseHealthCheck"
]
