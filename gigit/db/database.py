import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, Session
from gigit.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _build_engine():
    url = settings.sqlalchemy_url
    if url.startswith("sqlite"):
        # Store timestamps as ISO text so they sort correctly as strings
        sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))
        sqlite3.register_adapter(date, lambda value: value.isoformat())

        # TestClient and uvicorn workers touch the connection from other threads
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.debug
        )

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    # Create engine with connection pool
    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=settings.debug  # Log SQL queries in debug mode
    )


engine = _build_engine()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions (one unit of work).
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM users"))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ping_database() -> bool:
    """
    Test if the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        return False


def execute_raw_sql(sql: str, params: dict = None) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    This is useful for read-only listing queries.
    """
    with get_db_session() as db:
        return fetch_all(db, sql, params)


def fetch_all(db: Session, sql: str, params: dict = None) -> list:
    """Run a query inside an open session and return rows as dicts."""
    result = db.execute(text(sql), params or {})
    if not result.returns_rows:
        return []
    return [dict(row) for row in result.mappings().all()]


def fetch_one(db: Session, sql: str, params: dict = None):
    """Like fetch_all but returns the first row as a dict, or None."""
    row = db.execute(text(sql), params or {}).mappings().first()
    return dict(row) if row else None


def init_db() -> None:
    """Create all tables that do not exist yet."""
    from gigit.models import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")


def new_id() -> str:
    """Opaque primary key for new rows."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.utcnow()


def nest_columns(row: dict, prefixes: dict) -> dict:
    """
    Fold prefixed join columns into nested dicts.

    nest_columns({"id": 1, "j_title": "x"}, {"j_": "job"}) -> {"id": 1, "job": {"title": "x"}}
    """
    result = {name: {} for name in prefixes.values()}
    for key, value in row.items():
        for prefix, name in prefixes.items():
            if key.startswith(prefix):
                result[name][key[len(prefix):]] = value
                break
        else:
            result[key] = value
    return result


# Appended to LIKE comparisons that take a contains_pattern() parameter
LIKE_ESCAPE = " ESCAPE '!'"


def contains_pattern(value: str) -> str:
    """LIKE pattern matching `value` anywhere, with its own wildcards escaped."""
    escaped = value.replace("!", "!!").replace("%", "!%").replace("_", "!_")
    return f"%{escaped}%"
