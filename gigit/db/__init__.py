"""
Database module - SQLAlchemy engine, sessions and seed data.
"""
from gigit.db.database import get_db_session, init_db, ping_database

__all__ = [
    "get_db_session",
    "init_db",
    "ping_database",
]
