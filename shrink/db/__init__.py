"""Database module for the URL shortener service."""
from shrink.db.base import engine, get_engine, get_session, create_tables, DatabaseHealthCheck
from shrink.db.session import get_db, db_transaction

__all__ = [
    "engine",
    "get_engine",
    "get_session",
    "create_tables",
    "DatabaseHealthCheck",
    "get_db",
    "db_transaction",
]
