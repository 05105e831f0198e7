"""Database base configuration for SQLAlchemy with SQLModel.

This module provides the shared async engine, the session factory,
schema creation and a health check for the store.
"""

from typing import AsyncGenerator, Dict
import asyncio
import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import text
from sqlmodel import SQLModel

from shrink.core.config import settings, EnvironmentType

logger = logging.getLogger(__name__)


def get_engine_config() -> Dict:
    """Get the engine configuration for the configured store.

    Returns:
        Dict: Engine keyword arguments.
    """
    config: Dict = {"echo": settings.DB_ECHO}

    # SQLite uses a single-connection pool; sizing options do not apply
    if settings.is_sqlite:
        return config

    if settings.ENVIRONMENT == EnvironmentType.TESTING:
        config["poolclass"] = NullPool
        return config

    config.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_POOL_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )
    return config


def get_engine() -> AsyncEngine:
    """Create and configure an async SQLAlchemy engine.

    Returns:
        AsyncEngine: Configured SQLAlchemy async engine instance.
    """
    engine_config = get_engine_config()
    logger.info("Creating database engine for %s", _redact(settings.DATABASE_URL))

    return create_async_engine(settings.DATABASE_URL, **engine_config)


def _redact(url: str) -> str:
    """Hide the password part of a connection string."""
    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest:
        return url
    credentials, _, host = rest.rpartition("@")
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


# Shared async engine instance
engine = get_engine()

# Async session factory
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async session with proper cleanup.

    Yields:
        AsyncSession: SQLAlchemy async session
    """
    session = async_session_factory()
    try:
        yield session
    finally:
        await session.close()


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create the URL and click tables if they do not exist."""
    # Registers the table models on SQLModel.metadata
    import shrink.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


class DatabaseHealthCheck:
    """Health check functionality for the database connection."""

    @staticmethod
    async def check_connection(session: AsyncSession) -> Dict:
        """Check database connectivity and return status.

        Args:
            session: Session to run the check query on

        Returns:
            Dict: Health check result containing status and latency information
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        status = "healthy"
        error_message = None
        latency_ms = 0

        try:
            await asyncio.wait_for(
                session.execute(text("SELECT 1")),
                timeout=settings.STORE_TIMEOUT_SECONDS,
            )
            latency_ms = int((loop.time() - start_time) * 1000)
        except Exception as e:
            status = "unhealthy"
            error_message = str(e) or e.__class__.__name__
            logger.error(f"Database health check failed: {error_message}")

        return {
            "status": status,
            "latency_ms": latency_ms,
            "error": error_message,
        }
