"""Test fixtures for the URL shortener application."""

import os

# Settings are read at import time; configure them before importing shrink
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["ENVIRONMENT"] = "testing"
os.environ["GEOLOCATION_ENABLED"] = "false"

from typing import AsyncGenerator, List

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from shrink.api.dependencies import get_geolocation_client
from shrink.db.session import get_db
from shrink.main import app as main_app
from shrink.repositories.url_repository import URLRepository
from shrink.services.geolocation import GeoLocation, GeolocationClient
from shrink.services.shortener import ShortenedURLService
from shrink.services.tracking import ClickTrackingService
# Import models to ensure they're registered with SQLModel metadata
from shrink.models.url import ShortURL  # noqa: F401
from shrink.models.click import ClickEvent  # noqa: F401


# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeGeolocationClient(GeolocationClient):
    """Geolocation client returning a fixed location and recording lookups."""

    def __init__(self, location: GeoLocation = None):
        self.location = location or GeoLocation(
            country="Germany",
            city="Berlin",
            region="Berlin",
            latitude=52.52,
            longitude=13.405,
        )
        self.calls: List[str] = []

    async def lookup(self, ip: str) -> GeoLocation:
        self.calls.append(ip)
        return self.location


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory SQLite engine with all tables."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create isolated test database session."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def url_repository():
    return URLRepository()


@pytest.fixture
def geolocation_client():
    return FakeGeolocationClient()


@pytest.fixture
def shortener_service(url_repository):
    return ShortenedURLService(url_repository=url_repository)


@pytest.fixture
def tracking_service(shortener_service, url_repository, geolocation_client):
    return ClickTrackingService(
        shortener_service=shortener_service,
        url_repository=url_repository,
        geolocation=geolocation_client,
    )


@pytest.fixture
def test_app(test_db, geolocation_client) -> FastAPI:
    """FastAPI app with the store session and geolocation client overridden."""
    async def _override_get_db():
        yield test_db

    app = main_app
    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_geolocation_client] = lambda: geolocation_client
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client talking to the app in-process."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
