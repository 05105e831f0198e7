"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access repositories, services and the geolocation client.
"""

from functools import lru_cache

from fastapi import Depends

from shrink.repositories.url_repository import URLRepository
from shrink.services.geolocation import GeolocationClient, create_geolocation_client
from shrink.services.shortener import ShortenedURLService
from shrink.services.tracking import ClickTrackingService


async def get_url_repository():
    """Get an instance of the URL repository."""
    return URLRepository()


@lru_cache()
def get_geolocation_client() -> GeolocationClient:
    """Get the process-wide geolocation client."""
    return create_geolocation_client()


async def get_shortener_service(
    url_repo: URLRepository = Depends(get_url_repository),
) -> ShortenedURLService:
    """Get an instance of the URL shortening service."""
    return ShortenedURLService(url_repository=url_repo)


async def get_tracking_service(
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
    url_repo: URLRepository = Depends(get_url_repository),
    geolocation: GeolocationClient = Depends(get_geolocation_client),
) -> ClickTrackingService:
    """Get an instance of the redirect and click tracking service."""
    return ClickTrackingService(
        shortener_service=shortener_service,
        url_repository=url_repo,
        geolocation=geolocation,
    )
