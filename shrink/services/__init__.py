"""Service layer for the URL shortener service.

This package contains service classes implementing the business logic of the application.
Services orchestrate interactions between repositories and provide domain-specific operations.
"""

from shrink.services.shortener import ShortenedURLService, generate_short_code
from shrink.services.tracking import ClickTrackingService, RequestContext, RedirectResult, TrackingOutcome
from shrink.services.geolocation import GeolocationClient, GeoLocation, IPAPIGeolocationClient

__all__ = [
    "ShortenedURLService",
    "generate_short_code",
    "ClickTrackingService",
    "RequestContext",
    "RedirectResult",
    "TrackingOutcome",
    "GeolocationClient",
    "GeoLocation",
    "IPAPIGeolocationClient",
]
