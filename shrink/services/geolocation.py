"""IP geolocation for click analytics.

Location is a best-effort enrichment: every client here returns an empty
``GeoLocation`` instead of raising, so a slow or broken provider can never
fail a redirect.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from shrink.core.config import settings
from shrink.services.exceptions import GeoLookupError

logger = logging.getLogger(__name__)


class GeoLocation(BaseModel):
    """Location facts for one IP address; empty strings and zero coordinates when unknown."""

    model_config = ConfigDict(extra="ignore")

    country: str = ""
    city: str = ""
    region: str = ""
    latitude: float = 0.0
    longitude: float = 0.0

    @field_validator("country", "city", "region", mode="before")
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("latitude", "longitude", mode="before")
    def none_to_zero(cls, v: Any) -> Any:
        return 0.0 if v is None or v == "" else v


class GeolocationClient(ABC):
    """Narrow interface to an IP geolocation provider."""

    @abstractmethod
    async def lookup(self, ip: str) -> GeoLocation:
        """Resolve ``ip`` to a location; returns ``GeoLocation()`` on any failure."""


class NullGeolocationClient(GeolocationClient):
    """Used when geolocation is disabled."""

    async def lookup(self, ip: str) -> GeoLocation:
        return GeoLocation()


class IPAPIGeolocationClient(GeolocationClient):
    """
    Geolocation through an ipapi.co style HTTP endpoint.

    ``GET <url_template.format(ip=ip)>`` is expected to answer with JSON
    carrying ``country``, ``city``, ``region``, ``latitude`` and ``longitude``.
    """

    def __init__(
        self,
        url_template: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url_template = url_template or settings.GEOLOCATION_URL_TEMPLATE
        self.timeout = timeout if timeout is not None else settings.GEOLOCATION_TIMEOUT_SECONDS
        self._transport = transport

    async def lookup(self, ip: str) -> GeoLocation:
        try:
            return await self._fetch(ip)
        except GeoLookupError as e:
            logger.warning(f"Geolocation lookup failed for {ip}: {e}")
            return GeoLocation()

    async def _fetch(self, ip: str) -> GeoLocation:
        url = self.url_template.format(ip=ip)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            raise GeoLookupError(f"timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise GeoLookupError(f"provider answered {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GeoLookupError(f"request error: {e!r}") from e
        except httpx.InvalidURL as e:
            # Not an HTTPError subclass
            raise GeoLookupError(f"cannot build lookup URL: {e}") from e
        except ValueError as e:
            raise GeoLookupError("malformed JSON response") from e

        if not isinstance(payload, dict):
            raise GeoLookupError("unexpected response shape")
        if payload.get("error"):
            raise GeoLookupError(f"provider error: {payload.get('reason', 'unknown')}")

        try:
            return GeoLocation.model_validate(payload)
        except PydanticValidationError as e:
            raise GeoLookupError(f"invalid location data: {e.error_count()} errors") from e


def create_geolocation_client() -> GeolocationClient:
    """Build the client configured by GEOLOCATION_ENABLED."""
    if not settings.GEOLOCATION_ENABLED:
        return NullGeolocationClient()
    return IPAPIGeolocationClient()
