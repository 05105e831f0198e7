"""Redirect resolution and click tracking.

A redirect has two results: the destination, which must be delivered
whenever the record exists, and the outcome of recording the click, which is
best-effort. ``RedirectResult`` carries both so callers can observe a failed
append without it ever turning into a failed redirect.
"""

import ipaddress
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shrink.models.click import ClickEventCreate
from shrink.models.fields import (
    IP_MAX_LENGTH,
    LABEL_MAX_LENGTH,
    REFERRER_MAX_LENGTH,
    USER_AGENT_MAX_LENGTH,
    utc_now,
)
from shrink.repositories.base import RepositoryError
from shrink.repositories.url_repository import URLRepository
from shrink.services.geolocation import GeolocationClient
from shrink.services.shortener import ShortenedURLService
from shrink.services.user_agent import parse_user_agent

logger = logging.getLogger(__name__)

# Location recorded for visits from the local host
LOCAL_COUNTRY = "Local"
LOCAL_CITY = "Testing"
LOCAL_REGION = "Dev"


class TrackingOutcome(str, Enum):
    RECORDED = "recorded"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class RequestContext:
    """Facts about one visit, as extracted from the HTTP request."""

    ip: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    # Browser-side geolocation, passed through query parameters
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return bool(self.latitude) and bool(self.longitude)


@dataclass
class RedirectResult:
    destination_url: str
    tracking: TrackingOutcome
    click: ClickEventCreate


def parse_ip(ip: Optional[str]) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    """The address ``ip`` denotes, or None when it is not a literal IP address."""
    if not ip:
        return None
    try:
        return ipaddress.ip_address(ip.strip())
    except ValueError:
        return None


def is_loopback(ip: str) -> bool:
    """True for 127.0.0.0/8 and ::1; unparseable addresses are not loopback."""
    address = parse_ip(ip)
    return address is not None and address.is_loopback


def _parse_coordinate(value: Optional[str]) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    """Empty values become None, over-long ones are cut to the column size."""
    if not value:
        return None
    return value[:limit]


class ClickTrackingService:
    """
    Orchestrates a redirect: lookup, click capture, location, append.
    """

    def __init__(
        self,
        shortener_service: ShortenedURLService,
        url_repository: URLRepository,
        geolocation: GeolocationClient,
    ):
        self.shortener_service = shortener_service
        self.url_repository = url_repository
        self.geolocation = geolocation

    async def redirect(
        self,
        db: AsyncSession,
        short_url: str,
        context: RequestContext,
    ) -> RedirectResult:
        """
        Resolve a short code to its destination and record the visit.

        Raises:
            URLNotFoundError: If no record with this code exists
            StoreError: If the primary lookup fails
        """
        url = await self.shortener_service.get_url_by_code(db, short_url)
        destination_url = url.original_url

        click = await self.build_click(context)
        outcome = await self.record_click(db, short_url, click)

        return RedirectResult(destination_url=destination_url, tracking=outcome, click=click)

    async def build_click(self, context: RequestContext) -> ClickEventCreate:
        """
        Build the click event for a visit.

        Location comes from, in order: coordinates supplied by the client,
        the geolocation provider for a public IP, or the local placeholder
        for loopback visits. Values that do not parse as an IP address get
        no location. Request-supplied strings are cut to their column sizes
        so header contents can never fail a redirect.
        """
        location = {}
        address = parse_ip(context.ip)

        if context.has_coordinates:
            location = {
                "latitude": _parse_coordinate(context.latitude),
                "longitude": _parse_coordinate(context.longitude),
                "country": context.country,
                "city": context.city,
                "region": context.region,
            }
        elif address is not None and not address.is_loopback:
            found = await self.geolocation.lookup(str(address))
            location = found.model_dump()
        elif address is not None:
            location = {"country": LOCAL_COUNTRY, "city": LOCAL_CITY, "region": LOCAL_REGION}

        device = parse_user_agent(context.user_agent)

        return ClickEventCreate(
            timestamp=utc_now(),
            ip=_clip(context.ip, IP_MAX_LENGTH),
            user_agent=_clip(context.user_agent, USER_AGENT_MAX_LENGTH),
            referrer=_clip(context.referrer, REFERRER_MAX_LENGTH),
            country=_clip(location.get("country"), LABEL_MAX_LENGTH),
            city=_clip(location.get("city"), LABEL_MAX_LENGTH),
            region=_clip(location.get("region"), LABEL_MAX_LENGTH),
            latitude=location.get("latitude", 0.0),
            longitude=location.get("longitude", 0.0),
            browser=_clip(device.browser, LABEL_MAX_LENGTH),
            browser_version=_clip(device.browser_version, LABEL_MAX_LENGTH),
            os=_clip(device.os, LABEL_MAX_LENGTH),
            os_version=_clip(device.os_version, LABEL_MAX_LENGTH),
            device_type=device.device_type,
        )

    async def record_click(
        self,
        db: AsyncSession,
        short_url: str,
        click: ClickEventCreate,
    ) -> TrackingOutcome:
        """
        Append the click and commit it on its own.

        Never raises: failures are logged, rolled back and reported as
        ``TrackingOutcome.FAILED``.
        """
        try:
            appended = await self.url_repository.append_click(db, short_url, click)
            if not appended:
                await db.rollback()
                logger.warning(f"Click for '{short_url}' not recorded, record no longer exists")
                return TrackingOutcome.NOT_FOUND
            await db.commit()
            return TrackingOutcome.RECORDED
        except (RepositoryError, SQLAlchemyError) as e:
            logger.error(f"Failed to record click for '{short_url}': {e}")
            try:
                await db.rollback()
            except SQLAlchemyError as rollback_error:
                logger.error(f"Rollback after failed click append failed: {rollback_error}")
            return TrackingOutcome.FAILED
