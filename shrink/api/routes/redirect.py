"""URL redirection endpoint with click tracking."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from starlette.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from shrink.api import schemas
from shrink.api.dependencies import get_tracking_service
from shrink.db.session import get_db
from shrink.services.exceptions import StoreError, URLNotFoundError
from shrink.services.tracking import ClickTrackingService, RequestContext, TrackingOutcome

router = APIRouter(tags=["redirect"])


def get_client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For entry, else the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


@router.get(
    "/{short_url}",
    response_class=RedirectResponse,
    status_code=status.HTTP_301_MOVED_PERMANENTLY,
    responses={404: {"model": schemas.ErrorResponse, "description": "URL not found"}}
)
async def redirect_to_original_url(
    request: Request,
    short_url: str,
    lat: Optional[str] = Query(None, description="Browser-reported latitude"),
    lng: Optional[str] = Query(None, description="Browser-reported longitude"),
    country: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    tracking_service: ClickTrackingService = Depends(get_tracking_service),
):
    """Redirect to the original URL and record the click."""
    context = RequestContext(
        ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
        latitude=lat,
        longitude=lng,
        country=country,
        city=city,
        region=region,
    )

    try:
        result = await tracking_service.redirect(db, short_url, context)
    except URLNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if result.tracking is not TrackingOutcome.RECORDED:
        logger.warning(f"Redirected '{short_url}' without recording the click ({result.tracking.value})")

    return RedirectResponse(url=result.destination_url, status_code=status.HTTP_301_MOVED_PERMANENTLY)
