from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from shrink.api import schemas
from shrink.api.dependencies import get_shortener_service
from shrink.db.session import get_db
from shrink.services.shortener import ShortenedURLService
from shrink.services.exceptions import (
    AliasTakenError,
    StoreError,
    URLNotFoundError,
    ValidationError,
)

router = APIRouter(tags=["shortener"])


@router.post(
    "/shrink",
    response_model=schemas.ShrinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid URL, invalid alias or alias taken"},
        500: {"model": schemas.ErrorResponse, "description": "Store failure"},
    }
)
async def create_short_url(
    url_data: schemas.ShrinkRequest,
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    try:
        url = await shortener_service.create_short_url(
            db=db,
            original_url=url_data.original_url,
            custom_alias=url_data.custom_alias,
        )
        return schemas.ShrinkResponse.model_validate(url)
    except (ValidationError, AliasTakenError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get(
    "/info/{short_url}",
    response_model=schemas.URLInfoResponse,
    responses={404: {"model": schemas.ErrorResponse, "description": "URL not found"}}
)
async def get_url_info(
    short_url: str = Path(..., description="The short code of the URL"),
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    try:
        return await shortener_service.get_url_info(db, short_url)
    except URLNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get(
    "/stats/{short_url}",
    response_model=schemas.URLStatsResponse,
    responses={404: {"model": schemas.ErrorResponse, "description": "URL not found"}}
)
async def get_url_stats(
    short_url: str = Path(..., description="The short code of the URL"),
    db: AsyncSession = Depends(get_db),
    shortener_service: ShortenedURLService = Depends(get_shortener_service),
):
    try:
        return await shortener_service.get_url_stats(db, short_url)
    except URLNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
