"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from shrink.models.fields import as_utc

_http_url = TypeAdapter(HttpUrl)


class ShrinkRequest(BaseModel):
    """Request schema for creating a shortened URL."""
    original_url: str
    custom_alias: Optional[str] = None

    # Checked as an HttpUrl but stored exactly as submitted
    @field_validator("original_url")
    def validate_http_url(cls, v: str) -> str:
        try:
            _http_url.validate_python(v)
        except PydanticValidationError as e:
            raise ValueError(f"Invalid URL: {e.errors()[0]['msg']}") from e
        return v


class ShrinkResponse(BaseModel):
    """Response schema for a newly created short URL."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    original_url: str
    short_url: str
    total_clicks: int
    created_at: datetime
    is_active: bool

    @field_validator("created_at")
    def created_at_in_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class ClickData(BaseModel):
    """Schema for click event data."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    ip: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    latitude: float = 0.0
    longitude: float = 0.0
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    browser: Optional[str] = None
    browser_version: Optional[str] = None
    os: Optional[str] = None
    os_version: Optional[str] = None
    device_type: Optional[str] = None

    @field_validator("timestamp")
    def timestamp_in_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class URLStatsResponse(BaseModel):
    """Response schema for URL statistics."""
    id: int
    original_url: str
    short_url: str
    total_clicks: int
    created_at: datetime
    updated_at: datetime
    is_active: bool
    clicks: List[ClickData]

    @field_validator("created_at", "updated_at")
    def times_in_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class URLInfoResponse(URLStatsResponse):
    """Response schema for the full URL record."""
    custom_alias: Optional[str] = None
    clicks_count: int


class HealthResponse(BaseModel):
    status: str
    message: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    ready: bool
    components: Dict[str, Any]


class ErrorResponse(BaseModel):
    """Response schema for errors."""
    detail: str
    error_id: Optional[str] = None
    errors: Optional[List[Dict[str, Any]]] = None
