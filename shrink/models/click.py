"""
Click event tracking data models.

This module defines the ClickEvent model, one row per recorded visit of a short URL.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, Index
from sqlmodel import Field, Relationship, SQLModel

from shrink.models.fields import (
    IP_MAX_LENGTH,
    LABEL_MAX_LENGTH,
    REFERRER_MAX_LENGTH,
    USER_AGENT_MAX_LENGTH,
    utc_now,
)

if TYPE_CHECKING:
    from .url import ShortURL


class ClickEventBase(SQLModel):
    """Base model for click event data."""

    timestamp: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Timestamp of the visit"
    )
    ip: Optional[str] = Field(
        default=None,
        description="IP address of the visitor",
        max_length=IP_MAX_LENGTH
    )
    user_agent: Optional[str] = Field(
        default=None,
        description="User agent string of the visitor's browser/device",
        max_length=USER_AGENT_MAX_LENGTH
    )
    referrer: Optional[str] = Field(default=None, max_length=REFERRER_MAX_LENGTH)
    country: Optional[str] = Field(default=None, max_length=LABEL_MAX_LENGTH)
    city: Optional[str] = Field(default=None, max_length=LABEL_MAX_LENGTH)
    region: Optional[str] = Field(default=None, max_length=LABEL_MAX_LENGTH)
    latitude: float = Field(default=0.0)
    longitude: float = Field(default=0.0)

    # Derived from the user agent
    browser: Optional[str] = Field(default=None, max_length=LABEL_MAX_LENGTH)
    browser_version: Optional[str] = Field(default=None, max_length=LABEL_MAX_LENGTH)
    os: Optional[str] = Field(default=None, max_length=LABEL_MAX_LENGTH)
    os_version: Optional[str] = Field(default=None, max_length=LABEL_MAX_LENGTH)
    device_type: Optional[str] = Field(
        default=None,
        description="mobile, tablet, desktop or bot",
        max_length=32
    )


class ClickEvent(ClickEventBase, table=True):
    """
    Click event model for tracking visits of shortened URLs.

    Rows are append-only; the autoincrement id gives the order of the
    owning record's click sequence.
    """

    __tablename__ = "click_events"

    id: Optional[int] = Field(default=None, primary_key=True)

    url_id: int = Field(
        foreign_key="urls.id",
        description="Foreign key reference to the shortened URL"
    )

    url: "ShortURL" = Relationship(back_populates="clicks")

    __table_args__ = (
        Index("ix_click_events_url_id_id", "url_id", "id"),
    )


class ClickEventCreate(ClickEventBase):
    """Schema for creating a new click event record."""
    pass
