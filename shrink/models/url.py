"""Short URL data models.

This module defines the ShortURL model storing one shortening mapping
together with its aggregate click counter.
"""
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, Index
from sqlmodel import Field, Relationship, SQLModel

from shrink.models.fields import utc_now

if TYPE_CHECKING:
    from .click import ClickEvent


class ShortURLBase(SQLModel):
    """Base model for short URL data."""

    original_url: str = Field(
        description="The original (long) URL to redirect to"
    )
    short_url: str = Field(
        description="Unique code or custom alias identifying this mapping",
        unique=True,
        index=True,
        max_length=255,
    )
    custom_alias: Optional[str] = Field(
        default=None,
        description="The user-supplied alias, equal to short_url when set",
        max_length=255,
    )


class ShortURL(ShortURLBase, table=True):
    """
    Short URL model for storing shortened URLs in the database.

    ``short_url`` carries a unique constraint: the store, not the caller,
    decides which of two concurrent inserts of the same code wins.
    ``total_clicks`` always equals the number of rows in ``clicks``; both are
    only changed together by ``URLRepository.append_click``.
    """

    __tablename__ = "urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    total_clicks: int = Field(
        default=0,
        description="Counter for the number of recorded clicks"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Timestamp when this short URL was created"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Timestamp of creation or of the latest recorded click"
    )
    is_active: bool = Field(default=True)

    clicks: List["ClickEvent"] = Relationship(
        back_populates="url",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "passive_deletes": True,
            "lazy": "selectin",
            # Insertion order is chronological order
            "order_by": "ClickEvent.id",
        }
    )

    __table_args__ = (
        Index("ix_urls_created_at", "created_at"),
    )


class ShortURLCreate(ShortURLBase):
    """Schema for creating a new short URL."""
    pass

