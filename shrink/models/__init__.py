"""
Data models for the URL shortener service.

This module imports and exports all SQLModel models used in the application.
"""

from shrink.models.url import ShortURLBase, ShortURLCreate
from shrink.models.click import ClickEventBase, ClickEventCreate

# Table models, parent before child
from shrink.models.url import ShortURL
from shrink.models.click import ClickEvent

__all__ = [
    "ClickEvent",
    "ClickEventBase",
    "ClickEventCreate",
    "ShortURL",
    "ShortURLBase",
    "ShortURLCreate",
]
