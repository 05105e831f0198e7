"""Repository layer for the URL shortener service.

This module provides repository classes that abstract database operations
and implement the Repository pattern for clean separation of concerns.
"""

from shrink.repositories.base import (
    BaseRepository,
    RepositoryError,
    StoreTimeoutError,
    DuplicateEntityError,
)
from shrink.repositories.url_repository import URLRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "StoreTimeoutError",
    "DuplicateEntityError",
    "URLRepository",
]
