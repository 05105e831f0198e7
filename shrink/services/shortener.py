"""URL shortening service for the URL shortener application.

This module contains the short code generator and the ShortenedURLService
class, which allocates unique codes, creates records and reads them back.
"""

import logging
import random
import string
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession

from shrink.core.config import settings
from shrink.db.session import db_transaction
from shrink.models.url import ShortURL
from shrink.repositories.base import RepositoryError, DuplicateEntityError
from shrink.repositories.url_repository import URLRepository
from shrink.services.exceptions import (
    AliasTakenError,
    InvalidAliasError,
    InvalidURLError,
    StoreError,
    StoreExhaustedError,
    URLNotFoundError,
)

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits

# Single path segments the router claims before the redirect route
RESERVED_ALIASES = frozenset({"health", "shrink", "info", "stats", "docs", "redoc"})


def generate_short_code(length: int) -> str:
    """
    Generate a random code of exactly ``length`` characters.

    Characters are drawn uniformly with replacement from the 62 symbols
    of ``ALPHABET``.
    The result is not guaranteed to be unused.

    Raises:
        ValueError: If length is not positive
    """
    if length <= 0:
        raise ValueError(f"Short code length must be positive, got {length}")
    return "".join(random.choice(ALPHABET) for _ in range(length))


class ShortenedURLService:
    """
    Service for URL shortening business logic.

    Short codes are reserved by checking the store, and the store's unique
    constraint has the final word: an insert that loses a race is reported
    as a duplicate and handled here.
    """

    def __init__(
        self,
        url_repository: URLRepository,
        code_length: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize the URL shortening service.

        Args:
            url_repository: Repository for URL data access
            code_length: Length of generated codes, defaults to SHORT_CODE_LENGTH
            max_attempts: Bound on code generation retries, defaults to SHORT_CODE_MAX_ATTEMPTS
        """
        self.url_repository = url_repository
        self.code_length = code_length or settings.SHORT_CODE_LENGTH
        self.max_attempts = max_attempts or settings.SHORT_CODE_MAX_ATTEMPTS

    async def reserve(self, db: AsyncSession, requested_alias: Optional[str] = None) -> str:
        """
        Pick a short code that is currently free.

        A non-empty alias is checked by exact, case-sensitive match and
        returned unchanged. Otherwise random codes are generated until one is
        free or ``max_attempts`` candidates have been tried.

        Raises:
            AliasTakenError: If the requested alias is in use
            StoreExhaustedError: If no free random code was found
            StoreError: If the store check fails
        """
        try:
            if requested_alias:
                if await self.url_repository.count_by_short_url(db, requested_alias) > 0:
                    raise AliasTakenError(f"Custom alias '{requested_alias}' already exists")
                return requested_alias

            for attempt in range(1, self.max_attempts + 1):
                candidate = generate_short_code(self.code_length)
                if candidate in RESERVED_ALIASES:
                    logger.info(f"Generated code '{candidate}' is a reserved route, retrying")
                    continue
                if await self.url_repository.count_by_short_url(db, candidate) == 0:
                    return candidate
                logger.info(f"Short code collision on attempt {attempt}, retrying")
        except RepositoryError as e:
            logger.error(f"Error checking short code availability: {e}")
            raise StoreError("Database error") from e

        raise StoreExhaustedError(
            f"Could not find a free short code after {self.max_attempts} attempts"
        )

    @db_transaction(db_param_name="db")
    async def create_short_url(
        self,
        db: AsyncSession,
        original_url: str,
        custom_alias: Optional[str] = None,
    ) -> ShortURL:
        """
        Create a shortened URL with an optional custom alias.

        Args:
            db: Database session
            original_url: The original URL to shorten
            custom_alias: Optional user-chosen code

        Returns:
            ShortURL: The created record

        Raises:
            InvalidURLError: If URL format is invalid
            InvalidAliasError: If the alias format is invalid
            AliasTakenError: If the alias is already in use
            StoreExhaustedError: If a unique code cannot be generated
            StoreError: If the store fails
        """
        original_url = str(original_url)
        if not self._is_valid_url(original_url):
            raise InvalidURLError(f"Invalid URL format: {original_url}")

        if custom_alias:
            self._validate_alias(custom_alias)

        for attempt in range(1, self.max_attempts + 1):
            short_url = await self.reserve(db, custom_alias)
            url_data = {
                "original_url": original_url,
                "short_url": short_url,
                "custom_alias": custom_alias or None,
            }

            try:
                url = await self.url_repository.create_short_url(db, url_data)
                logger.info(f"Created short URL '{url.short_url}'")
                return url
            except DuplicateEntityError:
                # Another request committed the same code after our check
                if custom_alias:
                    raise AliasTakenError(f"Custom alias '{custom_alias}' already exists")
                logger.warning(f"Short code '{short_url}' taken concurrently, attempt {attempt}")
            except RepositoryError as e:
                logger.error(f"Error creating short URL: {e}")
                raise StoreError("Failed to save URL") from e

        raise StoreExhaustedError(
            f"Could not store a unique short code after {self.max_attempts} attempts"
        )

    async def get_url_by_code(self, db: AsyncSession, short_url: str) -> ShortURL:
        """
        Retrieve a record by its short code.

        Raises:
            URLNotFoundError: If no record with this code exists
            StoreError: If the lookup fails
        """
        try:
            url = await self.url_repository.get_by_short_url(db, short_url)
        except RepositoryError as e:
            logger.error(f"Error retrieving URL by code: {e}")
            raise StoreError("Database error") from e

        if url is None:
            raise URLNotFoundError(f"Short URL '{short_url}' not found")
        return url

    async def get_url_info(self, db: AsyncSession, short_url: str) -> Dict[str, Any]:
        """Full record including the click sequence and its length."""
        url = await self.get_url_by_code(db, short_url)
        return {
            "id": url.id,
            "original_url": url.original_url,
            "short_url": url.short_url,
            "custom_alias": url.custom_alias,
            "total_clicks": url.total_clicks,
            "created_at": url.created_at,
            "updated_at": url.updated_at,
            "is_active": url.is_active,
            "clicks_count": len(url.clicks),
            "clicks": list(url.clicks),
        }

    async def get_url_stats(self, db: AsyncSession, short_url: str) -> Dict[str, Any]:
        """Click statistics for a record."""
        url = await self.get_url_by_code(db, short_url)
        return {
            "id": url.id,
            "original_url": url.original_url,
            "short_url": url.short_url,
            "total_clicks": url.total_clicks,
            "created_at": url.created_at,
            "updated_at": url.updated_at,
            "is_active": url.is_active,
            "clicks": list(url.clicks),
        }

    def _is_valid_url(self, url: str) -> bool:
        """Absolute http(s)/ftp URL with a host."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        return parsed.scheme in ("http", "https", "ftp") and bool(parsed.netloc)

    def _validate_alias(self, alias: str) -> None:
        """Any string is accepted as long as it stays a single routable path segment."""
        if len(alias) > settings.CUSTOM_ALIAS_MAX_LENGTH:
            raise InvalidAliasError(
                f"Custom alias must be {settings.CUSTOM_ALIAS_MAX_LENGTH} characters or less"
            )
        if "/" in alias:
            raise InvalidAliasError(f"Custom alias '{alias}' must not contain '/'")
        if alias in RESERVED_ALIASES:
            raise InvalidAliasError(f"Custom alias '{alias}' is reserved")
