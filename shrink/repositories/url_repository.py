"""URL Repository for the URL shortener service.

This module provides the URLRepository class, the record store of the service:
creating short URL records, looking them up by code and appending click
events to them.
"""

from typing import Any, Dict, Optional, Union
import logging

from sqlalchemy import select, update, insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from shrink.models.click import ClickEvent, ClickEventCreate
from shrink.models.fields import utc_now
from shrink.models.url import ShortURL, ShortURLCreate
from shrink.repositories.base import BaseRepository, RepositoryError, DuplicateEntityError

logger = logging.getLogger(__name__)


class URLRepository(BaseRepository[ShortURL]):
    """
    Repository for ShortURL records and their click sequences.

    Uniqueness of ``short_url`` is left to the table's unique constraint;
    ``create_short_url`` turns a violation into ``DuplicateEntityError``.
    """

    def __init__(self, timeout: Optional[float] = None):
        super().__init__(ShortURL, timeout=timeout)

    async def create_short_url(
        self,
        db: AsyncSession,
        data: Union[ShortURLCreate, Dict[str, Any]]
    ) -> ShortURL:
        """
        Insert a new shortened URL record.

        The insert is flushed immediately so a duplicate code surfaces here.
        On a duplicate the session is rolled back and can be reused for a
        new attempt.

        Args:
            db: Database session
            data: Short URL data (either as a ShortURLCreate model or dictionary)

        Returns:
            The created ShortURL entity

        Raises:
            DuplicateEntityError: If the short code already exists
            RepositoryError: On other database errors
        """
        if isinstance(data, ShortURLCreate):
            data = data.model_dump(exclude_unset=True)

        now = utc_now()
        entity = ShortURL(**{"created_at": now, "updated_at": now, **data})

        try:
            db.add(entity)
            await self._bounded(db.flush(), "create_short_url")
            await self._bounded(db.refresh(entity), "create_short_url")
            return entity
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateEntityError(self.model_type, "short_url", data.get("short_url")) from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating short URL: {e}")
            await db.rollback()
            raise RepositoryError(f"Database error creating short URL: {e}") from e
        except RepositoryError:
            await db.rollback()
            raise

    async def get_by_short_url(self, db: AsyncSession, short_url: str) -> Optional[ShortURL]:
        """
        Find a record by exact match on its short code.

        The record's clicks are loaded in insertion order. Rows already in the
        session are refreshed so counters reflect appends made through
        ``append_click``.

        Returns:
            The ShortURL if found, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = (
                select(self.model_type)
                .where(self.model_type.short_url == short_url)
                .execution_options(populate_existing=True)
            )
            result = await self._execute(db, query, "get_by_short_url")
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving URL by short code: {e}") from e

    async def count_by_short_url(self, db: AsyncSession, short_url: str) -> int:
        """
        Count records using the given short code; 0 means the code is free.

        Raises:
            RepositoryError: On database errors
        """
        return await self.count(db, short_url=short_url)

    async def append_click(
        self,
        db: AsyncSession,
        short_url: str,
        click_data: Union[ClickEventCreate, Dict[str, Any]]
    ) -> bool:
        """
        Append a click event to the record with the given short code.

        The counter increment, the ``updated_at`` bump and the click insert
        run in the caller's transaction. The UPDATE comes first and locks the
        row, so concurrent appends to the same record are serialized by the
        store and ``total_clicks`` keeps matching the number of clicks once
        the transaction commits.

        Args:
            db: Database session
            short_url: Code of the record to append to
            click_data: Click event fields

        Returns:
            True if the click was appended, False if no record matched

        Raises:
            RepositoryError: On database errors
        """
        if not isinstance(click_data, ClickEventCreate):
            click_data = ClickEventCreate(**click_data)
        click_data = click_data.model_dump()

        try:
            stmt = (
                update(self.model_type)
                .where(self.model_type.short_url == short_url)
                .values(
                    total_clicks=self.model_type.total_clicks + 1,
                    updated_at=utc_now(),
                )
                .returning(self.model_type.id)
                .execution_options(synchronize_session=False)
            )
            result = await self._execute(db, stmt, "append_click")
            url_id = result.scalar_one_or_none()

            if url_id is None:
                return False

            await self._execute(
                db,
                insert(ClickEvent).values(url_id=url_id, **click_data),
                "append_click",
            )
            return True
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error appending click to '{short_url}': {e}") from e
