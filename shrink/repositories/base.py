"""Base repository implementation for the URL shortener service.

This module provides a generic BaseRepository class that follows the Repository pattern
for database operations, serving as a foundation for more specific repositories.
Every statement goes through ``_execute`` so that store calls are bounded by
``STORE_TIMEOUT_SECONDS``.
"""

from typing import Any, Awaitable, Generic, Optional, Type, TypeVar
import asyncio
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from shrink.core.config import settings

T = TypeVar("T", bound=SQLModel)
R = TypeVar("R")

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class StoreTimeoutError(RepositoryError):
    """A store operation did not finish within the configured timeout."""
    pass


class DuplicateEntityError(RepositoryError):
    """Exception raised when a unique constraint is violated."""

    def __init__(self, model_type: Type[SQLModel], field_name: str, value: Any):
        self.model_type = model_type
        self.field_name = field_name
        self.value = value
        model_name = getattr(model_type, "__name__", "Entity")
        super().__init__(f"{model_name} with {field_name}={value} already exists")


class BaseRepository(Generic[T]):
    """
    Base repository implementing common operations for SQLModel entities.

    Type parameters:
        T: The SQLModel type this repository manages
    """

    def __init__(self, model_type: Type[T], timeout: Optional[float] = None):
        """
        Initialize the repository with a specific model type.

        Args:
            model_type: The SQLModel class this repository will work with
            timeout: Seconds allowed per store call, defaults to STORE_TIMEOUT_SECONDS
        """
        self.model_type = model_type
        self.timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS

    async def _bounded(self, awaitable: Awaitable[R], operation: str) -> R:
        """Await a store call under the repository timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"{operation} on {self.model_type.__name__} timed out after {self.timeout}s")
            raise StoreTimeoutError(f"Store operation '{operation}' timed out") from e

    async def _execute(self, db: AsyncSession, statement, operation: str):
        return await self._bounded(db.execute(statement), operation)

    async def count(self, db: AsyncSession, **filters) -> int:
        """
        Count entities matching the given field=value filters.

        Args:
            db: Database session
            **filters: Field=value pairs to filter by (none counts everything)

        Returns:
            Number of matching rows

        Raises:
            RepositoryError: On database errors
        """
        try:
            conditions = [getattr(self.model_type, field) == value for field, value in filters.items()]
            query = select(func.count()).select_from(self.model_type).where(*conditions)
            result = await self._execute(db, query, "count")
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model_type.__name__} records: {e}")
            raise RepositoryError(f"Database error counting entities: {e}") from e

