"""Request-scoped sessions and the service transaction decorator."""

from typing import AsyncGenerator, Awaitable, Callable, Optional, TypeVar
import inspect
import logging
from functools import wraps

from sqlalchemy.ext.asyncio import AsyncSession

from shrink.db.base import get_session

logger = logging.getLogger(__name__)

R = TypeVar("R")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request; whatever is left uncommitted is rolled back."""
    async with get_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def _find_session(signature: inspect.Signature, db_param_name: Optional[str], args, kwargs) -> AsyncSession:
    bound = signature.bind_partial(*args, **kwargs)
    if db_param_name is not None:
        session = bound.arguments.get(db_param_name)
    else:
        session = next(
            (value for value in bound.arguments.values() if isinstance(value, AsyncSession)),
            None,
        )
    if not isinstance(session, AsyncSession):
        raise ValueError(f"No AsyncSession passed as '{db_param_name or 'any argument'}'")
    return session


def db_transaction(db_param_name: Optional[str] = None) -> Callable:
    """Run a coroutine as one unit of work on its session argument.

    The session is the argument named ``db_param_name``, or the first
    ``AsyncSession`` argument when no name is given. It is committed when the
    coroutine returns and rolled back when it raises.

    Example:
        ```python
        @db_transaction(db_param_name="db")
        async def create_short_url(self, db: AsyncSession, original_url: str) -> ShortURL:
            ...
        ```
    """
    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        signature = inspect.signature(func)
        if db_param_name is not None and db_param_name not in signature.parameters:
            raise TypeError(f"'{func.__qualname__}' has no parameter named '{db_param_name}'")

        @wraps(func)
        async def wrapper(*args, **kwargs) -> R:
            db = _find_session(signature, db_param_name, args, kwargs)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                await db.rollback()
                logger.debug(f"Rolled back '{func.__qualname__}': {e!r}")
                raise
            await db.commit()
            return result

        return wrapper
    return decorator
