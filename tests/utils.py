"""Test utilities for URL shortener tests."""

import random
import string
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shrink.models.url import ShortURL


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8)}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


async def create_test_url(
    db: AsyncSession,
    original_url: Optional[str] = None,
    short_url: Optional[str] = None,
    custom_alias: Optional[str] = None,
) -> ShortURL:
    """Create and commit a test ShortURL in the database."""
    url = ShortURL(
        original_url=original_url or random_url(),
        short_url=short_url or custom_alias or random_string(6),
        custom_alias=custom_alias,
    )
    db.add(url)
    await db.commit()
    await db.refresh(url)
    return url
