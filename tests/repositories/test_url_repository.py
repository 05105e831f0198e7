"""Tests for the URL repository."""

from datetime import timedelta

import pytest

from shrink.models.click import ClickEventCreate
from shrink.models.url import ShortURL, ShortURLCreate
from shrink.repositories.url_repository import DuplicateEntityError
from tests.utils import create_test_url, random_url


@pytest.mark.repository
class TestURLRepository:
    """Test suite for URL repository."""

    @pytest.mark.asyncio
    async def test_create_short_url(self, test_db, url_repository):
        """Test URL creation."""
        test_url = random_url()

        url_data = ShortURLCreate(
            original_url=test_url,
            short_url="testcreate",
            custom_alias="testcreate",
        )

        url = await url_repository.create_short_url(db=test_db, data=url_data)

        assert url.id is not None
        assert url.original_url == test_url
        assert url.short_url == "testcreate"
        assert url.total_clicks == 0
        assert url.is_active is True
        assert url.created_at == url.updated_at

        db_url = await url_repository.get_by_short_url(test_db, "testcreate")
        assert db_url is not None
        assert db_url.original_url == test_url
        assert db_url.clicks == []

    @pytest.mark.asyncio
    async def test_create_from_dict(self, test_db, url_repository):
        url = await url_repository.create_short_url(
            test_db, {"original_url": random_url(), "short_url": "fromdict"}
        )

        assert url.short_url == "fromdict"
        assert url.custom_alias is None

    @pytest.mark.asyncio
    async def test_create_duplicate_short_url(self, test_db, url_repository):
        """Test duplicate short code handling."""
        await create_test_url(test_db, short_url="duplicate")

        with pytest.raises(DuplicateEntityError) as excinfo:
            await url_repository.create_short_url(
                db=test_db,
                data={"original_url": random_url(), "short_url": "duplicate"},
            )

        assert excinfo.value.field_name == "short_url"
        assert excinfo.value.value == "duplicate"
        # Session is usable again after the failed insert
        assert await url_repository.count_by_short_url(test_db, "duplicate") == 1

    @pytest.mark.asyncio
    async def test_get_by_short_url(self, test_db, url_repository):
        """Test URL retrieval by code."""
        test_url = await create_test_url(test_db, short_url="testget")

        db_url = await url_repository.get_by_short_url(test_db, "testget")

        assert db_url is not None
        assert db_url.id == test_url.id
        assert db_url.original_url == test_url.original_url

    @pytest.mark.asyncio
    async def test_get_by_short_url_is_case_sensitive(self, test_db, url_repository):
        await create_test_url(test_db, short_url="AbC123")

        assert await url_repository.get_by_short_url(test_db, "abc123") is None

    @pytest.mark.asyncio
    async def test_get_by_short_url_nonexistent(self, test_db, url_repository):
        """Test retrieving nonexistent URL."""
        assert await url_repository.get_by_short_url(test_db, "nonexistent") is None

    @pytest.mark.asyncio
    async def test_count_by_short_url(self, test_db, url_repository):
        await create_test_url(test_db, short_url="counted")

        assert await url_repository.count_by_short_url(test_db, "counted") == 1
        assert await url_repository.count_by_short_url(test_db, "missing") == 0

    @pytest.mark.asyncio
    async def test_append_click(self, test_db, session_factory, url_repository):
        """Test that an append bumps the counter and stores the click."""
        url = await create_test_url(test_db, short_url="appendme")

        appended = await url_repository.append_click(
            test_db,
            "appendme",
            ClickEventCreate(ip="203.0.113.7", country="France", latitude=48.85, longitude=2.35),
        )
        await test_db.commit()

        assert appended is True

        async with session_factory() as session:
            stored = await url_repository.get_by_short_url(session, "appendme")

        assert stored.total_clicks == 1
        assert len(stored.clicks) == 1
        assert stored.clicks[0].ip == "203.0.113.7"
        assert stored.clicks[0].country == "France"
        assert stored.clicks[0].url_id == url.id
        assert stored.updated_at >= url.updated_at

    @pytest.mark.asyncio
    async def test_append_click_from_dict_defaults(self, test_db, session_factory, url_repository):
        await create_test_url(test_db, short_url="dictclick")

        assert await url_repository.append_click(test_db, "dictclick", {"user_agent": "curl/8.0"})
        await test_db.commit()

        async with session_factory() as session:
            stored = await url_repository.get_by_short_url(session, "dictclick")

        click = stored.clicks[0]
        assert click.user_agent == "curl/8.0"
        assert click.latitude == 0.0
        assert click.longitude == 0.0
        assert click.timestamp is not None

    @pytest.mark.asyncio
    async def test_append_click_keeps_order(self, test_db, session_factory, url_repository):
        await create_test_url(test_db, short_url="ordered")

        for ip in ["198.51.100.1", "198.51.100.2", "198.51.100.3"]:
            await url_repository.append_click(test_db, "ordered", ClickEventCreate(ip=ip))
            await test_db.commit()

        async with session_factory() as session:
            stored = await url_repository.get_by_short_url(session, "ordered")

        assert [click.ip for click in stored.clicks] == ["198.51.100.1", "198.51.100.2", "198.51.100.3"]
        assert stored.total_clicks == 3

    @pytest.mark.asyncio
    async def test_append_click_unknown_code(self, test_db, url_repository):
        appended = await url_repository.append_click(test_db, "ghost", ClickEventCreate())

        assert appended is False



def test_model_timestamps_are_utc_aware():
    url = ShortURL(original_url=random_url(), short_url="aware")
    click = ClickEventCreate()

    for value in (url.created_at, url.updated_at, click.timestamp):
        assert value.tzinfo is not None
        assert value.utcoffset() == timedelta(0)
