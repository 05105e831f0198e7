"""Tests for the short code generator and the URL shortening service."""

import string

import pytest
from unittest.mock import AsyncMock, patch

from shrink.models.url import ShortURL
from shrink.repositories.base import DuplicateEntityError, RepositoryError
from shrink.services.exceptions import (
    AliasTakenError,
    InvalidAliasError,
    InvalidURLError,
    StoreError,
    StoreExhaustedError,
    URLNotFoundError,
)
from shrink.services.shortener import ALPHABET, ShortenedURLService, generate_short_code
from tests.utils import create_test_url, random_url


class TestGenerateShortCode:

    def test_length_and_alphabet(self):
        for length in (1, 6, 12):
            code = generate_short_code(length)
            assert len(code) == length
            assert set(code) <= set(ALPHABET)

    def test_alphabet_has_62_symbols(self):
        assert len(set(ALPHABET)) == 62
        assert set(ALPHABET) == set(string.ascii_letters + string.digits)

    @pytest.mark.parametrize("length", [0, -3])
    def test_non_positive_length(self, length):
        with pytest.raises(ValueError):
            generate_short_code(length)


@pytest.mark.service
class TestShortenedURLService:

    @pytest.mark.asyncio
    async def test_create_random_code(self, test_db, shortener_service, url_repository):
        original = random_url()

        url = await shortener_service.create_short_url(test_db, original)

        assert url.original_url == original
        assert len(url.short_url) == 6
        assert set(url.short_url) <= set(ALPHABET)
        assert url.custom_alias is None
        assert url.total_clicks == 0
        assert await url_repository.count_by_short_url(test_db, url.short_url) == 1

    @pytest.mark.asyncio
    async def test_create_with_alias(self, test_db, shortener_service):
        url = await shortener_service.create_short_url(test_db, random_url(), custom_alias="promo")

        assert url.short_url == "promo"
        assert url.custom_alias == "promo"

    @pytest.mark.asyncio
    async def test_alias_collision(self, test_db, shortener_service, url_repository):
        first = random_url()
        await shortener_service.create_short_url(test_db, first, custom_alias="promo")

        with pytest.raises(AliasTakenError):
            await shortener_service.create_short_url(test_db, random_url(), custom_alias="promo")

        assert await url_repository.count_by_short_url(test_db, "promo") == 1
        stored = await shortener_service.get_url_by_code(test_db, "promo")
        assert stored.original_url == first

    @pytest.mark.asyncio
    async def test_alias_lost_race_reports_taken(self, test_db, shortener_service, url_repository):
        """The insert is the final check when another request wins between check and insert."""
        await create_test_url(test_db, custom_alias="race")

        with patch.object(url_repository, "count_by_short_url", AsyncMock(return_value=0)):
            with pytest.raises(AliasTakenError):
                await shortener_service.create_short_url(test_db, random_url(), custom_alias="race")

    @pytest.mark.asyncio
    async def test_random_code_lost_race_retries(self, test_db, shortener_service, url_repository):
        original_create = url_repository.create_short_url
        calls = []

        async def create_losing_first(db, data):
            calls.append(data["short_url"])
            if len(calls) == 1:
                raise DuplicateEntityError(ShortURL, "short_url", data["short_url"])
            return await original_create(db, data)

        with patch.object(url_repository, "create_short_url", side_effect=create_losing_first):
            url = await shortener_service.create_short_url(test_db, random_url())

        assert len(calls) == 2
        assert url.short_url == calls[1]

    @pytest.mark.asyncio
    async def test_reserve_skips_taken_codes(self, test_db, url_repository):
        service = ShortenedURLService(url_repository, max_attempts=5)
        counts = AsyncMock(side_effect=[1, 1, 0])

        with patch.object(url_repository, "count_by_short_url", counts):
            code = await service.reserve(test_db)

        assert counts.await_count == 3
        assert len(code) == 6

    @pytest.mark.asyncio
    async def test_reserve_returns_free_alias_unchanged(self, test_db, shortener_service):
        assert await shortener_service.reserve(test_db, "My-Alias_1") == "My-Alias_1"

    @pytest.mark.asyncio
    async def test_code_space_exhausted(self, test_db, url_repository):
        service = ShortenedURLService(url_repository, max_attempts=3)
        counts = AsyncMock(return_value=1)

        with patch.object(url_repository, "count_by_short_url", counts):
            with pytest.raises(StoreExhaustedError):
                await service.create_short_url(test_db, random_url())

        assert counts.await_count == 3

    @pytest.mark.asyncio
    async def test_store_failure_on_create(self, test_db, shortener_service, url_repository):
        with patch.object(url_repository, "create_short_url", AsyncMock(side_effect=RepositoryError("down"))):
            with pytest.raises(StoreError):
                await shortener_service.create_short_url(test_db, random_url())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_url", ["not-a-url", "example.com/path", "mailto:someone@example.com", ""])
    async def test_invalid_url(self, test_db, shortener_service, bad_url):
        with pytest.raises(InvalidURLError):
            await shortener_service.create_short_url(test_db, bad_url)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("alias", ["slash/alias", "/leading", "x" * 65, "health", "shrink", "stats"])
    async def test_invalid_alias(self, test_db, shortener_service, url_repository, alias):
        with pytest.raises(InvalidAliasError):
            await shortener_service.create_short_url(test_db, random_url(), custom_alias=alias)

        assert await url_repository.count(test_db) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("alias", ["my promo!", "ünïcödé", "a.b", "Sale%2024", "x" * 64])
    async def test_free_form_alias_accepted(self, test_db, shortener_service, alias):
        url = await shortener_service.create_short_url(test_db, random_url(), custom_alias=alias)

        assert url.short_url == alias
        found = await shortener_service.get_url_by_code(test_db, alias)
        assert found.id == url.id

    @pytest.mark.asyncio
    async def test_reserved_words_never_generated(self, test_db, shortener_service):
        candidates = iter(["health", "shrink", "Ab12Cd"])

        with patch("shrink.services.shortener.generate_short_code", side_effect=lambda length: next(candidates)):
            code = await shortener_service.reserve(test_db)

        assert code == "Ab12Cd"

    @pytest.mark.asyncio
    async def test_get_url_by_code_not_found(self, test_db, shortener_service):
        with pytest.raises(URLNotFoundError):
            await shortener_service.get_url_by_code(test_db, "x")

    @pytest.mark.asyncio
    async def test_get_url_by_code_store_error(self, test_db, shortener_service, url_repository):
        with patch.object(url_repository, "get_by_short_url", AsyncMock(side_effect=RepositoryError("down"))):
            with pytest.raises(StoreError):
                await shortener_service.get_url_by_code(test_db, "any")

    @pytest.mark.asyncio
    async def test_get_url_info(self, test_db, shortener_service):
        url = await create_test_url(test_db, custom_alias="infoalias")

        info = await shortener_service.get_url_info(test_db, "infoalias")

        assert info["id"] == url.id
        assert info["custom_alias"] == "infoalias"
        assert info["clicks_count"] == 0
        assert info["clicks"] == []

    @pytest.mark.asyncio
    async def test_codes_are_unique(self, test_db, shortener_service):
        codes = set()
        for _ in range(25):
            url = await shortener_service.create_short_url(test_db, random_url())
            codes.add(url.short_url)

        assert len(codes) == 25
