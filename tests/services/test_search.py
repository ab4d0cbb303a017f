"""
Tests for catalog search: ranking, cover filtering and debouncing.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

from readinglog.errors import CatalogError
from readinglog.services.search import DebouncedSearch, search_catalog


@pytest.fixture
def ranked_items(factory):
    """Five volumes whose popularity order differs from their catalog order."""
    return [
        factory.create_volume(volume_id='unrated', title='Unrated'),
        factory.create_volume(volume_id='few', title='Few', average_rating=4.0, ratings_count=5),
        factory.create_volume(volume_id='many', title='Many', average_rating=4.0, ratings_count=5000),
        factory.create_volume(volume_id='nocover', title='No Cover', average_rating=5.0, ratings_count=9000,
                              image_links={}),
        factory.create_volume(volume_id='mid', title='Mid', average_rating=3.0, ratings_count=100),
    ]


class TestSearchCatalog:
    """Tests for search_catalog."""

    @pytest.mark.asyncio
    async def test_blank_query_skips_catalog(self, mock_catalog):
        assert await search_catalog(mock_catalog, "   ") == []
        mock_catalog.search_books.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ranks_and_drops_coverless(self, mock_catalog, ranked_items):
        mock_catalog.search_books = AsyncMock(return_value={'totalItems': 5, 'items': ranked_items})

        results = await search_catalog(mock_catalog, "wizard")

        assert [r.id for r in results] == ['many', 'mid', 'few', 'unrated']
        mock_catalog.search_books.assert_awaited_once_with("wizard", 40, 'relevance')

    @pytest.mark.asyncio
    async def test_truncates_after_ranking(self, mock_catalog, ranked_items):
        mock_catalog.search_books = AsyncMock(return_value={'totalItems': 5, 'items': ranked_items})

        results = await search_catalog(mock_catalog, "wizard", fetch_size=10, limit=2)

        assert [r.id for r in results] == ['many', 'mid']
        mock_catalog.search_books.assert_awaited_once_with("wizard", 10, 'relevance')

    @pytest.mark.asyncio
    async def test_keeps_coverless_when_none_have_covers(self, mock_catalog, factory):
        items = [
            factory.create_volume(volume_id='a', image_links={}),
            factory.create_volume(volume_id='b', image_links={}, average_rating=3.0, ratings_count=10),
        ]
        mock_catalog.search_books = AsyncMock(return_value={'totalItems': 2, 'items': items})

        results = await search_catalog(mock_catalog, "obscure")

        assert [r.id for r in results] == ['b', 'a']

    @pytest.mark.asyncio
    async def test_no_items(self, mock_catalog):
        mock_catalog.search_books = AsyncMock(return_value={'totalItems': 0})

        assert await search_catalog(mock_catalog, "zzzz") == []

    @pytest.mark.asyncio
    async def test_catalog_error_propagates(self, mock_catalog):
        mock_catalog.search_books = AsyncMock(side_effect=CatalogError("down", status_code=503))

        with pytest.raises(CatalogError):
            await search_catalog(mock_catalog, "dune")


class TestDebouncedSearch:
    """Tests for DebouncedSearch."""

    @pytest.mark.asyncio
    async def test_only_latest_query_runs(self, mock_catalog, ranked_items):
        mock_catalog.search_books = AsyncMock(return_value={'totalItems': 5, 'items': ranked_items})
        searcher = DebouncedSearch(mock_catalog, delay=0.01)

        first = searcher.submit("wiz")
        second = searcher.submit("wizard")
        results = await second

        assert first.cancelled()
        assert results[0].id == 'many'
        mock_catalog.search_books.assert_awaited_once_with("wizard", 40, 'relevance')

    @pytest.mark.asyncio
    async def test_in_flight_request_is_cancelled(self, mock_catalog, factory):
        started = asyncio.Event()
        finished = []

        async def slow_then_fast(query, max_results, order_by):
            if query == "slow":
                started.set()
                await asyncio.sleep(10)
                finished.append(query)
            return {'totalItems': 1, 'items': [factory.create_volume(volume_id=query)]}

        mock_catalog.search_books = AsyncMock(side_effect=slow_then_fast)
        searcher = DebouncedSearch(mock_catalog, delay=0)

        first = searcher.submit("slow")
        await started.wait()
        results = await searcher.search("fast")

        assert [r.id for r in results] == ['fast']
        assert first.cancelled()
        assert finished == []

    @pytest.mark.asyncio
    async def test_superseded_search_raises_cancelled(self, mock_catalog):
        searcher = DebouncedSearch(mock_catalog, delay=0.05)

        waiting = asyncio.ensure_future(searcher.search("first"))
        await asyncio.sleep(0)
        latest = searcher.submit("second")

        with pytest.raises(asyncio.CancelledError):
            await waiting
        await latest

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending(self, mock_catalog):
        searcher = DebouncedSearch(mock_catalog, delay=0.05)
        searcher.submit("dune")

        assert searcher.pending
        await searcher.aclose()

        assert not searcher.pending
        mock_catalog.search_books.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_query_resolves_empty(self, mock_catalog):
        searcher = DebouncedSearch(mock_catalog, delay=0)

        assert await searcher.search("") == []
        mock_catalog.search_books.assert_not_awaited()
